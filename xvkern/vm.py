"""Two-level x86 page tables kept in a simulated physical memory."""

from __future__ import annotations

import struct
from typing import Callable, Optional, Union

from .mmu import (
    DEVSPACE,
    EXTMEM,
    KERNBASE,
    KERNLINK,
    PDXSHIFT,
    PGSIZE,
    PHYSTOP,
    PTE_P,
    PTE_U,
    PTE_W,
    p2v,
    pdx,
    pgrounddown,
    pgroundup,
    pte_addr,
    pte_flags,
    ptx,
    v2p,
)

_MASK32 = 0xFFFFFFFF
_WORD = struct.Struct("<I")
_ENTRY_SIZE = _WORD.size

Buffer = Union[bytes, bytearray, memoryview]


class OutOfMemory(MemoryError):
    """No free physical page is left."""


class PhysicalMemory:
    """A range of page-sized physical frames with a free-page allocator."""

    def __init__(self, start: int, end: int) -> None:
        start = pgroundup(start)
        end = pgrounddown(end)
        if end < start:
            raise ValueError(f"empty physical range {start:#x}..{end:#x}")
        self.start = start
        self.end = end
        self._data = bytearray(end - start)
        self._free = list(range(start, end, PGSIZE))
        self._free_set = set(self._free)

    def kalloc(self) -> int:
        """Take one free page and return its physical address."""
        if not self._free:
            raise OutOfMemory("no free physical pages")
        pa = self._free.pop()
        self._free_set.discard(pa)
        return pa

    def kfree(self, pa: int) -> None:
        """Return a page previously handed out by kalloc."""
        if pa % PGSIZE or not self.start <= pa < self.end:
            raise ValueError(f"kfree: bad page address {pa:#x}")
        if pa in self._free_set:
            raise ValueError(f"kfree: page {pa:#x} is already free")
        self._free.append(pa)
        self._free_set.add(pa)

    def _offset(self, pa: int, n: int) -> int:
        if n < 0 or pa < self.start or pa + n > self.end:
            raise ValueError(f"physical range {pa:#x}+{n} is not backed by memory")
        return pa - self.start

    def read(self, pa: int, n: int) -> bytes:
        """Bytes stored at physical addresses pa..pa+n."""
        off = self._offset(pa, n)
        return bytes(self._data[off:off + n])

    def write(self, pa: int, data: Buffer) -> None:
        """Store data at physical address pa."""
        n = len(data)
        off = self._offset(pa, n)
        self._data[off:off + n] = data

    def free_pages(self) -> int:
        """Number of pages that kalloc can still hand out."""
        return len(self._free)

    def _word(self, pa: int) -> int:
        return _WORD.unpack_from(self._data, self._offset(pa, _ENTRY_SIZE))[0]

    def _set_word(self, pa: int, value: int) -> None:
        _WORD.pack_into(self._data, self._offset(pa, _ENTRY_SIZE), value & _MASK32)


class PageDirectory:
    """A page directory and its page tables, all living in physical memory."""

    def __init__(self, mem: PhysicalMemory) -> None:
        self.mem = mem
        self.pa = mem.kalloc()
        mem.write(self.pa, bytes(PGSIZE))
        self._kernel_data: Optional[int] = None

    @classmethod
    def setup_kernel(cls, mem: PhysicalMemory, data: int) -> "PageDirectory":
        """A directory holding the kernel mappings; data is where kernel data starts."""
        if p2v(PHYSTOP) > DEVSPACE:
            raise RuntimeError("PHYSTOP too high")
        if not KERNLINK < data < p2v(PHYSTOP):
            raise ValueError(f"kernel data address {data:#x} out of range")
        kmap = (
            (KERNBASE, 0, EXTMEM, PTE_W),
            (KERNLINK, v2p(KERNLINK), v2p(data), 0),
            (data, v2p(data), PHYSTOP, PTE_W),
            (DEVSPACE, DEVSPACE, 0, PTE_W),
        )
        pgdir = cls(mem)
        try:
            for virt, phys_start, phys_end, perm in kmap:
                pgdir.map_pages(virt, (phys_end - phys_start) & _MASK32, phys_start, perm)
        except OutOfMemory:
            pgdir.free()
            raise
        pgdir._kernel_data = data
        return pgdir

    def walk(self, va: int, alloc: bool = False) -> Optional[int]:
        """Physical address of the entry mapping va, creating its table if asked."""
        pde_addr = self.pa + _ENTRY_SIZE * pdx(va)
        pde = self.mem._word(pde_addr)
        if pde & PTE_P:
            table = pte_addr(pde)
        else:
            if not alloc:
                return None
            table = self.mem.kalloc()
            self.mem.write(table, bytes(PGSIZE))
            self.mem._set_word(pde_addr, table | PTE_P | PTE_W | PTE_U)
        return table + _ENTRY_SIZE * ptx(va)

    def map_pages(self, va: int, size: int, pa: int, perm: int) -> None:
        """Map the pages covering va..va+size to physical pages starting at pa."""
        if size <= 0:
            raise ValueError("mapping size must be positive")
        a = pgrounddown(va)
        last = pgrounddown(va + size - 1)
        while True:
            pte = self.walk(a, alloc=True)
            if self.mem._word(pte) & PTE_P:
                raise RuntimeError(f"remap of {a:#x}")
            self.mem._set_word(pte, pa | perm | PTE_P)
            if a == last:
                break
            a = (a + PGSIZE) & _MASK32
            pa = (pa + PGSIZE) & _MASK32

    def init_user(self, code: Buffer) -> None:
        """Place code, smaller than a page, at user address 0."""
        if len(code) >= PGSIZE:
            raise ValueError("init_user: more than a page")
        page = self.mem.kalloc()
        self.mem.write(page, bytes(PGSIZE))
        self.map_pages(0, PGSIZE, page, PTE_W | PTE_U)
        self.mem.write(page, code)

    def load_user(
        self, addr: int, read: Callable[[int, int], bytes], offset: int, sz: int
    ) -> None:
        """Fill already-mapped pages from addr with sz bytes read(offset, n) supplies."""
        if addr % PGSIZE:
            raise ValueError("load_user: addr must be page aligned")
        for i in range(0, sz, PGSIZE):
            pte = self.walk(addr + i)
            if pte is None:
                raise RuntimeError("load_user: address should exist")
            pa = pte_addr(self.mem._word(pte))
            n = min(sz - i, PGSIZE)
            chunk = read(offset + i, n)
            if len(chunk) != n:
                raise EOFError(f"short read at offset {offset + i}: {len(chunk)} of {n}")
            self.mem.write(pa, chunk)

    def alloc_user(self, oldsz: int, newsz: int) -> int:
        """Grow user memory from oldsz to newsz with zeroed pages; return the new size."""
        if newsz >= KERNBASE:
            raise ValueError(f"user size {newsz:#x} reaches kernel space")
        if newsz < oldsz:
            return oldsz
        for a in range(pgroundup(oldsz), newsz, PGSIZE):
            try:
                page = self.mem.kalloc()
            except OutOfMemory:
                self.dealloc_user(newsz, oldsz)
                raise
            self.mem.write(page, bytes(PGSIZE))
            try:
                self.map_pages(a, PGSIZE, page, PTE_W | PTE_U)
            except OutOfMemory:
                self.dealloc_user(newsz, oldsz)
                self.mem.kfree(page)
                raise
        return newsz

    def dealloc_user(self, oldsz: int, newsz: int) -> int:
        """Shrink user memory from oldsz to newsz, freeing pages; return the new size."""
        if newsz >= oldsz:
            return oldsz
        a = pgroundup(newsz)
        while a < oldsz:
            pte = self.walk(a)
            if pte is None:
                a = ((pdx(a) + 1) << PDXSHIFT) - PGSIZE
            else:
                entry = self.mem._word(pte)
                if entry & PTE_P:
                    pa = pte_addr(entry)
                    if pa == 0:
                        raise RuntimeError("kfree of page 0")
                    self.mem.kfree(pa)
                    self.mem._set_word(pte, 0)
            a += PGSIZE
        return newsz

    def free(self) -> None:
        """Release all user pages, every page table and the directory itself."""
        self.dealloc_user(KERNBASE, 0)
        for (pde,) in _WORD.iter_unpack(self.mem.read(self.pa, PGSIZE)):
            if pde & PTE_P:
                self.mem.kfree(pte_addr(pde))
        self.mem.kfree(self.pa)

    def clear_user(self, uva: int) -> None:
        """Make the page at uva inaccessible to user code."""
        pte = self.walk(uva)
        if pte is None:
            raise RuntimeError(f"clear_user: no page table for {uva:#x}")
        self.mem._set_word(pte, self.mem._word(pte) & ~PTE_U)

    def copy(self, sz: int) -> "PageDirectory":
        """A new directory with private copies of the first sz bytes of user memory."""
        if self._kernel_data is not None:
            child = type(self).setup_kernel(self.mem, self._kernel_data)
        else:
            child = type(self)(self.mem)
        try:
            for i in range(0, sz, PGSIZE):
                pte = self.walk(i)
                if pte is None:
                    raise RuntimeError("copy: pte should exist")
                entry = self.mem._word(pte)
                if not entry & PTE_P:
                    raise RuntimeError("copy: page not present")
                page = self.mem.kalloc()
                self.mem.write(page, self.mem.read(pte_addr(entry), PGSIZE))
                try:
                    child.map_pages(i, PGSIZE, page, pte_flags(entry))
                except OutOfMemory:
                    self.mem.kfree(page)
                    raise
        except OutOfMemory:
            child.free()
            raise
        return child

    def user_to_kernel(self, uva: int) -> Optional[int]:
        """Kernel virtual address of the user page at uva, or None if not user-accessible."""
        pte = self.walk(uva)
        if pte is None:
            return None
        entry = self.mem._word(pte)
        if not entry & PTE_P or not entry & PTE_U:
            return None
        return p2v(pte_addr(entry))

    def _user_pages(self, va: int, n: int):
        """Yield (physical address, length) pieces covering user range va..va+n."""
        while n > 0:
            va0 = pgrounddown(va)
            kva = self.user_to_kernel(va0)
            if kva is None:
                raise ValueError(f"user address {va0:#x} is not mapped")
            step = min(PGSIZE - (va - va0), n)
            yield v2p(kva) + (va - va0), step
            n -= step
            va = va0 + PGSIZE

    def copy_out(self, va: int, data: Buffer) -> None:
        """Copy data into user memory at va."""
        view = memoryview(bytes(data))
        for pa, n in self._user_pages(va, len(view)):
            self.mem.write(pa, view[:n])
            view = view[n:]

    def read_user(self, va: int, n: int) -> bytes:
        """Read n bytes of user memory at va."""
        return b"".join(self.mem.read(pa, step) for pa, step in self._user_pages(va, n))