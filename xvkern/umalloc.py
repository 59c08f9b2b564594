"""A first-fit free-list allocator over a heap grown with sbrk."""

from __future__ import annotations

import bisect
from typing import Optional

UNIT = 8  # size of a block header; every block is a whole number of units
_MIN_GROW = 4096  # fewest units requested from sbrk at once
_BASE = -UNIT  # address of the zero-size sentinel block below the heap


class Heap:
    """A heap whose break may not pass limit bytes."""

    def __init__(self, limit: int) -> None:
        if limit < 0:
            raise ValueError("limit must not be negative")
        self.limit = limit
        self.memory = bytearray()
        self._allocated: dict[int, int] = {}
        self._free_addrs: list[int] = []
        self._free_sizes: dict[int, int] = {}
        self._freep: Optional[int] = None

    @property
    def brk(self) -> int:
        """The current break: the size of the heap in bytes."""
        return len(self.memory)

    def sbrk(self, n: int) -> int:
        """Move the break by n bytes and return the old break."""
        old = len(self.memory)
        new = old + n
        if new < 0 or new > self.limit:
            raise MemoryError(f"cannot move break from {old} to {new}")
        if n >= 0:
            self.memory.extend(bytes(n))
        else:
            del self.memory[new:]
        return old

    def malloc(self, nbytes: int) -> Optional[int]:
        """Address of a new block of at least nbytes, or None when memory runs out."""
        if nbytes < 0:
            raise ValueError("cannot allocate a negative size")
        nunits = (nbytes + UNIT - 1) // UNIT + 1
        if self._freep is None:
            self._free_addrs = [_BASE]
            self._free_sizes = {_BASE: 0}
            self._freep = _BASE
        prevp = self._freep
        p = self._next(prevp)
        while True:
            size = self._free_sizes[p]
            if size >= nunits:
                if size == nunits:
                    self._remove(p)
                    block = p
                else:
                    self._free_sizes[p] = size - nunits
                    block = p + (size - nunits) * UNIT
                self._freep = prevp
                self._allocated[block] = nunits
                return block + UNIT
            if p == self._freep:
                grown = self._morecore(nunits)
                if grown is None:
                    return None
                p = grown
            prevp, p = p, self._next(p)

    def free(self, ap: int) -> None:
        """Give back a block that malloc returned."""
        bp = ap - UNIT
        try:
            units = self._allocated.pop(bp)
        except KeyError:
            raise ValueError(f"{ap:#x} was not returned by malloc") from None
        self._insert(bp, units)

    def _next(self, addr: int) -> int:
        addrs = self._free_addrs
        return addrs[bisect.bisect_right(addrs, addr) % len(addrs)]

    def _remove(self, addr: int) -> int:
        """Take a block off the free list and return its size in units."""
        self._free_addrs.pop(bisect.bisect_left(self._free_addrs, addr))
        return self._free_sizes.pop(addr)

    def _insert(self, bp: int, size: int) -> None:
        addrs = self._free_addrs
        i = bisect.bisect_left(addrs, bp)
        p = addrs[i - 1]
        nxt = addrs[i % len(addrs)]
        if nxt != _BASE and bp + size * UNIT == nxt:
            size += self._free_sizes.pop(nxt)
            del addrs[i]
        if p + self._free_sizes[p] * UNIT == bp:
            self._free_sizes[p] += size
        else:
            addrs.insert(i, bp)
            self._free_sizes[bp] = size
        self._freep = p

    def _morecore(self, nunits: int) -> Optional[int]:
        nunits = max(nunits, _MIN_GROW)
        try:
            addr = self.sbrk(nunits * UNIT)
        except MemoryError:
            return None
        self._insert(addr, nunits)
        return self._freep