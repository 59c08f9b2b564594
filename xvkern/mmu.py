"""x86 memory-management unit layout: paging arithmetic and descriptors."""

from __future__ import annotations

import struct
from dataclasses import dataclass

_MASK32 = 0xFFFFFFFF

# Eflags register
FL_IF = 0x00000200

# Control register flags
CR0_PE = 0x00000001
CR0_WP = 0x00010000
CR0_PG = 0x80000000
CR4_PSE = 0x00000010

# Segment selectors
SEG_KCODE = 1
SEG_KDATA = 2
SEG_UCODE = 3
SEG_UDATA = 4
SEG_TSS = 5
NSEGS = 6

DPL_USER = 0x3

# Application segment type bits
STA_X = 0x8
STA_W = 0x2
STA_R = 0x2

# System segment type bits
STS_T32A = 0x9
STS_IG32 = 0xE
STS_TG32 = 0xF

# Paging
NPDENTRIES = 1024
NPTENTRIES = 1024
PGSIZE = 4096
PTXSHIFT = 12
PDXSHIFT = 22

# Page table/directory entry flags
PTE_P = 0x001
PTE_W = 0x002
PTE_U = 0x004
PTE_PS = 0x080

# Memory layout
EXTMEM = 0x100000
PHYSTOP = 0xE000000
DEVSPACE = 0xFE000000
KERNBASE = 0x80000000
KERNLINK = KERNBASE + EXTMEM


def pdx(va: int) -> int:
    """Page directory index of a virtual address."""
    return ((va & _MASK32) >> PDXSHIFT) & 0x3FF


def ptx(va: int) -> int:
    """Page table index of a virtual address."""
    return ((va & _MASK32) >> PTXSHIFT) & 0x3FF


def pgaddr(d: int, t: int, o: int) -> int:
    """Build a virtual address from directory index, table index and offset."""
    return ((d << PDXSHIFT) | (t << PTXSHIFT) | o) & _MASK32


def pgroundup(sz: int) -> int:
    """Round up to the next page boundary (32-bit wrap-around)."""
    return (sz + PGSIZE - 1) & ~(PGSIZE - 1) & _MASK32


def pgrounddown(a: int) -> int:
    """Round down to the page boundary."""
    return a & ~(PGSIZE - 1) & _MASK32


def pte_addr(pte: int) -> int:
    """Physical address held in a page table entry."""
    return pte & _MASK32 & ~0xFFF


def pte_flags(pte: int) -> int:
    """Flag bits of a page table entry."""
    return pte & 0xFFF


def v2p(a: int) -> int:
    """Kernel virtual address to physical address."""
    return (a - KERNBASE) & _MASK32


def p2v(a: int) -> int:
    """Physical address to kernel virtual address."""
    return (a + KERNBASE) & _MASK32


def seg_asm(type: int, base: int, lim: int) -> bytes:
    """Eight descriptor bytes as emitted by the boot-time assembler macro."""
    base &= _MASK32
    lim &= _MASK32
    return struct.pack(
        "<HHBBBB",
        (lim >> 12) & 0xFFFF,
        base & 0xFFFF,
        (base >> 16) & 0xFF,
        (0x90 | type) & 0xFF,
        0xC0 | ((lim >> 28) & 0xF),
        (base >> 24) & 0xFF,
    )


def seg_nullasm() -> bytes:
    """The all-zero null descriptor."""
    return bytes(8)


def _pack_bits(obj: object, layout: tuple[tuple[str, int], ...]) -> bytes:
    value = 0
    shift = 0
    for name, width in layout:
        field_value = getattr(obj, name)
        if not 0 <= field_value < (1 << width):
            raise ValueError(f"field {name}={field_value} does not fit in {width} bits")
        value |= field_value << shift
        shift += width
    return value.to_bytes(8, "little")


def _unpack_bits(data: bytes, layout: tuple[tuple[str, int], ...]) -> dict[str, int]:
    if len(data) != 8:
        raise ValueError(f"descriptor must be 8 bytes, got {len(data)}")
    value = int.from_bytes(bytes(data), "little")
    out = {}
    for name, width in layout:
        out[name] = value & ((1 << width) - 1)
        value >>= width
    return out


_SEG_LAYOUT = (
    ("lim_15_0", 16),
    ("base_15_0", 16),
    ("base_23_16", 8),
    ("type", 4),
    ("s", 1),
    ("dpl", 2),
    ("p", 1),
    ("lim_19_16", 4),
    ("avl", 1),
    ("rsv1", 1),
    ("db", 1),
    ("g", 1),
    ("base_31_24", 8),
)

_GATE_LAYOUT = (
    ("off_15_0", 16),
    ("cs", 16),
    ("args", 5),
    ("rsv1", 3),
    ("type", 4),
    ("s", 1),
    ("dpl", 2),
    ("p", 1),
    ("off_31_16", 16),
)


@dataclass(frozen=True)
class SegDesc:
    """A segment descriptor of the global descriptor table."""

    lim_15_0: int = 0
    base_15_0: int = 0
    base_23_16: int = 0
    type: int = 0
    s: int = 0
    dpl: int = 0
    p: int = 0
    lim_19_16: int = 0
    avl: int = 0
    rsv1: int = 0
    db: int = 0
    g: int = 0
    base_31_24: int = 0

    @classmethod
    def seg(cls, type: int, base: int, lim: int, dpl: int) -> "SegDesc":
        """A normal 32-bit segment with a 4K-granular limit."""
        base &= _MASK32
        lim &= _MASK32
        return cls(
            lim_15_0=(lim >> 12) & 0xFFFF,
            base_15_0=base & 0xFFFF,
            base_23_16=(base >> 16) & 0xFF,
            type=type & 0xF,
            s=1,
            dpl=dpl & 0x3,
            p=1,
            lim_19_16=(lim >> 28) & 0xF,
            avl=0,
            rsv1=0,
            db=1,
            g=1,
            base_31_24=base >> 24,
        )

    @classmethod
    def seg16(cls, type: int, base: int, lim: int, dpl: int) -> "SegDesc":
        """A segment with a byte-granular limit."""
        base &= _MASK32
        lim &= _MASK32
        return cls(
            lim_15_0=lim & 0xFFFF,
            base_15_0=base & 0xFFFF,
            base_23_16=(base >> 16) & 0xFF,
            type=type & 0xF,
            s=1,
            dpl=dpl & 0x3,
            p=1,
            lim_19_16=(lim >> 16) & 0xF,
            avl=0,
            rsv1=0,
            db=1,
            g=0,
            base_31_24=base >> 24,
        )

    def pack(self) -> bytes:
        """The descriptor's eight bytes as the processor reads them."""
        return _pack_bits(self, _SEG_LAYOUT)

    @classmethod
    def unpack(cls, data: bytes) -> "SegDesc":
        """Decode eight descriptor bytes."""
        return cls(**_unpack_bits(data, _SEG_LAYOUT))

    @property
    def base(self) -> int:
        return self.base_15_0 | (self.base_23_16 << 16) | (self.base_31_24 << 24)


@dataclass(frozen=True)
class GateDesc:
    """An interrupt or trap gate of the interrupt descriptor table."""

    off_15_0: int = 0
    cs: int = 0
    args: int = 0
    rsv1: int = 0
    type: int = 0
    s: int = 0
    dpl: int = 0
    p: int = 0
    off_31_16: int = 0

    @classmethod
    def gate(cls, istrap: bool, sel: int, off: int, dpl: int) -> "GateDesc":
        """A present gate; trap gates leave interrupts enabled."""
        off &= _MASK32
        return cls(
            off_15_0=off & 0xFFFF,
            cs=sel & 0xFFFF,
            args=0,
            rsv1=0,
            type=STS_TG32 if istrap else STS_IG32,
            s=0,
            dpl=dpl & 0x3,
            p=1,
            off_31_16=off >> 16,
        )

    def pack(self) -> bytes:
        """The gate's eight bytes as the processor reads them."""
        return _pack_bits(self, _GATE_LAYOUT)

    @classmethod
    def unpack(cls, data: bytes) -> "GateDesc":
        """Decode eight gate bytes."""
        return cls(**_unpack_bits(data, _GATE_LAYOUT))

    @property
    def offset(self) -> int:
        return self.off_15_0 | (self.off_31_16 << 16)