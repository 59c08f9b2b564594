"""ELF executable file headers."""

from __future__ import annotations

import struct
from dataclasses import astuple, dataclass
from typing import ClassVar

ELF_MAGIC = 0x464C457F  # "\x7FELF" in little endian

ELF_PROG_LOAD = 1

ELF_PROG_FLAG_EXEC = 1
ELF_PROG_FLAG_WRITE = 2
ELF_PROG_FLAG_READ = 4


class ElfError(ValueError):
    """The data is not a well-formed ELF image."""


@dataclass
class ElfHeader:
    """The ELF file header."""

    magic: int = ELF_MAGIC
    elf: bytes = bytes(12)
    type: int = 0
    machine: int = 0
    version: int = 0
    entry: int = 0
    phoff: int = 0
    shoff: int = 0
    flags: int = 0
    ehsize: int = 0
    phentsize: int = 0
    phnum: int = 0
    shentsize: int = 0
    shnum: int = 0
    shstrndx: int = 0

    _FORMAT: ClassVar[struct.Struct] = struct.Struct("<I12sHHIIIIIHHHHHH")
    SIZE: ClassVar[int] = _FORMAT.size

    @classmethod
    def parse(cls, data: bytes) -> "ElfHeader":
        """Decode the header at the start of data; the magic must match."""
        if len(data) < cls.SIZE:
            raise ElfError(f"ELF header needs {cls.SIZE} bytes, got {len(data)}")
        header = cls(*cls._FORMAT.unpack_from(data, 0))
        if header.magic != ELF_MAGIC:
            raise ElfError(f"bad ELF magic {header.magic:#x}")
        return header

    def pack(self) -> bytes:
        """Encode the header."""
        try:
            return self._FORMAT.pack(*astuple(self))
        except struct.error as exc:
            raise ElfError(str(exc)) from exc


@dataclass
class ProgramHeader:
    """An ELF program section header."""

    type: int = 0
    off: int = 0
    vaddr: int = 0
    paddr: int = 0
    filesz: int = 0
    memsz: int = 0
    flags: int = 0
    align: int = 0

    _FORMAT: ClassVar[struct.Struct] = struct.Struct("<8I")
    SIZE: ClassVar[int] = _FORMAT.size

    @classmethod
    def parse(cls, data: bytes) -> "ProgramHeader":
        """Decode a program header at the start of data."""
        if len(data) < cls.SIZE:
            raise ElfError(f"program header needs {cls.SIZE} bytes, got {len(data)}")
        return cls(*cls._FORMAT.unpack_from(data, 0))

    def pack(self) -> bytes:
        """Encode the program header."""
        try:
            return self._FORMAT.pack(*astuple(self))
        except struct.error as exc:
            raise ElfError(str(exc)) from exc


def program_headers(data: bytes) -> list[ProgramHeader]:
    """All program headers of an ELF image, in file order."""
    header = ElfHeader.parse(data)
    view = memoryview(data)
    result = []
    off = header.phoff
    for _ in range(header.phnum):
        result.append(ProgramHeader.parse(view[off:off + ProgramHeader.SIZE]))
        off += ProgramHeader.SIZE
    return result