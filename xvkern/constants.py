"""Kernel parameters, flags, call numbers and small on-disk records."""

from __future__ import annotations

import enum
import struct
from dataclasses import astuple, dataclass
from typing import ClassVar

NPROC = 64
KSTACKSIZE = 4096
NCPU = 8
NOFILE = 16
NFILE = 100
NINODE = 50
NDEV = 10
ROOTDEV = 1
MAXARG = 32
MAXOPBLOCKS = 10
LOGSIZE = MAXOPBLOCKS * 3
NBUF = MAXOPBLOCKS * 3
FSSIZE = 1000


class OpenFlag(enum.IntFlag):
    """Modes for opening a file."""

    RDONLY = 0x000
    WRONLY = 0x001
    RDWR = 0x002
    CREATE = 0x200


class FileType(enum.IntEnum):
    """Kinds of inode."""

    DIR = 1
    FILE = 2
    DEV = 3


class Syscall(enum.IntEnum):
    """System call numbers."""

    FORK = 1
    EXIT = 2
    WAIT = 3
    PIPE = 4
    READ = 5
    KILL = 6
    EXEC = 7
    FSTAT = 8
    CHDIR = 9
    DUP = 10
    GETPID = 11
    SBRK = 12
    SLEEP = 13
    UPTIME = 14
    OPEN = 15
    WRITE = 16
    MKNOD = 17
    UNLINK = 18
    LINK = 19
    MKDIR = 20
    CLOSE = 21
    GETYEAR = 22
    GETMYSIZE = 23
    GETKERNELSTARTADDR = 24
    GETKERNELENDADDR = 25
    GETKERNELVARADDR = 26
    GETSYSTEMCALLADDR = 27
    SETPRIORITY = 28
    GETINODESIZE = 29
    MYPS = 30


class Trap(enum.IntEnum):
    """x86 trap and interrupt vector numbers."""

    DIVIDE = 0
    DEBUG = 1
    NMI = 2
    BRKPT = 3
    OFLOW = 4
    BOUND = 5
    ILLOP = 6
    DEVICE = 7
    DBLFLT = 8
    TSS = 10
    SEGNP = 11
    STACK = 12
    GPFLT = 13
    PGFLT = 14
    FPERR = 16
    ALIGN = 17
    MCHK = 18
    SIMDERR = 19
    IRQ0 = 32
    SYSCALL = 64
    DEFAULT = 500


class Irq(enum.IntEnum):
    """Hardware interrupt request lines, relative to Trap.IRQ0."""

    TIMER = 0
    KBD = 1
    COM1 = 4
    IDE = 14
    ERROR = 19
    SPURIOUS = 31


@dataclass
class Stat:
    """File status as returned to user programs."""

    type: int = 0
    dev: int = 0
    ino: int = 0
    nlink: int = 0
    size: int = 0

    _FORMAT: ClassVar[struct.Struct] = struct.Struct("<hxxiIhxxI")
    SIZE: ClassVar[int] = _FORMAT.size

    def pack(self) -> bytes:
        """Encode with the padding of the in-memory record."""
        try:
            return self._FORMAT.pack(*astuple(self))
        except struct.error as exc:
            raise ValueError(str(exc)) from exc

    @classmethod
    def unpack(cls, data: bytes) -> "Stat":
        """Decode an encoded record."""
        if len(data) != cls.SIZE:
            raise ValueError(f"stat record must be {cls.SIZE} bytes, got {len(data)}")
        return cls(*cls._FORMAT.unpack(data))


@dataclass
class RtcDate:
    """A date and time read from the real-time clock."""

    second: int
    minute: int
    hour: int
    day: int
    month: int
    year: int