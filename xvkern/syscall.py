"""System call argument fetching and dispatch."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Mapping

_MASK32 = 0xFFFFFFFF
_INT_SIZE = 4


class BadAddress(ValueError):
    """A user-supplied address lies outside the process's memory."""


@dataclass
class UserContext:
    """A process as a system call sees it: its memory and saved registers."""

    memory: bytearray = field(default_factory=bytearray)
    esp: int = 0
    eax: int = 0
    pid: int = 0
    name: str = ""

    @property
    def sz(self) -> int:
        """Size of the process's memory in bytes."""
        return len(self.memory)

    def fetch_int(self, addr: int) -> int:
        """The signed 32-bit integer stored at user address addr."""
        addr &= _MASK32
        if addr >= self.sz or addr + _INT_SIZE > self.sz:
            raise BadAddress(f"int at {addr:#x} is outside the process")
        return int.from_bytes(self.memory[addr:addr + _INT_SIZE], "little", signed=True)

    def fetch_str(self, addr: int) -> bytes:
        """The NUL-terminated string at addr, without its NUL."""
        addr &= _MASK32
        if addr >= self.sz:
            raise BadAddress(f"string at {addr:#x} is outside the process")
        end = self.memory.find(0, addr)
        if end < 0:
            raise BadAddress(f"string at {addr:#x} is not terminated")
        return bytes(self.memory[addr:end])

    def arg_int(self, n: int) -> int:
        """The nth 32-bit system call argument."""
        return self.fetch_int(self.esp + _INT_SIZE + _INT_SIZE * n)

    def arg_ptr(self, n: int, size: int) -> int:
        """The nth argument as the address of size bytes inside the process."""
        addr = self.arg_int(n) & _MASK32
        if size < 0 or addr >= self.sz or addr + size > self.sz:
            raise BadAddress(f"block {addr:#x}+{size} is outside the process")
        return addr

    def arg_str(self, n: int) -> bytes:
        """The nth argument as a NUL-terminated string."""
        return self.fetch_str(self.arg_int(n))


def dispatch(
    proc: UserContext,
    handlers: Mapping[int, Callable[[UserContext], int]],
    log: Callable[[str], object] = print,
) -> int:
    """Run the call numbered in proc.eax and leave its result in proc.eax."""
    num = proc.eax
    handler = handlers.get(num) if num > 0 else None
    if handler is None:
        log(f"{proc.pid} {proc.name}: unknown sys call {num}")
        proc.eax = -1
    else:
        try:
            proc.eax = handler(proc)
        except BadAddress:
            proc.eax = -1
    return proc.eax