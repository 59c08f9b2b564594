"""Byte-string routines with NUL-terminated string semantics."""

from __future__ import annotations

import re
from typing import BinaryIO, Union

BytesLike = Union[bytes, bytearray, memoryview, str]

_DIGITS = re.compile(rb"[0-9]*")


def _cstr(s: BytesLike) -> bytes:
    """The bytes of s up to, not including, the first NUL."""
    data = s.encode("latin-1") if isinstance(s, str) else bytes(s)
    end = data.find(0)
    return data if end < 0 else data[:end]


def _char(c: Union[int, bytes, str]) -> int:
    if isinstance(c, int):
        return c & 0xFF
    if len(c) != 1:
        raise ValueError("expected a single character")
    return ord(c) & 0xFF


def memset(dst: bytearray, c: int, n: int) -> bytearray:
    """Fill the first n bytes of dst with the low byte of c."""
    if n < 0 or n > len(dst):
        raise ValueError(f"cannot set {n} bytes of a {len(dst)}-byte buffer")
    dst[:n] = bytes([c & 0xFF]) * n
    return dst


def memcmp(a: BytesLike, b: BytesLike, n: int) -> int:
    """Difference of the first differing byte among the first n, else 0."""
    left = bytes(a)[:n] if not isinstance(a, str) else a.encode("latin-1")[:n]
    right = bytes(b)[:n] if not isinstance(b, str) else b.encode("latin-1")[:n]
    if len(left) < n or len(right) < n:
        raise ValueError(f"both operands must hold at least {n} bytes")
    for x, y in zip(left, right):
        if x != y:
            return x - y
    return 0


def memmove(buf: bytearray, dst: int, src: int, n: int) -> bytearray:
    """Copy n bytes within buf from src to dst; overlapping ranges are safe."""
    if n < 0 or min(dst, src) < 0 or max(dst, src) + n > len(buf):
        raise ValueError("move range lies outside the buffer")
    buf[dst:dst + n] = buf[src:src + n]
    return buf


def strlen(s: BytesLike) -> int:
    """Length of the string before its NUL."""
    return len(_cstr(s))


def strcmp(p: BytesLike, q: BytesLike) -> int:
    """Compare two strings; the sign tells their order."""
    return strncmp(p, q, max(len(p), len(q)) + 1)


def strncmp(p: BytesLike, q: BytesLike, n: int) -> int:
    """Compare at most n characters of two strings."""
    left = _cstr(p) + b"\0"
    right = _cstr(q) + b"\0"
    for x, y in zip(left[:n], right[:n]):
        if x != y or x == 0:
            return x - y
    return 0


def strncpy(t: BytesLike, n: int) -> bytes:
    """Exactly n bytes: t up to its NUL, truncated or padded with NULs."""
    n = max(n, 0)
    copied = _cstr(t)[:n]
    return copied + bytes(n - len(copied))


def safestrcpy(t: BytesLike, n: int) -> bytes:
    """At most n-1 characters of t followed by a NUL; empty if n <= 0."""
    if n <= 0:
        return b""
    return _cstr(t)[:n - 1] + b"\0"


def strchr(s: BytesLike, c: Union[int, bytes, str]) -> int | None:
    """Index of the first c in s before its NUL, or None."""
    ch = _char(c)
    if ch == 0:
        return None
    index = _cstr(s).find(bytes([ch]))
    return None if index < 0 else index


def atoi(s: BytesLike) -> int:
    """Value of the leading decimal digits of s; no sign, no spaces."""
    digits = _DIGITS.match(_cstr(s)).group()
    return int(digits) if digits else 0


def gets(stream: BinaryIO, max: int) -> bytes:
    """Read a line of at most max-1 bytes, keeping its newline or return."""
    line = bytearray()
    while len(line) + 1 < max:
        ch = stream.read(1)
        if not ch:
            break
        line += ch
        if ch in (b"\n", b"\r"):
            break
    return bytes(line)