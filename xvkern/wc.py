"""Count lines, words and bytes."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import BinaryIO, Optional, Sequence

CHUNK = 512
# A NUL byte separates words too.
_SEPARATORS = frozenset(b" \r\t\n\v\0")


@dataclass(frozen=True)
class Counts:
    """Line, word and byte totals."""

    lines: int = 0
    words: int = 0
    chars: int = 0


def count(stream: BinaryIO) -> Counts:
    """Count the lines, words and bytes of a binary stream."""
    lines = words = chars = 0
    in_word = False
    for chunk in iter(lambda: stream.read(CHUNK), b""):
        chars += len(chunk)
        lines += chunk.count(b"\n")
        for byte in chunk:
            if byte in _SEPARATORS:
                in_word = False
            elif not in_word:
                words += 1
                in_word = True
    return Counts(lines, words, chars)


def _report(counts: Counts, name: str) -> None:
    print(f"{counts.lines} {counts.words} {counts.chars} {name}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Print counts for each named file, or for standard input when none is named."""
    names = sys.argv[1:] if argv is None else list(argv)
    if not names:
        try:
            counts = count(sys.stdin.buffer)
        except OSError:
            print("wc: read error")
            return 1
        _report(counts, "")
        return 0
    for name in names:
        try:
            stream = open(name, "rb")
        except OSError:
            print(f"wc: cannot open {name}")
            return 1
        with stream:
            try:
                counts = count(stream)
            except OSError:
                print("wc: read error")
                return 1
        _report(counts, name)
    return 0


if __name__ == "__main__":
    sys.exit(main())