"""Parser for the shell's command language: words, redirections, pipes, lists."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, NamedTuple, Optional, Union

from .constants import OpenFlag

WHITESPACE = " \t\r\n\v"
SYMBOLS = "<|>&;()"
MAXARGS = 10


class ShellSyntaxError(ValueError):
    """The command line cannot be parsed."""


@dataclass
class ExecCmd:
    """Run a program with its arguments; argv[0] names the program."""

    argv: list[str] = field(default_factory=list)


@dataclass
class RedirCmd:
    """Run cmd with descriptor fd reopened on file."""

    cmd: "Command"
    file: str
    mode: OpenFlag
    fd: int


@dataclass
class PipeCmd:
    """Run left and right with left's output feeding right's input."""

    left: "Command"
    right: "Command"


@dataclass
class ListCmd:
    """Run left to completion, then right."""

    left: "Command"
    right: "Command"


@dataclass
class BackCmd:
    """Run cmd without waiting for it."""

    cmd: "Command"


Command = Union[ExecCmd, RedirCmd, PipeCmd, ListCmd, BackCmd]


class Token(NamedTuple):
    """A lexical token: kind is 'a' for a word, '+' for '>>', else the symbol."""

    kind: str
    text: str


class _Parser:
    def __init__(self, line: str) -> None:
        # The line ends at its first NUL, as a C string would.
        self.s = line.split("\0", 1)[0]
        self.pos = 0

    def _skip_space(self) -> None:
        s = self.s
        while self.pos < len(s) and s[self.pos] in WHITESPACE:
            self.pos += 1

    def at_end(self) -> bool:
        self._skip_space()
        return self.pos >= len(self.s)

    def peek(self, toks: str) -> bool:
        self._skip_space()
        return self.pos < len(self.s) and self.s[self.pos] in toks

    def next_token(self) -> Optional[Token]:
        self._skip_space()
        s = self.s
        start = self.pos
        if start >= len(s):
            return None
        ch = s[start]
        if ch in "|();&<":
            self.pos += 1
            kind = ch
        elif ch == ">":
            self.pos += 1
            if self.pos < len(s) and s[self.pos] == ">":
                self.pos += 1
                kind = "+"
            else:
                kind = ">"
        else:
            while (
                self.pos < len(s)
                and s[self.pos] not in WHITESPACE
                and s[self.pos] not in SYMBOLS
            ):
                self.pos += 1
            kind = "a"
        token = Token(kind, s[start:self.pos])
        self._skip_space()
        return token

    def parse_line(self) -> Command:
        cmd = self.parse_pipe()
        while self.peek("&"):
            self.next_token()
            cmd = BackCmd(cmd)
        if self.peek(";"):
            self.next_token()
            cmd = ListCmd(cmd, self.parse_line())
        return cmd

    def parse_pipe(self) -> Command:
        cmd = self.parse_exec()
        if self.peek("|"):
            self.next_token()
            cmd = PipeCmd(cmd, self.parse_pipe())
        return cmd

    def parse_redirs(self, cmd: Command) -> Command:
        while self.peek("<>"):
            op = self.next_token()
            target = self.next_token()
            if target is None or target.kind != "a":
                raise ShellSyntaxError("missing file for redirection")
            if op.kind == "<":
                cmd = RedirCmd(cmd, target.text, OpenFlag.RDONLY, 0)
            else:  # '>' and '>>' open the same way
                cmd = RedirCmd(cmd, target.text, OpenFlag.WRONLY | OpenFlag.CREATE, 1)
        return cmd

    def parse_block(self) -> Command:
        if not self.peek("("):
            raise ShellSyntaxError("parseblock")
        self.next_token()
        cmd = self.parse_line()
        if not self.peek(")"):
            raise ShellSyntaxError("syntax - missing )")
        self.next_token()
        return self.parse_redirs(cmd)

    def parse_exec(self) -> Command:
        if self.peek("("):
            return self.parse_block()
        cmd = ExecCmd()
        ret = self.parse_redirs(cmd)
        while not self.peek("|)&;"):
            token = self.next_token()
            if token is None:
                break
            if token.kind != "a":
                raise ShellSyntaxError("syntax")
            cmd.argv.append(token.text)
            if len(cmd.argv) >= MAXARGS:
                raise ShellSyntaxError("too many args")
            ret = self.parse_redirs(ret)
        return ret


def tokens(line: str) -> Iterator[Token]:
    """The tokens of a command line, in order."""
    parser = _Parser(line)
    while (token := parser.next_token()) is not None:
        yield token


def parse_command(line: str) -> Command:
    """Parse a whole command line into a command tree."""
    parser = _Parser(line)
    cmd = parser.parse_line()
    if not parser.at_end():
        raise ShellSyntaxError(f"leftovers: {parser.s[parser.pos:]}")
    return cmd