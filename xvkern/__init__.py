"""Core pieces of a small x86 teaching kernel: paging, ELF headers, string routines, a heap, system-call arguments, a shell parser, word counting and locks."""

__version__ = "0.1.0"