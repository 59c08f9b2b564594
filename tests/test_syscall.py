import struct

import pytest

from xvkern.constants import Syscall
from xvkern.syscall import BadAddress, UserContext, dispatch

ESP = 16
STR_AT = 48


def make_proc(*args):
    memory = bytearray(64)
    struct.pack_into("<I", memory, ESP, 0x1234)
    struct.pack_into(f"<{len(args)}i", memory, ESP + 4, *args)
    memory[STR_AT:STR_AT + 6] = b"hello\0"
    return UserContext(memory=memory, esp=ESP, pid=7, name="init")


def test_arg_int_reads_stack_arguments():
    proc = make_proc(42, -5)
    assert proc.arg_int(0) == 42
    assert proc.arg_int(1) == -5


def test_fetch_int_bounds():
    proc = make_proc(1)
    assert proc.fetch_int(ESP) == 0x1234
    with pytest.raises(BadAddress):
        proc.fetch_int(proc.sz - 3)
    with pytest.raises(BadAddress):
        proc.fetch_int(proc.sz)
    with pytest.raises(BadAddress):
        proc.arg_int(20)


def test_fetch_str_and_arg_str():
    proc = make_proc(STR_AT)
    assert proc.fetch_str(STR_AT) == b"hello"
    assert proc.arg_str(0) == b"hello"


def test_fetch_str_requires_terminator():
    proc = make_proc(1)
    proc.memory[-3:] = b"abc"
    with pytest.raises(BadAddress):
        proc.fetch_str(proc.sz - 3)
    with pytest.raises(BadAddress):
        proc.fetch_str(proc.sz)


def test_arg_str_with_negative_address():
    proc = make_proc(-1)
    with pytest.raises(BadAddress):
        proc.arg_str(0)


def test_arg_ptr_checks_block():
    proc = make_proc(STR_AT)
    assert proc.arg_ptr(0, 8) == STR_AT
    assert proc.arg_ptr(0, proc.sz - STR_AT) == STR_AT
    with pytest.raises(BadAddress):
        proc.arg_ptr(0, proc.sz - STR_AT + 1)
    with pytest.raises(BadAddress):
        proc.arg_ptr(0, -1)


def test_dispatch_runs_handler():
    proc = make_proc(42)
    proc.eax = Syscall.GETPID
    result = dispatch(proc, {Syscall.GETPID: lambda p: p.pid}, log=lambda msg: None)
    assert result == 7
    assert proc.eax == 7


def test_dispatch_passes_arguments():
    proc = make_proc(42, 8)
    proc.eax = Syscall.KILL
    dispatch(proc, {Syscall.KILL: lambda p: p.arg_int(0) + p.arg_int(1)})
    assert proc.eax == 50


def test_dispatch_unknown_call_logs_and_fails():
    messages = []
    proc = make_proc()
    proc.eax = 99
    dispatch(proc, {Syscall.FORK: lambda p: 0}, log=messages.append)
    assert proc.eax == -1
    assert messages == ["7 init: unknown sys call 99"]


def test_dispatch_rejects_call_zero():
    messages = []
    proc = make_proc()
    proc.eax = 0
    dispatch(proc, {0: lambda p: 5}, log=messages.append)
    assert proc.eax == -1
    assert len(messages) == 1


def test_dispatch_turns_bad_address_into_failure():
    proc = make_proc(-1)
    proc.eax = Syscall.OPEN
    dispatch(proc, {Syscall.OPEN: lambda p: len(p.arg_str(0))})
    assert proc.eax == -1