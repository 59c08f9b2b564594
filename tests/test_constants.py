import pytest

from xvkern.constants import FileType, OpenFlag, RtcDate, Stat, Syscall, Trap, Irq


def test_stat_round_trip():
    st = Stat(type=FileType.FILE, dev=1, ino=42, nlink=2, size=4096)
    assert Stat.unpack(st.pack()) == st


def test_stat_layout():
    packed = Stat(type=FileType.DIR, dev=1, ino=1, nlink=1, size=0).pack()
    assert len(packed) == 20
    assert packed[:2] == b"\x01\x00"


def test_stat_unpack_wrong_size():
    with pytest.raises(ValueError):
        Stat.unpack(b"\x00" * 3)


def test_stat_pack_out_of_range():
    with pytest.raises(ValueError):
        Stat(size=-1).pack()


def test_syscall_numbers_are_dense():
    looked_up = [Syscall(n) for n in range(1, 31)]
    assert [int(s) for s in looked_up] == list(range(1, 31))
    assert looked_up[-1] is Syscall.MYPS


def test_syscall_lookup():
    assert Syscall(Syscall.MYPS.value) is Syscall.MYPS
    with pytest.raises(ValueError):
        Syscall(0)


def test_open_flags_combine():
    mode = OpenFlag(0x202)
    assert mode == OpenFlag.CREATE | OpenFlag.RDWR
    assert mode & OpenFlag.RDWR
    assert not mode & OpenFlag.WRONLY


def test_irq_vectors_follow_irq0():
    assert Trap(Trap.IRQ0 + Irq.TIMER) is Trap.IRQ0
    assert Trap.IRQ0 + Irq.SPURIOUS < Trap.SYSCALL


def test_rtcdate_fields():
    d = RtcDate(second=1, minute=2, hour=3, day=4, month=5, year=1975)
    assert (d.day, d.month, d.year) == (4, 5, 1975)