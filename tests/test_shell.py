import pytest

from xvkern.constants import OpenFlag
from xvkern.shell import (
    BackCmd,
    ExecCmd,
    ListCmd,
    PipeCmd,
    RedirCmd,
    ShellSyntaxError,
    parse_command,
    tokens,
)


def test_tokens_words_and_pipe():
    assert [tuple(t) for t in tokens("ls -l | wc")] == [
        ("a", "ls"),
        ("a", "-l"),
        ("|", "|"),
        ("a", "wc"),
    ]


def test_tokens_append_redirect():
    assert [t.kind for t in tokens("echo x >> out > f < in")] == [
        "a", "a", "+", "a", ">", "a", "<", "a",
    ]


def test_tokens_symbols_split_words():
    assert [t.text for t in tokens("a;b&(c)")] == ["a", ";", "b", "&", "(", "c", ")"]


def test_tokens_stop_at_nul():
    assert [t.text for t in tokens("echo hi\0 ignored")] == ["echo", "hi"]


def test_simple_exec():
    assert parse_command("echo hi there\n") == ExecCmd(["echo", "hi", "there"])


def test_empty_line():
    assert parse_command("   \n") == ExecCmd([])


def test_redirections_nest_outward():
    cmd = parse_command("cat < in > out")
    assert cmd == RedirCmd(
        RedirCmd(ExecCmd(["cat"]), "in", OpenFlag.RDONLY, 0),
        "out",
        OpenFlag.WRONLY | OpenFlag.CREATE,
        1,
    )


def test_append_opens_like_write():
    assert parse_command("echo a >> f") == parse_command("echo a > f")


def test_redirect_between_words():
    cmd = parse_command("echo a > f b")
    assert isinstance(cmd, RedirCmd)
    assert cmd.cmd == ExecCmd(["echo", "a", "b"])


def test_pipe_is_right_associative():
    assert parse_command("a | b | c") == PipeCmd(
        ExecCmd(["a"]), PipeCmd(ExecCmd(["b"]), ExecCmd(["c"]))
    )


def test_list_and_background():
    assert parse_command("a & ; b") == ListCmd(BackCmd(ExecCmd(["a"])), ExecCmd(["b"]))


def test_repeated_background():
    assert parse_command("a&&") == BackCmd(BackCmd(ExecCmd(["a"])))


def test_block_with_redirect():
    cmd = parse_command("(a ; b) > out")
    assert cmd == RedirCmd(
        ListCmd(ExecCmd(["a"]), ExecCmd(["b"])),
        "out",
        OpenFlag.WRONLY | OpenFlag.CREATE,
        1,
    )


def test_nine_args_allowed():
    words = [str(i) for i in range(9)]
    assert parse_command(" ".join(words)) == ExecCmd(words)


def test_too_many_args():
    with pytest.raises(ShellSyntaxError, match="too many args"):
        parse_command(" ".join(str(i) for i in range(10)))


def test_missing_redirect_file():
    with pytest.raises(ShellSyntaxError, match="missing file for redirection"):
        parse_command("echo hi >")


def test_missing_close_paren():
    with pytest.raises(ShellSyntaxError, match="missing"):
        parse_command("(echo hi")


def test_leftovers():
    with pytest.raises(ShellSyntaxError, match="leftovers"):
        parse_command("echo )")


def test_open_paren_after_word():
    with pytest.raises(ShellSyntaxError):
        parse_command("echo (")