import io
import sys

from xvkern.wc import Counts, count, main


def test_simple_count():
    assert count(io.BytesIO(b"hello world\n")) == Counts(1, 2, 12)


def test_empty_stream():
    assert count(io.BytesIO(b"")) == Counts(0, 0, 0)


def test_totals_across_chunks():
    data = b"ab cd\n" * 300
    result = count(io.BytesIO(data))
    assert result.chars == len(data)
    assert result.lines == data.count(b"\n")
    assert result.words == len(data.split())


def test_word_spanning_chunk_boundary_counts_once():
    data = b"x" * 511 + b"yy z"
    assert count(io.BytesIO(data)).words == count(io.BytesIO(b"w z")).words


def test_nul_and_vertical_tab_separate_words():
    assert count(io.BytesIO(b"a\0b\vc")).words == 3


def test_main_files(tmp_path, capsys):
    first = tmp_path / "one.txt"
    second = tmp_path / "two.txt"
    first.write_bytes(b"a b\nc\n")
    second.write_bytes(b"")
    assert main([str(first), str(second)]) == 0
    out = capsys.readouterr().out.splitlines()
    c1 = count(io.BytesIO(first.read_bytes()))
    assert out == [
        f"{c1.lines} {c1.words} {c1.chars} {first}",
        f"0 0 0 {second}",
    ]


def test_main_missing_file(tmp_path, capsys):
    missing = tmp_path / "nope"
    assert main([str(missing)]) == 1
    assert capsys.readouterr().out == f"wc: cannot open {missing}\n"


def test_main_stdin(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(b"hello world\n")))
    assert main([]) == 0
    assert capsys.readouterr().out == "1 2 12 \n"