"""Tests for shellstream.prelude commands."""

import io
import os
from datetime import datetime

import pytest

from shellstream.executor import ExitFailure
from shellstream.pattern import digit, plus, text
from shellstream.prelude import (
    append,
    date,
    die,
    echo,
    err,
    exit,
    find,
    grep,
    input,
    output,
    sed,
    stderr,
    stdin,
    stdout,
    time,
    touch,
    yes,
)
from shellstream.shell import limit, select


class TestFiles:
    def test_input_lines(self, foo_file) -> None:
        assert input(foo_file).run() == ["123", "456", "ABC"]

    def test_input_missing_file_raises_when_driven(self, tmp_path) -> None:
        shell = input(str(tmp_path / "missing.txt"))
        with pytest.raises(FileNotFoundError):
            shell.run()

    def test_output_and_append(self, tmp_path) -> None:
        path = str(tmp_path / "out.txt")
        output(path, select(["123", "456"]))
        append(path, select(["ABC"]))
        assert input(path).run() == ["123", "456", "ABC"]
        output(path, select(["new"]))
        assert input(path).run() == ["new"]

    def test_output_does_not_cache_input(self, tmp_path) -> None:
        path = str(tmp_path / "lines.txt")
        output(path, select(["one"]))
        shell = input(path)
        assert shell.run() == ["one"]
        append(path, select(["two"]))
        assert shell.run() == ["one", "two"]

    def test_touch(self, tmp_path) -> None:
        path = str(tmp_path / "touched")
        touch(path)
        assert os.path.isfile(path)
        os.utime(path, (0, 0))
        touch(path)
        assert os.path.getmtime(path) > 0


class TestGrep:
    def test_keeps_matching_lines(self, foo_file) -> None:
        assert grep(text("1") | "B", input(foo_file)).run() == ["123", "ABC"]

    def test_digit_or_b_keeps_every_line(self) -> None:
        assert grep(digit | "B", select(["123", "456", "ABC"])).run() == ["123", "456", "ABC"]

    def test_plain_string_pattern(self) -> None:
        assert grep("rr", select(["error", "warn", "mirror"])).run() == ["error", "mirror"]


class TestSed:
    def test_rewrites_every_occurrence(self, foo_file) -> None:
        exclaim = plus(digit).map(lambda s: s + "!")
        assert sed(exclaim, input(foo_file)).run() == ["123!", "456!", "ABC"]

    def test_multiple_occurrences_in_a_line(self) -> None:
        exclaim = plus(digit).map(lambda s: s + "!")
        assert sed(exclaim, select(["a1b22c"])).run() == ["a1!b22!c"]

    def test_replace_literal(self) -> None:
        assert sed(text("cat").map(lambda _: "dog"), select(["cat catalog", ""])).run() == [
            "dog dogalog",
            "",
        ]


class TestFind:
    def test_matches_paths(self, tree) -> None:
        found = sorted(os.path.relpath(p, tree) for p in find(".py", tree).run())
        assert found == [os.path.join("sub", "b.py"), "z.py"]

    def test_matches_directory_names(self, tree) -> None:
        found = [os.path.relpath(p, tree) for p in find("deeper", tree).run()]
        assert sorted(found) == [os.path.join("sub", "deeper"), os.path.join("sub", "deeper", "c.txt")]


class TestYes:
    def test_limited(self) -> None:
        assert limit(3, yes()).run() == ["y", "y", "y"]


class TestStandardStreams:
    def test_stdout_and_echo(self, capsys) -> None:
        stdout(select(["a", "b"]))
        echo("c")
        assert capsys.readouterr().out == "a\nb\nc\n"

    def test_stderr_and_err(self, capsys) -> None:
        stderr(select(["a"]))
        err("b")
        assert capsys.readouterr().err == "a\nb\n"

    def test_stdin(self, monkeypatch) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO("x\ny\n"))
        assert stdin().run() == ["x", "y"]


class TestMisc:
    def test_time(self) -> None:
        result, elapsed = time(lambda: 5)
        assert result == 5
        assert elapsed >= 0

    def test_date(self) -> None:
        assert isinstance(date(), datetime)
        assert date().tzinfo is not None

    def test_exit(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            exit(ExitFailure(4))
        assert exc_info.value.code == 4

    def test_die(self, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            die("fatal")
        assert exc_info.value.code == 1
        assert capsys.readouterr().err == "fatal\n"
