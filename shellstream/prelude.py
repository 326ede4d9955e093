"""Unix-flavoured commands built from shells, patterns and guarded resources.

Example:
    >>> output("foo.txt", select(["123", "456", "ABC"]))
    >>> stdout(grep(text("1") | "B", input("foo.txt")))
    123
    ABC
    >>> stdout(sed(plus(digit).map(lambda s: s + "!"), input("foo.txt")))
    123!
    456!
    ABC
"""

import os
import sys
import time as _time
from datetime import datetime, timezone
from typing import Any, Callable, TypeVar, Union

from shellstream.executor import ExitCode
from shellstream.filesystem import appendhandle, lstree, readhandle, testfile, writehandle
from shellstream.pattern import PatternLike, any_char, first, lift, many, occurs
from shellstream.protected import Protected, checkpoint
from shellstream.shell import Fold, Shell, empty, handlein, sh, using

T = TypeVar("T")


def echo(line: str) -> None:
    """Print to stdout."""
    print(line)


def err(line: str) -> None:
    """Print to stderr."""
    print(line, file=sys.stderr)


def stdin() -> Shell[str]:
    """Lines of standard input."""
    return Shell(lambda fold: handlein(sys.stdin).fold(fold))


def stdout(shell: Shell[str]) -> None:
    """Stream lines to standard output."""
    sh(shell.map(echo))


def stderr(shell: Shell[str]) -> None:
    """Stream lines to standard error."""
    sh(shell.map(err))


def input(path: str) -> Shell[str]:
    """
    Lines of a file.

    The file is opened when the stream is driven and closed once every line
    has been consumed, or as soon as the drive stops early.

    Raises:
        FileNotFoundError: When driven, if ``path`` does not exist.
    """
    return using(readhandle(path)).bind(handlein)


def _tee(resource: Protected[Any], shell: Shell[str]) -> None:
    def write_all(handle: Any) -> Shell[None]:
        return shell.map(lambda line: handle.write(line + "\n"))

    sh(using(resource).bind(write_all))


def output(path: str, shell: Shell[str]) -> None:
    """Write lines to a file, replacing its contents."""
    _tee(writehandle(path), shell)


def append(path: str, shell: Shell[str]) -> None:
    """Append lines to a file."""
    _tee(appendhandle(path), shell)


def touch(path: str) -> None:
    """Update a file's modification time, creating it if it does not exist."""
    if testfile(path):
        os.utime(path, None)
    else:
        output(path, empty())


def grep(pattern: PatternLike, shell: Shell[str]) -> Shell[str]:
    """Keep the lines that match ``pattern`` anywhere."""
    pattern = lift(pattern)
    return shell.filter(lambda line: occurs(pattern, line))


def sed(pattern: PatternLike, shell: Shell[str]) -> Shell[str]:
    """
    Replace every occurrence of ``pattern`` in each line with its value.

    ``pattern`` must not match the empty string: such a pattern can be
    applied forever without consuming input and the call never returns.
    """
    rewrite = many(lift(pattern) | any_char).map("".join)
    return shell.map(lambda line: first(rewrite, line))


def find(pattern: PatternLike, path: str) -> Shell[str]:
    """Recursively stream the paths under ``path`` that match ``pattern`` anywhere."""
    pattern = lift(pattern)
    return lstree(path).filter(lambda entry: occurs(pattern, entry))


def yes() -> Shell[str]:
    """An endless stream of ``"y"``. Bound it with ``limit``."""

    def drive(fold: Fold[str, Any]) -> Any:
        acc = fold.begin()
        while True:
            checkpoint()
            acc = fold.step(acc, "y")

    return Shell(drive)


def time(fn: Callable[[], T]) -> tuple[T, float]:
    """Run ``fn``, returning its result and the monotonic wall time in seconds."""
    start = _time.monotonic()
    result = fn()
    return result, _time.monotonic() - start


def date() -> datetime:
    """The current time (UTC)."""
    return datetime.now(timezone.utc)


def exit(code: Union[int, ExitCode] = 0) -> None:
    """Exit the interpreter; 0 (or ``ExitSuccess``) means success."""
    if isinstance(code, ExitCode):
        code = code.code
    raise SystemExit(code)


def die(message: str) -> None:
    """Print ``message`` to stderr and exit with status 1."""
    err(message)
    exit(1)
