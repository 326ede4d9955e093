"""Lazy, consumer-driven streams.

A ``Shell`` is a recipe for producing values into a ``Fold``. Nothing is
produced until the shell is driven (``fold``, ``run``, ``sh``, ``view``), and
driving it again re-runs every effect: shells are never cached.

Example:
    >>> cat(select([1, 2]), once(3)).map(lambda n: n * 10).run()
    [10, 20, 30]
"""

from dataclasses import dataclass
from typing import IO, Any, Callable, Generic, Iterable, Optional, TypeVar

from shellstream.protected import Protected, checkpoint

T = TypeVar("T")
U = TypeVar("U")
R = TypeVar("R")


def _identity(value: Any) -> Any:
    return value


def _starting_at(acc: Any) -> Callable[[], Any]:
    return lambda: acc


def _append(acc: list, value: Any) -> list:
    acc.append(value)
    return acc


@dataclass(frozen=True)
class Fold(Generic[T, R]):
    """
    A consumer: ``begin`` makes the initial accumulator, ``step`` folds one
    value into it, ``done`` turns the final accumulator into the result.

    ``begin`` is called once per drive, so mutable accumulators are never
    shared between drives.
    """

    step: Callable[[Any, T], Any]
    begin: Callable[[], Any]
    done: Callable[[Any], R] = _identity

    @classmethod
    def to_list(cls) -> "Fold[T, list]":
        return cls(_append, list)

    @classmethod
    def length(cls) -> "Fold[Any, int]":
        return cls(lambda n, _: n + 1, lambda: 0)

    @classmethod
    def last(cls, default: Any = None) -> "Fold[T, Any]":
        return cls(lambda _, value: value, _starting_at(default))


class _Halt(BaseException):
    """Unwinds a producer once a limiting combinator wants no more values.

    ``token`` identifies the combinator drive that raised it, so nested limits
    only catch their own halt.
    """

    def __init__(self, token: object, acc: Any):
        super().__init__()
        self.token = token
        self.acc = acc


class Shell(Generic[T]):
    """
    A lazy stream of values.

    Args:
        drive: Callable that runs the stream into a ``Fold`` and returns the
            fold's result.
    """

    def __init__(self, drive: Callable[[Fold[T, Any]], Any]):
        self._drive = drive

    def fold(self, fold: Fold[T, R]) -> R:
        """Drive the stream into ``fold``."""
        return self._drive(fold)

    def bind(self, fn: Callable[[T], "Shell[U]"]) -> "Shell[U]":
        """
        For each value, fully drive ``fn(value)`` before producing the next.

        Example:
            >>> select("ab").bind(lambda c: select([c, c.upper()])).run()
            ['a', 'A', 'b', 'B']
        """

        def drive(fold: Fold[U, Any]) -> Any:
            def step(acc: Any, value: T) -> Any:
                return fn(value).fold(Fold(fold.step, _starting_at(acc)))

            return fold.done(self.fold(Fold(step, fold.begin)))

        return Shell(drive)

    def map(self, fn: Callable[[T], U]) -> "Shell[U]":
        def drive(fold: Fold[U, Any]) -> Any:
            return self.fold(
                Fold(lambda acc, value: fold.step(acc, fn(value)), fold.begin, fold.done)
            )

        return Shell(drive)

    def filter(self, predicate: Callable[[T], bool]) -> "Shell[T]":
        def drive(fold: Fold[T, Any]) -> Any:
            def step(acc: Any, value: T) -> Any:
                return fold.step(acc, value) if predicate(value) else acc

            return self.fold(Fold(step, fold.begin, fold.done))

        return Shell(drive)

    def limit(self, n: int, drain: bool = False) -> "Shell[T]":
        return limit(n, self, drain=drain)

    def limit_while(self, predicate: Callable[[T], bool], drain: bool = False) -> "Shell[T]":
        return limit_while(predicate, self, drain=drain)

    def run(self) -> list:
        """Drive the stream and collect every value into a list."""
        return self.fold(Fold.to_list())

    def first(self, default: Any = None) -> Any:
        """Return the first value (stopping the producer), or ``default``."""
        return limit(1, self).fold(Fold.last(default))

    def __add__(self, other: "Shell[T]") -> "Shell[T]":
        return cat(self, other)


# Producers


def select(values: Iterable[T]) -> Shell[T]:
    """
    Stream the items of ``values``.

    Each drive iterates ``values`` again, so pass a re-iterable collection if
    the shell is driven more than once.
    """

    def drive(fold: Fold[T, Any]) -> Any:
        acc = fold.begin()
        iterator = iter(values)
        try:
            for value in iterator:
                checkpoint()
                acc = fold.step(acc, value)
        finally:
            close = getattr(iterator, "close", None)
            if close is not None:
                close()
        return fold.done(acc)

    return Shell(drive)


def handlein(handle: IO[str]) -> Shell[str]:
    """Stream lines read from an open text handle, newline stripped.

    Each line is one blocking ``readline``; the stream ends at end of file.
    """

    def drive(fold: Fold[str, Any]) -> Any:
        acc = fold.begin()
        while True:
            checkpoint()
            line = handle.readline()
            if not line:
                return fold.done(acc)
            acc = fold.step(acc, line[:-1] if line.endswith("\n") else line)

    return Shell(drive)


def once(value: T) -> Shell[T]:
    """A stream of exactly one value."""
    return select((value,))


def empty() -> Shell[Any]:
    """A stream of no values."""
    return select(())


def cat(*shells: Shell[T]) -> Shell[T]:
    """Drive each shell in turn into the same consumer."""

    def drive(fold: Fold[T, Any]) -> Any:
        acc = fold.begin()
        for shell in shells:
            acc = shell.fold(Fold(fold.step, _starting_at(acc)))
        return fold.done(acc)

    return Shell(drive)


def concat(first: Shell[T], second: Shell[T]) -> Shell[T]:
    return cat(first, second)


def using(resource: Protected[T]) -> Shell[T]:
    """
    Acquire ``resource`` and stream it once.

    The resource is released after the downstream consumer has finished with
    the value, so ``using(readhandle(path)).bind(handlein)`` keeps the handle
    open while its lines are consumed.
    """

    def drive(fold: Fold[T, Any]) -> Any:
        acc = fold.begin()
        with resource as value:
            acc = fold.step(acc, value)
        return fold.done(acc)

    return Shell(drive)


# Limiting


def limit(n: int, shell: Shell[T], drain: bool = False) -> Shell[T]:
    """
    Keep at most the first ``n`` values of ``shell``.

    Args:
        n: Maximum number of values to forward.
        shell: Source stream.
        drain: By default the producer is stopped as soon as ``n`` values have
            been forwarded (its guarded resources are released on the way
            out). With ``drain=True`` the producer runs to completion and the
            excess values are dropped, so their side effects still happen.

    Example:
        >>> limit(2, yes()).run()
        ['y', 'y']
    """

    def drive(fold: Fold[T, Any]) -> Any:
        if n <= 0 and not drain:
            return fold.done(fold.begin())
        token = object()
        seen = 0

        def step(acc: Any, value: T) -> Any:
            nonlocal seen
            seen += 1
            if seen > n:
                return acc
            acc = fold.step(acc, value)
            if seen == n and not drain:
                raise _Halt(token, acc)
            return acc

        return fold.done(_drive_until_halt(shell, Fold(step, fold.begin), token))

    return Shell(drive)


def limit_while(
    predicate: Callable[[T], bool], shell: Shell[T], drain: bool = False
) -> Shell[T]:
    """
    Keep values while ``predicate`` holds.

    The first failing value ends the output for good, even if later values
    would pass. ``drain`` behaves as in ``limit``.
    """

    def drive(fold: Fold[T, Any]) -> Any:
        token = object()
        passing = True

        def step(acc: Any, value: T) -> Any:
            nonlocal passing
            passing = passing and predicate(value)
            if passing:
                return fold.step(acc, value)
            if not drain:
                raise _Halt(token, acc)
            return acc

        return fold.done(_drive_until_halt(shell, Fold(step, fold.begin), token))

    return Shell(drive)


def _drive_until_halt(shell: Shell[T], fold: Fold[T, Any], token: object) -> Any:
    try:
        return shell.fold(fold)
    except _Halt as halt:
        if halt.token is not token:
            raise
        return halt.acc


# Drivers


def fold(shell: Shell[T], consumer: Fold[T, R]) -> R:
    return shell.fold(consumer)


def sh(shell: Shell[Any]) -> None:
    """Drive ``shell`` for its effects, discarding the values."""
    shell.fold(Fold(lambda acc, _: acc, lambda: None))


def view(shell: Shell[Any]) -> None:
    """Print the repr of every value."""
    sh(shell.map(lambda value: print(repr(value))))


def first(shell: Shell[T], default: Optional[T] = None) -> Optional[T]:
    return shell.first(default)
