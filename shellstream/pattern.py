"""Backtracking text patterns.

A pattern describes the ways to consume a prefix of a string. Evaluating a
pattern yields every ``(value, leftover)`` pair it can produce, so an ambiguous
pattern yields several results, in a deterministic order (left alternatives
first, repetitions greedy first).

Patterns are built from frozen dataclass nodes and plain ``str`` operands are
lifted to literals, so they compose with operators:

    >>> match(plus(digit) + "!", "123!")
    ['123!']
    >>> match(text("a") | "ab", "ab")
    ['ab']

Evaluation backtracks without bound. Nested repetitions over long inputs
(``many(many(any_char))``) can take exponential time; keep patterns anchored
where that matters.
"""

import operator
import string
from dataclasses import dataclass
from functools import reduce
from typing import Any, Callable, Iterator, Optional, Union


@dataclass(frozen=True)
class Pattern:
    """Base class for all pattern nodes."""

    def __or__(self, other: "PatternLike") -> "Pattern":
        return Alt(self, lift(other))

    def __ror__(self, other: "PatternLike") -> "Pattern":
        return Alt(lift(other), self)

    def __add__(self, other: "PatternLike") -> "Pattern":
        return Seq(self, lift(other), operator.add)

    def __radd__(self, other: "PatternLike") -> "Pattern":
        return Seq(lift(other), self, operator.add)

    def then(self, other: "PatternLike", combine: Callable[[Any, Any], Any]) -> "Pattern":
        """Sequence ``self`` and ``other``, merging their values with ``combine``."""
        return Seq(self, lift(other), combine)

    def map(self, fn: Callable[[Any], Any]) -> "Pattern":
        """Transform every value this pattern produces."""
        return Map(self, fn)

    def match(self, text: str) -> list:
        return match(self, text)

    def inside(self, text: str) -> list:
        return inside(self, text)


PatternLike = Union[Pattern, str]


@dataclass(frozen=True)
class Literal(Pattern):
    """Consume exactly ``text``."""

    text: str


@dataclass(frozen=True)
class Satisfy(Pattern):
    """Consume one character accepted by ``predicate``."""

    predicate: Callable[[str], bool]
    name: str = "satisfy"


@dataclass(frozen=True)
class Seq(Pattern):
    """Run ``left`` then ``right`` on the leftover; values merged by ``combine``."""

    left: Pattern
    right: Pattern
    combine: Callable[[Any, Any], Any]


@dataclass(frozen=True)
class Alt(Pattern):
    """Every result of ``left`` followed by every result of ``right``."""

    left: Pattern
    right: Pattern


@dataclass(frozen=True)
class Many(Pattern):
    """Repeat ``inner`` at least ``minimum`` times, yielding a list of values.

    Every valid number of repetitions is enumerated, longest first.
    """

    inner: Pattern
    minimum: int = 0


@dataclass(frozen=True)
class Map(Pattern):
    """Apply ``fn`` to each value of ``inner``."""

    inner: Pattern
    fn: Callable[[Any], Any]


@dataclass(frozen=True)
class Pure(Pattern):
    """Consume nothing and yield ``value``."""

    value: Any = ""


@dataclass(frozen=True)
class Fail(Pattern):
    """Never match."""


def lift(value: PatternLike) -> Pattern:
    """Turn a ``str`` into a literal pattern; patterns pass through."""
    if isinstance(value, Pattern):
        return value
    if isinstance(value, str):
        return Literal(value)
    raise TypeError(f"Cannot use {type(value).__name__} as a pattern")


# Evaluation


def _run(pattern: Pattern, text: str, pos: int) -> Iterator[tuple[Any, int]]:
    """Yield ``(value, end)`` for every way ``pattern`` matches at ``pos``."""
    if isinstance(pattern, Literal):
        if text.startswith(pattern.text, pos):
            yield pattern.text, pos + len(pattern.text)
    elif isinstance(pattern, Satisfy):
        if pos < len(text) and pattern.predicate(text[pos]):
            yield text[pos], pos + 1
    elif isinstance(pattern, Seq):
        for left, middle in _run(pattern.left, text, pos):
            for right, end in _run(pattern.right, text, middle):
                yield pattern.combine(left, right), end
    elif isinstance(pattern, Alt):
        yield from _run(pattern.left, text, pos)
        yield from _run(pattern.right, text, pos)
    elif isinstance(pattern, Many):
        yield from _repeat(pattern.inner, pattern.minimum, text, pos)
    elif isinstance(pattern, Map):
        for value, end in _run(pattern.inner, text, pos):
            yield pattern.fn(value), end
    elif isinstance(pattern, Pure):
        yield pattern.value, pos
    elif isinstance(pattern, Fail):
        return
    else:
        raise TypeError(f"Unknown pattern node: {type(pattern).__name__}")


def _repeat(
    inner: Pattern, minimum: int, text: str, pos: int
) -> Iterator[tuple[list, int]]:
    """Enumerate repetitions of ``inner`` with an explicit stack.

    Each frame holds the values collected so far (as a linked list), the
    repetition count, the position and the pending matches of the next
    repetition. A frame is yielded once all its extensions are exhausted,
    which gives the longest-first order.
    """
    stack = [(None, 0, pos, _run(inner, text, pos))]
    while stack:
        values, depth, position, pending = stack[-1]
        for value, end in pending:
            stack.append(((value, values), depth + 1, end, _run(inner, text, end)))
            break
        else:
            stack.pop()
            if depth >= minimum:
                yield _collect(values), position


def _collect(values: Optional[tuple]) -> list:
    result = []
    while values is not None:
        value, values = values
        result.append(value)
    result.reverse()
    return result


def _full(pattern: Pattern, text: str) -> Iterator[Any]:
    for value, end in _run(pattern, text, 0):
        if end == len(text):
            yield value


def match(pattern: PatternLike, text: str) -> list:
    """
    Match ``pattern`` against the whole of ``text``.

    Args:
        pattern: Pattern (or literal string) to match.
        text: Input text.

    Returns:
        Every value for which the pattern consumed the entire input. An empty
        list means no match.

    Example:
        >>> match(text("ab"), "ab")
        ['ab']
        >>> match(text("ab"), "abc")
        []
    """
    return list(_full(lift(pattern), text))


def inside(pattern: PatternLike, text: str) -> list:
    """Match ``pattern`` against any contiguous substring of ``text``."""
    return match(has(pattern), text)


def occurs(pattern: PatternLike, text: str) -> bool:
    """Return True if ``pattern`` matches somewhere in ``text``.

    Equivalent to ``bool(inside(pattern, text))`` but stops at the first hit.
    """
    pattern = lift(pattern)
    for start in range(len(text) + 1):
        for _ in _run(pattern, text, start):
            return True
    return False


def first(pattern: PatternLike, text: str) -> Optional[Any]:
    """Return the first whole-text match of ``pattern``, or None."""
    return next(_full(lift(pattern), text), None)


# Single-character patterns


def satisfy(predicate: Callable[[str], bool], name: str = "satisfy") -> Pattern:
    return Satisfy(predicate, name)


def char(c: str) -> Pattern:
    return Satisfy(lambda x: x == c, f"char({c!r})")


def not_char(c: str) -> Pattern:
    return Satisfy(lambda x: x != c, f"not_char({c!r})")


def one_of(chars: str) -> Pattern:
    return Satisfy(lambda x: x in chars, f"one_of({chars!r})")


def none_of(chars: str) -> Pattern:
    return Satisfy(lambda x: x not in chars, f"none_of({chars!r})")


def text(s: str) -> Pattern:
    return Literal(s)


any_char = Satisfy(lambda _: True, "any_char")
digit = Satisfy(lambda x: "0" <= x <= "9", "digit")
hex_digit = Satisfy(lambda x: x in string.hexdigits, "hex_digit")
letter = Satisfy(str.isalpha, "letter")
alpha_num = Satisfy(str.isalnum, "alpha_num")
upper = Satisfy(str.isupper, "upper")
lower = Satisfy(str.islower, "lower")
space = Satisfy(str.isspace, "space")
newline = char("\n")
tab = char("\t")


# Combinators


def many(pattern: PatternLike) -> Pattern:
    """Zero or more repetitions, yielding a list."""
    return Many(lift(pattern), 0)


def many1(pattern: PatternLike) -> Pattern:
    """One or more repetitions, yielding a list."""
    return Many(lift(pattern), 1)


def star(pattern: PatternLike) -> Pattern:
    """Zero or more repetitions of a text pattern, joined into one string."""
    return Map(Many(lift(pattern), 0), "".join)


def plus(pattern: PatternLike) -> Pattern:
    """
    One or more repetitions of a text pattern, joined into one string.

    Example:
        >>> match(plus(digit), "123")
        ['123']
    """
    return Map(Many(lift(pattern), 1), "".join)


spaces = star(space)
spaces1 = plus(space)


def option(pattern: PatternLike, default: Any = "") -> Pattern:
    """Match ``pattern`` or nothing, yielding ``default`` in the latter case."""
    return Alt(lift(pattern), Pure(default))


def choice(*patterns: PatternLike) -> Pattern:
    """Union of the results of all ``patterns``, in order."""
    if not patterns:
        return Fail()
    return reduce(Alt, (lift(p) for p in patterns))


def count(n: int, pattern: PatternLike) -> Pattern:
    """Exactly ``n`` repetitions, yielding a list."""
    pattern = lift(pattern)
    result: Pattern = Pure([])
    for _ in range(n):
        result = Seq(result, pattern, lambda values, value: values + [value])
    return result


def _left(a: Any, _: Any) -> Any:
    return a


def _right(_: Any, b: Any) -> Any:
    return b


def between(open_: PatternLike, close: PatternLike, pattern: PatternLike) -> Pattern:
    """Match ``open_ pattern close``, keeping the value of ``pattern``."""
    return Seq(Seq(lift(open_), lift(pattern), _right), lift(close), _left)


def skip(pattern: PatternLike) -> Pattern:
    """Match ``pattern`` but yield an empty string."""
    return Map(lift(pattern), lambda _: "")


decimal = Map(plus(digit), int)


def signed(pattern: PatternLike) -> Pattern:
    """
    Allow an optional leading sign in front of a numeric pattern.

    Example:
        >>> match(signed(decimal), "-42")
        [-42]
    """
    return Seq(
        option(one_of("+-")),
        lift(pattern),
        lambda sign, value: -value if sign == "-" else value,
    )


def prefix(pattern: PatternLike) -> Pattern:
    """Match ``pattern`` at the start of the text, ignoring what follows."""
    return Seq(lift(pattern), star(any_char), _left)


def suffix(pattern: PatternLike) -> Pattern:
    """Match ``pattern`` at the end of the text, ignoring what precedes it."""
    return Seq(star(any_char), lift(pattern), _right)


def has(pattern: PatternLike) -> Pattern:
    """Match ``pattern`` anywhere in the text."""
    return Seq(Seq(star(any_char), lift(pattern), _right), star(any_char), _left)
