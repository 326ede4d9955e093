"""Tests for shellstream.pattern."""

import pytest

from shellstream.pattern import (
    Alt,
    Fail,
    Literal,
    Many,
    Pure,
    any_char,
    between,
    char,
    choice,
    count,
    decimal,
    digit,
    first,
    has,
    inside,
    letter,
    lift,
    many,
    many1,
    match,
    none_of,
    not_char,
    occurs,
    one_of,
    option,
    plus,
    prefix,
    signed,
    skip,
    spaces1,
    star,
    suffix,
    text,
)


class TestLiteral:
    def test_whole_match(self) -> None:
        assert match(text("ab"), "ab") == ["ab"]

    def test_partial_match_rejected(self) -> None:
        assert match(text("ab"), "abc") == []

    def test_str_is_lifted(self) -> None:
        assert match("ab", "ab") == ["ab"]
        assert lift("x") == Literal("x")

    def test_lift_rejects_other_types(self) -> None:
        with pytest.raises(TypeError):
            lift(3)  # type: ignore[arg-type]

    def test_empty_literal_matches_empty_text(self) -> None:
        assert match(text(""), "") == [""]


class TestCharacters:
    def test_any_char(self) -> None:
        assert match(any_char, "x") == ["x"]
        assert match(any_char, "") == []

    def test_digit_and_letter(self) -> None:
        assert match(digit, "7") == ["7"]
        assert match(digit, "a") == []
        assert match(letter, "a") == ["a"]

    def test_char_classes(self) -> None:
        assert match(char("a"), "a") == ["a"]
        assert match(not_char("a"), "a") == []
        assert match(one_of("xyz"), "y") == ["y"]
        assert match(none_of("xyz"), "y") == []


class TestSequence:
    def test_concatenates_text(self) -> None:
        assert match(text("ab") + "cd", "abcd") == ["abcd"]

    def test_radd_lifts_left_operand(self) -> None:
        assert match("ab" + digit, "ab1") == ["ab1"]

    def test_then_combines_values(self) -> None:
        pair = decimal.then(",", lambda n, _: n).then(decimal, lambda a, b: (a, b))
        assert match(pair, "12,34") == [(12, 34)]


class TestAlternation:
    def test_returns_every_result(self) -> None:
        both = text("a").map(lambda _: "left") | text("a").map(lambda _: "right")
        assert match(both, "a") == ["left", "right"]

    def test_not_first_match_only(self) -> None:
        # The left branch succeeds on a prefix but only the right one consumes everything.
        assert match(text("a") | "ab", "ab") == ["ab"]

    def test_ror_lifts_left_operand(self) -> None:
        assert isinstance("1" | digit, Alt)
        assert match("B" | digit, "B") == ["B"]

    def test_choice(self) -> None:
        assert match(choice("x", "y", "z"), "z") == ["z"]
        assert match(choice(), "") == []
        assert choice() == Fail()


class TestRepetition:
    def test_plus_digits(self) -> None:
        assert match(plus(digit), "123") == ["123"]
        assert match(plus(digit), "") == []

    def test_star_accepts_empty(self) -> None:
        assert match(star(digit), "") == [""]

    def test_many_yields_lists(self) -> None:
        assert match(many(digit), "12") == [["1", "2"]]
        assert match(many1(digit), "") == []

    def test_enumerates_every_split_longest_first(self) -> None:
        split = star(any_char).then(star(any_char), lambda a, b: (a, b))
        assert match(split, "ab") == [("ab", ""), ("a", "b"), ("", "ab")]

    def test_backtracks_into_repetition(self) -> None:
        assert match(star(any_char) + "c", "abc") == ["abc"]

    def test_minimum_respected(self) -> None:
        assert match(Many(digit, 2).map("".join), "1") == []
        assert match(Many(digit, 2).map("".join), "12") == ["12"]

    def test_long_input_does_not_hit_recursion_limit(self) -> None:
        line = "x" * 3000
        assert match(plus(any_char), line) == [line]

    def test_count(self) -> None:
        assert match(count(3, digit), "123") == [["1", "2", "3"]]
        assert match(count(3, digit), "12") == []


class TestTransforms:
    def test_map(self) -> None:
        assert match(plus(digit).map(lambda s: s + "!"), "12") == ["12!"]

    def test_decimal_and_signed(self) -> None:
        assert match(decimal, "42") == [42]
        assert match(signed(decimal), "-42") == [-42]
        assert match(signed(decimal), "+7") == [7]

    def test_option(self) -> None:
        assert match(option("x") + "y", "y") == ["y"]
        assert match(option("x") + "y", "xy") == ["xy"]

    def test_between_and_skip(self) -> None:
        assert match(between("(", ")", plus(letter)), "(abc)") == ["abc"]
        assert match(skip(spaces1) + "a", "   a") == ["a"]

    def test_pure_and_fail(self) -> None:
        assert match(Pure(5), "") == [5]
        assert match(Fail(), "") == []


class TestInside:
    def test_matches_any_substring(self) -> None:
        assert inside(text("b"), "abc") == ["b"]
        assert inside(text("z"), "abc") == []

    def test_one_result_per_occurrence(self) -> None:
        assert inside(text("a"), "aXa") == ["a", "a"]

    def test_occurs(self) -> None:
        assert occurs(text("1") | "B", "ABC")
        assert not occurs(text("1") | "B", "456")
        assert occurs(star(digit), "")

    def test_anchors(self) -> None:
        assert match(prefix("ab"), "abzz") == ["ab"]
        assert match(suffix("zz"), "abzz") == ["zz"]
        assert match(has("bz"), "abzz") == ["bz"]

    def test_first(self) -> None:
        assert first(plus(digit), "123") == "123"
        assert first(plus(digit), "abc") is None

    def test_method_forms(self) -> None:
        assert text("ab").match("ab") == ["ab"]
        assert text("b").inside("abc") == ["b"]
