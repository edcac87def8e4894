# tests/test_parse_fmt.py
from __future__ import annotations

import pytest

from divchain.display import format_ratio
from divchain.fmt import abbr_int_fast, format_duration, format_factorization, format_int_list, strip_ansi
from divchain.parse import parse_int_list, parse_int_literal, parse_items, read_int_file, validate_values
from divchain.runtime import APPLY
from divchain.utility import UserInputError

# ---------- formatting --------------------------------------------------------


@pytest.mark.parametrize("values,text", [
    ([], "[]"),
    ([7], "[7]"),
    ([4, 8, 2], "[4, 8, 2]"),
    ((1, 2), "[1, 2]"),
])
def test_format_int_list(values, text):
    assert format_int_list(values) == text


def test_abbr_int_fast():
    assert abbr_int_fast(12345) == "12345"
    n = int("1234567890" * 5)
    assert abbr_int_fast(n, head=3, tail=3, threshold=10, ellipsis="...") == "123...890"
    assert abbr_int_fast(-n, head=3, tail=3, threshold=10, ellipsis="...") == "-123...890"


def test_format_factorization():
    assert format_factorization({2: 3, 3: 1, 5: 2}) == "2^3 × 3 × 5^2"
    assert format_factorization({}) == "1"


def test_format_ratio():
    assert format_ratio(3, 3) == "×1"
    assert format_ratio(2, 24) == "×2^2 × 3"


@pytest.mark.parametrize("seconds,text", [
    (0.0123, "12 ms"),
    (1.5, "1.500 s"),
    (75.25, "1:15.250"),
])
def test_format_duration(seconds, text):
    assert format_duration(seconds) == text


def test_strip_ansi():
    assert strip_ansi("\x1b[32m[2, 1]\x1b[0m") == "[2, 1]"
    assert strip_ansi(None) == ""


# ---------- parsing -----------------------------------------------------------


@pytest.mark.parametrize("text,value", [
    ("42", 42),
    ("+5", 5),
    ("-7", -7),
    ("1_000", 1000),
    ("0x10", 16),
    ("0b101", 5),
    ("0o17", 15),
    ("3.14", None),
    ("1e3", None),
    ("abc", None),
    ("", None),
])
def test_parse_int_literal(text, value):
    assert parse_int_literal(text) == value


@pytest.mark.parametrize("text,values", [
    ("4 8 2", [4, 8, 2]),
    ("4, 8, 2", [4, 8, 2]),
    ("[4, 8, 2]", [4, 8, 2]),
    ("4,8;2", [4, 8, 2]),
    ("[]", []),
    ("", []),
    ("  [ 0x10 , 2 ] ", [16, 2]),
])
def test_parse_int_list(text, values):
    assert parse_int_list(text) == values


@pytest.mark.parametrize("text", ["4, x, 2", "[4, 8", "1.5 2", "4 8]"])
def test_parse_int_list_rejects(text):
    with pytest.raises(UserInputError):
        parse_int_list(text)


def test_parse_items_concatenates_arguments():
    assert parse_items(["4", "8, 2", "[1]"]) == [4, 8, 2, 1]


def test_read_int_file(tmp_path):
    p = tmp_path / "nums.txt"
    p.write_text("# sample\n4, 8\n2   # trailing comment\n\n16\n", encoding="utf-8")
    assert read_int_file(p) == [4, 8, 2, 16]


def test_read_int_file_reports_line(tmp_path):
    p = tmp_path / "bad.txt"
    p.write_text("1 2\n3 four\n", encoding="utf-8")
    with pytest.raises(UserInputError, match="line 2"):
        read_int_file(p)


def test_read_int_file_missing(tmp_path):
    with pytest.raises(UserInputError, match="not found"):
        read_int_file(tmp_path / "nope.txt")


def test_validate_values_rejects_non_positive():
    with pytest.raises(UserInputError, match="positive"):
        validate_values([3, 0, 6])
    with pytest.raises(UserInputError, match="positive"):
        validate_values([-2, 4])


def test_validate_values_size_guard():
    APPLY({"BEHAVIOUR": {"MAX_INPUT_SIZE": 3}})
    assert validate_values([1, 2, 3]) == [1, 2, 3]
    with pytest.raises(UserInputError, match="limit is 3"):
        validate_values([1, 2, 3, 4])
