import pytest

from luakit.errors import LuaError
from luakit.strlib import (
    byte,
    char,
    format,
    length,
    lower,
    number_to_string,
    rep,
    reverse,
    sub,
    upper,
)


def test_length_counts_characters_and_numbers():
    assert length("hello") == len("hello")
    assert length(b"\0ab") == 3
    assert length(12) == len("12")


def test_length_rejects_non_strings():
    with pytest.raises(LuaError, match="string expected, got boolean"):
        length(True)


@pytest.mark.parametrize("i, j, expected", [
    (2, 4, "hello"[1:4]),
    (-3, None, "hello"[-3:]),
    (0, None, "hello"),
    (4, 2, ""),
    (1, 100, "hello"),
    (-100, 2, "hello"[:2]),
])
def test_sub(i, j, expected):
    assert sub("hello", i, j) == expected


def test_sub_keeps_bytes_type():
    assert sub(b"hello", 2, 3) == b"hello"[1:3]


def test_reverse_round_trip():
    for s in ["", "a", "abc def", "x\0y"]:
        assert reverse(reverse(s)) == s
        assert reverse(s) == s[::-1]


def test_case_mapping_is_ascii_only():
    assert upper("abcXYZ") == "ABCXYZ"
    assert lower("abcXYZ") == "abcxyz"
    assert lower("\u00c0B") == "\u00c0" + "b"
    assert upper(b"mixed Case") == b"MIXED CASE"


def test_case_mapping_invariants():
    s = "Hello, World 123"
    assert upper(lower(s)) == upper(s)
    assert lower(upper(s)) == lower(s)


def test_rep():
    assert rep("ab", 3) == "ab" * 3
    assert rep("ab", 0) == ""
    assert rep("ab", -2) == ""
    assert rep(b"x", 2) == b"xx"


def test_rep_needs_number():
    with pytest.raises(LuaError, match="number expected"):
        rep("a", "many")


def test_byte_defaults_and_ranges():
    assert byte("abc") == (ord("a"),)
    assert byte("ABC", 1, -1) == tuple(map(ord, "ABC"))
    assert byte("abc", -1) == (ord("c"),)
    assert byte("abc", 10) == ()
    assert byte("") == ()


def test_char_byte_round_trip():
    s = "any \x00 text \xff"
    assert char(*byte(s, 1, -1)) == s


def test_char_rejects_out_of_range():
    with pytest.raises(LuaError, match="bad argument #2 to 'char'"):
        char(65, 256)
    with pytest.raises(LuaError, match="invalid value"):
        char(-1)


def test_number_to_string():
    assert number_to_string(10) == "10"
    assert number_to_string(0.5) == "%.14g" % 0.5
    assert number_to_string(1e15) == "1e+15"


def test_format_plain_and_percent():
    assert format("no directives") == "no directives"
    assert format("100%%") == "100%"


@pytest.mark.parametrize("spec, value", [
    ("%d", 42),
    ("%5d", -7),
    ("%-5d|", 3),
    ("%+d", 9),
    ("%5.2f", 3.14159),
    ("%e", 12345.678),
    ("%g", 0.0001),
    ("%G", 1e20),
    ("%x", 255),
    ("%X", 255),
    ("%#x", 255),
    ("%o", 8),
])
def test_format_numbers_follow_printf(spec, value):
    assert format(spec, value) == spec % value


def test_format_truncates_floats_for_integers():
    assert format("%d", 3.9) == format("%d", 3)
    assert format("%d", "12") == format("%d", 12)


def test_format_unsigned_wraps_negative():
    assert format("%x", -1) == "f" * 16


def test_format_alternate_octal_and_zero_hex():
    assert format("%#o", 8) == "010"
    assert format("%#x", 0) == "0"


def test_format_char_and_nul():
    assert format("%c%c", 72, 105) == "Hi"
    assert format("a%cb", 0) == "ab"


def test_format_strings():
    assert format("%s-%s", "a", 1) == "a-1"
    assert format("%.3s", "abcdef") == "abc"
    assert format("[%5s]", "ab") == "[%5s]" % "ab"


def test_format_long_string_kept_whole():
    s = "x" * 100 + "\0tail"
    assert format("%s", s) == s
    assert format("%.2s", s) == "xx"


def test_format_quoted():
    assert format("%q", 'a"b\\c\n\r\0') == '"a\\"b\\\\c\\\n\\r\\000"'


def test_format_bytes_in_bytes_out():
    assert format(b"%s=%d", b"k", 5) == b"k=5"


def test_format_errors():
    with pytest.raises(LuaError, match="invalid option '%y'"):
        format("%y", 1)
    with pytest.raises(LuaError, match="width or precision too long"):
        format("%123d", 1)
    with pytest.raises(LuaError, match="repeated flags"):
        format("%------d", 1)
    with pytest.raises(LuaError, match=r"#2 to 'format' \(number expected, got no value\)"):
        format("%d")
    with pytest.raises(LuaError, match="number expected, got string"):
        format("%d", "abc")
    with pytest.raises(LuaError, match="string expected, got table|string expected"):
        format("%s", object())