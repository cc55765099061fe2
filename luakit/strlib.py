"""String functions: sub, reverse, case mapping, rep, byte, char and format.

Strings may be ``str`` or ``bytes``; numbers are accepted wherever a
string is expected and are converted as the interpreter prints them.
Results keep the type of the string argument.  Case mapping follows the
plain ASCII ("C" locale) definitions.
"""

from __future__ import annotations

import math
from typing import Any, Optional, Tuple, Union

from .errors import LuaError
from .tagmethods import type_name

Text = Union[str, bytes]

L_ESC = "%"
FLAGS = "-+ #0"
_MAX_FLAGS = len(FLAGS) + 1  # the C limit counts the terminating NUL
_LONG_STRING = 100
_ULONG_MASK = (1 << 64) - 1

_UPPER = {c: c + 32 for c in range(ord("A"), ord("Z") + 1)}
_LOWER = {c: c - 32 for c in range(ord("a"), ord("z") + 1)}


def number_to_string(n: Union[int, float]) -> str:
    """Convert a number to text the way the interpreter prints numbers."""
    if isinstance(n, bool) or not isinstance(n, (int, float)):
        raise LuaError(f"number expected, got {type_name(n)}")
    return "%.14g" % n


# ---------------------------------------------------------------- arguments

def _missing(argn: int, fname: str, expected: str) -> LuaError:
    return LuaError(
        f"bad argument #{argn} to '{fname}' ({expected} expected, got no value)"
    )


def _check_string(value: Any, argn: int, fname: str) -> Tuple[str, bool]:
    """Return ``value`` as text and whether it was given as bytes."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("latin-1"), True
    if isinstance(value, str):
        return value, False
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return number_to_string(value), False
    raise LuaError(f"bad argument #{argn} to '{fname}' "
                   f"(string expected, got {type_name(value)})")


def _str_to_number(text: str) -> Optional[float]:
    stripped = text.strip(" \t\n\v\f\r")
    if not stripped or "_" in stripped:
        return None
    try:
        return float(stripped)
    except ValueError:
        pass
    body = stripped.lstrip("+-")
    if body[:2].lower() == "0x":
        try:
            value = int(body[2:], 16)
        except ValueError:
            return None
        return float(-value if stripped.startswith("-") else value)
    return None


def _check_number(value: Any, argn: int, fname: str) -> Union[int, float]:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    if isinstance(value, (str, bytes, bytearray)):
        text = value if isinstance(value, str) else bytes(value).decode("latin-1")
        number = _str_to_number(text)
        if number is not None:
            return number
    raise LuaError(f"bad argument #{argn} to '{fname}' "
                   f"(number expected, got {type_name(value)})")


def _check_int(value: Any, argn: int, fname: str) -> int:
    number = _check_number(value, argn, fname)
    if isinstance(number, float) and not math.isfinite(number):
        raise LuaError(f"bad argument #{argn} to '{fname}' "
                       f"(number has no integer representation)")
    return int(number)


def _opt_int(value: Any, argn: int, fname: str, default: int) -> int:
    return default if value is None else _check_int(value, argn, fname)


def _result(text: str, as_bytes: bool) -> Text:
    return text.encode("latin-1") if as_bytes else text


def _posrelat(pos: int, length: int) -> int:
    if pos < 0:
        pos += length + 1
    return pos if pos >= 0 else 0


# ---------------------------------------------------------------- basics

def length(s: Text) -> int:
    """Return the length of ``s``."""
    text, _ = _check_string(s, 1, "len")
    return len(text)


def sub(s: Text, i: int, j: Optional[int] = -1) -> Text:
    """Return the substring from ``i`` to ``j`` (1-based, inclusive).

    Negative positions count back from the end of the string.
    """
    text, as_bytes = _check_string(s, 1, "sub")
    size = len(text)
    start = _posrelat(_check_int(i, 2, "sub"), size)
    end = _posrelat(_opt_int(j, 3, "sub", -1), size)
    start = max(start, 1)
    end = min(end, size)
    if start > end:
        return _result("", as_bytes)
    return _result(text[start - 1:end], as_bytes)


def reverse(s: Text) -> Text:
    """Return ``s`` reversed."""
    text, as_bytes = _check_string(s, 1, "reverse")
    return _result(text[::-1], as_bytes)


def lower(s: Text) -> Text:
    """Return ``s`` with ASCII upper-case letters changed to lower case."""
    text, as_bytes = _check_string(s, 1, "lower")
    return _result(text.translate(_UPPER), as_bytes)


def upper(s: Text) -> Text:
    """Return ``s`` with ASCII lower-case letters changed to upper case."""
    text, as_bytes = _check_string(s, 1, "upper")
    return _result(text.translate(_LOWER), as_bytes)


def rep(s: Text, n: int) -> Text:
    """Return ``n`` copies of ``s`` joined together (empty when ``n <= 0``)."""
    text, as_bytes = _check_string(s, 1, "rep")
    count = _check_int(n, 2, "rep")
    return _result(text * max(count, 0), as_bytes)


def byte(s: Text, i: Optional[int] = 1, j: Optional[int] = None) -> Tuple[int, ...]:
    """Return the character codes of ``s[i..j]``; ``j`` defaults to ``i``."""
    text, _ = _check_string(s, 1, "byte")
    size = len(text)
    posi = _posrelat(_opt_int(i, 2, "byte", 1), size)
    pose = _posrelat(_opt_int(j, 3, "byte", posi), size)
    posi = max(posi, 1)
    pose = min(pose, size)
    if posi > pose:
        return ()
    return tuple(ord(c) for c in text[posi - 1:pose])


def char(*args: int) -> str:
    """Return the string made of the character codes in ``args`` (0..255)."""
    codes = []
    for argn, value in enumerate(args, start=1):
        code = _check_int(value, argn, "char")
        if not 0 <= code <= 255:
            raise LuaError(f"bad argument #{argn} to 'char' (invalid value)")
        codes.append(chr(code))
    return "".join(codes)


# ---------------------------------------------------------------- format

def _quoted(text: str) -> str:
    out = ['"']
    for c in text:
        if c in '"\\\n':
            out.append("\\" + c)
        elif c == "\r":
            out.append("\\r")
        elif c == "\0":
            out.append("\\000")
        else:
            out.append(c)
    out.append('"')
    return "".join(out)


def _scan_format(fmt: str, p: int) -> Tuple[str, Optional[str], Optional[str], int]:
    """Parse flags, width and precision starting at ``p``.

    Returns ``(flags, width, precision, position of the conversion)``.
    """
    start = p
    n = len(fmt)
    while p < n and fmt[p] in FLAGS:
        p += 1
    if p - start >= _MAX_FLAGS:
        raise LuaError("invalid format (repeated flags)")
    flags = fmt[start:p]
    wstart = p
    for _ in range(2):
        if p < n and fmt[p].isdigit() and fmt[p].isascii():
            p += 1
    width = fmt[wstart:p] or None
    precision = None
    if p < n and fmt[p] == ".":
        p += 1
        pstart = p
        for _ in range(2):
            if p < n and fmt[p].isdigit() and fmt[p].isascii():
                p += 1
        precision = fmt[pstart:p]
    if p < n and fmt[p].isdigit() and fmt[p].isascii():
        raise LuaError("invalid format (width or precision too long)")
    return flags, width, precision, p


def _spec(flags: str, width: Optional[str], precision: Optional[str],
          conv: str) -> str:
    spec = "%" + flags + (width or "")
    if precision is not None:
        spec += "." + precision
    return spec + conv


def _format_unsigned(value: int, flags: str, width: Optional[str],
                     precision: Optional[str], conv: str) -> str:
    if conv == "u":
        return _spec(flags, width, precision, "d") % value
    if "#" in flags and value == 0:
        flags = flags.replace("#", "")
    if conv == "o" and "#" in flags:
        # C forces a leading zero by widening the precision.
        flags = flags.replace("#", "")
        digits = len("%o" % value) + 1
        current = int(precision) if precision else 0
        precision = str(max(current, digits))
    return _spec(flags, width, precision, conv) % value


def format(fmt: Text, *args: Any) -> Text:
    """Format ``args`` following the printf-like directives in ``fmt``.

    Supports ``%c %d %i %o %u %x %X %e %E %f %g %G %q %s`` and ``%%`` with
    at most two digits of width and of precision.
    """
    text, as_bytes = _check_string(fmt, 1, "format")
    out = []
    argn = 1
    p = 0
    n = len(text)
    while p < n:
        c = text[p]
        if c != L_ESC:
            out.append(c)
            p += 1
            continue
        p += 1
        if p < n and text[p] == L_ESC:
            out.append(L_ESC)
            p += 1
            continue
        argn += 1
        flags, width, precision, p = _scan_format(text, p)
        conv = text[p] if p < n else ""
        p += 1
        index = argn - 2
        present = index < len(args)
        value = args[index] if present else None

        def need(expected: str) -> None:
            if not present:
                raise _missing(argn, "format", expected)

        if conv == "c":
            need("number")
            code = _check_int(value, argn, "format") & 0xFF
            item = _spec(flags, width, precision, "c") % chr(code)
        elif conv in ("d", "i"):
            need("number")
            number = _check_int(value, argn, "format")
            item = _spec(flags, width, precision, "d") % number
        elif conv in ("o", "u", "x", "X"):
            need("number")
            number = _check_int(value, argn, "format") & _ULONG_MASK
            item = _format_unsigned(number, flags, width, precision, conv)
        elif conv in ("e", "E", "f", "g", "G"):
            need("number")
            number = float(_check_number(value, argn, "format"))
            item = _spec(flags, width, precision, conv) % number
        elif conv == "q":
            need("string")
            arg_text, _ = _check_string(value, argn, "format")
            out.append(_quoted(arg_text))
            continue
        elif conv == "s":
            need("string")
            arg_text, _ = _check_string(value, argn, "format")
            if precision is None and len(arg_text) >= _LONG_STRING:
                out.append(arg_text)  # too long to format; keep it whole
                continue
            arg_text = arg_text.split("\0", 1)[0]
            item = _spec(flags, width, precision, "s") % arg_text
        else:
            raise LuaError(f"invalid option '%{conv}' to 'format'")
        out.append(item.split("\0", 1)[0])
    return _result("".join(out), as_bytes)