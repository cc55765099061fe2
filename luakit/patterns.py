"""Pattern matching over strings: find, match, gmatch and gsub.

Patterns use ``%`` as the escape character and support character classes
(``%a``, ``%d``, ``%s`` ...), sets (``[...]``), the repetition suffixes
``*``, ``+``, ``-`` and ``?``, anchors, captures (including position
captures ``()``), back references ``%1``..``%9``, balanced matches
``%bxy`` and frontiers ``%f[set]``.  Character classes follow the plain
ASCII ("C" locale) definitions.

Subjects may be ``str`` or ``bytes``; captured strings come back with the
type of the subject.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Iterator, List, Optional, Tuple, Union

from .errors import LuaError
from .table import LuaTable
from .tagmethods import type_name

MAXCAPTURES = 32
"""Maximum number of captures a pattern may make."""

CAP_UNFINISHED = -1
CAP_POSITION = -2

L_ESC = "%"
SPECIALS = "^$*+?.([%-"

Text = Union[str, bytes]


# ---------------------------------------------------------------- classes

def _isalpha(c: int) -> bool:
    return 65 <= c <= 90 or 97 <= c <= 122


def _isdigit(c: int) -> bool:
    return 48 <= c <= 57


def _islower(c: int) -> bool:
    return 97 <= c <= 122


def _isupper(c: int) -> bool:
    return 65 <= c <= 90


def _isspace(c: int) -> bool:
    return 9 <= c <= 13 or c == 32


def _iscntrl(c: int) -> bool:
    return c < 32 or c == 127


def _isalnum(c: int) -> bool:
    return _isalpha(c) or _isdigit(c)


def _ispunct(c: int) -> bool:
    return 33 <= c <= 126 and not _isalnum(c)


def _isxdigit(c: int) -> bool:
    return _isdigit(c) or 97 <= c <= 102 or 65 <= c <= 70


_CLASSES: dict = {
    "a": _isalpha,
    "c": _iscntrl,
    "d": _isdigit,
    "l": _islower,
    "p": _ispunct,
    "s": _isspace,
    "u": _isupper,
    "w": _isalnum,
    "x": _isxdigit,
    "z": lambda c: c == 0,
}


def _match_class(c: int, cl: str) -> bool:
    code = ord(cl)
    lowered = chr(code + 32) if _isupper(code) else cl
    predicate = _CLASSES.get(lowered)
    if predicate is None:
        return code == c
    res = predicate(c)
    return res if _islower(code) else not res


# ---------------------------------------------------------------- matcher

class _MatchState:
    """State of one matching attempt of a pattern against a subject."""

    def __init__(self, src: str, pattern: str) -> None:
        self.src = src
        self.src_end = len(src)
        self.pat = pattern
        self.pat_end = len(pattern)
        self.level = 0
        self.capture: List[List[int]] = [[0, 0] for _ in range(MAXCAPTURES)]

    # -- pattern structure

    def class_end(self, p: int) -> int:
        pat, n = self.pat, self.pat_end
        c = pat[p]
        p += 1
        if c == L_ESC:
            if p >= n:
                raise LuaError("malformed pattern (ends with '%')")
            return p + 1
        if c == "[":
            if p < n and pat[p] == "^":
                p += 1
            while True:  # look for a ']'
                if p >= n:
                    raise LuaError("malformed pattern (missing ']')")
                c = pat[p]
                p += 1
                if c == L_ESC and p < n:
                    p += 1  # skip escapes such as '%]'
                if p < n and pat[p] == "]":
                    break
            return p + 1
        return p

    def match_bracket_class(self, c: int, p: int, ec: int) -> bool:
        pat = self.pat
        sig = True
        if pat[p + 1] == "^":
            sig = False
            p += 1
        p += 1
        while p < ec:
            if pat[p] == L_ESC:
                p += 1
                if _match_class(c, pat[p]):
                    return sig
            elif pat[p + 1] == "-" and p + 2 < ec:
                p += 2
                if ord(pat[p - 2]) <= c <= ord(pat[p]):
                    return sig
            elif ord(pat[p]) == c:
                return sig
            p += 1
        return not sig

    def single_match(self, s: int, p: int, ep: int) -> bool:
        if s >= self.src_end:
            return False
        c = ord(self.src[s])
        pc = self.pat[p]
        if pc == ".":
            return True
        if pc == L_ESC:
            return _match_class(c, self.pat[p + 1])
        if pc == "[":
            return self.match_bracket_class(c, p, ep - 1)
        return ord(pc) == c

    # -- captures

    def check_capture(self, ch: str) -> int:
        index = ord(ch) - ord("1")
        if (index < 0 or index >= self.level
                or self.capture[index][1] == CAP_UNFINISHED):
            raise LuaError("invalid capture index")
        return index

    def capture_to_close(self) -> int:
        for level in range(self.level - 1, -1, -1):
            if self.capture[level][1] == CAP_UNFINISHED:
                return level
        raise LuaError("invalid pattern capture")

    def start_capture(self, s: int, p: int, what: int) -> Optional[int]:
        level = self.level
        if level >= MAXCAPTURES:
            raise LuaError("too many captures")
        self.capture[level][0] = s
        self.capture[level][1] = what
        self.level = level + 1
        res = self.match(s, p)
        if res is None:
            self.level -= 1
        return res

    def end_capture(self, s: int, p: int) -> Optional[int]:
        index = self.capture_to_close()
        self.capture[index][1] = s - self.capture[index][0]
        res = self.match(s, p)
        if res is None:
            self.capture[index][1] = CAP_UNFINISHED
        return res

    def match_capture(self, s: int, ch: str) -> Optional[int]:
        index = self.check_capture(ch)
        init, length = self.capture[index]
        if length < 0:
            return None  # a position capture never matches text
        if (self.src_end - s >= length
                and self.src[init:init + length] == self.src[s:s + length]):
            return s + length
        return None

    def one_capture(self, i: int, s: int, e: int) -> Union[str, int]:
        if i >= self.level:
            if i == 0:
                return self.src[s:e]
            raise LuaError("invalid capture index")
        init, length = self.capture[i]
        if length == CAP_UNFINISHED:
            raise LuaError("unfinished capture")
        if length == CAP_POSITION:
            return init + 1
        return self.src[init:init + length]

    def captures(self, s: Optional[int], e: int) -> List[Union[str, int]]:
        nlevels = 1 if self.level == 0 and s is not None else self.level
        return [self.one_capture(i, s if s is not None else 0, e)
                for i in range(nlevels)]

    # -- matching

    def match_balance(self, s: int, p: int) -> Optional[int]:
        if p + 1 >= self.pat_end:
            raise LuaError("unbalanced pattern")
        if s >= self.src_end or self.src[s] != self.pat[p]:
            return None
        begin, end = self.pat[p], self.pat[p + 1]
        depth = 1
        s += 1
        while s < self.src_end:
            ch = self.src[s]
            if ch == end:
                depth -= 1
                if depth == 0:
                    return s + 1
            elif ch == begin:
                depth += 1
            s += 1
        return None

    def max_expand(self, s: int, p: int, ep: int) -> Optional[int]:
        i = 0
        while self.single_match(s + i, p, ep):
            i += 1
        while i >= 0:  # try the longest repetition first
            res = self.match(s + i, ep + 1)
            if res is not None:
                return res
            i -= 1
        return None

    def min_expand(self, s: int, p: int, ep: int) -> Optional[int]:
        while True:
            res = self.match(s, ep + 1)
            if res is not None:
                return res
            if self.single_match(s, p, ep):
                s += 1
            else:
                return None

    def match(self, s: int, p: int) -> Optional[int]:
        pat, plen = self.pat, self.pat_end
        while True:
            if p >= plen:
                return s
            ch = pat[p]
            if ch == "(":
                if p + 1 < plen and pat[p + 1] == ")":
                    return self.start_capture(s, p + 2, CAP_POSITION)
                return self.start_capture(s, p + 1, CAP_UNFINISHED)
            if ch == ")":
                return self.end_capture(s, p + 1)
            if ch == L_ESC and p + 1 < plen:
                nxt = pat[p + 1]
                if nxt == "b":
                    found = self.match_balance(s, p + 2)
                    if found is None:
                        return None
                    s = found
                    p += 4
                    continue
                if nxt == "f":
                    p += 2
                    if p >= plen or pat[p] != "[":
                        raise LuaError("missing '[' after '%f' in pattern")
                    ep = self.class_end(p)
                    previous = 0 if s == 0 else ord(self.src[s - 1])
                    current = ord(self.src[s]) if s < self.src_end else 0
                    if (self.match_bracket_class(previous, p, ep - 1)
                            or not self.match_bracket_class(current, p, ep - 1)):
                        return None
                    p = ep
                    continue
                if _isdigit(ord(nxt)):
                    found = self.match_capture(s, nxt)
                    if found is None:
                        return None
                    s = found
                    p += 2
                    continue
            if ch == "$" and p + 1 == plen:
                return s if s == self.src_end else None
            # a single-character item, possibly with a repetition suffix
            ep = self.class_end(p)
            m = self.single_match(s, p, ep)
            suffix = pat[ep] if ep < plen else ""
            if suffix == "?":
                if m:
                    res = self.match(s + 1, ep + 1)
                    if res is not None:
                        return res
                p = ep + 1
                continue
            if suffix == "*":
                return self.max_expand(s, p, ep)
            if suffix == "+":
                return self.max_expand(s + 1, p, ep) if m else None
            if suffix == "-":
                return self.min_expand(s, p, ep)
            if not m:
                return None
            s += 1
            p = ep


# ---------------------------------------------------------------- helpers

def _as_text(value: Any, argn: int, fname: str) -> Tuple[str, bool]:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("latin-1"), True
    if isinstance(value, str):
        return value, False
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return "%.14g" % value, False
    raise LuaError(f"bad argument #{argn} to '{fname}' "
                   f"(string expected, got {type_name(value)})")


def _out(value: Union[str, int], as_bytes: bool) -> Any:
    if as_bytes and isinstance(value, str):
        return value.encode("latin-1")
    return value


def _posrelat(pos: int, length: int) -> int:
    if pos < 0:
        pos += length + 1
    return pos if pos >= 0 else 0


def _pattern_body(pattern: str) -> str:
    """The part of a pattern that the matcher sees: up to the first NUL."""
    return pattern.split("\0", 1)[0]


def _shape(values: List[Any]) -> Any:
    return values[0] if len(values) == 1 else tuple(values)


def _find_aux(s: Any, pattern: Any, init: int, plain: bool,
              find_mode: bool) -> Any:
    fname = "find" if find_mode else "match"
    text, as_bytes = _as_text(s, 1, fname)
    pat, _ = _as_text(pattern, 2, fname)
    length = len(text)
    start = _posrelat(int(init), length) - 1
    start = min(max(start, 0), length)
    body = _pattern_body(pat)

    if find_mode and (plain or not any(c in SPECIALS for c in body)):
        found = text.find(pat, start)
        if found < 0:
            return None
        return (found + 1, found + len(pat))

    anchor = body.startswith("^")
    state = _MatchState(text, body[1:] if anchor else body)
    s1 = start
    while True:
        state.level = 0
        res = state.match(s1, 0)
        if res is not None:
            if find_mode:
                caps = [_out(c, as_bytes) for c in state.captures(None, 0)]
                return (s1 + 1, res, *caps)
            caps = [_out(c, as_bytes) for c in state.captures(s1, res)]
            return _shape(caps)
        if anchor or s1 >= length:
            return None
        s1 += 1


# ---------------------------------------------------------------- public

def find(s: Text, pattern: Text, init: int = 1, plain: bool = False) -> Any:
    """Find the first match of ``pattern`` in ``s`` from position ``init``.

    Returns ``(start, end, *captures)`` with 1-based inclusive positions, or
    ``None``.  With ``plain`` (or a pattern without magic characters) the
    search is for the literal substring.
    """
    return _find_aux(s, pattern, init, plain, True)


def match(s: Text, pattern: Text, init: int = 1) -> Any:
    """Match ``pattern`` against ``s`` starting the search at ``init``.

    Returns ``None`` when there is no match, the single capture (or the
    whole match) when there is one value, and a tuple of captures
    otherwise.  Position captures are 1-based integers.
    """
    return _find_aux(s, pattern, init, False, False)


def gmatch(s: Text, pattern: Text) -> Iterator[Any]:
    """Yield the captures of each successive match of ``pattern`` in ``s``.

    Each item has the same shape as the result of :func:`match`.  The
    ``^`` anchor has no special meaning here.
    """
    text, as_bytes = _as_text(s, 1, "gmatch")
    pat, _ = _as_text(pattern, 2, "gmatch")
    state = _MatchState(text, _pattern_body(pat))
    length = len(text)
    start = 0
    while start <= length:
        for src in range(start, length + 1):
            state.level = 0
            end = state.match(src, 0)
            if end is not None:
                start = end + 1 if end == src else end
                caps = [_out(c, as_bytes) for c in state.captures(src, end)]
                yield _shape(caps)
                break
        else:
            return


def _expand_template(state: _MatchState, template: str,
                     s: int, e: int) -> str:
    parts: List[str] = []
    i = 0
    n = len(template)
    while i < n:
        ch = template[i]
        if ch != L_ESC:
            parts.append(ch)
            i += 1
            continue
        i += 1
        nxt = template[i] if i < n else "\0"
        if not _isdigit(ord(nxt)):
            parts.append(nxt)
        elif nxt == "0":
            parts.append(state.src[s:e])
        else:
            value = state.one_capture(ord(nxt) - ord("1"), s, e)
            parts.append(value if isinstance(value, str) else "%.14g" % value)
        i += 1
    return "".join(parts)


def gsub(s: Text, pattern: Text, repl: Any,
         max_n: Optional[int] = None) -> Tuple[Text, int]:
    """Replace matches of ``pattern`` in ``s``; return ``(result, count)``.

    ``repl`` is a template string (``%0``..``%9`` refer to the match and its
    captures, ``%%`` is a percent sign), a mapping or table looked up with
    the first capture, or a function called with the captures.  A ``None``
    or ``False`` lookup or call result keeps the original text.  At most
    ``max_n`` substitutions are made.
    """
    text, as_bytes = _as_text(s, 1, "gsub")
    pat, _ = _as_text(pattern, 2, "gsub")
    body = _pattern_body(pat)

    template: Optional[str] = None
    table: Any = None
    func: Optional[Callable[..., Any]] = None
    if isinstance(repl, (str, bytes, bytearray)) or (
            isinstance(repl, (int, float)) and not isinstance(repl, bool)):
        template, _ = _as_text(repl, 3, "gsub")
    elif isinstance(repl, (LuaTable, Mapping)):
        table = repl
    elif callable(repl):
        func = repl
    else:
        raise LuaError("bad argument #3 to 'gsub' "
                       "(string/function/table expected)")

    limit = len(text) + 1 if max_n is None else int(max_n)
    anchor = body.startswith("^")
    state = _MatchState(text, body[1:] if anchor else body)

    def replacement(start: int, end: int) -> str:
        if template is not None:
            return _expand_template(state, template, start, end)
        if func is not None:
            caps = [_out(c, as_bytes) for c in state.captures(start, end)]
            result = func(*caps)
        else:
            key = _out(state.one_capture(0, start, end), as_bytes)
            result = table.get(key)
        if result is None or result is False:
            return text[start:end]
        if isinstance(result, (str, bytes, bytearray)) or (
                isinstance(result, (int, float))
                and not isinstance(result, bool)):
            return _as_text(result, 3, "gsub")[0]
        raise LuaError(f"invalid replacement value (a {type_name(result)})")

    parts: List[str] = []
    src = 0
    length = len(text)
    count = 0
    while count < limit:
        state.level = 0
        end = state.match(src, 0)
        if end is not None:
            count += 1
            parts.append(replacement(src, end))
        if end is not None and end > src:
            src = end
        elif src < length:
            parts.append(text[src])
            src += 1
        else:
            break
        if anchor:
            break
    parts.append(text[src:])
    return _out("".join(parts), as_bytes), count