"""Table manipulation functions: concat, insert, remove, sort and friends."""

from __future__ import annotations

from typing import Any, Callable, Optional

from .errors import LuaError
from .table import LuaTable
from .tagmethods import TagMethod, get_tag_method_by_object, type_name


def _arg_error(argn: int, fname: str, expected: str, value: Any) -> LuaError:
    return LuaError(
        f"bad argument #{argn} to '{fname}' "
        f"({expected} expected, got {_got_name(value)})"
    )


def _got_name(value: Any) -> str:
    return "no value" if value is None else type_name(value)


def _check_table(table: Any, fname: str) -> LuaTable:
    if not isinstance(table, LuaTable):
        raise _arg_error(1, fname, "table", table)
    return table


def _check_int(value: Any, argn: int, fname: str) -> int:
    if type_name(value) != "number":
        raise _arg_error(argn, fname, "number", value)
    return int(value)


def _truthy(value: Any) -> bool:
    return not (value is None or value is False)


def _to_text(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("latin-1")
    if isinstance(value, str):
        return value
    return "%.14g" % value


def concat(table: LuaTable, sep: str = "", i: int = 1,
           j: Optional[int] = None) -> str:
    """Join ``table[i..j]`` with ``sep``; values must be strings or numbers."""
    if type_name(sep) not in ("string", "number"):
        raise _arg_error(2, "concat", "string", sep)
    sep = _to_text(sep)
    _check_table(table, "concat")
    i = _check_int(i, 3, "concat")
    last = table.length() if j is None else _check_int(j, 4, "concat")

    def field(index: int) -> str:
        value = table.get(index)
        if type_name(value) not in ("string", "number"):
            raise LuaError(
                f"invalid value ({type_name(value)}) at index {index} "
                f"in table for 'concat'"
            )
        return _to_text(value)

    parts = []
    while i < last:
        parts.append(field(i))
        parts.append(sep)
        i += 1
    if i == last:
        parts.append(field(i))
    return "".join(parts)


def insert(table: LuaTable, *args: Any) -> None:
    """``insert(t, v)`` appends; ``insert(t, pos, v)`` shifts up and inserts."""
    _check_table(table, "insert")
    e = table.length() + 1
    if len(args) == 1:
        pos = e
        value = args[0]
    elif len(args) == 2:
        pos = _check_int(args[0], 2, "insert")
        value = args[1]
        if pos > e:
            e = pos
        for index in range(e, pos, -1):
            table[index] = table[index - 1]
    else:
        raise LuaError("wrong number of arguments to 'insert'")
    table[pos] = value


def remove(table: LuaTable, pos: Optional[int] = None) -> Any:
    """Remove and return ``table[pos]`` (default: the last element).

    Returns ``None`` when ``pos`` lies outside ``1..#table``.
    """
    _check_table(table, "remove")
    e = table.length()
    pos = e if pos is None else _check_int(pos, 2, "remove")
    if not 1 <= pos <= e:
        return None
    result = table[pos]
    for index in range(pos, e):
        table[index] = table[index + 1]
    table[e] = None
    return result


def _order_error(a: Any, b: Any) -> LuaError:
    ta, tb = type_name(a), type_name(b)
    if ta == tb:
        return LuaError(f"attempt to compare two {ta} values")
    return LuaError(f"attempt to compare {ta} with {tb}")


def _less_than(a: Any, b: Any) -> bool:
    kind = type_name(a)
    if kind != type_name(b):
        raise _order_error(a, b)
    if kind in ("number", "string"):
        if isinstance(a, bytes) != isinstance(b, bytes):
            return _to_text(a) < _to_text(b)
        return a < b
    tm1 = get_tag_method_by_object(a, TagMethod.LT)
    if tm1 is not None:
        tm2 = get_tag_method_by_object(b, TagMethod.LT)
        if tm1 is tm2 or (tm2 is not None and tm1 == tm2):
            return _truthy(tm1(a, b))
    raise _order_error(a, b)


def _auxsort(t: LuaTable, lo: int, up: int,
             lt: Callable[[Any, Any], bool]) -> None:
    while lo < up:
        a_lo, a_up = t[lo], t[up]
        if lt(a_up, a_lo):
            t[lo], t[up] = a_up, a_lo
        if up - lo == 1:
            break
        i = (lo + up) // 2
        a_i, a_lo = t[i], t[lo]
        if lt(a_i, a_lo):
            t[i], t[lo] = a_lo, a_i
        else:
            a_up = t[up]
            if lt(a_up, a_i):
                t[i], t[up] = a_up, a_i
        if up - lo == 2:
            break
        pivot = t[i]
        t[i], t[up - 1] = t[up - 1], pivot
        # a[lo] <= P == a[up-1] <= a[up]; partition lo+1 .. up-2
        i, j = lo, up - 1
        while True:
            i += 1
            while lt(t[i], pivot):
                if i > up:
                    raise LuaError("invalid order function for sorting")
                i += 1
            j -= 1
            while lt(pivot, t[j]):
                if j < lo:
                    raise LuaError("invalid order function for sorting")
                j -= 1
            if j < i:
                break
            t[i], t[j] = t[j], t[i]
        t[up - 1], t[i] = t[i], t[up - 1]
        # Recurse into the smaller half, loop over the larger one.
        if i - lo < up - i:
            start, stop, lo = lo, i - 1, i + 1
        else:
            start, stop, up = i + 1, up, i - 1
        _auxsort(t, start, stop, lt)


def sort(table: LuaTable, comp: Optional[Callable[[Any, Any], Any]] = None) -> None:
    """Sort ``table[1..#table]`` in place with ``comp`` or the ``<`` order."""
    _check_table(table, "sort")
    n = table.length()
    if comp is None:
        lt = _less_than
    elif callable(comp):
        def lt(a: Any, b: Any) -> bool:
            return _truthy(comp(a, b))
    else:
        raise _arg_error(2, "sort", "function", comp)
    _auxsort(table, 1, n, lt)


def maxn(table: LuaTable) -> Any:
    """Return the largest positive numeric key, or 0 when there is none."""
    _check_table(table, "maxn")
    best: Any = 0
    for key, _ in table:
        if type_name(key) == "number" and key > best:
            best = key
    return best


def getn(table: LuaTable) -> int:
    """Return the length of the table."""
    return _check_table(table, "getn").length()


def foreach(table: LuaTable, func: Callable[[Any, Any], Any]) -> Any:
    """Call ``func(k, v)`` for every entry; stop at the first non-nil result."""
    _check_table(table, "foreach")
    if not callable(func):
        raise _arg_error(2, "foreach", "function", func)
    entry = table.next(None)
    while entry is not None:
        key, value = entry
        result = func(key, value)
        if result is not None:
            return result
        entry = table.next(key)
    return None


def foreachi(table: LuaTable, func: Callable[[int, Any], Any]) -> Any:
    """Call ``func(i, t[i])`` for ``i`` in ``1..#t``; stop at a non-nil result."""
    _check_table(table, "foreachi")
    n = table.length()
    if not callable(func):
        raise _arg_error(2, "foreachi", "function", func)
    for index in range(1, n + 1):
        result = func(index, table.get(index))
        if result is not None:
            return result
    return None