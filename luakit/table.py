"""Tables with an array part and a chained scatter hash part.

Non-negative integer keys are candidates for the array part, whose size is
the largest power of two ``n`` such that more than half of the slots
between 1 and ``n`` are in use.  Everything else lives in a hash part that
uses chained scatter with Brent's variation: an element that is not in its
main position guarantees that the element occupying that position is in
its own main position.
"""

from __future__ import annotations

import math
import struct
import zlib
from typing import Any, Iterator, List, Optional, Tuple

from .errors import LuaError

MAXBITS = 26
"""The array part holds at most ``2 ** MAXBITS`` slots."""

MAXASIZE = 1 << MAXBITS

MAX_INT = 2**31 - 1 - 2
"""Largest int value used for index arithmetic (two below the C limit)."""

_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1

_NIL = "nil"
_BOOLEAN = "boolean"
_NUMBER = "number"
_STRING = "string"
_OBJECT = "object"

# A location is (in_array, index): a slot in the array or a node index.
_Location = Tuple[bool, int]


def _lua_type(value: Any) -> str:
    if value is None:
        return _NIL
    if isinstance(value, bool):
        return _BOOLEAN
    if isinstance(value, (int, float)):
        return _NUMBER
    if isinstance(value, (str, bytes)):
        return _STRING
    return _OBJECT


def _raw_equal(a: Any, b: Any) -> bool:
    kind = _lua_type(a)
    if kind != _lua_type(b):
        return False
    if kind == _NIL:
        return True
    if kind == _OBJECT:
        return a is b
    return a == b


def _array_index(key: Any) -> int:
    """Return ``key`` as an int if it is an integral number, else -1."""
    if _lua_type(key) != _NUMBER:
        return -1
    if isinstance(key, float) and not math.isfinite(key):
        return -1
    k = int(key)
    if k != key or not _INT_MIN <= k <= _INT_MAX:
        return -1
    return k


def _ceil_log2(x: int) -> int:
    return (x - 1).bit_length()


def _number_bits(n: Any) -> int:
    try:
        packed = struct.pack("<d", float(n))
    except OverflowError:
        return hash(n) & 0xFFFFFFFF
    low, high = struct.unpack("<II", packed)
    return (low + high) & 0xFFFFFFFF


class _Node:
    __slots__ = ("key", "value", "next")

    def __init__(self) -> None:
        self.key: Any = None
        self.value: Any = None
        self.next: Optional[int] = None


class LuaTable:
    """An associative table keyed by any non-nil, non-NaN value.

    ``None`` plays the role of nil: reading a missing key gives ``None`` and
    storing ``None`` removes the value.  ``True`` and ``1`` are distinct
    keys, while ``1`` and ``1.0`` are the same key.
    """

    def __init__(self, narray: int = 0, nhash: int = 0) -> None:
        if narray < 0 or nhash < 0:
            raise ValueError("table sizes must not be negative")
        self.metatable: Optional["LuaTable"] = None
        self.flags = 0xFF  # cache of absent tag methods
        self._array: List[Any] = []
        self._nodes: List[_Node] = [_Node()]
        self._dummy = True
        self._lastfree = 0
        self._set_array_vector(narray)
        self._set_node_vector(nhash)

    # ------------------------------------------------------------ sizing

    def array_size(self) -> int:
        """Number of slots in the array part."""
        return len(self._array)

    def hash_size(self) -> int:
        """Number of nodes in the hash part (0 when it is empty)."""
        return 0 if self._dummy else len(self._nodes)

    def _set_array_vector(self, size: int) -> None:
        if size > len(self._array):
            self._array.extend([None] * (size - len(self._array)))
        else:
            del self._array[size:]

    def _set_node_vector(self, size: int) -> None:
        if size == 0:
            self._nodes = [_Node()]
            self._dummy = True
            self._lastfree = 0
            return
        lsize = _ceil_log2(size)
        if lsize > MAXBITS:
            raise LuaError("table overflow")
        size = 1 << lsize
        self._nodes = [_Node() for _ in range(size)]
        self._dummy = False
        self._lastfree = size

    def _resize(self, nasize: int, nhsize: int) -> None:
        oldasize = len(self._array)
        old_nodes = self._nodes
        if nasize > oldasize:
            self._set_array_vector(nasize)
        self._set_node_vector(nhsize)
        if nasize < oldasize:
            vanishing = self._array[nasize:]
            del self._array[nasize:]
            for index, value in enumerate(vanishing, start=nasize + 1):
                if value is not None:
                    self._raw_set(index, value)
        for node in reversed(old_nodes):
            if node.value is not None:
                self._raw_set(node.key, node.value)

    def resize_array(self, nasize: int) -> None:
        """Resize the array part to ``nasize`` slots, keeping every entry."""
        if nasize < 0:
            raise ValueError("array size must not be negative")
        self._resize(nasize, self.hash_size())

    # ------------------------------------------------------------ rehash

    def _num_use_array(self, nums: List[int]) -> int:
        ause = 0
        i = 1
        sizearray = len(self._array)
        for lg in range(MAXBITS + 1):
            lim = 1 << lg
            if lim > sizearray:
                lim = sizearray
                if i > lim:
                    break
            count = sum(1 for value in self._array[i - 1:lim] if value is not None)
            i = lim + 1
            nums[lg] += count
            ause += count
        return ause

    @staticmethod
    def _count_int(key: Any, nums: List[int]) -> int:
        k = _array_index(key)
        if 0 < k <= MAXASIZE:
            nums[_ceil_log2(k)] += 1
            return 1
        return 0

    def _num_use_hash(self, nums: List[int]) -> Tuple[int, int]:
        totaluse = 0
        ause = 0
        for node in reversed(self._nodes):
            if node.value is not None:
                ause += self._count_int(node.key, nums)
                totaluse += 1
        return totaluse, ause

    @staticmethod
    def _compute_sizes(nums: List[int], narray: int) -> Tuple[int, int]:
        """Return (elements going to the array part, optimal array size)."""
        a = na = n = 0
        twotoi = 1
        i = 0
        while twotoi // 2 < narray:
            if nums[i] > 0:
                a += nums[i]
                if a > twotoi // 2:
                    n = twotoi
                    na = a
            if a == narray:
                break
            i += 1
            twotoi *= 2
        return na, n

    def _rehash(self, extra_key: Any) -> None:
        nums = [0] * (MAXBITS + 1)
        nasize = self._num_use_array(nums)
        totaluse = nasize
        hash_use, hash_ints = self._num_use_hash(nums)
        totaluse += hash_use
        nasize += hash_ints
        nasize += self._count_int(extra_key, nums)
        totaluse += 1
        na, nasize = self._compute_sizes(nums, nasize)
        self._resize(nasize, totaluse - na)

    # ------------------------------------------------------------ hashing

    def _main_position(self, key: Any) -> int:
        size = len(self._nodes)
        kind = _lua_type(key)
        if kind == _NUMBER:
            if key == 0:
                return 0
            return _number_bits(key) % ((size - 1) | 1)
        if kind == _STRING:
            data = key.encode("utf-8", "surrogatepass") if isinstance(key, str) else key
            return zlib.crc32(data) & (size - 1)
        if kind == _BOOLEAN:
            return int(key) & (size - 1)
        return (id(key) & 0xFFFFFFFF) % ((size - 1) | 1)

    def _get_free_pos(self) -> Optional[int]:
        while self._lastfree > 0:
            self._lastfree -= 1
            if self._nodes[self._lastfree].key is None:
                return self._lastfree
        return None

    def _new_key(self, key: Any) -> _Location:
        nodes = self._nodes
        mp = self._main_position(key)
        if nodes[mp].value is not None or self._dummy:
            free = self._get_free_pos()
            if free is None:
                self._rehash(key)
                return self._locate(key) or self._new_key(key)
            other = self._main_position(nodes[mp].key)
            if other != mp:
                # The colliding node is out of its main position: move it.
                while nodes[other].next != mp:
                    other = nodes[other].next  # type: ignore[assignment]
                nodes[other].next = free
                moved = nodes[free]
                moved.key, moved.value, moved.next = (
                    nodes[mp].key, nodes[mp].value, nodes[mp].next)
                nodes[mp].next = None
                nodes[mp].value = None
            else:
                nodes[free].next = nodes[mp].next
                nodes[mp].next = free
                mp = free
        nodes[mp].key = key
        return (False, mp)

    def _locate(self, key: Any) -> Optional[_Location]:
        if key is None:
            return None
        if _lua_type(key) == _NUMBER:
            k = _array_index(key)
            if k != -1 and 1 <= k <= len(self._array):
                return (True, k - 1)
        index: Optional[int] = self._main_position(key)
        while index is not None:
            node = self._nodes[index]
            if _raw_equal(node.key, key):
                return (False, index)
            index = node.next
        return None

    def _load(self, location: _Location) -> Any:
        in_array, index = location
        return self._array[index] if in_array else self._nodes[index].value

    def _store(self, location: _Location, value: Any) -> None:
        in_array, index = location
        if in_array:
            self._array[index] = value
        else:
            self._nodes[index].value = value

    def _raw_set(self, key: Any, value: Any) -> None:
        location = self._locate(key) or self._new_key(key)
        self._store(location, value)

    # ------------------------------------------------------------ access

    def get(self, key: Any) -> Any:
        """Return the value stored under ``key``, or ``None``."""
        location = self._locate(key)
        return None if location is None else self._load(location)

    def set(self, key: Any, value: Any) -> None:
        """Store ``value`` under ``key``; ``None`` as value clears the entry."""
        self.flags = 0
        location = self._locate(key)
        if location is None:
            if key is None:
                raise LuaError("table index is nil")
            if isinstance(key, float) and math.isnan(key):
                raise LuaError("table index is NaN")
            location = self._new_key(key)
        self._store(location, value)

    def _find_index(self, key: Any) -> int:
        if key is None:
            return -1
        i = _array_index(key)
        if 0 < i <= len(self._array):
            return i - 1
        index: Optional[int] = self._main_position(key)
        while index is not None:
            node = self._nodes[index]
            if _raw_equal(node.key, key):
                return index + len(self._array)
            index = node.next
        raise LuaError("invalid key to 'next'")

    def next(self, key: Any = None) -> Optional[Tuple[Any, Any]]:
        """Return the entry after ``key`` in traversal order, or ``None``.

        Passing ``None`` starts a traversal.  Entries may be cleared while
        traversing; the cleared key can still be passed back in.
        """
        i = self._find_index(key) + 1
        sizearray = len(self._array)
        for slot in range(i, sizearray):
            value = self._array[slot]
            if value is not None:
                return slot + 1, value
        for slot in range(max(i - sizearray, 0), len(self._nodes)):
            node = self._nodes[slot]
            if node.value is not None:
                return node.key, node.value
        return None

    def _unbound_search(self, j: int) -> int:
        i = j
        j += 1
        while self.get(j) is not None:
            i = j
            j *= 2
            if j > MAX_INT:
                # Pathological table: fall back to a linear search.
                i = 1
                while self.get(i) is not None:
                    i += 1
                return i - 1
        while j - i > 1:
            m = (i + j) // 2
            if self.get(m) is None:
                j = m
            else:
                i = m
        return i

    def length(self) -> int:
        """Return a border: an ``n`` with ``t[n]`` set and ``t[n+1]`` nil."""
        j = len(self._array)
        if j > 0 and self._array[j - 1] is None:
            i = 0
            while j - i > 1:
                m = (i + j) // 2
                if self._array[m - 1] is None:
                    j = m
                else:
                    i = m
            return i
        if self._dummy:
            return j
        return self._unbound_search(j)

    # ------------------------------------------------------------ protocol

    def __iter__(self) -> Iterator[Tuple[Any, Any]]:
        """Yield ``(key, value)`` pairs in traversal order."""
        for index, value in enumerate(self._array, start=1):
            if value is not None:
                yield index, value
        for node in self._nodes:
            if node.value is not None:
                yield node.key, node.value

    def __len__(self) -> int:
        """The length operator: a border of the table."""
        return self.length()

    def __bool__(self) -> bool:
        return True

    def __getitem__(self, key: Any) -> Any:
        return self.get(key)

    def __setitem__(self, key: Any, value: Any) -> None:
        self.set(key, value)

    def __repr__(self) -> str:
        return (f"LuaTable(array_size={self.array_size()}, "
                f"hash_size={self.hash_size()})")