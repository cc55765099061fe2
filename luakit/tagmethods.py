"""Tag methods: metatable events and lookup of their handlers."""

from __future__ import annotations

import enum
from typing import Any, Mapping, Optional

from .table import LuaTable

TYPE_NAMES = (
    "nil", "boolean", "userdata", "number",
    "string", "table", "function", "userdata", "thread",
    "proto", "upval",
)
"""Type names indexed by internal type tag."""


class TagMethod(enum.IntEnum):
    """Metatable events, in the order the interpreter relies on."""

    INDEX = 0
    NEWINDEX = 1
    GC = 2
    MODE = 3
    EQ = 4  # last event with cached ("fast") absence
    ADD = 5
    SUB = 6
    MUL = 7
    DIV = 8
    MOD = 9
    POW = 10
    UNM = 11
    LEN = 12
    LT = 13
    LE = 14
    CONCAT = 15
    CALL = 16

    @property
    def event_name(self) -> str:
        """The metatable key for this event, such as ``"__index"``."""
        return "__" + self.name.lower()

    @property
    def is_fast(self) -> bool:
        """Whether the absence of this event is cached in table flags."""
        return self <= TagMethod.EQ


def type_name(value: Any) -> str:
    """Return the type name of a value as the interpreter reports it."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, (str, bytes)):
        return "string"
    if isinstance(value, LuaTable):
        return "table"
    if callable(value):
        return "function"
    return "userdata"


def get_tag_method(events: Optional[LuaTable], event: TagMethod) -> Any:
    """Look up ``event`` in the metatable ``events``.

    Returns the handler or ``None``.  For the fast events the absence of a
    handler is remembered in the table's flags until the table is changed.
    """
    if events is None:
        return None
    event = TagMethod(event)
    bit = 1 << int(event)
    if event.is_fast and events.flags & bit:
        return None
    tm = events.get(event.event_name)
    if tm is None:
        if event.is_fast:
            events.flags |= bit
        return None
    return tm


def get_tag_method_by_object(
    value: Any,
    event: TagMethod,
    type_metatables: Optional[Mapping[str, LuaTable]] = None,
) -> Any:
    """Look up the handler for ``event`` in the metatable of ``value``.

    Tables carry their own metatable; other values use the per-type
    metatable in ``type_metatables``, keyed by type name.  Userdata objects
    with a ``metatable`` attribute use that one.
    """
    event = TagMethod(event)
    kind = type_name(value)
    if isinstance(value, LuaTable):
        mt = value.metatable
    elif kind == "userdata" and hasattr(value, "metatable"):
        mt = value.metatable
    else:
        mt = (type_metatables or {}).get(kind)
    if mt is None:
        return None
    return mt.get(event.event_name)