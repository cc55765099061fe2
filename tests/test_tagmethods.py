import pytest

from luakit.table import LuaTable
from luakit.tagmethods import (
    TagMethod,
    get_tag_method,
    get_tag_method_by_object,
    type_name,
)


def test_every_event_is_found_under_its_name():
    assert TagMethod.INDEX == 0
    assert TagMethod.EQ == 4
    assert TagMethod.CALL == 16
    assert len(TagMethod) == 17
    for event in TagMethod:
        handler = object()
        mt = LuaTable()
        mt[event.event_name] = handler
        assert get_tag_method(mt, event) is handler


def test_event_names_are_looked_up():
    names = [event.event_name for event in TagMethod]
    assert names[:5] == ["__index", "__newindex", "__gc", "__mode", "__eq"]
    assert names[-2:] == ["__concat", "__call"]
    handler = object()
    mt = LuaTable()
    mt["__concat"] = handler
    assert get_tag_method(mt, TagMethod.CONCAT) is handler
    assert get_tag_method(mt, TagMethod.CALL) is None


def test_only_fast_events_cache_absence():
    fast = [e for e in TagMethod if e.is_fast]
    assert fast == [
        TagMethod.INDEX, TagMethod.NEWINDEX, TagMethod.GC,
        TagMethod.MODE, TagMethod.EQ,
    ]
    mt = LuaTable()
    mt["__other"] = 1
    assert mt.flags == 0
    for event in TagMethod:
        assert get_tag_method(mt, event) is None
    cached = [e for e in TagMethod if mt.flags & (1 << e)]
    assert cached == fast


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, "nil"),
        (True, "boolean"),
        (3, "number"),
        (2.5, "number"),
        ("s", "string"),
        (b"s", "string"),
        (LuaTable(), "table"),
        (len, "function"),
        (object(), "userdata"),
    ],
)
def test_type_name(value, expected):
    assert type_name(value) == expected


def test_get_tag_method_without_metatable():
    assert get_tag_method(None, TagMethod.INDEX) is None


def test_absence_is_cached_and_cleared_by_set():
    handler = object()
    mt = LuaTable()
    mt["__add"] = object()
    assert mt.flags == 0
    assert get_tag_method(mt, TagMethod.INDEX) is None
    assert mt.flags & (1 << TagMethod.INDEX)
    mt["__index"] = handler
    assert get_tag_method(mt, TagMethod.INDEX) is handler


def test_slow_event_absence_not_cached():
    mt = LuaTable()
    mt["__index"] = object()
    assert get_tag_method(mt, TagMethod.ADD) is None
    assert mt.flags & (1 << TagMethod.ADD) == 0


def test_slow_event_found():
    handler = object()
    mt = LuaTable()
    mt["__add"] = handler
    assert get_tag_method(mt, TagMethod.ADD) is handler


def test_by_object_uses_table_metatable():
    handler = object()
    mt = LuaTable()
    mt["__len"] = handler
    t = LuaTable()
    t.metatable = mt
    assert get_tag_method_by_object(t, TagMethod.LEN) is handler
    assert get_tag_method_by_object(LuaTable(), TagMethod.LEN) is None


def test_by_object_uses_type_metatables():
    handler = object()
    mt = LuaTable()
    mt["__index"] = handler
    assert get_tag_method_by_object("abc", TagMethod.INDEX, {"string": mt}) is handler
    assert get_tag_method_by_object(5, TagMethod.INDEX, {"string": mt}) is None