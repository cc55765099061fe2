import struct
import sys

import pytest

from luakit.errors import LuaSyntaxError
from luakit.stream import from_bytes
from luakit.undump import LocVar, make_header, undump

ORDER = "<" if sys.byteorder == "little" else ">"
SIZE_T = "Q" if struct.calcsize("N") == 8 else "I"


def _int(n):
    return struct.pack(ORDER + "i", n)


def _str(s):
    if s is None:
        return struct.pack(ORDER + SIZE_T, 0)
    data = s + b"\0"
    return struct.pack(ORDER + SIZE_T, len(data)) + data


def _constant(value):
    if value is None:
        return b"\x00"
    if isinstance(value, bool):
        return b"\x01" + bytes([int(value)])
    if isinstance(value, float):
        return b"\x03" + struct.pack(ORDER + "d", value)
    return b"\x04" + _str(value)


def _function(source=b"@t.lua", code=(), constants=(), protos=(),
              lineinfo=(), locvars=(), upvalues=(), line=0, lastline=0,
              nups=0, params=0, vararg=2, maxstack=2):
    out = _str(source) + _int(line) + _int(lastline)
    out += bytes([nups, params, vararg, maxstack])
    out += _int(len(code)) + b"".join(struct.pack(ORDER + "I", c) for c in code)
    out += _int(len(constants)) + b"".join(_constant(k) for k in constants)
    out += _int(len(protos)) + b"".join(protos)
    out += _int(len(lineinfo)) + b"".join(_int(x) for x in lineinfo)
    out += _int(len(locvars))
    for name, start, end in locvars:
        out += _str(name) + _int(start) + _int(end)
    out += _int(len(upvalues)) + b"".join(_str(u) for u in upvalues)
    return out


def _chunk(body):
    return make_header() + body


def test_header_layout():
    header = make_header()
    assert len(header) == 12
    assert header[:6] == b"\x1bLua\x51\x00"
    assert header[-1] == 0


def test_undump_main_function():
    body = _function(
        code=(7, 30),
        constants=(None, True, 1.5, b"print"),
        lineinfo=(1, 1),
        locvars=((b"x", 0, 2),),
        upvalues=(b"up",),
        nups=1,
        params=1,
        maxstack=3,
    )
    f = undump(_chunk(body), "@t.lua")
    assert f.source == b"@t.lua"
    assert f.code == [7, 30]
    assert f.constants == [None, True, 1.5, b"print"]
    assert f.line_info == [1, 1]
    assert f.loc_vars == [LocVar(b"x", 0, 2)]
    assert f.upvalues == [b"up"]
    assert (f.nups, f.num_params, f.is_vararg, f.max_stack_size) == (1, 1, 2, 3)


def test_nested_function_inherits_source():
    inner = _function(source=None, line=3, lastline=5)
    body = _function(protos=(inner,))
    f = undump(_chunk(body))
    assert len(f.protos) == 1
    assert f.protos[0].source == f.source
    assert (f.protos[0].line_defined, f.protos[0].last_line_defined) == (3, 5)


def test_main_without_source_gets_placeholder():
    f = undump(_chunk(_function(source=None)))
    assert f.source == b"=?"


def test_chunked_stream_gives_same_result():
    data = _chunk(_function(code=(1, 2, 3), constants=(b"abc", 2.0)))
    assert undump(from_bytes(data, 3)) == undump(data)


def test_truncated_chunk_names_file():
    data = _chunk(_function())[:-3]
    with pytest.raises(LuaSyntaxError,
                       match="^t.lua: unexpected end in precompiled chunk$"):
        undump(data, "@t.lua")


def test_binary_string_name():
    with pytest.raises(LuaSyntaxError, match="^binary string: bad header"):
        undump(b"\x1bLuaXXXXXXXXXXXX", "\x1bLua")


def test_bad_header():
    data = bytearray(_chunk(_function()))
    data[4] = 0x50
    with pytest.raises(LuaSyntaxError, match="bad header"):
        undump(bytes(data), "=chunk")


def test_bad_integer():
    body = _str(b"@t.lua") + _int(-1)
    with pytest.raises(LuaSyntaxError, match="bad integer"):
        undump(_chunk(body))


def test_bad_constant():
    body = _function()
    good = _int(0) + _int(0)  # no constants, no protos
    prefix_len = len(_str(b"@t.lua")) + 8 + 4 + 4
    bad = body[:prefix_len] + _int(1) + b"\x09" + body[prefix_len + len(good):]
    with pytest.raises(LuaSyntaxError, match="bad constant"):
        undump(_chunk(bad))


def test_syntax_error_status():
    with pytest.raises(LuaSyntaxError) as info:
        undump(b"", "=empty")
    assert info.value.status == 3