"""Loading of precompiled chunks."""

from __future__ import annotations

import struct
import sys
from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

from .errors import LuaSyntaxError
from .stream import ZStream, from_bytes

SIGNATURE = b"\x1bLua"
VERSION = 0x51
FORMAT = 0
HEADER_SIZE = 12
MAX_C_CALLS = 200

_TNIL = 0
_TBOOLEAN = 1
_TNUMBER = 3
_TSTRING = 4

_ORDER = "<" if sys.byteorder == "little" else ">"
_SIZE_T = "Q" if struct.calcsize("N") == 8 else "I"
_INT = struct.Struct(_ORDER + "i")
_SIZE = struct.Struct(_ORDER + _SIZE_T)
_INSTRUCTION = struct.Struct(_ORDER + "I")
_NUMBER = struct.Struct(_ORDER + "d")


@dataclass
class LocVar:
    """A local variable and the instruction range where it is active."""

    varname: Optional[bytes]
    startpc: int
    endpc: int


@dataclass
class Proto:
    """A function prototype loaded from a precompiled chunk."""

    source: Optional[bytes] = None
    line_defined: int = 0
    last_line_defined: int = 0
    nups: int = 0
    num_params: int = 0
    is_vararg: int = 0
    max_stack_size: int = 0
    code: List[int] = field(default_factory=list)
    constants: List[Any] = field(default_factory=list)
    protos: List["Proto"] = field(default_factory=list)
    line_info: List[int] = field(default_factory=list)
    loc_vars: List[LocVar] = field(default_factory=list)
    upvalues: List[Optional[bytes]] = field(default_factory=list)


def make_header() -> bytes:
    """Return the header expected for chunks made on this platform."""
    return SIGNATURE + bytes([
        VERSION,
        FORMAT,
        1 if sys.byteorder == "little" else 0,
        _INT.size,
        _SIZE.size,
        _INSTRUCTION.size,
        _NUMBER.size,
        0,  # numbers are not integral
    ])


class _Loader:
    def __init__(self, stream: ZStream, name: str) -> None:
        self.stream = stream
        self.name = name
        self.depth = 0

    def error(self, why: str) -> LuaSyntaxError:
        return LuaSyntaxError(f"{self.name}: {why} in precompiled chunk")

    def block(self, size: int) -> bytes:
        data = self.stream.read(size)
        if len(data) != size:
            raise self.error("unexpected end")
        return data

    def byte(self) -> int:
        return self.block(1)[0]

    def char(self) -> int:
        value = self.byte()
        return value - 256 if value > 127 else value

    def int(self) -> int:
        (value,) = _INT.unpack(self.block(_INT.size))
        if value < 0:
            raise self.error("bad integer")
        return value

    def number(self) -> float:
        return _NUMBER.unpack(self.block(_NUMBER.size))[0]

    def string(self) -> Optional[bytes]:
        (size,) = _SIZE.unpack(self.block(_SIZE.size))
        if size == 0:
            return None
        return self.block(size)[:-1]  # drop the trailing NUL

    def code(self) -> List[int]:
        n = self.int()
        data = self.block(n * _INSTRUCTION.size)
        return [value for (value,) in _INSTRUCTION.iter_unpack(data)]

    def constants(self, f: Proto) -> None:
        for _ in range(self.int()):
            tag = self.char()
            if tag == _TNIL:
                f.constants.append(None)
            elif tag == _TBOOLEAN:
                f.constants.append(self.char() != 0)
            elif tag == _TNUMBER:
                f.constants.append(self.number())
            elif tag == _TSTRING:
                f.constants.append(self.string())
            else:
                raise self.error("bad constant")
        f.protos = [self.function(f.source) for _ in range(self.int())]

    def debug(self, f: Proto) -> None:
        n = self.int()
        data = self.block(n * _INT.size)
        f.line_info = [value for (value,) in _INT.iter_unpack(data)]
        for _ in range(self.int()):
            varname = self.string()
            startpc = self.int()
            endpc = self.int()
            f.loc_vars.append(LocVar(varname, startpc, endpc))
        f.upvalues = [self.string() for _ in range(self.int())]

    def function(self, parent_source: Optional[bytes]) -> Proto:
        self.depth += 1
        if self.depth > MAX_C_CALLS:
            raise self.error("code too deep")
        f = Proto()
        source = self.string()
        f.source = parent_source if source is None else source
        f.line_defined = self.int()
        f.last_line_defined = self.int()
        f.nups = self.byte()
        f.num_params = self.byte()
        f.is_vararg = self.byte()
        f.max_stack_size = self.byte()
        f.code = self.code()
        self.constants(f)
        self.debug(f)
        self.depth -= 1
        return f

    def header(self) -> None:
        if self.block(HEADER_SIZE) != make_header():
            raise self.error("bad header")


def _chunk_display_name(name: str) -> str:
    if name[:1] in ("@", "="):
        return name[1:]
    if name[:1] == SIGNATURE[:1].decode("latin-1"):
        return "binary string"
    return name


def undump(stream: Union[ZStream, bytes], name: str = "=?") -> Proto:
    """Load a precompiled chunk and return its main function prototype.

    ``stream`` is a :class:`ZStream` or the chunk's bytes.  Malformed input
    raises :class:`LuaSyntaxError` naming the chunk.
    """
    if isinstance(stream, (bytes, bytearray)):
        stream = from_bytes(bytes(stream))
    loader = _Loader(stream, _chunk_display_name(name))
    loader.header()
    return loader.function(b"=?")