"""Exceptions raised by the interpreter components."""

from __future__ import annotations

# Status codes reported by a failed protected call.
ERRRUN = 2
ERRSYNTAX = 3
ERRMEM = 4
ERRERR = 5


class LuaError(Exception):
    """A runtime error raised while running or loading code."""

    status: int = ERRRUN

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class LuaSyntaxError(LuaError):
    """A malformed chunk, either source text or a precompiled binary."""

    status: int = ERRSYNTAX