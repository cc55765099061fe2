"""Building blocks of a Lua 5.1 runtime: tables, patterns, string and table libraries, chunk loading and streams."""

__version__ = "0.1.0"