# luakit

Pure-Python pieces of a Lua 5.1 runtime, usable on their own. Requires
Python 3.10 or later and nothing outside the standard library.

- `luakit.table`: `LuaTable`, a table with an array part and a hash part,
  resized the way Lua resizes them, with `get`, `set`, `next`, `length`
  (the `#` border), `resize_array`, plus `array_size` and `hash_size` for
  inspecting the layout. It also supports iteration over `(key, value)`
  pairs, `len()` and indexing. `None` stands for nil.
- `luakit.patterns`: Lua pattern matching: `find`, `match`, `gmatch` and
  `gsub`, with captures, position captures, `%b`, `%f` and back-references.
  Subjects may be `str` or `bytes`.
- `luakit.strlib`: the rest of the string library: `length`, `sub`,
  `reverse`, `lower`, `upper`, `rep`, `byte`, `char`, `format` and
  `number_to_string` (numbers formatted with `%.14g`).
- `luakit.tablelib`: the table library: `concat`, `insert`, `remove`,
  `sort`, `maxn`, `getn`, `foreach` and `foreachi`, working on `LuaTable`.
- `luakit.tagmethods`: the `TagMethod` events (`__index`, `__add`, and so
  on), `type_name`, `get_tag_method` and `get_tag_method_by_object`.
- `luakit.undump`: loading precompiled 5.1 chunks into `Proto` objects
  (with `LocVar` entries for locals) with `undump`, and the header this
  platform expects from `make_header`.
- `luakit.stream`: `ZStream`, a buffered byte stream over a reader
  function, and `from_bytes` to build one from a bytes object.
- `luakit.errors`: `LuaError` and `LuaSyntaxError`, raised wherever Lua
  would raise an error.
- `luakit.warmup`: a small exercise that sums integers: `solution`,
  `validate`, `bench` and the `main` behind the `luakit-warmup` command.

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Examples

```python
from luakit import strlib, patterns
from luakit.table import LuaTable
from luakit import tablelib

strlib.sub("hello", 2, 4)        # "ell"
strlib.upper("lua")              # "LUA"

t = LuaTable(0, 0)
t[1] = "a"
t[2] = "b"
t[3] = "c"
t.length()                       # 3
tablelib.concat(t, ", ", 1, 3)   # "a, b, c"

for word in patterns.gmatch("one two three", "%a+"):
    print(word)

patterns.gsub("hello world", "o", "0")   # ("hell0 w0rld", 2)
```

Loading a compiled chunk from bytes:

```python
from luakit.stream import from_bytes
from luakit.undump import undump

with open("chunk.luac", "rb") as fh:
    proto = undump(from_bytes(fh.read(), 4096), "=chunk")
```

Errors in patterns, formats or chunk data raise `LuaError` (or
`LuaSyntaxError` for malformed precompiled chunks).

## Command line

`luakit-warmup` runs the warm-up exercise: it sums the numbers from 1 to
`N` (1000 by default), checks the result against the closed form, and
prints `Validation Successful`, or reports the mismatch and exits with
status 1.

```
luakit-warmup
luakit-warmup -n 5000
luakit-warmup --bench 1000
```

`-n N` sets how many numbers are summed; `--bench REPEAT` also times the
sum over `REPEAT` runs and prints the mean time per iteration.

## What it does not do

luakit has no compiler and no virtual machine: it cannot parse Lua
source or execute scripts or loaded `Proto` objects, and it offers no
interactive interpreter. `undump` only reads chunks into data objects.