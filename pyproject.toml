[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "luakit"
version = "0.1.0"
description = "Pure-Python building blocks of a Lua 5.1 runtime: tables, string patterns, the string and table libraries, chunk loading and buffered streams"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "lua",
    "interpreter",
    "patterns",
    "hash table",
    "bytecode",
    "string library",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Interpreters",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
luakit-warmup = "luakit.warmup:main"

[tool.hatch.build.targets.wheel]
packages = ["luakit"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
