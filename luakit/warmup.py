"""Warm-up exercise: sum a sequence of integers, validate and time it."""

from __future__ import annotations

import argparse
import sys
import time
from typing import Iterable, Optional, Sequence, Tuple

DEFAULT_N = 1000


def solution(values: Iterable[int]) -> int:
    """Return the sum of all values."""
    return sum(values)


def _expected(n: int) -> int:
    return n * (n + 1) // 2


def validate(n: int = DEFAULT_N) -> int:
    """Sum 1..n with ``solution`` and check it against the closed form.

    Returns the computed sum; raises ``ValueError`` on a mismatch.
    """
    if n < 0:
        raise ValueError("n must not be negative")
    result = solution(range(1, n + 1))
    expected = _expected(n)
    if result != expected:
        raise ValueError(
            f"Validation Failed. Result = {result}. Expected = {expected}"
        )
    return result


def bench(n: int = DEFAULT_N, repeat: int = 1000) -> Tuple[int, float]:
    """Run ``solution`` over 1..n ``repeat`` times.

    Returns the result and the mean time per call in seconds.
    """
    if n < 0:
        raise ValueError("n must not be negative")
    if repeat < 1:
        raise ValueError("repeat must be at least 1")
    values = list(range(1, n + 1))
    result = 0
    start = time.perf_counter()
    for _ in range(repeat):
        result = solution(values)
    elapsed = time.perf_counter() - start
    return result, elapsed / repeat


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Validate the solution and optionally time it; return an exit status."""
    parser = argparse.ArgumentParser(prog="warmup")
    parser.add_argument("-n", type=int, default=DEFAULT_N)
    parser.add_argument("--bench", type=int, metavar="REPEAT", default=0)
    args = parser.parse_args(argv)

    try:
        validate(args.n)
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 1
    print("Validation Successful")

    if args.bench:
        try:
            _, per_call = bench(args.n, args.bench)
        except ValueError as exc:
            print(exc, file=sys.stderr)
            return 1
        print(f"bench1: {per_call * 1e9:.1f} ns per iteration")
    return 0