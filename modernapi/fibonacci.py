"""Fibonacci numbers and the responses built from them."""

from __future__ import annotations

import time
from collections.abc import Iterator
from dataclasses import dataclass, field

_INT32_MODULUS = 1 << 32
_INT32_LIMIT = 1 << 31


def _to_int32(value: int) -> int:
    """Wrap an integer into the signed 32-bit range, as a fixed-width cast does."""
    value %= _INT32_MODULUS
    return value - _INT32_MODULUS if value >= _INT32_LIMIT else value


def _fibonacci_numbers() -> Iterator[int]:
    current, following = 0, 1
    while True:
        yield current
        current, following = following, current + following


def fib(n: int) -> int:
    """Return the n-th Fibonacci number; zero for any n <= 0."""
    if n <= 0:
        return 0
    previous, current = 0, 1
    for _ in range(n - 1):
        previous, current = current, previous + current
    return current


def fibonacci_sequence(count: int) -> list[int]:
    """Return the first ``count`` Fibonacci numbers, starting with fib(0)."""
    if count < 0:
        raise ValueError(f"count must not be negative, got {count}")
    numbers = _fibonacci_numbers()
    return [next(numbers) for _ in range(count)]


@dataclass
class SyncFibonacciResponse:
    """All requested numbers at once, with the time it took to compute them."""

    time_taken: str
    fibonacci_numbers: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class AsyncFibonacciResponse:
    """One number of a streamed sequence and its position."""

    sequence: int
    fibonacci_number: int


def sync_fibonacci(number: int) -> SyncFibonacciResponse:
    """Compute the first ``number`` Fibonacci numbers as 32-bit values."""
    started = time.perf_counter()
    numbers = [_to_int32(value) for value in fibonacci_sequence(number)]
    elapsed = time.perf_counter() - started
    return SyncFibonacciResponse(
        time_taken=f"{elapsed} seconds",
        fibonacci_numbers=numbers,
    )


def async_fibonacci(number: int) -> Iterator[AsyncFibonacciResponse]:
    """Yield the first ``number`` Fibonacci numbers one at a time."""
    numbers = _fibonacci_numbers()
    for index in range(max(number, 0)):
        yield AsyncFibonacciResponse(
            sequence=_to_int32(index),
            fibonacci_number=_to_int32(next(numbers)),
        )