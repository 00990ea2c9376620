"""Timing, byte packing, text scanning and modular helpers used across the package."""

from __future__ import annotations

import random
import time
from typing import Optional, Sequence

from queqiao.config import get_residual, power

_DIGITS = "0123456789"
_CLOCK_SLOTS = 101
_RAND_MAX = 2**31 - 1


def _wrap(value: int, bits: int) -> int:
    value &= (1 << bits) - 1
    return value - (1 << bits) if value >= 1 << (bits - 1) else value


class Clock:
    """Measures wall time; leaving a ``with`` block adds it to a numbered total."""

    _totals: list[int] = [0] * _CLOCK_SLOTS  # microseconds per slot

    def __init__(self, clock_id: int) -> None:
        self._check_id(clock_id)
        self.clock_id = clock_id
        self._start = time.time_ns()

    @staticmethod
    def _check_id(clock_id: int) -> None:
        if not 0 <= clock_id < _CLOCK_SLOTS:
            raise IndexError(f"clock id must be in 0..{_CLOCK_SLOTS - 1}")

    def _elapsed_us(self) -> int:
        return (time.time_ns() - self._start) // 1000

    def __enter__(self) -> "Clock":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        Clock._totals[self.clock_id] += self._elapsed_us()

    def elapsed(self) -> float:
        """Seconds since the clock started, to the microsecond."""
        return self._elapsed_us() / 1_000_000

    def report(self) -> None:
        """Print the time since the clock started."""
        print(f"duration: {self.elapsed():f}")

    @classmethod
    def total(cls, clock_id: int) -> float:
        """Seconds accumulated under ``clock_id``."""
        cls._check_id(clock_id)
        return cls._totals[clock_id] / 1_000_000


def get_date_time() -> str:
    """Local time as ``YYYY-MM-DD_HH-MM-SS``."""
    return time.strftime("%Y-%m-%d_%H-%M-%S", time.localtime())


def int_to_bytes(u: int) -> bytes:
    """The low 32 bits of ``u``, little-endian."""
    return (u & 0xFFFFFFFF).to_bytes(4, "little")


def ll_to_bytes(u: int) -> bytes:
    """The low 64 bits of ``u``, little-endian."""
    return (u & 0xFFFFFFFFFFFFFFFF).to_bytes(8, "little")


def bytes_to_int(data: bytes) -> int:
    """Signed 32-bit integer from the first four bytes, little-endian."""
    if len(data) < 4:
        raise ValueError("need at least 4 bytes")
    return int.from_bytes(data[:4], "little", signed=True)


def bytes_to_ll(data: bytes) -> int:
    """Signed 64-bit integer from the first eight bytes, little-endian."""
    if len(data) < 8:
        raise ValueError("need at least 8 bytes")
    return int.from_bytes(data[:8], "little", signed=True)


def _skip_to_number(text: str, begin: int) -> tuple[int, bool]:
    """Position of the next digit, and whether a minus sign was passed on the way."""
    pos = begin
    while pos < len(text) and text[pos] not in _DIGITS:
        pos += 1
    if pos >= len(text):
        raise ValueError(f"no number in text after position {begin}")
    return pos, "-" in text[begin:pos]


def get_next(text: str, begin: int) -> int:
    """Position just past the number at or after ``begin`` (decimal points included).

    Empty fields are skipped: in ``"3,,,,,4"`` the number after 3 is 4.
    """
    pos, _ = _skip_to_number(text, begin)
    while pos < len(text) and text[pos] in _DIGITS:
        pos += 1
        if pos < len(text) and text[pos] == ".":
            pos += 1
    return pos


def _read_integer(text: str, begin: int, bits: int) -> tuple[int, int]:
    pos, negative = _skip_to_number(text, begin)
    start = pos
    while pos < len(text) and text[pos] in _DIGITS:
        pos += 1
    magnitude = _wrap(int(text[start:pos]), bits)
    return _wrap(-magnitude if negative else magnitude, bits), pos


def get_int(text: str, begin: int) -> tuple[int, int]:
    """Read a 32-bit integer at or after ``begin``; return it and the position after it."""
    return _read_integer(text, begin, 32)


def get_ll(text: str, begin: int) -> tuple[int, int]:
    """Read a 64-bit integer at or after ``begin``; return it and the position after it."""
    return _read_integer(text, begin, 64)


def get_fixpoint(text: str, begin: int, ie: int) -> tuple[int, int]:
    """Read a decimal number scaled by ``ie`` and truncated to an integer.

    Returns the scaled value and the position after the number.
    """
    pos, negative = _skip_to_number(text, begin)
    digits = 0
    point_digits = 0
    in_fraction = 0
    while pos < len(text) and text[pos] in _DIGITS:
        digits = 10 * digits + int(text[pos])
        point_digits += in_fraction
        pos += 1
        if pos < len(text) and text[pos] == ".":
            in_fraction = 1
            pos += 1
    result = int(digits / 10**point_digits * ie)
    return (-result if negative else result), pos


def random_long(mod: int) -> int:
    """A pseudo-random residue modulo ``mod``."""
    return random.randint(0, _RAND_MAX) % abs(mod)


def get_sign(a: int, mod: int) -> int:
    """Map a residue above half the modulus to its negative representative."""
    half = abs(mod) // 2 * (1 if mod >= 0 else -1)
    return a - mod if a > half else a


def get_abs(a: int) -> int:
    return a if a > 0 else -a


def mod_sqrt(a: int, mod: int) -> int:
    """Square root of ``a`` modulo a prime ``mod`` congruent to 3 mod 4."""
    return power(a, (mod + 1) >> 2, mod)


def cal_perm(key: Sequence[int], l: int, k: int, m: int, mod: int) -> int:
    """Elementary symmetric sum of degree ``l`` over the first ``m`` keys, skipping index ``k``."""
    if not l:
        return 1
    if len(key) < m:
        raise ValueError(f"need {m} keys, got {len(key)}")
    coefficients = [1] + [0] * l
    for i, value in enumerate(key[:m]):
        if i == k:
            continue
        for j in range(l, 0, -1):
            coefficients[j] = get_residual(
                coefficients[j] + coefficients[j - 1] * value, mod
            )
    return coefficients[l]