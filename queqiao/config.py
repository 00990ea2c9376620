"""Run-time settings loaded from a JSON file, plus modular arithmetic helpers."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Optional, Union

from queqiao.reader import Reader
from queqiao.value import Value

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

# Integer settings that are read from the member of the same name.
_INT_FIELDS = (
    "B",
    "D",
    "PRINT_PRE_ITE",
    "OFFLINE_PHASE_ON",
    "LOCAL_TEST",
    "GRAPH_TYPE",
    "ACTIVATION",
    "SIGMOID",
    "TANH",
    "N",
    "M",
    "L",
    "CH",
    "IE_b",
    "TN",
    "MAX_NODE_NUM",
    "MASTER",
    "IE",
    "NM",
    "BIT_LENGTH",
    "REDUNDANCY",
    "BIT_P_LEN",
    "BUFFER_MAX",
    "HEADER_LEN",
    "ND",
    "DECIMAL_PLACES",
    "HEADER_LEN_OPT",
    "TRAIN_ITE",
    "THREAD_NUM",
    "MatColMajor",
    "MatRowMajor",
    "MM_NN",
    "MM_NT",
    "MM_TN",
    "MM_TT",
    "NGRAM",
    "KEY_NUM",
    "KEY_BATCH",
    "MAX_LEN",
    "INFER_BATCH",
    "MAX_SMOOTHING_LEVEL",
    "ALPHABET_SIZE",
    "CLOCK_MAIN",
    "CLOCK_TRAIN",
    "FEATURE_DIM",
    "USE_D",
    "LABEL_P",
    "TRAIN_TEST_SAME",
)


def _trunc_div(a: int, b: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b >= 0) else -quotient


def _trunc_mod(a: int, b: int) -> int:
    """Remainder whose sign follows the dividend."""
    return a - b * _trunc_div(a, b)


def _leading_int(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value >= 1 << 31 else value


def _shift_one(count: int) -> int:
    # A 32-bit shift uses only the low five bits of its count.
    return _to_int32(1 << (count & 31))


def get_residual(a: int, mod: int) -> int:
    """Reduce ``a`` into the residue range of ``mod``."""
    return _trunc_mod(_trunc_mod(a, mod) + mod, mod)


def power(a: int, b: int, mod: int) -> int:
    """``a`` to the power ``b`` modulo ``mod``; the exponent is reduced by ``mod`` first."""
    a = get_residual(a, mod)
    b = get_residual(b, mod)
    if b == 0:
        return 1
    result = 1
    while b > 0:
        if b & 1:
            result *= a
        result = get_residual(result, mod)
        a = get_residual(a * a, mod)
        b >>= 1
    return result


def inverse(a: int, b: int, mod: int) -> int:
    """Modular inverse of ``a`` for a prime ``b``, by Fermat's little theorem."""
    return power(a, b - 2, mod)


def _member(root: Value, name: str) -> Value:
    found = root.get(name)
    return found if found is not None else Value()


def _element(array: Value, index: int) -> Value:
    found = array.get(index)
    return found if found is not None else Value()


@dataclass(frozen=True)
class Config:
    """Settings of one run; absent numeric members read as zero."""

    B: int
    D: int
    PRINT_PRE_ITE: int
    OFFLINE_PHASE_ON: int
    LOCAL_TEST: int
    GRAPH_TYPE: int
    ACTIVATION: int
    SIGMOID: int
    TANH: int
    LEAKEY_RELU_BIAS: int
    MOD: int
    N: int
    M: int
    L: int
    D2: int
    CH: int
    IE_b: int
    TN: int
    MAX_NODE_NUM: int
    MASTER: int
    IE: int
    NM: int
    BIT_LENGTH: int
    REDUNDANCY: int
    BIT_P_LEN: int
    BUFFER_MAX: int
    HEADER_LEN: int
    ND: int
    DECIMAL_PLACES: int
    HEADER_LEN_OPT: int
    TRAIN_ITE: int
    THREAD_NUM: int
    MatColMajor: int
    MatRowMajor: int
    MM_NN: int
    MM_NT: int
    MM_TN: int
    MM_TT: int
    NGRAM: int
    KEY_NUM: int
    KEY_BATCH: int
    MAX_LEN: int
    INFER_BATCH: int
    MAX_SMOOTHING_LEVEL: int
    ALPHABET_SIZE: int
    CLOCK_MAIN: int
    CLOCK_TRAIN: int
    FEATURE_DIM: int
    IP: tuple[str, ...]
    PORT: tuple[int, ...]
    SQRTINV: int
    INV2: int
    INV2_M: int
    USE_D: int
    LABEL_P: int
    LEARNING_RATE: float
    TRAIN_TEST_SAME: int
    TRAIN_FILENAME: str
    TEST_FILENAME: str
    FILENAME: str

    @classmethod
    def from_value(cls, root: Value) -> "Config":
        """Build the settings from a parsed JSON object.

        ``MOD`` must be given as a string; the first ``M`` entries of
        ``IP`` and ``PORT`` are the parties' addresses.
        """
        ints = {name: _member(root, name).as_int() for name in _INT_FIELDS}
        count = ints["M"]
        ip_list = _member(root, "IP")
        port_list = _member(root, "PORT")
        ips = tuple(_element(ip_list, i).as_string() for i in range(count))
        ports = tuple(_element(port_list, i).as_int() for i in range(count))
        mod = _leading_int(_member(root, "MOD").as_string())
        return cls(
            **ints,
            LEAKEY_RELU_BIAS=_trunc_div(ints["IE"], 2),
            MOD=mod,
            D2=_trunc_div(ints["D"], ints["L"]),
            IP=ips,
            PORT=ports,
            SQRTINV=_trunc_mod(((mod + 1) >> 2) * (mod - 2), mod - 1),
            INV2=inverse(2, mod, mod),
            INV2_M=_shift_one(inverse(_shift_one(ints["DECIMAL_PLACES"]), mod, mod)),
            LEARNING_RATE=_member(root, "LEARNING_RATE").as_double(),
            TRAIN_FILENAME=_member(root, "TRAIN_FILENAME").as_string(),
            TEST_FILENAME=_member(root, "TEST_FILENAME").as_string(),
            FILENAME=_member(root, "FILENAME").as_string(),
        )

    @classmethod
    def load(cls, file_name: Union[str, os.PathLike]) -> "Config":
        """Read the settings from a JSON file."""
        with open(file_name, encoding="utf-8") as stream:
            root = Reader().parse(stream)
        return cls.from_value(root)


_active: Optional[Config] = None


def init(file_name: Union[str, os.PathLike]) -> Config:
    """Load the process-wide settings once; later calls return the same object."""
    global _active
    if _active is None:
        _active = Config.load(file_name)
    return _active


def current() -> Config:
    """Return the process-wide settings loaded by :func:`init`."""
    if _active is None:
        raise RuntimeError("configuration has not been initialised")
    return _active


def reset() -> Optional[Config]:
    """Forget the process-wide settings and return the ones that were active."""
    global _active
    previous, _active = _active, None
    return previous