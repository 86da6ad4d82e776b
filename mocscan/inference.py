"""Multi-hypothesis type inference for data runs.

Every word of a run is decoded as a signed integer, an unsigned integer, a
single precision float and as raw bytes.  The integer decodings feed one
shared ``min``/``max`` pair which then drives :data:`TYPE_RULES`, an ordered
decision table whose first matching rule names the assumed type.  Because the
unsigned decoding of a negative word is always larger than ``0x7FFFFFFF`` the
shared range pushes every signed run to :attr:`AssumedType.I32`; the narrower
signed rules only fire when :func:`select_type` is called with a hand-made
range.
"""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence, Tuple

from .words import WORD_SIZE, Endian


class AssumedType(Enum):
    """Primitive type hypotheses ordered from narrowest to widest."""

    BOOL = "Bool"
    I8 = "I8"
    I16 = "I16"
    I32 = "I32"
    U8 = "U8"
    U16 = "U16"
    U32 = "U32"
    ZERO = "Zero"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class WordDecoding:
    raw: bytes
    signed: int
    unsigned: int
    real: float


@dataclass(frozen=True)
class Inference:
    assumed_type: AssumedType
    min: int
    max: int
    float_plausible: bool
    string_plausible: bool
    float_min: float = 0.0
    float_max: float = 0.0


def _is_signed(low: int, high: int) -> bool:
    return low < 0 or high < 0


TypeRule = Tuple[AssumedType, Callable[[int, int], bool]]

TYPE_RULES: Tuple[TypeRule, ...] = (
    (AssumedType.BOOL, lambda low, high: low in (0, 1) and high in (0, 1)),
    (AssumedType.I8, lambda low, high: _is_signed(low, high) and low >= -0x80 and high <= 0x7F),
    (AssumedType.I16, lambda low, high: _is_signed(low, high) and low >= -0x8000 and high <= 0x7FFF),
    (AssumedType.I32, _is_signed),
    (AssumedType.U8, lambda low, high: 0 < high <= 0xFF),
    (AssumedType.U16, lambda low, high: 0 < high <= 0xFFFF),
    (AssumedType.U32, lambda low, high: high > 0),
    (AssumedType.ZERO, lambda low, high: True),
)


def select_type(low: int, high: int) -> AssumedType:
    """Return the first assumed type of :data:`TYPE_RULES` matching the range."""

    for assumed, predicate in TYPE_RULES:
        if predicate(low, high):
            return assumed
    return AssumedType.ZERO  # pragma: no cover - the table ends with a catch-all


def is_valid_utf8(data: bytes) -> bool:
    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        return False
    return True


DecodeObserver = Callable[[int, WordDecoding], None]


class TypeInferencer:
    """Fold the decodings of a run's words into an :class:`Inference`."""

    def __init__(self, endian: Endian = Endian.LITTLE) -> None:
        self.endian = endian
        prefix = endian.struct_prefix
        self._signed = struct.Struct(f"{prefix}i")
        self._unsigned = struct.Struct(f"{prefix}I")
        self._float = struct.Struct(f"{prefix}f")

    def decode(self, raw: bytes) -> WordDecoding:
        if len(raw) != WORD_SIZE:
            raise ValueError(f"expected a {WORD_SIZE}-byte word, got {len(raw)} bytes")
        (signed,) = self._signed.unpack(raw)
        (unsigned,) = self._unsigned.unpack(raw)
        (real,) = self._float.unpack(raw)
        return WordDecoding(raw, signed, unsigned, real)

    def infer(
        self,
        words: Sequence[bytes],
        on_decode: Optional[DecodeObserver] = None,
    ) -> Inference:
        low = high = 0
        float_low = float_high = 0.0
        float_plausible = True
        collected = bytearray()

        for index, raw in enumerate(words):
            decoding = self.decode(raw)
            if on_decode is not None:
                on_decode(index, decoding)

            for number in (decoding.signed, decoding.unsigned):
                low = min(low, number)
                high = max(high, number)

            real = decoding.real
            if math.isnan(real):
                float_plausible = False
            else:
                float_low = min(float_low, real)
                float_high = max(float_high, real)

            collected.extend(raw)

        return Inference(
            assumed_type=select_type(low, high),
            min=low,
            max=high,
            float_plausible=float_plausible,
            string_plausible=is_valid_utf8(bytes(collected)),
            float_min=float_low,
            float_max=float_high,
        )
