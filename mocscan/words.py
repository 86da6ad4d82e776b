"""Representation utilities for raw 4-byte words."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator


WORD_SIZE = 4
ZERO_WORD = bytes(WORD_SIZE)


class Endian(Enum):
    """Byte order used to decode every word of a scan."""

    BIG = "big"
    LITTLE = "little"

    @property
    def struct_prefix(self) -> str:
        return ">" if self is Endian.BIG else "<"

    def __str__(self) -> str:
        return self.value


class SeekOutOfRange(ValueError):
    """Raised when a scan is asked to start outside of its buffer."""

    def __init__(self, offset: int, length: int) -> None:
        super().__init__(f"start offset 0x{offset:X} is outside of buffer of {length} bytes")
        self.offset = offset
        self.length = length


@dataclass(frozen=True)
class Word:
    offset: int
    raw: bytes

    def is_zero(self) -> bool:
        return self.raw == ZERO_WORD


class WordReader:
    """Lazy reader that yields :class:`Word` values from ``start_offset``.

    The reader is a one-shot iterator: once consumed it stays exhausted.  A
    trailing fragment shorter than a word ends the stream normally and its
    length is reported through :attr:`remainder`.
    """

    def __init__(self, data: bytes, start_offset: int = 0) -> None:
        if not (0 <= start_offset <= len(data)):
            raise SeekOutOfRange(start_offset, len(data))
        self._data = data
        self._cursor = start_offset
        self.start_offset = start_offset

    def __iter__(self) -> Iterator[Word]:
        return self

    def __next__(self) -> Word:
        cursor = self._cursor
        if cursor + WORD_SIZE > len(self._data):
            raise StopIteration
        self._cursor = cursor + WORD_SIZE
        return Word(cursor, bytes(self._data[cursor : cursor + WORD_SIZE]))

    @property
    def remainder(self) -> int:
        return len(self._data) - self._cursor if self.exhausted else 0

    @property
    def exhausted(self) -> bool:
        return self._cursor + WORD_SIZE > len(self._data)

    @property
    def total_words(self) -> int:
        return (len(self._data) - self.start_offset) // WORD_SIZE
