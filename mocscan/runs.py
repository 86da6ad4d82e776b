"""Segmentation of a word stream into maximal zero and data runs."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from .words import WORD_SIZE, Word


# Zero runs shorter than this many words are padding, not a void region.
VOID_THRESHOLD = 8


class RunKind(Enum):
    ZERO = "zero"
    DATA = "data"


@dataclass(frozen=True)
class Run:
    """A maximal sequence of words sharing the zero/non-zero class."""

    kind: RunKind
    start_offset: int
    end_offset: int
    word_count: int
    words: Tuple[bytes, ...] = ()
    trailing: bool = False

    @property
    def size(self) -> int:
        return self.word_count * WORD_SIZE

    @property
    def is_data(self) -> bool:
        return self.kind is RunKind.DATA

    @property
    def is_void(self) -> bool:
        return self.kind is RunKind.ZERO and self.word_count >= VOID_THRESHOLD

    def without_words(self) -> "Run":
        return replace(self, words=())


@dataclass
class _ZeroRun:
    start: int
    count: int = 0

    def close(self, *, trailing: bool = False) -> Run:
        return Run(
            RunKind.ZERO,
            self.start,
            self.start + self.count * WORD_SIZE,
            self.count,
            trailing=trailing,
        )


@dataclass
class _DataRun:
    start: int
    words: List[bytes] = field(default_factory=list)

    def close(self) -> Run:
        count = len(self.words)
        return Run(
            RunKind.DATA,
            self.start,
            self.start + count * WORD_SIZE,
            count,
            tuple(self.words),
        )


class RunSegmenter:
    """Two-state machine grouping consecutive words of the same class.

    Feed words one at a time with :meth:`feed` (which returns the run closed
    by that word, if any) and call :meth:`finish` at the end of the stream, or
    let :meth:`segment` drive the whole stream.
    """

    def __init__(self) -> None:
        self._state: Optional[Union[_ZeroRun, _DataRun]] = None

    def feed(self, word: Word) -> Optional[Run]:
        state = self._state
        completed: Optional[Run] = None
        if word.is_zero():
            if not isinstance(state, _ZeroRun):
                if state is not None:
                    completed = state.close()
                state = self._state = _ZeroRun(word.offset)
            state.count += 1
        else:
            if not isinstance(state, _DataRun):
                if state is not None:
                    completed = state.close()
                state = self._state = _DataRun(word.offset)
            state.words.append(word.raw)
        return completed

    def finish(self) -> Optional[Run]:
        state, self._state = self._state, None
        if isinstance(state, _DataRun):
            return state.close()
        if isinstance(state, _ZeroRun):
            return state.close(trailing=True)
        return None

    def segment(self, words: Iterable[Word]) -> Iterator[Run]:
        for word in words:
            run = self.feed(word)
            if run is not None:
                yield run
        run = self.finish()
        if run is not None:
            yield run
