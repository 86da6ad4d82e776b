"""Structured scan records and the sinks that receive them."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional

from .inference import Inference, WordDecoding
from .runs import Run
from .words import WORD_SIZE

TRACE = 5
logging.addLevelName(TRACE, "TRACE")


def _render_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass(frozen=True)
class ScanRecord:
    """A single report line, independent of how it is transported."""

    level: int
    tag: str
    start: int
    end: int
    size: int
    fields: Mapping[str, object] = field(default_factory=dict)

    def render(self) -> str:
        parts = [self.tag, f"{self.start:#010x}", f"{self.end:#010x}", f"size={self.size}"]
        parts.extend(f"{key}={_render_value(value)}" for key, value in self.fields.items())
        return " ".join(parts)


RecordSink = Callable[[ScanRecord], None]


class LoggingSink:
    """Forward records to a :mod:`logging` logger at the record's level."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger("mocscan.scan")

    def __call__(self, record: ScanRecord) -> None:
        if self.logger.isEnabledFor(record.level):
            self.logger.log(record.level, record.render())


class Reporter:
    """Turn runs, inferences and per-word decodings into :class:`ScanRecord`."""

    def __init__(
        self,
        sink: Optional[RecordSink] = None,
        *,
        report_offset: int = 0,
        trace_words: bool = False,
    ) -> None:
        self.sink: RecordSink = sink if sink is not None else LoggingSink()
        self.report_offset = report_offset
        self.trace_words = trace_words

    def report_run(self, run: Run, inference: Optional[Inference] = None) -> Optional[ScanRecord]:
        if run.is_data:
            if inference is None:
                raise ValueError(f"data run at 0x{run.start_offset:X} reported without an inference")
            record = ScanRecord(
                logging.INFO,
                "DATA",
                run.start_offset,
                self._display_end(run),
                run.size,
                {
                    "probably": inference.assumed_type,
                    "min": inference.min,
                    "max": inference.max,
                    "maybe_float": inference.float_plausible,
                    "maybe_string": inference.string_plausible,
                },
            )
        elif run.is_void and not run.trailing:
            record = ScanRecord(
                logging.DEBUG,
                "VOID",
                run.start_offset,
                self._display_end(run),
                run.size,
            )
        else:
            return None
        self.sink(record)
        return record

    def report_decoding(self, offset: int, decoding: WordDecoding) -> None:
        if not self.trace_words:
            return
        self.sink(
            ScanRecord(
                TRACE,
                "WORD",
                offset,
                offset + WORD_SIZE,
                WORD_SIZE,
                {
                    "signed": decoding.signed,
                    "unsigned": decoding.unsigned,
                    "float": decoding.real,
                },
            )
        )

    def report_summary(
        self,
        start: int,
        end: int,
        *,
        data_runs: int,
        void_runs: int,
        words: int,
        remainder: int,
    ) -> ScanRecord:
        record = ScanRecord(
            logging.INFO,
            "SUMMARY",
            start,
            end,
            end - start,
            {
                "words": words,
                "data_runs": data_runs,
                "void_runs": void_runs,
                "remainder": remainder,
            },
        )
        self.sink(record)
        return record

    def _display_end(self, run: Run) -> int:
        return run.end_offset - self.report_offset
