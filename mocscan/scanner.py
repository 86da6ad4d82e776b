"""Drive the word reader, segmenter, inferencer and reporter over buffers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from .inference import Inference, TypeInferencer, WordDecoding
from .report import RecordSink, Reporter
from .runs import Run, RunSegmenter
from .words import Endian, SeekOutOfRange, WORD_SIZE, WordReader


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanConfig:
    endian: Endian = Endian.LITTLE
    start_offset: int = 0
    report_offset: int = 0
    trace_words: bool = False


@dataclass
class ScanResult:
    """Runs (without their word buffers) and inferences of one buffer."""

    start_offset: int
    end_offset: int
    runs: List[Run] = field(default_factory=list)
    inferences: Dict[int, Inference] = field(default_factory=dict)
    remainder: int = 0

    @property
    def word_count(self) -> int:
        return sum(run.word_count for run in self.runs)

    def data_runs(self) -> List[Run]:
        return [run for run in self.runs if run.is_data]

    def void_runs(self) -> List[Run]:
        return [run for run in self.runs if run.is_void and not run.trailing]

    def inference_for(self, run: Run) -> Optional[Inference]:
        return self.inferences.get(run.start_offset) if run.is_data else None

    def pairs(self) -> Iterable[Tuple[Run, Optional[Inference]]]:
        for run in self.runs:
            yield run, self.inference_for(run)


@dataclass
class BatchEntry:
    label: str
    result: Optional[ScanResult] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BufferScanner:
    """Scan flat byte buffers and report every run through a :class:`Reporter`."""

    def __init__(self, config: Optional[ScanConfig] = None, sink: Optional[RecordSink] = None) -> None:
        self.config = config or ScanConfig()
        self.inferencer = TypeInferencer(self.config.endian)
        self.reporter = Reporter(
            sink,
            report_offset=self.config.report_offset,
            trace_words=self.config.trace_words,
        )

    def scan(self, data: bytes) -> ScanResult:
        reader = WordReader(data, self.config.start_offset)
        logger.debug(
            "scanning %d words of %d bytes from offset 0x%X as %s endian",
            reader.total_words,
            len(data),
            reader.start_offset,
            self.config.endian,
        )
        result = ScanResult(reader.start_offset, len(data))
        for run in self._segment(reader):
            inference = self._infer(run) if run.is_data else None
            self.reporter.report_run(run, inference)
            result.runs.append(run.without_words())
            if inference is not None:
                result.inferences[run.start_offset] = inference

        result.remainder = reader.remainder
        if result.remainder:
            logger.debug("ignored %d trailing bytes after the last full word", result.remainder)
        self.reporter.report_summary(
            result.start_offset,
            result.start_offset + result.word_count * WORD_SIZE,
            data_runs=len(result.data_runs()),
            void_runs=len(result.void_runs()),
            words=result.word_count,
            remainder=result.remainder,
        )
        return result

    def scan_many(self, buffers: Iterable[Tuple[str, bytes]]) -> List[BatchEntry]:
        """Scan buffers one after another; a failed seek only skips its buffer."""

        entries: List[BatchEntry] = []
        for label, data in buffers:
            logger.info("analyzing %s", label)
            try:
                result = self.scan(data)
            except SeekOutOfRange as exc:
                logger.error("skipping %s: %s", label, exc)
                entries.append(BatchEntry(label, error=exc))
                continue
            entries.append(BatchEntry(label, result=result))
        return entries

    def _segment(self, reader: WordReader) -> Iterable[Run]:
        return RunSegmenter().segment(reader)

    def _infer(self, run: Run) -> Inference:
        base = run.start_offset
        reporter = self.reporter

        def observe(index: int, decoding: WordDecoding) -> None:
            reporter.report_decoding(base + index * WORD_SIZE, decoding)

        return self.inferencer.infer(run.words, observe if reporter.trace_words else None)


def scan_buffer(
    data: bytes,
    config: Optional[ScanConfig] = None,
    sink: Optional[RecordSink] = None,
) -> ScanResult:
    return BufferScanner(config, sink).scan(data)
