"""Public package exports for the moc word-run scanner."""

from .inference import AssumedType, Inference, TypeInferencer, select_type
from .model import Model, ModelError, MocHeader, MultipleModelsError, find_models, load_model, load_runtime
from .report import TRACE, LoggingSink, Reporter, ScanRecord
from .runs import VOID_THRESHOLD, Run, RunKind, RunSegmenter
from .scanner import BatchEntry, BufferScanner, ScanConfig, ScanResult, scan_buffer
from .words import WORD_SIZE, Endian, SeekOutOfRange, Word, WordReader

__all__ = [
    "AssumedType",
    "Inference",
    "TypeInferencer",
    "select_type",
    "Model",
    "ModelError",
    "MocHeader",
    "MultipleModelsError",
    "find_models",
    "load_model",
    "load_runtime",
    "TRACE",
    "LoggingSink",
    "Reporter",
    "ScanRecord",
    "VOID_THRESHOLD",
    "Run",
    "RunKind",
    "RunSegmenter",
    "BatchEntry",
    "BufferScanner",
    "ScanConfig",
    "ScanResult",
    "scan_buffer",
    "WORD_SIZE",
    "Endian",
    "SeekOutOfRange",
    "Word",
    "WordReader",
]
