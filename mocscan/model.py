"""Loading helpers for Live2D ``.model3.json`` models and their moc payload."""

from __future__ import annotations

import glob
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

logger = logging.getLogger(__name__)

MODEL_SUFFIX = ".model3.json"
MOC_MAGIC = b"MOC3"
MOC_HEADER_SIZE = 64


class ModelError(ValueError):
    """Raised when a model or runtime directory cannot be loaded."""


class MultipleModelsError(ModelError):
    def __init__(self, directory: Path, candidates: List[Path]) -> None:
        names = ", ".join(path.name for path in candidates)
        super().__init__(f"runtime directory {directory} contains multiple models: {names}")
        self.directory = directory
        self.candidates = candidates


@dataclass(frozen=True)
class MocHeader:
    """The fixed 64-byte header at the start of a moc payload."""

    magic: bytes
    version: int
    big_endian: bool

    @property
    def valid_magic(self) -> bool:
        return self.magic == MOC_MAGIC

    @classmethod
    def parse(cls, data: bytes) -> "MocHeader":
        if len(data) < MOC_HEADER_SIZE:
            raise ModelError(
                f"moc payload is {len(data)} bytes, shorter than its {MOC_HEADER_SIZE}-byte header"
            )
        return cls(bytes(data[:4]), data[4], data[5] != 0)

    def describe(self) -> str:
        magic = self.magic.decode("latin-1", "replace")
        endian = "big" if self.big_endian else "little"
        return f"magic={magic!r} version={self.version} endian={endian}"


@dataclass(frozen=True)
class Model:
    path: Path
    moc_path: Path
    moc: bytes

    @property
    def name(self) -> str:
        return self.path.name[: -len(MODEL_SUFFIX)] if self.path.name.endswith(MODEL_SUFFIX) else self.path.stem

    @property
    def header(self) -> MocHeader:
        return MocHeader.parse(self.moc)


def load_model(path: Path) -> Model:
    """Read ``path`` and the moc file referenced by ``FileReferences.Moc``."""

    try:
        payload = json.loads(path.read_text("utf-8"))
    except OSError as exc:
        raise ModelError(f"cannot read model file {path}: {exc}") from exc
    except ValueError as exc:
        raise ModelError(f"model file {path} is not valid JSON: {exc}") from exc

    references = payload.get("FileReferences") if isinstance(payload, dict) else None
    moc_name = references.get("Moc") if isinstance(references, dict) else None
    if not isinstance(moc_name, str) or not moc_name:
        raise ModelError(f"model file {path} does not reference a moc file")

    moc_path = path.parent / moc_name
    try:
        moc = moc_path.read_bytes()
    except OSError as exc:
        raise ModelError(f"cannot read moc file {moc_path}: {exc}") from exc
    logger.debug("loaded %d moc bytes from %s", len(moc), moc_path)
    return Model(path, moc_path, moc)


def load_runtime(directory: Path) -> Model:
    """Load the single model of a runtime directory."""

    if not directory.is_dir():
        raise ModelError(f"runtime directory {directory} does not exist")
    candidates = sorted(directory.glob(f"*{MODEL_SUFFIX}"))
    if not candidates:
        raise ModelError(f"runtime directory {directory} does not contain a {MODEL_SUFFIX} file")
    if len(candidates) > 1:
        raise MultipleModelsError(directory, candidates)
    return load_model(candidates[0])


def find_models(pattern: str, match_filename: Optional[str] = None) -> Iterator[Model]:
    """Yield every model whose ``.model3.json`` matches the glob ``pattern``."""

    for match in sorted(glob.glob(pattern, recursive=True)):
        path = Path(match)
        if match_filename is not None and path.name != match_filename:
            logger.debug("skipping %s because it does not match %r", path.name, match_filename)
            continue

        logger.debug("found %s", path)
        try:
            model = load_runtime(path.parent)
        except MultipleModelsError:
            logger.debug("%s holds multiple models, loading %s directly", path.parent, path.name)
            model = load_model(path)
            logger.info("loaded model from file %s", path)
        else:
            logger.info("loaded model from directory %s", path.parent)
        yield model
