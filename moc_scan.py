#!/usr/bin/env python3
"""Command-line interface for the moc word-run scanner."""

from __future__ import annotations

import argparse
import logging
import os
import time
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from mocscan import (
    TRACE,
    BufferScanner,
    Endian,
    ModelError,
    ScanConfig,
    find_models,
    load_model,
    load_runtime,
)

LOG_LEVELS = {
    "trace": TRACE,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

logger = logging.getLogger("mocscan.cli")


def parse_offset(text: str) -> int:
    try:
        value = int(text, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid offset: {text!r}") from None
    if value < 0:
        raise argparse.ArgumentTypeError(f"offset must be non-negative: {text!r}")
    return value


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    # argparse never checks a default against choices.
    default_level = os.environ.get("MOCSCAN_LOG_LEVEL", "info").lower()
    if default_level not in LOG_LEVELS:
        parser.error(
            f"MOCSCAN_LOG_LEVEL must be one of {', '.join(sorted(LOG_LEVELS))}, "
            f"got {default_level!r}"
        )
    parser.add_argument(
        "--log-level",
        choices=sorted(LOG_LEVELS),
        default=default_level,
        help="Verbosity: trace shows per-word decodes, debug adds void regions",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser(
        "analyze",
        help="Partition moc payloads into void and data runs and guess their types",
    )
    source = analyze.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--model-file",
        type=Path,
        nargs="+",
        dest="model_files",
        help="One or more .model3.json files whose moc payload is scanned",
    )
    source.add_argument(
        "--runtime-dir",
        type=Path,
        nargs="+",
        dest="runtime_dirs",
        help="One or more runtime directories holding a single model each",
    )
    source.add_argument(
        "--raw-file",
        type=Path,
        nargs="+",
        dest="raw_files",
        help="Scan files as-is without resolving a model",
    )
    analyze.add_argument(
        "--endian",
        type=Endian,
        choices=list(Endian),
        default=Endian.LITTLE,
        help="Byte order used to decode each word",
    )
    analyze.add_argument(
        "--start-at",
        type=parse_offset,
        default=0,
        help="Byte offset where scanning begins",
    )
    analyze.add_argument(
        "--report-offset",
        type=parse_offset,
        default=5,
        help="Value subtracted from the displayed end offset of each run",
    )

    load = subparsers.add_parser("load", help="Locate and load every model matching a glob")
    load.add_argument(
        "--pattern",
        default="./assets/**/*.model3.json",
        help="Recursive glob used to find .model3.json files",
    )
    load.add_argument(
        "--match-filename",
        default=None,
        metavar="FILENAME",
        help="Only load models whose file name equals FILENAME",
    )
    load.add_argument(
        "--moc3",
        action="store_true",
        help="Log the moc header of every loaded model",
    )
    return parser.parse_args(argv)


def configure_logging(level_name: str) -> int:
    level = LOG_LEVELS[level_name]
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-5s [%(name)s] %(message)s",
    )
    # basicConfig is a no-op once the root logger has handlers.
    logging.getLogger().setLevel(level)
    return level


def collect_buffers(args: argparse.Namespace) -> Tuple[List[Tuple[str, bytes]], int]:
    """Resolve the analyze inputs; a broken input is logged and counted."""

    buffers: List[Tuple[str, bytes]] = []
    failures = 0
    if args.raw_files:
        for path in args.raw_files:
            try:
                buffers.append((str(path), path.read_bytes()))
            except OSError as exc:
                logger.error("cannot read %s: %s", path, exc)
                failures += 1
        return buffers, failures

    loader = load_model if args.model_files else load_runtime
    for path in args.model_files or args.runtime_dirs:
        try:
            model = loader(path)
        except ModelError as exc:
            logger.error("%s", exc)
            failures += 1
            continue
        buffers.append((str(model.moc_path), model.moc))
    return buffers, failures


def run_analyze(args: argparse.Namespace, level: int) -> int:
    buffers, failures = collect_buffers(args)
    config = ScanConfig(
        endian=args.endian,
        start_offset=args.start_at,
        report_offset=args.report_offset,
        trace_words=level <= TRACE,
    )
    entries = BufferScanner(config).scan_many(buffers)
    failures += sum(1 for entry in entries if not entry.ok)
    logger.info("analyzed %d buffers, %d failed", len(entries), failures)
    return failures


def run_load(args: argparse.Namespace) -> int:
    logger.info("looking for files matching %r", args.pattern)
    models = []
    try:
        for model in find_models(args.pattern, args.match_filename):
            models.append(model)
    except ModelError as exc:
        raise SystemExit(str(exc))
    logger.info("successfully loaded %d models", len(models))

    failures = 0
    if args.moc3:
        logger.info("reading moc headers of all loaded models")
        for model in models:
            try:
                header = model.header
            except ModelError as exc:
                logger.error("%s: %s", model.name, exc)
                failures += 1
                continue
            if not header.valid_magic:
                logger.warning("%s: unexpected moc magic %r", model.name, header.magic)
            logger.info("%s: %s", model.name, header.describe())
    return failures


def main() -> None:
    start_time = time.perf_counter()
    args = parse_args()
    level = configure_logging(args.log_level)

    if args.command == "analyze":
        failures = run_analyze(args, level)
    else:
        failures = run_load(args)

    total_time = time.perf_counter() - start_time
    logger.debug("total execution time: %.2fs", total_time)
    if failures:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
