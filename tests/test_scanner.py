import logging

import pytest

from mocscan.inference import AssumedType
from mocscan.report import TRACE
from mocscan.runs import RunKind
from mocscan.scanner import BufferScanner, ScanConfig, scan_buffer
from mocscan.words import Endian, SeekOutOfRange


def _words(*values: int, byteorder: str = "little") -> bytes:
    return b"".join(value.to_bytes(4, byteorder) for value in values)


def _scan(data: bytes, **config):
    records = []
    result = scan_buffer(data, ScanConfig(**config), records.append)
    return result, records


def _tags(records):
    return [record.tag for record in records]


def test_all_zero_buffer_is_one_unreported_zero_run():
    result, records = _scan(bytes(32))

    assert len(result.runs) == 1
    run = result.runs[0]
    assert run.kind is RunKind.ZERO
    assert (run.start_offset, run.end_offset, run.size) == (0, 32, 32)
    assert result.void_runs() == []
    assert _tags(records) == ["SUMMARY"]


def test_void_region_is_reported_when_followed_by_data():
    result, records = _scan(bytes(32) + _words(7))

    assert _tags(records) == ["VOID", "DATA", "SUMMARY"]
    void = records[0]
    assert (void.start, void.end, void.size) == (0, 32, 32)
    assert void.level == logging.DEBUG
    assert len(result.void_runs()) == 1


def test_flag_word_followed_by_short_gap():
    result, records = _scan(_words(1, 0))

    assert _tags(records) == ["DATA", "SUMMARY"]
    data = records[0]
    assert (data.start, data.end, data.size) == (0, 4, 4)
    assert data.fields["probably"] is AssumedType.BOOL
    assert (data.fields["min"], data.fields["max"]) == (0, 1)
    inference = result.inference_for(result.runs[0])
    assert inference is not None and inference.assumed_type is AssumedType.BOOL
    assert result.inference_for(result.runs[1]) is None


@pytest.mark.parametrize("gap,reported", [(7, False), (8, True), (12, True)])
def test_void_threshold(gap, reported):
    _, records = _scan(_words(3) + bytes(gap * 4) + _words(4))

    assert ("VOID" in _tags(records)) is reported
    assert _tags(records).count("DATA") == 2


def test_report_offset_is_display_only():
    data = _words(1, 2) + bytes(40) + _words(9)

    plain, plain_records = _scan(data)
    shifted, shifted_records = _scan(data, report_offset=5)

    assert [run.end_offset for run in plain.runs] == [run.end_offset for run in shifted.runs]
    assert [record.end - 5 for record in plain_records[:-1]] == [
        record.end for record in shifted_records[:-1]
    ]


def test_start_offset_and_truncated_tail():
    data = _words(0xDEAD, 1, 2) + b"\x05\x06"

    result, records = _scan(data, start_offset=4)

    assert [(run.start_offset, run.end_offset) for run in result.runs] == [(4, 12)]
    assert result.remainder == 2
    assert result.word_count == 2
    summary = records[-1]
    assert summary.fields["remainder"] == 2
    assert summary.fields["data_runs"] == 1
    assert result.runs[0].words == ()


def test_big_endian_scan():
    result, _ = _scan(_words(256, byteorder="big"), endian=Endian.BIG)

    inference = result.inference_for(result.runs[0])
    assert inference.max == 256
    assert inference.assumed_type is AssumedType.U16


def test_trace_words_emits_one_record_per_data_word():
    _, records = _scan(_words(1, 2, 0, 3), trace_words=True)

    words = [record for record in records if record.tag == "WORD"]
    assert [record.start for record in words] == [0, 4, 12]
    assert all(record.level == TRACE for record in words)


def test_seek_out_of_range_fails_before_reporting():
    records = []
    scanner = BufferScanner(ScanConfig(start_offset=16), records.append)

    with pytest.raises(SeekOutOfRange):
        scanner.scan(bytes(8))
    assert records == []


def test_scan_many_continues_after_a_failed_seek(caplog):
    caplog.set_level(logging.INFO, logger="mocscan.scanner")
    records = []
    scanner = BufferScanner(ScanConfig(start_offset=8), records.append)

    entries = scanner.scan_many(
        [
            ("first", _words(0, 0, 1)),
            ("short", _words(1)),
            ("third", _words(0, 0, 2, 3)),
        ]
    )

    assert [entry.label for entry in entries] == ["first", "short", "third"]
    assert [entry.ok for entry in entries] == [True, False, True]
    assert isinstance(entries[1].error, SeekOutOfRange)
    assert entries[1].result is None
    assert entries[2].result.word_count == 2
    assert _tags(records).count("SUMMARY") == 2
    assert "skipping short" in caplog.text


def test_result_pairs_runs_with_inferences():
    result, _ = _scan(_words(1, 0, 0x10000))

    pairs = list(result.pairs())
    assert [run.kind for run, _ in pairs] == [RunKind.DATA, RunKind.ZERO, RunKind.DATA]
    assert pairs[1][1] is None
    assert pairs[2][1].assumed_type is AssumedType.U32
    assert len(result.data_runs()) == 2


def test_scan_logs_word_count_before_scanning(caplog):
    caplog.set_level(logging.DEBUG, logger="mocscan.scanner")

    _scan(_words(0xDEAD, 1, 2) + b"\x05", start_offset=4)

    assert "scanning 2 words of 13 bytes from offset 0x4 as little endian" in caplog.text
