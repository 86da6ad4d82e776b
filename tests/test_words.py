import pytest

from mocscan.words import Endian, SeekOutOfRange, Word, WordReader


def test_reader_yields_aligned_words_and_reports_remainder():
    data = bytes(range(10))
    reader = WordReader(data)

    words = list(reader)

    assert [word.offset for word in words] == [0, 4]
    assert words[0].raw == b"\x00\x01\x02\x03"
    assert words[1].raw == b"\x04\x05\x06\x07"
    assert reader.exhausted
    assert reader.remainder == 2


def test_reader_honours_start_offset():
    data = bytes(range(16))
    reader = WordReader(data, start_offset=4)

    assert reader.total_words == 3
    assert [word.offset for word in reader] == [4, 8, 12]


def test_reader_is_not_restartable():
    reader = WordReader(bytes(8))

    assert len(list(reader)) == 2
    assert list(reader) == []


def test_reader_starting_at_buffer_end_is_empty():
    reader = WordReader(b"abcd", start_offset=4)

    assert list(reader) == []
    assert reader.remainder == 0


@pytest.mark.parametrize("offset", [5, 100, -1])
def test_reader_rejects_out_of_range_seek_on_construction(offset):
    with pytest.raises(SeekOutOfRange, match="outside of buffer"):
        WordReader(b"abcd", start_offset=offset)


def test_seek_out_of_range_is_a_value_error():
    with pytest.raises(ValueError):
        WordReader(b"", start_offset=4)


def test_word_helpers():
    word = Word(0x10, b"\x01\x02\x03\x04")

    assert not word.is_zero()
    assert Word(0, bytes(4)).is_zero()


def test_endian_struct_prefix():
    assert Endian.BIG.struct_prefix == ">"
    assert Endian.LITTLE.struct_prefix == "<"
    assert str(Endian("big")) == "big"
