import io

import pytest

from bitops import BitWriter, BitReader


def test_bitwriter_write_bits_and_flush_basic():
    bw = BitWriter()
    bw.write_bits(0b1010, 4)
    bw.write_bits(0b11110000, 8)
    out = bw.flush()
    assert isinstance(out, (bytes, bytearray))
    assert len(out) == 2
    assert out[0] == 0b10101111
    assert out[1] == 0b00000000
    assert bw.bits_written == 12


def test_write_zero_bits_is_noop_and_flush_padding():
    bw = BitWriter()
    bw.write_bits(0xAA, 8)
    bw.write_bits(0, 0)
    out = bw.flush()
    assert out == bytes([0xAA])


def test_bitwriter_close_writes_sink_once():
    sink = io.BytesIO()
    bw = BitWriter(sink=sink)
    bw.write_bits(0b101, 3)
    assert bw.close() == bytes([0b10100000])
    bw.close()
    assert sink.getvalue() == bytes([0b10100000])
    with pytest.raises(ValueError):
        bw.write_bits(1, 1)


def test_bitreader_read_bits_across_bytes():
    data = bytes([0b11001010, 0xFF, 0x00])
    br = BitReader(data)
    assert br.read_bits(3) == 0b110
    assert br.read_bits(9) == 0b010101111
    assert br.bits_read == 12
    assert br.bits_left() == 12


def test_bitreader_eoferror_on_insufficient_bits_consumes_nothing():
    br = BitReader(b"\xF0")
    with pytest.raises(EOFError):
        _ = br.read_bits(9)
    assert br.read_bits(8) == 0xF0


def test_bitreader_reset_rewinds():
    br = BitReader(b"\x12\x34")
    assert br.read_bits(16) == 0x1234
    with pytest.raises(EOFError):
        br.read_bits(1)
    br.reset()
    assert br.bits_read == 0
    assert br.read_bits(8) == 0x12
