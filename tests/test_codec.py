"""
Nibble packing and frame header
Run with:  python -m pytest tests/ -v
"""

import struct

import numpy as np
import pytest

from imcode.codec import (
    HEADER_SIZE,
    MAGIC_NUMBER,
    InvalidInputError,
    apply_nibbles,
    data_capacity,
    join_nibbles,
    pack_header,
    pack_nibble,
    position_capacity,
    split_byte,
    unpack_header,
    unpack_nibble,
)


# ── Nibbles ───────────────────────────────────────────────────────────────────
def test_split_byte_high_first():
    assert split_byte(0xAB) == (0xA, 0xB)
    assert split_byte(0x0F) == (0x0, 0xF)

def test_join_nibbles():
    assert join_nibbles(0xA, 0xB) == 0xAB
    assert all(join_nibbles(*split_byte(b)) == b for b in range(256))

def test_pack_nibble_channel_order():
    pixel = np.array([0xFF, 0x00, 0xAA, 0x55], dtype=np.uint8)
    pack_nibble(pixel, 0b1010)
    assert pixel.tolist() == [0xFF, 0x00, 0xAB, 0x54]

def test_pack_nibble_keeps_high_bits():
    rng = np.random.default_rng(1)
    for nibble in range(16):
        original = rng.integers(0, 256, 4, dtype=np.uint8)
        pixel    = original.copy()
        pack_nibble(pixel, nibble)
        assert np.array_equal(pixel & 0xFE, original & 0xFE)
        assert unpack_nibble(pixel) == nibble

def test_unpack_nibble_reads_lsbs():
    assert unpack_nibble(np.array([1, 0, 1, 1], dtype=np.uint8)) == 0b1011
    assert unpack_nibble(np.array([254, 255, 2, 3], dtype=np.uint8)) == 0b0101

def test_apply_nibbles_matches_pack_nibble():
    row      = np.random.default_rng(2).integers(0, 256, (8, 4), dtype=np.uint8)
    expected = row.copy()
    cols, nibbles = [1, 5, 3], [15, 0, 9]
    for col, nibble in zip(cols, nibbles):
        pack_nibble(expected[col], nibble)

    apply_nibbles(row, cols, nibbles)
    assert np.array_equal(row, expected)


# ── Header ────────────────────────────────────────────────────────────────────
def test_header_layout():
    header = pack_header(5)
    assert len(header) == HEADER_SIZE == 12
    assert header == struct.pack("<i", MAGIC_NUMBER) + struct.pack("<q", 5)

def test_header_roundtrip_large_length():
    assert unpack_header(pack_header(2**40)) == 2**40

def test_pack_header_rejects_negative():
    with pytest.raises(ValueError):
        pack_header(-1)

def test_wrong_magic_is_invalid_input():
    data = struct.pack("<iq", MAGIC_NUMBER + 1, 5)
    with pytest.raises(InvalidInputError):
        unpack_header(data)

def test_negative_length_is_invalid_input():
    with pytest.raises(InvalidInputError):
        unpack_header(struct.pack("<iq", MAGIC_NUMBER, -3))

def test_invalid_input_is_value_error():
    assert issubclass(InvalidInputError, ValueError)

def test_unpack_header_wrong_size():
    with pytest.raises(ValueError):
        unpack_header(b"\x00" * 11)


# ── Capacity ──────────────────────────────────────────────────────────────────
def test_data_capacity():
    assert data_capacity(1280) == 10
    assert data_capacity(127) == 0

def test_position_capacity():
    assert position_capacity(28) == 2
    assert position_capacity(24) == 0
    assert position_capacity(10) == 0
