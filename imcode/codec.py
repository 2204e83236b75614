# Copyright (C) 2026 Daniel Iwugo
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License.
# See <https://www.gnu.org/licenses/> for details.

# File: imcode/codec.py
# Description: Nibble packing into RGBA LSBs and the 12-byte frame header.
#
#   One byte occupies two pixels: the high nibble first, then the low one.
#   Within a pixel, nibble bit 3 → R, bit 2 → G, bit 1 → B, bit 0 → A.

import struct

import numpy as np


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

MAGIC_NUMBER      = -113590060
HEADER_FORMAT     = "<iq"          # int32 magic, int64 payload length
HEADER_SIZE       = struct.calcsize(HEADER_FORMAT)   # 12
NIBBLES_PER_BYTE  = 2
CAPACITY_DIVISOR  = 128

# Shift per channel, R G B A.
_SHIFTS = np.array([3, 2, 1, 0], dtype=np.uint8)


class InvalidInputError(ValueError):
    """Input the operation cannot proceed with: missing payload, no room, or no data found."""


# ---------------------------------------------------------------------------
# Nibble helpers
# ---------------------------------------------------------------------------

def split_byte(value: int) -> tuple[int, int]:
    return (value & 0xF0) >> 4, value & 0x0F


def join_nibbles(high: int, low: int) -> int:
    return ((high & 0x0F) << 4) | (low & 0x0F)


def pack_nibble(pixel: np.ndarray, nibble: int) -> None:
    """Write nibble into the LSBs of one RGBA pixel, in place."""
    bits = (np.uint8(nibble) >> _SHIFTS) & np.uint8(1)
    pixel[:] = (pixel & np.uint8(0xFE)) | bits


def unpack_nibble(pixel: np.ndarray) -> int:
    r, g, b, a = (int(c) & 1 for c in pixel[:4])
    return (r << 3) | (g << 2) | (b << 1) | a


def apply_nibbles(row_pixels: np.ndarray, cols, nibbles) -> None:
    """
    Vectorised pack_nibble over one pixel row.

    row_pixels is a (W, 4) view into the grid; cols and nibbles are parallel
    sequences. Columns must be distinct.
    """
    cols    = np.fromiter(cols, dtype=np.intp)
    nibbles = np.fromiter(nibbles, dtype=np.uint8)
    bits    = (nibbles[:, None] >> _SHIFTS[None, :]) & np.uint8(1)
    row_pixels[cols] = (row_pixels[cols] & np.uint8(0xFE)) | bits


# ---------------------------------------------------------------------------
# Frame header
# ---------------------------------------------------------------------------

def pack_header(length: int) -> bytes:
    if length < 0:
        raise ValueError(f"Payload length cannot be negative, got {length}.")
    return struct.pack(HEADER_FORMAT, MAGIC_NUMBER, length)


def unpack_header(data: bytes) -> int:
    """Validate a decoded header and return the payload length it declares."""
    if len(data) != HEADER_SIZE:
        raise ValueError(f"Header must be {HEADER_SIZE} bytes, got {len(data)}.")

    magic, length = struct.unpack(HEADER_FORMAT, data)
    if magic != MAGIC_NUMBER or length < 0:
        raise InvalidInputError(
            "It seems like either there is no data here to decode "
            "or you have entered the wrong keyword."
        )
    return length


# ---------------------------------------------------------------------------
# Capacity
# ---------------------------------------------------------------------------

def data_capacity(image_byte_length: int) -> int:
    """Coarse payload bound from the carrier's size in bytes."""
    return image_byte_length // CAPACITY_DIVISOR


def position_capacity(position_count: int) -> int:
    """Exact payload bound for an information space of position_count pixels."""
    return max(0, position_count // NIBBLES_PER_BYTE - HEADER_SIZE)
