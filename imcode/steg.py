# Copyright (C) 2026 Daniel Iwugo
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License.
# See <https://www.gnu.org/licenses/> for details.

# File: imcode/steg.py
# Description: Keyword-placed RGBA LSB steganography.
#
#   Payload layout on the carrier, per information space:
#     12-byte header (magic + length) | payload bytes
#   Each byte is two nibbles on two shuffled pixels, one bit per channel.
#
#   encode/decode work on an in-memory (H, W, 4) grid; embed/extract wrap
#   them with file I/O for the CLI.

import io
import logging
from pathlib import Path
from typing import BinaryIO, Optional

import numpy as np

from imcode.codec import (
    HEADER_SIZE,
    NIBBLES_PER_BYTE,
    InvalidInputError,
    apply_nibbles,
    data_capacity,
    join_nibbles,
    pack_header,
    position_capacity,
    split_byte,
    unpack_header,
    unpack_nibble,
)
from imcode.image import CHANNELS, carrier_size, load_pixels, save_pixels
from imcode.space import (
    SPACE_COUNT,
    Position,
    keyword_positions,
    keyword_space,
    position_count,
)
from imcode.utils import atomic_output

logger = logging.getLogger(__name__)

__all__ = [
    "CHUNK_SIZE",
    "InvalidInputError",
    "encode",
    "encode_bytes",
    "decode",
    "decode_bytes",
    "embed",
    "extract",
    "read_payload",
    "get_capacity",
]


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

CHUNK_SIZE = 4096

_NO_DATA = (
    "It seems like either there is no data here to decode "
    "or you have entered the wrong keyword."
)

ChangeMap = dict[int, dict[int, int]]


def _check_grid(grid: np.ndarray) -> None:
    if grid.ndim != 3 or grid.shape[2] != CHANNELS:
        raise ValueError(f"Expected an (H, W, {CHANNELS}) pixel grid, got shape {grid.shape}.")
    if grid.dtype != np.uint8:
        raise ValueError(f"Expected a uint8 pixel grid, got {grid.dtype}.")


def _check_data_capacity(length: int, image_byte_length: int) -> None:
    capacity = data_capacity(image_byte_length)
    if length > capacity:
        raise InvalidInputError(
            f"Not enough space on image to encode this much data! "
            f"Maximum amount of data for this image is {capacity} bytes!"
        )


# ---------------------------------------------------------------------------
# Staging (encode side)
#
# Nibbles are collected per row first and written in one row-major pass.
# The payload can then be read in any chunk size without affecting where
# its bits end up.
# ---------------------------------------------------------------------------

def _stage_byte(changes: ChangeMap, positions: list[Position], value: int) -> None:
    for nibble in split_byte(value):
        row, col = positions.pop()
        changes.setdefault(row, {})[col] = nibble


def _apply_changes(grid: np.ndarray, changes: ChangeMap) -> None:
    for row in range(grid.shape[0]):
        row_changes = changes.get(row)
        if row_changes:
            apply_nibbles(grid[row], row_changes.keys(), row_changes.values())


# ---------------------------------------------------------------------------
# Reading (decode side)
# ---------------------------------------------------------------------------

def _read_byte(grid: np.ndarray, positions: list[Position]) -> int:
    row, col = positions.pop()
    high = unpack_nibble(grid[row, col])
    row, col = positions.pop()
    low = unpack_nibble(grid[row, col])
    return join_nibbles(high, low)


def _read_bytes(grid: np.ndarray, positions: list[Position], n: int) -> bytes:
    return bytes(_read_byte(grid, positions) for _ in range(n))


# ---------------------------------------------------------------------------
# Grid encode / decode
# ---------------------------------------------------------------------------

def encode(grid:              np.ndarray,
           keyword:           str,
           source:            Optional[BinaryIO],
           length:            int,
           image_byte_length: Optional[int] = None,
           chunk_size:        int = CHUNK_SIZE) -> int:
    """
    Hide `length` bytes read from `source` in grid, in place.

    image_byte_length feeds the coarse capacity bound (carrier size / 128)
    and defaults to the grid's raw size. The grid is only written once the
    whole payload has been staged, so any failure leaves it untouched.

    Returns the information space the keyword selected.

    Raises:
        InvalidInputError: No source, payload too large, or the source ran
                           dry before `length` bytes.
        ValueError:        Malformed grid or negative length.
    """
    _check_grid(grid)
    if source is None:
        raise InvalidInputError("No payload given. Provide inline data or an input file.")
    if length < 0:
        raise ValueError(f"Payload length cannot be negative, got {length}.")

    if image_byte_length is None:
        image_byte_length = grid.nbytes
    _check_data_capacity(length, image_byte_length)

    height, width = grid.shape[:2]
    space, positions = keyword_positions(keyword, height, width)
    room = position_capacity(len(positions))
    if (HEADER_SIZE + length) * NIBBLES_PER_BYTE > len(positions):
        raise InvalidInputError(
            f"Not enough space on image to encode this much data! "
            f"This keyword's information space holds at most {room} bytes."
        )

    changes: ChangeMap = {}
    for value in pack_header(length):
        _stage_byte(changes, positions, value)

    remaining = length
    while remaining > 0:
        chunk = source.read(min(chunk_size, remaining))
        if not chunk:
            raise InvalidInputError(
                f"Payload source ended early: {remaining} of {length} bytes missing."
            )
        for value in chunk:
            _stage_byte(changes, positions, value)
        remaining -= len(chunk)

    _apply_changes(grid, changes)
    logger.debug("Encoded %d payload bytes into space %d", length, space)
    return space


def encode_bytes(grid:              np.ndarray,
                 keyword:           str,
                 data:              Optional[bytes],
                 image_byte_length: Optional[int] = None) -> int:
    source = None if data is None else io.BytesIO(data)
    return encode(grid, keyword, source, len(data or b""), image_byte_length)


def decode(grid:       np.ndarray,
           keyword:    str,
           sink:       BinaryIO,
           chunk_size: int = CHUNK_SIZE) -> int:
    """
    Recover the payload hidden in grid under keyword and write it to sink.

    Returns the payload length. Nothing reaches sink unless the header
    checks out and the declared length fits the information space.

    Raises:
        InvalidInputError: No header found (wrong keyword, no data, or a
                           damaged carrier; these cannot be told apart).
    """
    _check_grid(grid)
    height, width = grid.shape[:2]
    space, positions = keyword_positions(keyword, height, width)

    if len(positions) < HEADER_SIZE * NIBBLES_PER_BYTE:
        raise InvalidInputError(_NO_DATA)
    length = unpack_header(_read_bytes(grid, positions, HEADER_SIZE))

    if length * NIBBLES_PER_BYTE > len(positions):
        raise InvalidInputError(_NO_DATA)

    remaining = length
    while remaining > 0:
        n = min(chunk_size, remaining)
        sink.write(_read_bytes(grid, positions, n))
        remaining -= n

    logger.debug("Decoded %d payload bytes from space %d", length, space)
    return length


def decode_bytes(grid: np.ndarray, keyword: str) -> bytes:
    sink = io.BytesIO()
    decode(grid, keyword, sink)
    return sink.getvalue()


# ---------------------------------------------------------------------------
# Public API (files)
# ---------------------------------------------------------------------------

def embed(image_path:   str | Path,
          keyword:      str,
          data:         Optional[str] = None,
          payload_path: Optional[str | Path] = None,
          output_path:  Optional[str | Path] = None) -> Path:
    """
    Hide a payload in image_path and save the result as an RGBA PNG.

    payload_path takes precedence over data (a UTF-8 string). The carrier
    is overwritten unless output_path is given. The coarse capacity bound
    uses the carrier's file size.
    """
    image_path  = Path(image_path)
    output_path = Path(output_path) if output_path else image_path

    try:
        image_byte_length = carrier_size(image_path)
        if payload_path is not None:
            payload_path = Path(payload_path)
            with payload_path.open("rb") as source:
                length = payload_path.stat().st_size
                grid   = _checked_grid(image_path, length, image_byte_length)
                encode(grid, keyword, source, length, image_byte_length)
        elif data is not None:
            payload = data.encode("utf-8")
            grid    = _checked_grid(image_path, len(payload), image_byte_length)
            encode_bytes(grid, keyword, payload, image_byte_length)
        else:
            raise InvalidInputError("Must specify either inputData or --infile!")

        save_pixels(grid, output_path)
    except (ValueError, RuntimeError):
        raise
    except OSError as exc:
        raise InvalidInputError(f"Could not read or write image: {exc}") from exc
    except Exception as exc:
        raise RuntimeError(f"Embedding failed: {exc}") from exc

    return output_path


def _checked_grid(image_path: Path, length: int, image_byte_length: int) -> np.ndarray:
    # Reject oversize payloads before paying for the image decode.
    _check_data_capacity(length, image_byte_length)
    return load_pixels(image_path)


def read_payload(image_path: str | Path, keyword: str) -> bytes:
    """Return the payload hidden in image_path under keyword."""
    try:
        return decode_bytes(load_pixels(image_path), keyword)
    except (ValueError, RuntimeError):
        raise
    except OSError as exc:
        raise InvalidInputError(f"Could not read image: {exc}") from exc
    except Exception as exc:
        raise RuntimeError(f"Extraction failed: {exc}") from exc


def extract(image_path:  str | Path,
            keyword:     str,
            output_path: str | Path) -> Path:
    """Write the payload hidden in image_path to output_path, all or nothing."""
    output_path = Path(output_path)
    try:
        grid = load_pixels(image_path)
        with atomic_output(output_path) as sink:
            decode(grid, keyword, sink)
    except (ValueError, RuntimeError):
        raise
    except OSError as exc:
        raise InvalidInputError(f"Could not read image or write output: {exc}") from exc
    except Exception as exc:
        raise RuntimeError(f"Extraction failed: {exc}") from exc

    return output_path


def get_capacity(image_path: str | Path, keyword: Optional[str] = None) -> dict:
    """
    Capacity figures for a carrier.

    coarse_bytes is the file-size bound, space_bytes the smallest exact
    bound over all 16 spaces (or the keyword's space, when given), and
    available_bytes the lower of the two.
    """
    path          = Path(image_path)
    grid          = load_pixels(path)
    height, width = grid.shape[:2]
    coarse        = data_capacity(carrier_size(path))

    if keyword is None:
        space     = None
        per_space = min(position_capacity(position_count(height, width, s))
                        for s in range(SPACE_COUNT))
    else:
        space     = keyword_space(keyword)
        per_space = position_capacity(position_count(height, width, space))

    return {
        "width":           width,
        "height":          height,
        "coarse_bytes":    coarse,
        "space_bytes":     per_space,
        "available_bytes": min(coarse, per_space),
        "space":           space,
    }
