# Copyright (C) 2026 Daniel Iwugo
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License.
# See <https://www.gnu.org/licenses/> for details.

# File: imcode/space.py
# Description: Keyword → seed → information space → shuffled positions.
#
#   The pixel grid is tiled in 4×4 cells. An information space is one fixed
#   (row % 4, col % 4) phase of that tiling, so the 16 spaces never share a
#   pixel. A keyword picks its space with the first draw of a generator
#   seeded from the keyword and then shuffles the space's pixels with the
#   draws that follow.

import hashlib
import logging
from typing import NamedTuple

import numpy as np

from imcode.rng import SubtractiveRandom

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

SPACE_COUNT = 16
GRID_STRIDE = 4

Position = tuple[int, int]


# ---------------------------------------------------------------------------
# Seed + generator
# ---------------------------------------------------------------------------

def derive_seed(keyword: str) -> int:
    """
    Fold the SHA-256 digest of the keyword into a signed 32-bit seed.

    Digest byte i is XOR-ed into accumulator byte i % 4; the accumulator is
    then read little-endian. Different keywords can land on the same seed.
    """
    digest = np.frombuffer(hashlib.sha256(keyword.encode("utf-8")).digest(), dtype=np.uint8)
    folded = np.bitwise_xor.reduce(digest.reshape(-1, 4), axis=0)
    return int.from_bytes(folded.tobytes(), "little", signed=True)


def create_random(keyword: str) -> SubtractiveRandom:
    return SubtractiveRandom(derive_seed(keyword))


# ---------------------------------------------------------------------------
# Information spaces
# ---------------------------------------------------------------------------

def information_space(rng: SubtractiveRandom) -> int:
    """Draw the space id. Must be the first draw taken from rng."""
    return rng.randbelow(SPACE_COUNT)


def space_offsets(space: int) -> Position:
    if not 0 <= space < SPACE_COUNT:
        raise ValueError(f"Information space must be in [0, {SPACE_COUNT}), got {space}.")
    return space >> 2, space & 0b11


def keyword_space(keyword: str) -> int:
    return information_space(create_random(keyword))


def _enumerate(row_offset: int, col_offset: int, height: int, width: int) -> list[Position]:
    return [
        (row, col)
        for row in range(row_offset, height, GRID_STRIDE)
        for col in range(col_offset, width, GRID_STRIDE)
    ]


def space_positions(height: int, width: int, space: int) -> list[Position]:
    """Row-major coordinates belonging to one space, unshuffled."""
    return _enumerate(*space_offsets(space), height, width)


def position_count(height: int, width: int, space: int) -> int:
    row_offset, col_offset = space_offsets(space)
    rows = len(range(row_offset, height, GRID_STRIDE))
    cols = len(range(col_offset, width, GRID_STRIDE))
    return rows * cols


# ---------------------------------------------------------------------------
# Position sequence
# ---------------------------------------------------------------------------

def shuffled_positions(rng: SubtractiveRandom,
                       row_offset: int,
                       col_offset: int,
                       height: int,
                       width: int) -> list[Position]:
    """
    Every pixel of the space, shuffled with the continuing rng stream.

    Callers consume the result with list.pop(), i.e. from the END. Which
    physical pixel each bit lands on depends on that order.
    """
    positions = _enumerate(row_offset, col_offset, height, width)
    rng.shuffle(positions)
    return positions


def keyword_positions(keyword: str, height: int, width: int) -> tuple[int, list[Position]]:
    """Space id and shuffled positions for keyword on a height × width grid."""
    rng   = create_random(keyword)
    space = information_space(rng)
    row_offset, col_offset = space_offsets(space)
    positions = shuffled_positions(rng, row_offset, col_offset, height, width)
    logger.debug("Keyword selects information space %d (%d positions)", space, len(positions))
    return space, positions


# ---------------------------------------------------------------------------
# Collision check
# ---------------------------------------------------------------------------

class CollisionReport(NamedTuple):
    first:  int
    second: int

    @property
    def collides(self) -> bool:
        return self.first == self.second


def check_collision(keyword1: str, keyword2: str) -> CollisionReport:
    """Report the information spaces of two keywords, each from its own generator."""
    return CollisionReport(keyword_space(keyword1), keyword_space(keyword2))
