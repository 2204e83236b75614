# Copyright (C) 2026 Daniel Iwugo
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License.
# See <https://www.gnu.org/licenses/> for details.

# File: imcode/image.py
# Description: Carrier image I/O. Any Pillow-readable image in, RGBA PNG out.

from pathlib import Path

import numpy as np
from PIL import Image

from imcode.utils import atomic_output


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

PIXEL_MODE    = "RGBA"
OUTPUT_FORMAT = "PNG"
CHANNELS      = 4


# ---------------------------------------------------------------------------
# Load / save
# ---------------------------------------------------------------------------

def load_pixels(path: str | Path) -> np.ndarray:
    """
    Load an image as a writable (H, W, 4) uint8 RGBA array.

    Pixels are copied out through tobytes() and the PIL image is closed
    before the array is built, so numpy and PIL never share an allocation.
    """
    with Image.open(path) as src:
        pil_img = src.convert(PIXEL_MODE)
    w, h = pil_img.size
    raw  = pil_img.tobytes()
    pil_img.close()
    del pil_img
    return np.frombuffer(raw, dtype=np.uint8).reshape(h, w, CHANNELS).copy()


def save_pixels(grid: np.ndarray, path: str | Path) -> Path:
    """Write grid as an RGBA PNG. The destination only changes if the save completes."""
    path = Path(path)
    h, w = grid.shape[:2]
    # frombytes gets its own copy of the pixels; fromarray would hand PIL
    # numpy's buffer.
    img = Image.frombytes(PIXEL_MODE, (w, h), np.ascontiguousarray(grid).tobytes())
    with atomic_output(path) as fh:
        img.save(fh, format=OUTPUT_FORMAT)
    return path


def carrier_size(path: str | Path) -> int:
    """Size of the carrier file in bytes, as used by the coarse capacity bound."""
    return Path(path).stat().st_size
