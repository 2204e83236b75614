# Copyright (C) 2026 Daniel Iwugo
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License.
# See <https://www.gnu.org/licenses/> for details.

# File: imcode/utils.py
# Description: Shared helpers. Atomic file output, byte formatting.

import os
import stat
import tempfile
from contextlib import contextmanager
from pathlib import Path


# ---------------------------------------------------------------------------
# Atomic output
# ---------------------------------------------------------------------------

@contextmanager
def atomic_output(destination: str | Path):
    """
    Context manager yielding a binary file handle whose contents replace
    `destination` only if the block finishes without raising.

    The temporary file is created next to the destination so os.replace
    stays on one filesystem. On any exception, KeyboardInterrupt included,
    the temporary file is removed and the destination is left as it was.
    A replaced file keeps its permission bits; a new one gets the process
    default (0o666 minus the umask), not mkstemp's 0o600.

    Usage:
        with atomic_output("stego.png") as fh:
            fh.write(data)
        # stego.png now holds data, or is untouched if the write failed
    """
    destination = Path(destination)
    fd, tmp_str = tempfile.mkstemp(
        prefix=f".{destination.name}.", suffix=".tmp", dir=destination.parent or "."
    )
    tmp = Path(tmp_str)
    try:
        with os.fdopen(fd, "wb") as fh:
            yield fh
        os.chmod(tmp, _target_mode(destination))
        os.replace(tmp, destination)
    finally:
        if tmp.exists():
            tmp.unlink()


def _target_mode(destination: Path) -> int:
    if destination.exists():
        return stat.S_IMODE(destination.stat().st_mode)
    # The umask can only be read by setting it.
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

def fmt_bytes(n: int) -> str:
    if n >= 1_048_576:
        return f"{n / 1_048_576:.2f} MB"
    if n >= 1_024:
        return f"{n / 1_024:.1f} KB"
    return f"{n} B"
