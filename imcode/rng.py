# Copyright (C) 2026 Daniel Iwugo
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License.
# See <https://www.gnu.org/licenses/> for details.

# File: imcode/rng.py
# Description: Seeded subtractive pseudo-random generator (Knuth, TAOCP
#              vol. 2, 3.6). The draw sequence matches the seeded
#              System.Random of the .NET runtime exactly, so carriers written
#              by the original Imcode tool decode with this package.

from typing import MutableSequence


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_MBIG  = 2**31 - 1            # int32 max
_MSEED = 161803398
_INT32_MIN = -(2**31)


def _wrap32(value: int) -> int:
    """Two's-complement wrap to a signed 32-bit int, as unchecked C# arithmetic does."""
    return (value + 2**31) % 2**32 - 2**31


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------

class SubtractiveRandom:
    """
    Deterministic generator seeded from a signed 32-bit integer.

    Two instances built from the same seed produce the same stream forever.
    Not suitable for anything security related: the keyword only selects
    where bits go, it never protects them.
    """

    def __init__(self, seed: int):
        if not _INT32_MIN <= seed <= _MBIG:
            raise ValueError(f"Seed {seed} does not fit in a signed 32-bit integer.")

        subtraction = _MBIG if seed == _INT32_MIN else abs(seed)
        state       = [0] * 56
        mj          = _MSEED - subtraction
        state[55]   = mj
        mk          = 1

        # Spread the seed over the table in a 21-step cycle.
        for i in range(1, 55):
            ii        = (21 * i) % 55
            state[ii] = mk
            mk        = mj - mk
            if mk < 0:
                mk += _MBIG
            mj = state[ii]

        # Warm up. state[55] may still be negative here, so the subtraction
        # can leave the int32 range.
        for _ in range(4):
            for i in range(1, 56):
                state[i] = _wrap32(state[i] - state[1 + (i + 30) % 55])
                if state[i] < 0:
                    state[i] += _MBIG

        self._state  = state
        self._inext  = 0
        self._inextp = 21

    def _next_raw(self) -> int:
        inext  = self._inext + 1
        inextp = self._inextp + 1
        if inext >= 56:
            inext = 1
        if inextp >= 56:
            inextp = 1

        value = _wrap32(self._state[inext] - self._state[inextp])
        if value == _MBIG:
            value -= 1
        if value < 0:
            value += _MBIG

        self._state[inext] = value
        self._inext  = inext
        self._inextp = inextp
        return value

    def sample(self) -> float:
        """Return a float in [0, 1)."""
        return self._next_raw() * (1.0 / _MBIG)

    def randbelow(self, n: int) -> int:
        """Return an int uniformly drawn from [0, n)."""
        if n <= 0:
            raise ValueError(f"Upper bound must be positive, got {n}.")
        return int(self.sample() * n)

    def shuffle(self, items: MutableSequence) -> None:
        """Fisher-Yates shuffle in place, walking from the end."""
        for i in range(len(items) - 1, 0, -1):
            k = self.randbelow(i + 1)
            items[i], items[k] = items[k], items[i]
