import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np
import pytest
from PIL import Image


def noise_grid(height: int, width: int, seed: int = 0) -> np.ndarray:
    return np.random.default_rng(seed).integers(0, 256, (height, width, 4), dtype=np.uint8)


class Int32Reference:
    """
    Second rendition of the seeded subtractive generator, computed on a
    numpy int32 table so overflow wraps natively. One-element slices keep
    numpy from warning about scalar overflow.

    `wrapped` records whether the warm-up actually left the int32 range.
    """

    MBIG  = 2**31 - 1
    MSEED = 161803398

    def __init__(self, seed: int):
        subtraction = self.MBIG if seed == -(2**31) else abs(seed)
        s  = np.zeros(56, dtype=np.int32)
        mj = self.MSEED - subtraction
        s[55] = mj
        mk = 1
        ii = 0
        for _ in range(1, 55):
            ii += 21
            if ii >= 55:
                ii -= 55
            s[ii] = mk
            mk = mj - mk
            if mk < 0:
                mk += self.MBIG
            mj = int(s[ii])

        self.wrapped = False
        for _ in range(1, 5):
            for i in range(1, 56):
                n = i + 30
                if n >= 55:
                    n -= 55
                exact = int(s[i]) - int(s[1 + n])
                if not -(2**31) <= exact < 2**31:
                    self.wrapped = True
                s[i:i + 1] -= s[1 + n:2 + n]
                if s[i] < 0:
                    s[i:i + 1] += self.MBIG

        self.table  = s
        self.inext  = 0
        self.inextp = 21

    def raw(self) -> int:
        self.inext  = 1 if self.inext + 1 >= 56 else self.inext + 1
        self.inextp = 1 if self.inextp + 1 >= 56 else self.inextp + 1
        value = int(self.table[self.inext]) - int(self.table[self.inextp])
        if value == self.MBIG:
            value -= 1
        if value < 0:
            value += self.MBIG
        self.table[self.inext] = value
        return value

    def below(self, n: int) -> int:
        return int(self.raw() * (1.0 / self.MBIG) * n)

    def shuffle(self, items: list) -> None:
        for i in range(len(items) - 1, 0, -1):
            k = self.below(i + 1)
            items[i], items[k] = items[k], items[i]


def keyword_in_other_space(keyword: str) -> str:
    """First keyword of the form 'other<N>' that does not share keyword's space."""
    from imcode.space import keyword_space

    target = keyword_space(keyword)
    for i in range(1000):
        candidate = f"other{i}"
        if keyword_space(candidate) != target:
            return candidate
    raise AssertionError("no keyword found in a different information space")


@pytest.fixture
def grid():
    return noise_grid(64, 64)


@pytest.fixture
def carrier(tmp_path):
    """64×64 RGBA noise PNG. Noise barely compresses, so the file-size bound stays above 100 bytes."""
    path = tmp_path / "carrier.png"
    Image.fromarray(noise_grid(64, 64, seed=7)).save(path, format="PNG")
    return path
