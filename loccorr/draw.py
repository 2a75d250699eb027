"""Simple drawing of opaque patterns over three-channel images."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

C_R = (255, 0, 0)
C_G = (0, 255, 0)
C_B = (0, 0, 255)
C_K = (0, 0, 0)
C_W = (255, 255, 255)


@dataclass
class Img3:
    """Three-channel 8-bit image, data shaped (height, width, 3)."""

    data: np.ndarray

    def __post_init__(self) -> None:
        self.data = np.asarray(self.data, dtype=np.uint8)
        if self.data.ndim != 3 or self.data.shape[2] != 3:
            raise ValueError("Img3 data must have shape (height, width, 3)")

    @property
    def w(self) -> int:
        return self.data.shape[1]

    @property
    def h(self) -> int:
        return self.data.shape[0]


@dataclass
class Pattern:
    """Single-channel opacity mask, data shaped (height, width)."""

    data: np.ndarray

    def __post_init__(self) -> None:
        self.data = np.asarray(self.data, dtype=np.uint8)
        if self.data.ndim != 2:
            raise ValueError("pattern data must be two-dimensional")

    @property
    def w(self) -> int:
        return self.data.shape[1]

    @property
    def h(self) -> int:
        return self.data.shape[0]

    @classmethod
    def cross(cls, h: int, w: int) -> "Pattern":
        """Make an opaque cross of the given height and width."""
        if h < 1 or w < 1:
            raise ValueError("cross size must be positive")
        data = np.zeros((h, w), dtype=np.uint8)
        data[:, w // 2] = 255
        data[h // 2, :] = 255
        return cls(data)

    def draw3(self, img: Img3, xc: int, yc: int, colour) -> None:
        """Blend the pattern in `colour` onto `img` centred at (xc, yc).

        The drawn area ends one pixel before the pattern's last row and column.
        """
        xul, yul = xc - self.w // 2, yc - self.h // 2
        xdr, ydr = xul + self.w - 1, yul + self.h - 1
        right, down = img.w, img.h
        if ydr < 0 or xdr < 0 or xul > right - 1 or yul > down - 1:
            return
        oxlow, ixlow = (0, -xul) if xul < 0 else (xul, 0)
        oylow, iylow = (0, -yul) if yul < 0 else (yul, 0)
        oxhigh = xdr if xdr < right else right
        oyhigh = ydr if ydr < down else down
        if oxhigh <= oxlow or oyhigh <= oylow:
            return
        mask = self.data[iylow:iylow + oyhigh - oylow, ixlow:ixlow + oxhigh - oxlow]
        opaque = (mask / 255.0).astype(np.float32).astype(np.float64)[..., None]
        region = img.data[oylow:oyhigh, oxlow:oxhigh].astype(np.float64)
        colr = np.asarray(colour, dtype=np.float64)[:3]
        blended = colr * opaque + region * (1.0 - opaque)
        img.data[oylow:oyhigh, oxlow:oxhigh] = blended.astype(np.uint8)