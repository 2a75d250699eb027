"""Median filtering, running medians and simple image statistics."""

from __future__ import annotations

import sys
from bisect import bisect_left, insort
from collections import deque

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from .fits import Image

# sizes whose median is the mean of the two middle values
_AVERAGED_SIZES = frozenset((2, 4, 6, 8, 16))
# upper bound of window elements handled at once by the median filter
_CHUNK_ELEMENTS = 4_000_000


def calc_median(values) -> float:
    """Return the median of `values`.

    For 2, 4, 6, 8 and 16 values the two middle values are averaged; for any
    other even amount the lower middle value is returned.
    """
    arr = np.asarray(values, dtype=np.float32).ravel()
    n = arr.size
    if n < 1:
        raise ValueError("calc_median(): no data")
    if n == 1:
        return float(arr[0])
    ordered = np.sort(arr)
    if n in _AVERAGED_SIZES:
        k = n // 2
        return float((ordered[k - 1] + ordered[k]) * np.float32(0.5))
    return float(ordered[(n - 1) // 2])


class RunningMedian:
    """Median of the last `size` inserted values."""

    def __init__(self, size: int) -> None:
        if size < 1:
            raise ValueError("window size must be positive")
        self.size = size
        self._window: deque[float] = deque()
        self._sorted: list[float] = []

    def __len__(self) -> int:
        return len(self._window)

    def insert(self, value) -> None:
        """Add a value, dropping the oldest one when the window is full."""
        v = float(np.float32(value))
        if len(self._window) == self.size:
            old = self._window.popleft()
            del self._sorted[bisect_left(self._sorted, old)]
        self._window.append(v)
        insort(self._sorted, v)

    def median(self) -> float:
        """Median of the window (mean of the two middle values when even)."""
        count = len(self._sorted)
        if count == 0:
            raise ValueError("no values inserted")
        upper = self._sorted[count // 2]
        if count % 2:
            return upper
        lower = self._sorted[count // 2 - 1]
        return float((np.float32(upper) + np.float32(lower)) / np.float32(2))

    def stat(self) -> tuple[float, float, float]:
        """Return (median, minimum, maximum) of the window."""
        med = self.median()
        return med, self._sorted[0], self._sorted[-1]


def get_median(image: Image, seed: int) -> Image:
    """Median-filter the image by a (2*seed+1)^2 box; borders are left zero."""
    if seed < 1:
        raise ValueError("median radius must be at least 1")
    out = image.similar()
    size = 2 * seed + 1
    height, width = image.height, image.width
    if height >= size and width >= size:
        windows = sliding_window_view(image.data, (size, size))
        rows, cols = windows.shape[:2]
        chunk = max(1, _CHUNK_ELEMENTS // (cols * size * size))
        for start in range(0, rows, chunk):
            stop = min(rows, start + chunk)
            block = np.median(windows[start:stop], axis=(-2, -1))
            out.data[seed + start:seed + stop, seed:width - seed] = block.astype(np.float32)
    out.update_minmax()
    return out


def _box_sums(values: np.ndarray, size: int) -> np.ndarray:
    height, width = values.shape
    integral = np.zeros((height + 1, width + 1), dtype=np.float64)
    integral[1:, 1:] = values.cumsum(axis=0).cumsum(axis=1)
    return (integral[size:, size:] - integral[:-size, size:]
            - integral[size:, :-size] + integral[:-size, :-size])


def get_stat(image: Image, seed: int) -> tuple[Image, Image]:
    """Return (mean, std) images over a (2*seed+1)^2 box; borders are left zero."""
    width, height = image.width, image.height
    if seed < 1 or seed > (width - 1) // 2 or seed > (height - 1) // 2:
        raise ValueError(f"bad box radius {seed} for image {width}x{height}")
    size = 2 * seed + 1
    count = size * size
    data = image.data.astype(np.float64)
    mean = _box_sums(data, size) / count
    variance = _box_sums(data * data, size) / count - mean * mean
    std = np.sqrt(np.clip(variance, 0.0, None))
    mean_img = image.similar()
    std_img = image.similar()
    mean_img.data[seed:height - seed, seed:width - seed] = mean.astype(np.float32)
    std_img.data[seed:height - seed, seed:width - seed] = std.astype(np.float32)
    mean_img.update_minmax()
    std_img.update_minmax()
    return mean_img, std_img


def _trunc_div4(value: int) -> int:
    quotient = abs(value) // 4
    return quotient if value >= 0 else -quotient


def calc_background(image: Image) -> float:
    """Estimate the background level from the bend of the image histogram."""
    vmin = np.float32(image.minval)
    ampl = np.float32(image.maxval) - vmin
    if not np.isfinite(ampl) or float(ampl) < sys.float_info.epsilon:
        raise ValueError("Zero image!")
    with np.errstate(invalid="ignore", over="ignore"):
        scaled = ((image.data - vmin) / ampl).astype(np.float64) * 255.0 + 0.5
    scaled = np.nan_to_num(scaled, nan=0.0, posinf=255.0, neginf=0.0)
    indexes = np.clip(np.trunc(scaled), 0, 255).astype(np.int64)
    histogram = [int(v) for v in np.bincount(indexes.ravel(), minlength=256)[:256]]
    modeidx = max(range(256), key=lambda i: (histogram[i], -i))
    diff2 = [0] * 256
    for i in range(2, 254):
        diff2[i] = _trunc_div4(histogram[i + 2] + histogram[i - 2] - 2 * histogram[i])
    modeidx = max(modeidx, 2)
    if modeidx > 253:
        raise ValueError("image is overilluminated")
    borderidx = next(
        (i for i in range(modeidx, 254) if diff2[i] <= 0 and diff2[i + 1] <= 0),
        modeidx,
    )
    value = float(np.float32(borderidx)) / 255.0 * float(ampl) + float(vmin)
    return float(np.float32(value))