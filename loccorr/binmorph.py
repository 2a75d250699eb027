"""Morphological operations on packed binary images (8 pixels per byte, MSB first)."""

from __future__ import annotations

import numpy as np

# minimal image size for morphological operations
MINWIDTH = 9
MINHEIGHT = 3


def _unpacked(image, width: int, height: int) -> np.ndarray:
    """Return the bits of all bytes of every row, padding bits included."""
    stride = (width + 7) // 8
    if isinstance(image, (bytes, bytearray, memoryview)):
        raw = np.frombuffer(bytes(image), dtype=np.uint8)
    else:
        raw = np.asarray(image, dtype=np.uint8).ravel()
    if raw.size < stride * height:
        raise ValueError("packed image is shorter than its size requires")
    rows = raw[:stride * height].reshape(height, stride)
    return np.unpackbits(rows, axis=1).astype(bool)


def _check_size(width: int, height: int) -> None:
    if width < MINWIDTH or height < MINHEIGHT:
        raise ValueError(
            f"image {width}x{height} is smaller than {MINWIDTH}x{MINHEIGHT}"
        )


def erosion(image, width: int, height: int) -> np.ndarray:
    """Erode a packed image by a 3x3 cross.

    The first and last rows and the leftmost and rightmost pixel columns
    of the result are always cleared. Returns an array shaped
    (height, (width + 7) // 8).
    """
    _check_size(width, height)
    bits = _unpacked(image, width, height)
    left = np.zeros_like(bits)
    left[:, 1:] = bits[:, :-1]
    # beyond the last byte of a row nothing is checked
    right = np.ones_like(bits)
    right[:, :-1] = bits[:, 1:]
    out = np.zeros_like(bits)
    out[1:-1] = (
        bits[1:-1] & bits[:-2] & bits[2:] & left[1:-1] & right[1:-1]
    )
    out[:, 0] = False
    out[:, width - 1] = False
    return np.packbits(out, axis=1)


def erosion_n(image, width: int, height: int, n: int) -> np.ndarray:
    """Erode a packed image `n` times.

    Images too small for erosion, or `n` below 1, come back unchanged.
    """
    if width < 1 or height < 1:
        raise ValueError("image size must be positive")
    stride = (width + 7) // 8
    current = np.packbits(_unpacked(image, width, height), axis=1)
    if width < MINWIDTH or height < MINHEIGHT or n < 1:
        return current.reshape(height, stride).copy()
    for _ in range(n):
        current = erosion(current, width, height)
    return current


def filter8(image, width: int, height: int) -> np.ndarray:
    """Clear every set pixel that has none of its eight neighbours set."""
    _check_size(width, height)
    bits = _unpacked(image, width, height)
    padded = np.pad(bits, 1)
    rows, cols = bits.shape
    neighbours = np.zeros_like(bits)
    for dy in (-1, 0, 1):
        for dx in (-1, 0, 1):
            if dy == 0 and dx == 0:
                continue
            neighbours |= padded[1 + dy:1 + dy + rows, 1 + dx:1 + dx + cols]
    return np.packbits(bits & neighbours, axis=1)