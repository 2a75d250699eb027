"""Image file detection, loading, conversion and export."""

from __future__ import annotations

import enum
import logging
import os
from pathlib import Path

import numpy as np
from PIL import Image as PILImage

from .fits import BYTE_IMG, FLOAT_IMG, USHORT_IMG, Image, read_fits

log = logging.getLogger(__name__)


class InputType(enum.IntEnum):
    """Kind of a file or directory given as input."""

    WRONG = 0
    DIRECTORY = 1
    BMP = 2
    FITS = 3
    GZIP = 4
    GIF = 5
    JPEG = 6
    PNG = 7


_SIGNATURES = (
    (b"BM", InputType.BMP),
    (b"SIMPLE", InputType.FITS),
    (b"\x1f\x8b\x08", InputType.GZIP),
    (b"GIF8", InputType.GIF),
    (b"\xff\xd8\xff\xdb", InputType.JPEG),
    (b"\xff\xd8\xff\xe0", InputType.JPEG),
    (b"\xff\xd8\xff\xe1", InputType.JPEG),
    (b"\x89PNG", InputType.PNG),
)
_SIGNATURE_LEN = 7


def check_input(name) -> InputType:
    """Tell whether `name` is a directory or an image file of a known type."""
    path = Path(name)
    if path.is_dir():
        try:
            with os.scandir(path):
                pass
        except OSError as exc:
            log.warning("Can't open directory %s: %s", path, exc)
            return InputType.WRONG
        return InputType.DIRECTORY
    try:
        with open(path, "rb") as f:
            head = f.read(_SIGNATURE_LEN)
    except OSError as exc:
        log.warning("Can't open file %s: %s", path, exc)
        return InputType.WRONG
    if len(head) != _SIGNATURE_LEN:
        log.warning("Can't read file signature of %s", path)
        return InputType.WRONG
    for signature, kind in _SIGNATURES:
        if head.startswith(signature):
            return kind
    return InputType.WRONG


def _load_picture(name) -> Image:
    try:
        with PILImage.open(name) as picture:
            gray = np.asarray(picture.convert("L"), dtype=np.uint8)
    except (OSError, SyntaxError, ValueError) as exc:
        raise ValueError(f"Error in loading the image {name}") from exc
    height, width = gray.shape
    # flip upside down for the FITS coordinate system
    return Image(
        width,
        height,
        gray[::-1].astype(np.float32),
        dtype=USHORT_IMG,
        minval=float(gray.min()),
        maxval=float(gray.max()),
    )


def read_image(name) -> Image:
    """Read an image from any supported file type."""
    kind = check_input(name)
    if kind in (InputType.DIRECTORY, InputType.WRONG):
        raise ValueError(f"Bad file type to read: {name}")
    if kind in (InputType.FITS, InputType.GZIP):
        return read_fits(name)
    return _load_picture(name)


def _check_channels(nchannels: int) -> None:
    if nchannels not in (1, 3):
        raise ValueError("only 1 or 3 colour channels are supported")


def _to_channels(levels: np.ndarray, nchannels: int) -> np.ndarray:
    if nchannels == 3:
        return np.repeat(levels[:, :, None], 3, axis=2)
    return np.ascontiguousarray(levels)


def linear(image: Image, nchannels: int = 1) -> np.ndarray:
    """Scale the image linearly into 8 bits, flipped upside down."""
    _check_channels(nchannels)
    vmin = np.float32(image.minval)
    span = np.float32(image.maxval) - vmin
    if not np.isfinite(span) or span == 0:
        levels = np.zeros(image.data.shape, dtype=np.uint8)
    else:
        scale = np.float32(255.0 / float(span))
        with np.errstate(invalid="ignore", over="ignore"):
            scaled = scale * (image.data - vmin)
        scaled = np.nan_to_num(scaled, nan=0.0, posinf=255.0, neginf=0.0)
        levels = np.clip(scaled, 0.0, 255.0).astype(np.uint8)
    return _to_channels(levels[::-1], nchannels)


def _equalized(image: Image, nchannels: int, throwpart: float) -> np.ndarray:
    _check_channels(nchannels)
    lin = linear(image, 1)
    total = lin.size
    histogram = np.bincount(lin.ravel(), minlength=256)
    cumulative = np.cumsum(histogram)
    bpart = int(throwpart * total)
    reached = np.flatnonzero(cumulative >= bpart)
    if reached.size:
        startidx = int(reached[0]) + 1
        nblack = int(cumulative[reached[0]])
    else:
        startidx = 257
        nblack = total
    part = (total + 1.0 - nblack) / 256.0
    levels = np.zeros(256, dtype=np.uint8)
    if startidx < 256:
        running = np.cumsum(histogram[startidx:]).astype(np.float64)
        levels[startidx:] = (running / part).astype(np.uint8)
    return _to_channels(levels[lin], nchannels)


def equalize(image: Image, nchannels: int = 1, throwpart: float = 0.5) -> np.ndarray:
    """Histogram-equalize the image into 8 bits, dropping `throwpart` of dark pixels."""
    return _equalized(image, nchannels, throwpart)


def write_jpg(image: Image, name, equalize: bool = False, throwpart: float = 0.5) -> None:
    """Save the image as a grayscale JPEG, linear or equalized."""
    if image.data.size == 0:
        raise ValueError("image has no data")
    pixels = _equalized(image, 1, throwpart) if equalize else linear(image, 1)
    PILImage.fromarray(pixels).save(name, format="JPEG", quality=95)


def _packed_rows(packed, width: int, height: int) -> np.ndarray:
    if width < 1 or height < 1:
        raise ValueError("image size must be positive")
    stride = (width + 7) // 8
    if isinstance(packed, (bytes, bytearray, memoryview)):
        raw = np.frombuffer(bytes(packed), dtype=np.uint8)
    else:
        raw = np.asarray(packed, dtype=np.uint8).ravel()
    if raw.size < stride * height:
        raise ValueError("packed image is shorter than its size requires")
    return raw[:stride * height].reshape(height, stride)


def _unpack(packed, width: int, height: int) -> np.ndarray:
    return np.unpackbits(_packed_rows(packed, width, height), axis=1)[:, :width]


def bin_to_image(packed, width: int, height: int) -> Image:
    """Convert a packed binary image (8 pixels per byte) into a 0/1 image."""
    bits = _unpack(packed, width, height)
    return Image(width, height, bits.astype(np.float32), dtype=BYTE_IMG, minval=0.0, maxval=1.0)


def image_to_bin(image: Image, bk: float) -> np.ndarray:
    """Pack the image into bits: a pixel is set when it is above `bk`.

    Pixels of a trailing partial byte are compared with zero instead of `bk`.
    """
    width, height = image.width, image.height
    if width < 2 or height < 2:
        raise ValueError("image is too small to binarize")
    data = image.data
    bits = data > np.float32(bk)
    full = (width // 8) * 8
    if full < width:
        bits[:, full:] = data[:, full:] > 0
    return np.packbits(bits, axis=1)


def bin_to_labels(packed, width: int, height: int) -> np.ndarray:
    """Convert a packed binary image into an integer array of 0 and 1."""
    return _unpack(packed, width, height).astype(np.int64)


def labels_to_image(labels, width: int, height: int) -> Image:
    """Convert an integer label array into a floating image."""
    arr = np.asarray(labels)
    if arr.size != width * height:
        raise ValueError("label array does not match the image size")
    image = Image(width, height, arr.reshape(height, width).astype(np.float32), dtype=FLOAT_IMG)
    image.update_minmax()
    return image