"""Reading and writing of two-dimensional FITS images."""

from __future__ import annotations

import gzip
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np

log = logging.getLogger(__name__)

BLOCK_SIZE = 2880
CARD_SIZE = 80

# image storage types (BITPIX-like codes)
BYTE_IMG = 8
SHORT_IMG = 16
LONG_IMG = 32
LONGLONG_IMG = 64
FLOAT_IMG = -32
DOUBLE_IMG = -64
SBYTE_IMG = 10
USHORT_IMG = 20
ULONG_IMG = 40
ULONGLONG_IMG = 80

MODIFIED_COMMENT = "COMMENT  modified by loccorr"

# value range of every integer storage type
_INT_RANGE = {
    SBYTE_IMG: (-128.0, 127.0),
    SHORT_IMG: (-32768.0, 32767.0),
    USHORT_IMG: (0.0, 65535.0),
    LONG_IMG: (-2147483648.0, 2147483647.0),
    ULONG_IMG: (0.0, 4294967295.0),
    ULONGLONG_IMG: (0.0, 18446744073709551615.0),
    LONGLONG_IMG: (-9223372036854775808.0, 9223372036854775807.0),
    BYTE_IMG: (0.0, 255.0),
}

# how each integer type is stored on disk: (BITPIX, BZERO)
_STORAGE = {
    BYTE_IMG: (8, 0),
    SBYTE_IMG: (8, -128),
    SHORT_IMG: (16, 0),
    USHORT_IMG: (16, 32768),
    LONG_IMG: (32, 0),
    ULONG_IMG: (32, 2147483648),
    LONGLONG_IMG: (64, 0),
    ULONGLONG_IMG: (64, 9223372036854775808),
}

_NUMPY_TYPES = {
    8: np.dtype("u1"),
    16: np.dtype(">i2"),
    32: np.dtype(">i4"),
    64: np.dtype(">i8"),
    -32: np.dtype(">f4"),
    -64: np.dtype(">f8"),
}

# header records that the writer produces itself
_SKIPPED_PREFIXES = ("SIMPLE", "EXTEND", "COMMENT", "NAXIS", "BITPIX", "BZERO", "BSCALE", "END")


class FitsError(Exception):
    """Raised when a FITS file cannot be read or written."""


@dataclass
class Image:
    """A single-plane image with its header records."""

    width: int
    height: int
    data: np.ndarray
    dtype: int = 0
    minval: float = 0.0
    maxval: float = 0.0
    keylist: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.data = np.asarray(self.data, dtype=np.float32)
        if self.data.shape != (self.height, self.width):
            raise ValueError(
                f"data shape {self.data.shape} does not match {self.width}x{self.height}"
            )

    @classmethod
    def blank(cls, width: int, height: int) -> "Image":
        """Create a zero-filled image of the given size."""
        if width < 0 or height < 0:
            raise ValueError("image size must not be negative")
        return cls(width, height, np.zeros((height, width), dtype=np.float32))

    def similar(self) -> "Image":
        """Create an empty image with the same size and storage type."""
        if self.width * self.height < 1:
            raise ValueError("image is empty")
        out = Image.blank(self.width, self.height)
        out.dtype = self.dtype
        return out

    def update_minmax(self) -> None:
        """Recalculate the extremal data values."""
        if self.data.size == 0:
            return
        self.minval = float(np.nanmin(self.data))
        self.maxval = float(np.nanmax(self.data))


def _numeric(card: str) -> float:
    text = card[10:].split("/", 1)[0].strip()
    try:
        if text.lstrip("+-").isdigit():
            return int(text)
        return float(text.replace("D", "E").replace("d", "e"))
    except ValueError as exc:
        raise FitsError(f"bad numeric value in card {card.rstrip()!r}") from exc


def _read_header(raw: bytes, pos: int) -> tuple[list[str], int]:
    cards: list[str] = []
    while True:
        block = raw[pos:pos + BLOCK_SIZE]
        if len(block) < BLOCK_SIZE:
            raise FitsError("header is truncated or has no END card")
        pos += BLOCK_SIZE
        text = block.decode("ascii", errors="replace")
        for start in range(0, BLOCK_SIZE, CARD_SIZE):
            card = text[start:start + CARD_SIZE]
            if card[:8].rstrip() == "END":
                return cards, pos
            cards.append(card)


def _iter_hdus(raw: bytes):
    pos = 0
    first = True
    while len(raw) - pos >= BLOCK_SIZE:
        if first and not raw.startswith(b"SIMPLE"):
            raise FitsError("not a FITS file")
        if not first and not raw[pos:pos + BLOCK_SIZE].strip(b"\x00 "):
            return
        cards, pos = _read_header(raw, pos)
        header = {}
        for card in cards:
            key = card[:8].strip()
            if key and card[8:10] == "= " and key not in header:
                header[key] = card
        try:
            bitpix = int(_numeric(header["BITPIX"]))
            naxis = int(_numeric(header["NAXIS"]))
            naxes = [int(_numeric(header[f"NAXIS{i}"])) for i in range(1, naxis + 1)]
        except KeyError as exc:
            raise FitsError(f"missing mandatory keyword {exc.args[0]}") from exc
        pcount = int(_numeric(header["PCOUNT"])) if "PCOUNT" in header else 0
        gcount = int(_numeric(header["GCOUNT"])) if "GCOUNT" in header else 1
        size = abs(bitpix) // 8 * gcount * (pcount + math.prod(naxes)) if naxis else 0
        data = raw[pos:pos + size]
        if len(data) < size:
            raise FitsError("data unit is truncated")
        pos += -(-size // BLOCK_SIZE) * BLOCK_SIZE
        yield cards, header, bitpix, naxes, data
        first = False


def read_fits(filename) -> Image:
    """Read the primary image and all header records of a FITS file."""
    try:
        raw = Path(filename).read_bytes()
    except OSError as exc:
        raise FitsError(f"can't open {filename}: {exc}") from exc
    if raw[:2] == b"\x1f\x8b":
        try:
            raw = gzip.decompress(raw)
        except (OSError, EOFError) as exc:
            raise FitsError(f"can't decompress {filename}: {exc}") from exc
    hdus = list(_iter_hdus(raw))
    if not hdus:
        raise FitsError("Can't read HDU")
    _, header, bitpix, naxes, payload = hdus[0]
    if len(naxes) > 2:
        raise FitsError("Images with > 2 dimensions are not supported")
    if not naxes:
        raise FitsError("primary HDU holds no image")
    if bitpix not in _NUMPY_TYPES:
        raise FitsError(f"unsupported BITPIX {bitpix}")
    width = naxes[0]
    height = naxes[1] if len(naxes) == 2 else 1
    bzero = _numeric(header["BZERO"]) if "BZERO" in header else 0.0
    bscale = _numeric(header["BSCALE"]) if "BSCALE" in header else 1.0
    values = np.frombuffer(payload, dtype=_NUMPY_TYPES[bitpix], count=width * height)
    data = (values.astype(np.float64) * bscale + bzero).astype(np.float32)
    keylist = [
        card.rstrip()
        for cards, *_ in hdus
        for card in cards
        if card.strip()
    ]
    image = Image(width, height, data.reshape(height, width), dtype=bitpix, keylist=keylist)
    image.update_minmax()
    undefined = int(np.count_nonzero(np.isnan(image.data)))
    if undefined:
        log.warning("Found %d pixels with undefined value", undefined)
    return image


def _round_away(values: np.ndarray) -> np.ndarray:
    return np.trunc(values + np.copysign(0.5, values))


def _encode(image: Image) -> tuple[int, int, bytes]:
    if image.dtype > 0:
        code = image.dtype if image.dtype in _INT_RANGE else BYTE_IMG
        lo, hi = _INT_RANGE[code]
        vmin = np.float32(image.minval)
        span = np.float32(image.maxval) - vmin
        if not np.isfinite(span) or span == 0:
            raise FitsError("image has no dynamic range to convert into integers")
        scale = np.float32((np.float32(hi) - np.float32(lo)) / span)
        scaled = scale * (image.data - vmin) + np.float32(lo)
        bitpix, bzero = _STORAGE[code]
        target = _NUMPY_TYPES[bitpix]
        info = np.iinfo(target) if target.kind == "i" else np.iinfo(np.uint8)
        upper = float(info.max)
        if int(upper) > info.max:
            upper = float(np.nextafter(upper, 0.0))
        stored = np.clip(_round_away(scaled.astype(np.float64) - bzero), float(info.min), upper)
        return bitpix, bzero, stored.astype(target).tobytes()
    if image.dtype == DOUBLE_IMG:
        return DOUBLE_IMG, 0, image.data.astype(_NUMPY_TYPES[-64]).tobytes()
    if image.dtype == FLOAT_IMG:
        return FLOAT_IMG, 0, image.data.astype(_NUMPY_TYPES[-32]).tobytes()
    raise FitsError(f"unsupported image data type {image.dtype}")


def _card(key: str, value, comment: str | None = None) -> str:
    text = "T" if value is True else "F" if value is False else str(value)
    card = f"{key:<8}= {text:>20}"
    if comment:
        card += f" / {comment}"
    return card


def write_fits(filename, image: Image) -> None:
    """Write an image into a new FITS file ("!" before the name overwrites)."""
    name = str(filename)
    overwrite = name.startswith("!")
    if overwrite:
        name = name[1:]
    bitpix, bzero, payload = _encode(image)
    cards = [
        _card("SIMPLE", True, "file does conform to FITS standard"),
        _card("BITPIX", bitpix, "number of bits per data pixel"),
        _card("NAXIS", 2, "number of data axes"),
        _card("NAXIS1", image.width, "length of data axis 1"),
        _card("NAXIS2", image.height, "length of data axis 2"),
        _card("EXTEND", True, "FITS dataset may contain extensions"),
    ]
    if bzero:
        cards.append(_card("BZERO", bzero, "offset data range to that of unsigned"))
        cards.append(_card("BSCALE", 1, "default scaling factor"))
    cards.extend(rec for rec in image.keylist if not rec.startswith(_SKIPPED_PREFIXES))
    cards.append(MODIFIED_COMMENT)
    cards.append("END")
    header = "".join(card[:CARD_SIZE].ljust(CARD_SIZE) for card in cards)
    header += " " * (-len(header) % BLOCK_SIZE)
    try:
        head_bytes = header.encode("ascii")
    except UnicodeEncodeError as exc:
        raise FitsError("header records must be ASCII") from exc
    payload += b"\x00" * (-len(payload) % BLOCK_SIZE)
    try:
        with open(name, "wb" if overwrite else "xb") as f:
            f.write(head_bytes)
            f.write(payload)
    except OSError as exc:
        raise FitsError(f"can't create {name}: {exc}") from exc