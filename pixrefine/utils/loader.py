"""Image decoding from raw bytes into NumPy RGBA arrays.

All processing in this project happens on NumPy arrays. Pillow is used only
to turn compressed bytes into a ``uint8`` array of shape (H, W, 4) and back.
"""
from __future__ import annotations

import io
from pathlib import Path
from typing import Optional, Union

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from ..errors import DecodeError

Array = np.ndarray

# Input MIME types and the Pillow plugins allowed to open them.
DECODE_FORMATS = {
    "image/png": "PNG",
    "image/jpeg": "JPEG",
    "image/jpg": "JPEG",
    "image/webp": "WEBP",
    "image/gif": "GIF",
    "image/bmp": "BMP",
}


# Integer modes wider than 8 bits per sample (16-bit PNG greyscale).
WIDE_INT_MODES = ("I", "I;16", "I;16B", "I;16L", "I;16N")


def _to_rgba(im: Image.Image) -> Image.Image:
    """Apply EXIF orientation and convert to 8-bit RGBA.

    Wide integer samples are scaled down by their top 8 bits rather than
    clamped, which is what a plain ``convert("L")`` would do.
    """
    im = ImageOps.exif_transpose(im)
    if im.mode in WIDE_INT_MODES:
        wide = np.clip(np.asarray(im).astype(np.int64), 0, 65535)
        im = Image.fromarray((wide >> 8).astype(np.uint8))
    return im.convert("RGBA")


def load_bytes(path: Union[str, Path]) -> bytes:
    """Read a whole image file into memory."""
    return Path(path).read_bytes()


def decode_image(data: bytes, mime_type: Optional[str] = None) -> Array:
    """Decode compressed image bytes into an RGBA NumPy array (uint8).

    Parameters
    ----------
    data : bytes
        Encoded image (PNG, JPEG, WEBP, GIF or BMP).
    mime_type : str | None
        Claimed type of ``data``. When given, only the matching decoder is
        tried; otherwise any of the supported decoders may identify it.

    Returns
    -------
    np.ndarray
        Array of shape (H, W, 4), dtype=uint8, in RGBA order. For
        multi-frame inputs only the first frame is returned.

    Raises
    ------
    DecodeError
        If the bytes are empty, malformed, truncated, of an unsupported
        format, or report a zero dimension.
    """
    if not data:
        raise DecodeError("Input is empty")

    if mime_type is None:
        formats = sorted(set(DECODE_FORMATS.values()))
    else:
        fmt = DECODE_FORMATS.get(mime_type.lower())
        if fmt is None:
            raise DecodeError(
                f"Unsupported input type: {mime_type}",
                details={"mime_type": mime_type},
            )
        formats = [fmt]

    try:
        with Image.open(io.BytesIO(data), formats=formats) as im:
            im.load()
            width, height = im.size
            if width == 0 or height == 0:
                raise DecodeError(
                    "Image reports a zero dimension",
                    details={"width": width, "height": height},
                )
            arr = np.array(_to_rgba(im), dtype=np.uint8)
    except UnidentifiedImageError as exc:
        raise DecodeError("Input is not a recognised image") from exc
    except Image.DecompressionBombError as exc:
        raise DecodeError(str(exc)) from exc
    except (OSError, SyntaxError, ValueError, EOFError) as exc:
        raise DecodeError(f"Image data is corrupt or truncated: {exc}") from exc

    return np.ascontiguousarray(arr)
