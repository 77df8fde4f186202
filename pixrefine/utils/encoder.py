"""Encoding NumPy RGBA arrays into PNG, JPEG or WEBP bytes via Pillow.

Format notes
------------
- PNG  : lossless RGBA. ``quality`` is accepted and ignored.
- JPEG : lossy RGB. JPEG has no alpha channel, so non-opaque pixels are
         composited over ``settings.JPEG_BACKGROUND`` (black by default,
         like a browser canvas exported to JPEG) and alpha is dropped.
- WEBP : lossy at the given quality, alpha preserved.
"""
from __future__ import annotations

import io
from enum import Enum
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

from ..config import settings
from ..errors import EncodeError

Array = np.ndarray


class OutputFormat(str, Enum):
    WEBP = "webp"
    PNG = "png"
    JPEG = "jpeg"

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"

    @property
    def extension(self) -> str:
        return ".jpg" if self is OutputFormat.JPEG else f".{self.value}"

    @property
    def pil_format(self) -> str:
        return self.value.upper()

    @property
    def lossy(self) -> bool:
        return self is not OutputFormat.PNG

    @classmethod
    def parse(cls, value: Union["OutputFormat", str]) -> "OutputFormat":
        """Accept an ``OutputFormat``, a short name or a MIME type."""
        if isinstance(value, OutputFormat):
            return value
        name = str(value).strip().lower()
        if name.startswith("image/"):
            name = name[len("image/"):]
        if name == "jpg":
            name = "jpeg"
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"Unknown output format: {value}") from None

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "OutputFormat":
        """Pick the format matching a file extension."""
        suffix = Path(path).suffix.lstrip(".")
        if not suffix:
            raise ValueError(f"No file extension on {path}")
        return cls.parse(suffix)


def _quality_percent(quality: float) -> int:
    return max(1, min(100, int(round(quality * 100))))


def _flatten(arr: Array) -> Array:
    """Composite RGBA over the opaque JPEG background, returning RGB."""
    rgb = arr[:, :, :3]
    alpha = arr[:, :, 3:4]
    if np.all(alpha == 255):
        return np.ascontiguousarray(rgb)
    bg = np.array(settings.JPEG_BACKGROUND, dtype=np.float32)
    a = alpha.astype(np.float32) / 255.0
    out = rgb.astype(np.float32) * a + bg * (1.0 - a)
    return np.clip(np.rint(out), 0, 255).astype(np.uint8)


def encode_image(
    arr: Array,
    fmt: Union[OutputFormat, str],
    quality: float = 0.9,
) -> bytes:
    """Encode an RGBA array (uint8) into compressed image bytes.

    Parameters
    ----------
    arr : np.ndarray
        Array of shape (H, W, 4), dtype=uint8.
    fmt : OutputFormat | str
        Target format.
    quality : float
        0.0-1.0, higher is larger and cleaner. Ignored for PNG.

    Returns
    -------
    bytes
        The encoded image.

    Raises
    ------
    EncodeError
        If the array is not an RGBA uint8 image or Pillow cannot encode it.
    """
    fmt = OutputFormat.parse(fmt)
    if not isinstance(arr, np.ndarray):
        raise EncodeError("arr must be a NumPy array")
    if arr.dtype != np.uint8:
        raise EncodeError(f"Unsupported pixel dtype: {arr.dtype}")
    if arr.ndim != 3 or arr.shape[2] != 4:
        raise EncodeError(f"Unsupported pixel layout: {arr.shape}")

    if fmt is OutputFormat.JPEG:
        im = Image.fromarray(_flatten(arr))
        params = {"quality": _quality_percent(quality)}
    elif fmt is OutputFormat.WEBP:
        im = Image.fromarray(np.ascontiguousarray(arr))
        params = {
            "quality": float(quality) * 100.0,
            "lossless": False,
            "method": settings.WEBP_METHOD,
        }
    else:
        im = Image.fromarray(np.ascontiguousarray(arr))
        params = {"compress_level": settings.PNG_COMPRESS_LEVEL}

    buf = io.BytesIO()
    try:
        im.save(buf, format=fmt.pil_format, **params)
    except Exception as exc:
        raise EncodeError(
            f"{fmt.pil_format} encoder failed: {exc}",
            details={"format": fmt.value, "width": arr.shape[1], "height": arr.shape[0]},
        ) from exc
    return buf.getvalue()
