"""Bicubic resizing for NumPy RGBA arrays.

Uses the Keys cubic convolution kernel (a = -0.5, also known as
Catmull-Rom) separably: first along rows, then along columns. Every channel,
alpha included, is interpolated the same way. Source taps outside the image
are clamped to the nearest edge pixel.
"""
from __future__ import annotations

import math
from typing import Optional

import numpy as np

from ..config import settings
from ..errors import InvalidDimensions

Array = np.ndarray

CUBIC_A = -0.5


def target_size(width: int, height: int, scale: float) -> tuple[int, int]:
    """Return ``(floor(width * scale), floor(height * scale))``.

    Raises
    ------
    InvalidDimensions
        If either side is 0, a side exceeds ``MAX_DIMENSION`` or the area
        exceeds ``MAX_PIXELS``.
    """
    new_w = int(math.floor(width * scale))
    new_h = int(math.floor(height * scale))
    _check_dimensions(new_w, new_h)
    return new_w, new_h


def _check_dimensions(width: int, height: int) -> None:
    if width < 1 or height < 1:
        raise InvalidDimensions(
            f"Target size {width}x{height} has a zero dimension",
            width=width,
            height=height,
        )
    if width > settings.MAX_DIMENSION or height > settings.MAX_DIMENSION:
        raise InvalidDimensions(
            f"Target size {width}x{height} exceeds the {settings.MAX_DIMENSION}px limit",
            width=width,
            height=height,
        )
    if width * height > settings.MAX_PIXELS:
        raise InvalidDimensions(
            f"Target size {width}x{height} exceeds {settings.MAX_PIXELS} pixels",
            width=width,
            height=height,
        )


def _cubic(x: Array) -> Array:
    """Keys cubic convolution kernel evaluated at distances ``x``."""
    a = CUBIC_A
    x = np.abs(x)
    x2 = x * x
    x3 = x2 * x
    near = (a + 2.0) * x3 - (a + 3.0) * x2 + 1.0
    far = a * x3 - 5.0 * a * x2 + 8.0 * a * x - 4.0 * a
    return np.where(x <= 1.0, near, np.where(x < 2.0, far, 0.0))


def _axis_taps(src_len: int, dst_len: int) -> tuple[Array, Array]:
    """Source indices and weights (each shape (dst_len, 4)) for one axis.

    Output pixel centers are mapped back to source space with
    ``(i + 0.5) * src_len / dst_len - 0.5``. Weights are normalised so each
    row sums to 1; indices are clamped to ``[0, src_len - 1]``.
    """
    centers = (np.arange(dst_len, dtype=np.float64) + 0.5) * (src_len / dst_len) - 0.5
    base = np.floor(centers).astype(np.int64)
    idx = base[:, None] + np.arange(-1, 3, dtype=np.int64)[None, :]
    weights = _cubic(centers[:, None] - idx)
    weights /= weights.sum(axis=1, keepdims=True)
    idx = np.clip(idx, 0, src_len - 1)
    return idx, weights.astype(np.float32)


def resize_bicubic(
    arr: Array, new_h: int, new_w: int, band_rows: Optional[int] = None
) -> Array:
    """Resize an RGBA image to (new_h, new_w) via bicubic interpolation.

    Parameters
    ----------
    arr : np.ndarray
        Input array of shape (H, W, 4), dtype=uint8.
    new_h : int
        Target height (>=1).
    new_w : int
        Target width (>=1).
    band_rows : int | None
        Output rows computed per pass. Defaults to ``settings.BAND_ROWS``.
        Only affects peak memory, never the result.

    Returns
    -------
    np.ndarray
        Resized image, dtype=uint8. Equal to a copy of ``arr`` when the size
        is unchanged.
    """
    if not isinstance(arr, np.ndarray) or arr.ndim != 3 or arr.shape[2] != 4:
        raise ValueError("arr must be an RGBA image with shape (H, W, 4)")
    _check_dimensions(new_w, new_h)

    H, W, C = arr.shape
    if H == new_h and W == new_w:
        return arr.copy()

    band = band_rows or settings.BAND_ROWS
    ys, wy = _axis_taps(H, new_h)
    xs, wx = _axis_taps(W, new_w)

    src = arr.astype(np.float32)
    out = np.empty((new_h, new_w, C), dtype=np.uint8)

    for top in range(0, new_h, band):
        bottom = min(top + band, new_h)

        # Vertical pass for this band of output rows: (rows, W, C)
        rows = np.zeros((bottom - top, W, C), dtype=np.float32)
        for k in range(4):
            rows += wy[top:bottom, k, None, None] * src[ys[top:bottom, k]]

        # Horizontal pass: (rows, new_w, C)
        acc = np.zeros((bottom - top, new_w, C), dtype=np.float32)
        for k in range(4):
            acc += wx[None, :, k, None] * rows[:, xs[:, k], :]

        out[top:bottom] = np.clip(np.rint(acc), 0, 255).astype(np.uint8)

    return out


def resize_bicubic_scale(arr: Array, scale: float) -> Array:
    """Resize an RGBA image by a float ``scale`` via bicubic interpolation.

    Parameters
    ----------
    arr : np.ndarray
        Input array of shape (H, W, 4), dtype=uint8.
    scale : float
        Scale factor (>0). Values >1 upscale, <1 downscale. The target size
        is ``floor`` of each side times ``scale``.

    Returns
    -------
    np.ndarray
        Resized image.
    """
    if not scale > 0 or not math.isfinite(scale):
        raise ValueError("scale must be a finite number > 0")
    H, W, _ = arr.shape
    new_w, new_h = target_size(W, H, scale)
    return resize_bicubic(arr, new_h, new_w)
