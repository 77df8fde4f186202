"""3x3 convolution sharpening for NumPy RGBA arrays.

The kernel is applied to the RGB channels of interior pixels only. The
1-pixel border and the alpha channel are copied through unchanged, and every
output value is computed from the unmodified source.
"""
from __future__ import annotations

import numpy as np

Array = np.ndarray

# Edge-enhance kernel: sums to 1, so flat regions are left as they are.
SHARPEN_KERNEL = np.array(
    [
        [0, -1, 0],
        [-1, 5, -1],
        [0, -1, 0],
    ],
    dtype=np.int32,
)
SHARPEN_KERNEL.setflags(write=False)


def convolve3x3(arr: Array, kernel: Array) -> Array:
    """Convolve interior RGB values of an RGBA image with a 3x3 kernel.

    Parameters
    ----------
    arr : np.ndarray
        Input array of shape (H, W, 4), dtype=uint8.
    kernel : np.ndarray
        3x3 weights. Integer kernels are accumulated exactly; float kernels
        are rounded to nearest before clamping.

    Returns
    -------
    np.ndarray
        New array of the same shape. Images smaller than 3x3 come back as
        an unchanged copy.
    """
    if not isinstance(arr, np.ndarray) or arr.ndim != 3 or arr.shape[2] != 4:
        raise ValueError("arr must be an RGBA image with shape (H, W, 4)")
    kernel = np.asarray(kernel)
    if kernel.shape != (3, 3):
        raise ValueError("kernel must have shape (3, 3)")

    H, W, _ = arr.shape
    out = arr.copy()
    if H < 3 or W < 3:
        return out

    acc_dtype = np.int32 if np.issubdtype(kernel.dtype, np.integer) else np.float64
    src = arr[:, :, :3].astype(acc_dtype)
    acc = np.zeros((H - 2, W - 2, 3), dtype=acc_dtype)

    # Shifted-slice convolution; zero weights are skipped
    for dy in range(3):
        for dx in range(3):
            weight = kernel[dy, dx]
            if weight == 0:
                continue
            acc += weight * src[dy:dy + H - 2, dx:dx + W - 2]

    out[1:-1, 1:-1, :3] = np.clip(np.rint(acc), 0, 255).astype(np.uint8)
    return out


def sharpen(arr: Array) -> Array:
    """Sharpen an RGBA image with ``SHARPEN_KERNEL``."""
    return convolve3x3(arr, SHARPEN_KERNEL)
