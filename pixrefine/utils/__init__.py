"""Image transform building blocks for pixrefine.

Modules:
- loader: Decode image bytes into NumPy RGBA arrays.
- resize: Bicubic resampling to arbitrary output size.
- sharpen: 3x3 convolution sharpening of interior RGB values.
- encoder: Encode NumPy RGBA arrays as PNG, JPEG or WEBP.
- sizes: Human-readable byte sizes.
"""
from .loader import decode_image, load_bytes
from .resize import target_size, resize_bicubic, resize_bicubic_scale
from .sharpen import SHARPEN_KERNEL, convolve3x3, sharpen
from .encoder import OutputFormat, encode_image
from .sizes import format_file_size

__all__ = [
    "decode_image",
    "load_bytes",
    "target_size",
    "resize_bicubic",
    "resize_bicubic_scale",
    "SHARPEN_KERNEL",
    "convolve3x3",
    "sharpen",
    "OutputFormat",
    "encode_image",
    "format_file_size",
]
