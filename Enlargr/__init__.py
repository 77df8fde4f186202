from __future__ import annotations

# Alias package: re-export public API from the existing implementation.
from pixrefine.errors import (  # noqa: F401
    Cancelled,
    DecodeError,
    EncodeError,
    InvalidDimensions,
    InvalidOptions,
    ProcessingError,
)
from pixrefine.pipeline import (  # noqa: F401
    CancelToken,
    ImagePipeline,
    PipelineState,
    ProcessOptions,
    ProcessResult,
    transform,
)
from pixrefine.utils.encoder import OutputFormat, encode_image  # noqa: F401
from pixrefine.utils.loader import decode_image  # noqa: F401
from pixrefine.utils.resize import resize_bicubic, resize_bicubic_scale  # noqa: F401
from pixrefine.utils.sharpen import SHARPEN_KERNEL, sharpen  # noqa: F401
from pixrefine.worker import TransformWorker  # noqa: F401

__all__ = [
    "transform",
    "ProcessOptions",
    "ProcessResult",
    "OutputFormat",
    "PipelineState",
    "ImagePipeline",
    "CancelToken",
    "TransformWorker",
    "decode_image",
    "resize_bicubic",
    "resize_bicubic_scale",
    "sharpen",
    "SHARPEN_KERNEL",
    "encode_image",
    "ProcessingError",
    "DecodeError",
    "InvalidDimensions",
    "EncodeError",
    "InvalidOptions",
    "Cancelled",
]
