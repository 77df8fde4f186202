"""Decode -> resample -> (sharpen) -> encode pipeline.

``transform`` is the single public entry point: it takes raw image bytes
plus a ``ProcessOptions`` value and returns a ``ProcessResult`` holding the
re-encoded bytes, or raises a ``ProcessingError`` subclass. Nothing partial
is ever returned.

Sharpening only runs when it is requested *and* the image is being
upscaled (``scale > 1``); it exists to counteract interpolation blur.
"""
from __future__ import annotations

import math
import threading
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from .errors import (
    Cancelled,
    DecodeError,
    EncodeError,
    InvalidDimensions,
    InvalidOptions,
    ProcessingError,
)
from .log import get_logger, stage_context
from .utils.encoder import OutputFormat, encode_image
from .utils.loader import decode_image
from .utils.resize import resize_bicubic, target_size
from .utils.sharpen import sharpen
from .utils.sizes import format_file_size

logger = get_logger(__name__)

MIN_SCALE = 1.0
MAX_SCALE = 4.0


@dataclass(frozen=True)
class ProcessOptions:
    """Options for one pipeline run.

    ``format`` may be passed as an ``OutputFormat``, a short name such as
    ``"webp"`` or a MIME type such as ``"image/webp"``.
    """

    scale: float = 1.0
    format: OutputFormat = OutputFormat.WEBP
    quality: float = 0.9
    sharpen: bool = False

    def __post_init__(self) -> None:
        try:
            fmt = OutputFormat.parse(self.format)
        except ValueError as exc:
            raise InvalidOptions(str(exc)) from exc
        object.__setattr__(self, "format", fmt)

        try:
            scale = float(self.scale)
            quality = float(self.quality)
        except (TypeError, ValueError) as exc:
            raise InvalidOptions(f"scale and quality must be numbers: {exc}") from exc

        if not math.isfinite(scale) or not MIN_SCALE <= scale <= MAX_SCALE:
            raise InvalidOptions(
                f"scale must be within [{MIN_SCALE}, {MAX_SCALE}], got {self.scale}",
                details={"scale": self.scale},
            )
        if not math.isfinite(quality) or not 0.0 <= quality <= 1.0:
            raise InvalidOptions(
                f"quality must be within [0.0, 1.0], got {self.quality}",
                details={"quality": self.quality},
            )
        object.__setattr__(self, "scale", scale)
        object.__setattr__(self, "quality", quality)
        object.__setattr__(self, "sharpen", bool(self.sharpen))

    @property
    def applies_sharpen(self) -> bool:
        return self.sharpen and self.scale > 1.0


@dataclass(frozen=True)
class ProcessResult:
    """Encoded output of one successful run."""

    data: bytes
    width: int
    height: int
    format: OutputFormat

    @property
    def byte_length(self) -> int:
        return len(self.data)

    @property
    def mime_type(self) -> str:
        return self.format.mime_type

    @property
    def size_label(self) -> str:
        return format_file_size(self.byte_length)


class PipelineState(str, Enum):
    IDLE = "idle"
    DECODING = "decoding"
    RESAMPLING = "resampling"
    SHARPENING = "sharpening"
    ENCODING = "encoding"
    DONE = "done"
    FAILED = "failed"


class CancelToken:
    """Thread-safe flag checked by the pipeline between stages."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class ImagePipeline:
    """Single-use orchestrator for one transform.

    States advance strictly forward through
    ``IDLE -> DECODING -> RESAMPLING -> (SHARPENING) -> ENCODING -> DONE``;
    any error moves to ``FAILED`` and is re-raised.
    """

    def __init__(self, options: ProcessOptions, cancel: Optional[CancelToken] = None) -> None:
        self.options = options
        self.cancel = cancel
        self.run_id = uuid.uuid4().hex[:8]
        self.state = PipelineState.IDLE
        self.history: List[PipelineState] = [PipelineState.IDLE]

    def _advance(self, state: PipelineState) -> None:
        if state in self.history:
            raise RuntimeError(f"Pipeline state {state.value} already visited")
        self.state = state
        self.history.append(state)

    def _stage(
        self,
        state: PipelineState,
        name: str,
        error_cls: type,
        func: Callable[[], object],
    ):
        """Run one stage: check for cancel, advance, time and log it.

        Unexpected exceptions are wrapped in ``error_cls`` so callers only
        ever see ``ProcessingError`` subclasses.
        """
        if self.cancel is not None and self.cancel.cancelled:
            raise Cancelled(name)
        self._advance(state)
        with stage_context(name, run_id=self.run_id):
            start = time.perf_counter()
            try:
                result = func()
            except ProcessingError:
                raise
            except Exception as exc:
                raise error_cls(f"{name} failed: {exc}", stage=name) from exc
            duration_ms = int((time.perf_counter() - start) * 1000)
            logger.debug(f"{name}_completed", duration_ms=duration_ms)
        return result

    def run(self, data: bytes, mime_type: Optional[str] = None) -> ProcessResult:
        """Transform ``data`` according to ``self.options``."""
        if self.state is not PipelineState.IDLE:
            raise RuntimeError("ImagePipeline instances are single-use")
        opts = self.options
        try:
            pixels = self._stage(
                PipelineState.DECODING, "decode", DecodeError,
                lambda: decode_image(data, mime_type),
            )
            src_h, src_w = pixels.shape[:2]

            def resample():
                new_w, new_h = target_size(src_w, src_h, opts.scale)
                return resize_bicubic(pixels, new_h, new_w)

            # The decoded buffer is dropped as soon as resampling has a result.
            pixels = self._stage(
                PipelineState.RESAMPLING, "resample", InvalidDimensions, resample
            )
            new_h, new_w = pixels.shape[:2]
            if opts.applies_sharpen:
                pixels = self._stage(
                    PipelineState.SHARPENING, "sharpen", ProcessingError,
                    lambda: sharpen(pixels),
                )
            encoded = self._stage(
                PipelineState.ENCODING, "encode", EncodeError,
                lambda: encode_image(pixels, opts.format, opts.quality),
            )
        except ProcessingError as exc:
            self._fail(exc)
            raise

        self._advance(PipelineState.DONE)
        result = ProcessResult(
            data=encoded, width=new_w, height=new_h, format=opts.format
        )
        logger.info(
            "transform_completed",
            run_id=self.run_id,
            source=f"{src_w}x{src_h}",
            output=f"{new_w}x{new_h}",
            format=opts.format.value,
            sharpened=opts.applies_sharpen,
            size=result.size_label,
        )
        return result

    def _fail(self, exc: ProcessingError) -> None:
        failed_in = self.state
        self.state = PipelineState.FAILED
        self.history.append(PipelineState.FAILED)
        if isinstance(exc, Cancelled):
            logger.info("transform_cancelled", run_id=self.run_id, stage=exc.stage)
        else:
            logger.warning(
                "transform_failed",
                run_id=self.run_id,
                state=failed_in.value,
                error=exc.message,
                error_type=type(exc).__name__,
            )


def transform(
    data: bytes,
    options: Optional[ProcessOptions] = None,
    cancel: Optional[CancelToken] = None,
    mime_type: Optional[str] = None,
) -> ProcessResult:
    """Decode, resample, optionally sharpen and re-encode an image.

    Parameters
    ----------
    data : bytes
        The encoded source image.
    options : ProcessOptions | None
        Scale, output format, quality and sharpen flag. Defaults to
        ``ProcessOptions()``.
    cancel : CancelToken | None
        Checked before each stage; once cancelled the run raises
        ``Cancelled``.
    mime_type : str | None
        Claimed type of ``data``, restricting which decoder is used.

    Returns
    -------
    ProcessResult

    Raises
    ------
    ProcessingError
        ``DecodeError``, ``InvalidDimensions``, ``EncodeError`` or
        ``Cancelled``; the first error stops the run.
    """
    return ImagePipeline(options or ProcessOptions(), cancel=cancel).run(data, mime_type)

