"""Exception hierarchy for the transform pipeline.

Every failure the pipeline can surface derives from ``ProcessingError`` so
callers can show one generic message, while tests and richer callers can
still tell the kinds apart.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class ProcessingError(Exception):
    """Base exception for a failed transform."""

    stage: Optional[str] = None

    def __init__(
        self,
        message: str,
        stage: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        if stage is not None:
            self.stage = stage
        self.details = details or {}
        super().__init__(self.message)


class DecodeError(ProcessingError):
    """Raised when input bytes are not a readable image."""

    stage = "decode"


class InvalidDimensions(ProcessingError):
    """Raised when a target size is zero or above the configured maximum."""

    stage = "resample"

    def __init__(
        self,
        message: str,
        width: Optional[int] = None,
        height: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.details["width"] = width
        self.details["height"] = height


class EncodeError(ProcessingError):
    """Raised when the target encoder rejects the buffer or parameters."""

    stage = "encode"


class InvalidOptions(ProcessingError, ValueError):
    """Raised when ``ProcessOptions`` values fall outside their domain."""

    stage = "options"


class Cancelled(ProcessingError):
    """Raised at a stage boundary when the run's cancel token is set."""

    def __init__(self, stage: str) -> None:
        super().__init__(f"Transform cancelled before {stage}", stage=stage)


__all__ = [
    "ProcessingError",
    "DecodeError",
    "InvalidDimensions",
    "EncodeError",
    "InvalidOptions",
    "Cancelled",
]
