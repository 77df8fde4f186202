"""Runtime settings.

Values come from environment variables prefixed with ``PIXREFINE_`` (or a
local ``.env`` file) through Pydantic Settings. The pipeline only reads them.
"""
from __future__ import annotations

from typing import Tuple

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Limits and encoder tuning for the transform pipeline."""

    # ==========================================================================
    # Dimension limits
    # ==========================================================================
    MAX_DIMENSION: int = Field(default=16384, ge=1)
    MAX_PIXELS: int = Field(default=16384 * 16384, ge=1)

    # Output rows resampled per band; bounds the float working set.
    BAND_ROWS: int = Field(default=256, ge=1)

    # ==========================================================================
    # Encoders
    # ==========================================================================
    # JPEG has no alpha; transparent pixels are composited over this color.
    JPEG_BACKGROUND: Tuple[int, int, int] = (0, 0, 0)
    WEBP_METHOD: int = Field(default=4, ge=0, le=6)
    PNG_COMPRESS_LEVEL: int = Field(default=6, ge=0, le=9)

    # ==========================================================================
    # Logging
    # ==========================================================================
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT_JSON: bool = False

    model_config = SettingsConfigDict(
        env_prefix="PIXREFINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()
