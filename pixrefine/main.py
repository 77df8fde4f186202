"""Command-line entry point for Enlargr.

This tool loads an image, resizes it by a scale factor with bicubic
interpolation, optionally sharpens the upscaled result, and re-encodes it
as WEBP, PNG or JPEG at the chosen quality.

All processing occurs on NumPy arrays; Pillow is used only for decoding
and encoding.

Usage example:
    python -m pixrefine.main -i input.png -o output.webp --scale 2 --quality 0.9 --sharpen
"""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional

from .config import settings
from .errors import ProcessingError
from .log import get_logger, setup_logging
from .pipeline import MAX_SCALE, MIN_SCALE, ProcessOptions, transform
from .utils.encoder import OutputFormat
from .utils.loader import DECODE_FORMATS, load_bytes

logger = get_logger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Parameters
    ----------
    argv : list[str] | None
        Optional list of arguments for testing. If None, uses sys.argv.

    Returns
    -------
    argparse.Namespace
        Parsed arguments.
    """
    parser = argparse.ArgumentParser(
        prog="enlargr",
        description=(
            "Upscale, sharpen and convert images locally. "
            "Resampling is bicubic with clamp-to-edge borders."
        ),
    )

    parser.add_argument("-i", "--input", required=True, help="Path to input image file")
    parser.add_argument("-o", "--output", required=True, help="Path to output image file")

    parser.add_argument(
        "--scale",
        type=float,
        default=1.0,
        help=f"Resize factor ({MIN_SCALE:g}-{MAX_SCALE:g}). Output size is floor(size * scale).",
    )
    parser.add_argument(
        "--format",
        type=str,
        default=None,
        choices=[f.value for f in OutputFormat] + ["jpg"],
        help="Output format. Default: taken from the output extension, else webp.",
    )
    parser.add_argument(
        "--quality",
        type=float,
        default=0.9,
        help="Encoder quality 0.0-1.0 for webp/jpeg (ignored for png).",
    )
    parser.add_argument(
        "--sharpen",
        action="store_true",
        help="Sharpen after upscaling. Has no effect when --scale is 1.",
    )
    parser.add_argument(
        "--input-type",
        type=str,
        default=None,
        choices=sorted(DECODE_FORMATS),
        help="MIME type of the input. Restricts decoding to that format.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level.",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        default=settings.LOG_FORMAT_JSON,
        help="Emit JSON log lines instead of console output.",
    )

    return parser.parse_args(argv)


def resolve_format(ns: argparse.Namespace) -> OutputFormat:
    """Output format from ``--format``, else the output extension, else WEBP."""
    if ns.format:
        return OutputFormat.parse(ns.format)
    try:
        return OutputFormat.from_path(ns.output)
    except ValueError:
        return OutputFormat.WEBP


def validate_args(ns: argparse.Namespace) -> ProcessOptions:
    """Validate argument values and build the pipeline options.

    Raises ValueError for invalid inputs.
    """
    if not Path(ns.input).is_file():
        raise ValueError(f"Input file not found: {ns.input}")
    return ProcessOptions(
        scale=ns.scale,
        format=resolve_format(ns),
        quality=ns.quality,
        sharpen=ns.sharpen,
    )


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry function for the CLI.

    Parameters
    ----------
    argv : list[str] | None
        Optional list of arguments for testing.

    Returns
    -------
    int
        0 on success, 1 if processing failed, 2 for argument errors.
    """
    args = parse_args(argv)
    setup_logging(args.log_level, json_format=args.json_logs)
    try:
        options = validate_args(args)
    except ValueError as e:
        print(f"Argument error: {e}")
        return 2

    # 1) Load bytes; the pipeline itself never touches the filesystem
    try:
        data = load_bytes(args.input)
    except OSError as e:
        print(f"Cannot read input: {e}")
        return 2

    # 2) Decode -> resample -> (sharpen) -> encode
    try:
        result = transform(data, options, mime_type=args.input_type)
    except ProcessingError as e:
        logger.error("processing_failed", error=e.message, stage=e.stage)
        print("Processing failed. The image may be too large or unreadable.")
        return 1

    # 3) Write the encoded buffer
    Path(args.output).write_bytes(result.data)
    print(
        f"Wrote {args.output} ({result.width}x{result.height}, "
        f"{result.mime_type}, {result.size_label})"
    )
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
