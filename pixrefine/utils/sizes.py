"""Human-readable byte sizes."""
from __future__ import annotations

_UNITS = ("B", "KB", "MB", "GB")


def format_file_size(num_bytes: int) -> str:
    """Format a byte count with 1024-based units, e.g. ``1.5 KB``.

    Values keep at most two decimals with trailing zeros dropped.
    """
    if num_bytes < 0:
        raise ValueError("num_bytes must be >= 0")
    if num_bytes == 0:
        return "0 B"
    i = 0
    while num_bytes >= 1024 ** (i + 1) and i < len(_UNITS) - 1:
        i += 1
    value = round(num_bytes / 1024 ** i, 2)
    return f"{value:g} {_UNITS[i]}"
