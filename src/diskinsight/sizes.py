"""Byte-size formatting and parsing shared by analyzers and display."""

import re

KB = 1024
MB = 1024 * KB
GB = 1024 * MB

_SIZE_UNITS = ["B", "KB", "MB", "GB", "TB"]

_SIZE_PATTERN = re.compile(r"([\d.]+)\s*([KMGT]?)B?", re.IGNORECASE)

_MULTIPLIERS = {
    "": 1,
    "K": 1024,
    "M": 1024**2,
    "G": 1024**3,
    "T": 1024**4,
}


def format_size(size_bytes: int) -> str:
    """
    Format bytes as a human-readable string (binary units, two decimals).

    Args:
        size_bytes: Size in bytes

    Returns:
        String such as "0.00 B" or "1.00 GB"
    """
    size = float(size_bytes)
    unit_index = 0
    while size >= 1024 and unit_index < len(_SIZE_UNITS) - 1:
        size /= 1024
        unit_index += 1
    return f"{size:.2f} {_SIZE_UNITS[unit_index]}"


def parse_size(size_str: str) -> int:
    """
    Parse a size string like "1.5GB" or "512kB" to bytes.

    Unit suffixes K/M/G/T are base 1024 and case-insensitive.
    Anything unparsable yields 0.
    """
    if not size_str:
        return 0

    match = _SIZE_PATTERN.search(size_str.strip())
    if not match:
        return 0

    try:
        value = float(match.group(1))
    except ValueError:
        return 0

    return int(value * _MULTIPLIERS[match.group(2).upper()])
