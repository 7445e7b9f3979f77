"""
Numeric parsing helpers for probe output.

Tool output is untrusted text: a usage column may read "N/A", "-", "42%"
or be empty. These helpers never raise; anything that is not a number
becomes the supplied default so threshold comparisons stay safe.

Usage:
    from hostcheck.utils.parsing import parse_percent
    if parse_percent(fields[4]) > 90:
        ...
"""

from typing import Any, Optional


def parse_int(value: Any, default: int = 0) -> int:
    """Parse an integer, returning default for anything non-numeric."""
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text:
        return default
    try:
        return int(text)
    except ValueError:
        pass
    try:
        # "12.7" style values truncate like shell integer arithmetic
        return int(float(text))
    except (ValueError, OverflowError):
        return default


def parse_float(value: Any, default: float = 0.0) -> float:
    """Parse a float, returning default for anything non-numeric."""
    if value is None:
        return default
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    text = str(value).strip()
    if not text:
        return default
    try:
        result = float(text)
    except ValueError:
        return default
    if result != result:  # NaN
        return default
    return result


def parse_percent(value: Any, default: int = 0) -> int:
    """Parse a df-style percentage column ("87%") into an int."""
    if value is None:
        return default
    return parse_int(str(value).strip().rstrip('%'), default)


def first_field(text: Optional[str], index: int = 0, default: str = "") -> str:
    """Return a whitespace-separated field from the first line of text."""
    if not text:
        return default
    lines = text.strip().splitlines()
    if not lines:
        return default
    fields = lines[0].split()
    if index < len(fields):
        return fields[index]
    return default


def round1(value: float) -> float:
    """Round to one decimal place."""
    return round(float(value), 1)
