"""Common utility functions."""

from enum import Enum
from typing import Any


def normalize_id(value: Any) -> str:
    """
    Normalize a string or symbolic identifier to its canonical string form.

    ``"read_file"``, ``":read_file"`` and an enum member whose value is
    ``"read_file"`` all normalize to ``"read_file"``.

    Args:
        value: Raw identifier.

    Returns:
        Canonical identifier string.
    """
    if isinstance(value, Enum):
        value = value.value
    return str(value).strip().lstrip(":")


def truncate_output(text: str, max_length: int = 4000) -> str:
    """
    Truncate text output to prevent context overflow.

    Args:
        text: Text to truncate.
        max_length: Maximum allowed length.

    Returns:
        Truncated text with indicator if truncated.
    """
    if len(text) <= max_length:
        return text
    half = max_length // 2
    return text[:half] + f"\n\n... [truncated {len(text) - max_length} chars] ...\n\n" + text[-half:]


def format_error(error: Exception) -> str:
    """
    Format an exception for display.

    Args:
        error: The exception to format.

    Returns:
        Human-readable error string.
    """
    error_type = type(error).__name__
    return f"{error_type}: {str(error)}"
