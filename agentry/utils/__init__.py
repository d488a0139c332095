"""Utility functions."""

from agentry.utils.helpers import format_error, normalize_id, truncate_output

__all__ = ["format_error", "normalize_id", "truncate_output"]
