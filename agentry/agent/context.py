"""Context strings used to seed agent memory."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

from loguru import logger

PROJECT_SUMMARY_FILE = "PROJECT_SUMMARY.md"
CODE_INDEX_FILE = Path(".agentry") / "code_index.txt"

_SEPARATOR = "======================="


def _read(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Skipping context file {path}: {e}")
        return None


def build_context_strings(working_directory: str | Path, context: Any) -> list[str]:
    """
    Build the context strings for an agent.

    Args:
        working_directory: Project root used to find the summary and code index.
        context: ``True`` for the project summary and code index, a list of
            file paths to include verbatim, or anything else for no context.

    Returns:
        Context strings in order; missing files are skipped.
    """
    root = Path(working_directory).expanduser()

    if context is True:
        strings: list[str] = []
        summary = root / PROJECT_SUMMARY_FILE
        if summary.is_file() and (text := _read(summary)) is not None:
            strings.append(f"This is a project summary:\n{text}")
        code_index = root / CODE_INDEX_FILE
        if code_index.is_file() and (text := _read(code_index)) is not None:
            strings.append(
                "This is a code index of the code in this project.\n"
                "Please use it to inform you as to which files should be investigated.\n"
                f"{_SEPARATOR}\n{text}"
            )
        return strings

    if isinstance(context, Sequence) and not isinstance(context, str):
        strings = []
        for file_path in context:
            path = Path(file_path).expanduser()
            if not path.is_absolute():
                path = root / path
            if not path.is_file():
                logger.debug(f"Context file not found: {file_path}")
                continue
            text = _read(path)
            if text is not None:
                strings.append(f"File: {file_path}\n{_SEPARATOR}\n{text}\n\n")
        return strings

    return []
