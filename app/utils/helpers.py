"""
Common utility functions and helpers.
"""
import logging
import os
from typing import Optional

logger = logging.getLogger(__name__)


def safe_remove(path: Optional[str]) -> None:
    """Delete a file silently, logging warnings but never raising."""
    try:
        if path and os.path.exists(path):
            os.remove(path)
    except OSError as exc:
        logger.warning(f"Could not remove file {path!r}: {exc}")


def truncate_text(text: str, max_length: int = 200, suffix: str = "...") -> str:
    """
    Truncate text to maximum length.

    Args:
        text: Text to truncate
        max_length: Maximum length
        suffix: Suffix to add if truncated

    Returns:
        Truncated text
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix
