"""
Utility functions for cody_cli.
"""
import os
import sys
from pathlib import Path
from typing import Union


def truncate_string(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """
    Truncate a string to a maximum length.

    Args:
        text: The string to truncate
        max_length: Maximum length of the output string
        suffix: Suffix to append when truncating

    Returns:
        Truncated string
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix


def format_bytes(num_bytes: int) -> str:
    """Format a byte count as a human-readable string."""
    size = float(num_bytes)
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size < 1024:
            return f"{size:.0f} {unit}" if unit == 'B' else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"


def resolve_path(path: Union[str, Path], base_dir: Union[str, Path]) -> Path:
    """
    Resolve a user-supplied path.

    Args:
        path: Path as typed, possibly starting with ~ or relative
        base_dir: Directory relative paths are joined to

    Returns:
        Absolute, normalized path
    """
    expanded = Path(os.path.expandvars(str(path))).expanduser()
    if expanded.is_absolute():
        return Path(os.path.normpath(expanded))
    return (Path(base_dir) / expanded).resolve()


def is_windows() -> bool:
    """Check if running on Windows."""
    return sys.platform == 'win32'
