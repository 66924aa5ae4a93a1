"""
Icons and banner text for cody_cli.
"""
import sys
from typing import Optional

ICONS = {
    "cody": "◆",
    "user": "❯",
    "success": "✓",
    "error": "✗",
    "warning": "⚠",
    "info": "ℹ",
    "file": "📄",
    "folder": "📁",
    "edit": "✎",
    "run": "▶",
    "tool": "⚡",
    "arrow": "→",
    "bullet": "•",
}

ASCII_ICONS = {
    "cody": "*",
    "user": ">",
    "success": "[+]",
    "error": "[X]",
    "warning": "[!]",
    "info": "[i]",
    "file": "[F]",
    "folder": "[D]",
    "edit": "[E]",
    "run": "[>]",
    "tool": "[~]",
    "arrow": "->",
    "bullet": "*",
}

DIVIDER_CHAR = "─"
ASCII_DIVIDER_CHAR = "-"


def _can_use_unicode() -> bool:
    """Check if the terminal supports Unicode."""
    try:
        "◆❯✓".encode(sys.stdout.encoding or 'utf-8')
        return True
    except (UnicodeEncodeError, LookupError):
        return False


class ASCIIArt:
    """
    Icon lookup with a pure ASCII fallback for limited terminals.
    """

    def __init__(self, use_unicode: Optional[bool] = None) -> None:
        """
        Initialize ASCII art manager.

        Args:
            use_unicode: Whether to use Unicode characters.
                        Auto-detected if not specified.
        """
        if use_unicode is None:
            use_unicode = _can_use_unicode()
        self.use_unicode = use_unicode
        self._icons = ICONS if use_unicode else ASCII_ICONS
        self._divider = DIVIDER_CHAR if use_unicode else ASCII_DIVIDER_CHAR

    def get_icon(self, name: str, fallback: str = "") -> str:
        """
        Get an icon by name.

        Args:
            name: Icon name
            fallback: Fallback string if icon not found

        Returns:
            Icon string
        """
        return self._icons.get(name, fallback)

    def divider(self, width: int) -> str:
        return self._divider * max(width, 0)
