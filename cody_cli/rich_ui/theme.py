"""
Theme management for cody_cli Rich UI.
"""
from dataclasses import dataclass, field
from typing import Optional

from rich.theme import Theme as RichTheme


@dataclass
class ThemeColors:
    """Theme color definitions."""
    primary: str = "cyan"
    secondary: str = "magenta"
    accent: str = "yellow"
    success: str = "green"
    warning: str = "yellow"
    error: str = "red"
    info: str = "blue"
    muted: str = "bright_black"
    border: str = "grey42"


@dataclass
class ThemeStyles:
    """Styles for the pieces of a turn: reply marker, tool lines, diffs, trees."""
    assistant_marker: str = "magenta"
    error_message: str = "red"
    warning_message: str = "yellow"
    code_border: str = "grey50"
    tool_call: str = "bright_black"
    file_created: str = "green"
    file_modified: str = "yellow"
    diff_added: str = "green"
    diff_removed: str = "red"
    diff_context: str = "dim"
    directory: str = "cyan"


@dataclass
class Theme:
    """Complete theme definition."""
    name: str = "default"
    colors: ThemeColors = field(default_factory=ThemeColors)
    styles: ThemeStyles = field(default_factory=ThemeStyles)

    def to_rich_theme(self) -> RichTheme:
        """Convert to Rich Theme object."""
        style_dict = {
            "primary": self.colors.primary,
            "secondary": self.colors.secondary,
            "accent": self.colors.accent,
            "success": self.colors.success,
            "warning": self.colors.warning,
            "error": self.colors.error,
            "info": self.colors.info,
            "muted": self.colors.muted,
            "border": self.colors.border,
            "tool": self.styles.tool_call,
            "diff.added": self.styles.diff_added,
            "diff.removed": self.styles.diff_removed,
            "directory": self.styles.directory,
        }
        return RichTheme(style_dict)


class ThemeManager:
    """
    Holds the active theme and resolves style names against it.
    """

    _instance: Optional['ThemeManager'] = None

    def __new__(cls) -> 'ThemeManager':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self) -> None:
        if self._initialized:
            return
        self._initialized = True
        self._current_theme: Theme = Theme()

    @property
    def current_theme(self) -> Theme:
        """Get the current active theme."""
        return self._current_theme

    def get_rich_theme(self) -> RichTheme:
        """Get the current theme as a Rich Theme object."""
        return self._current_theme.to_rich_theme()

    def get_style(self, name: str) -> str:
        """
        Get a style string from the current theme.

        Args:
            name: Style name (e.g., 'diff_added', 'error_message')

        Returns:
            Style string or empty string if not found
        """
        return getattr(self._current_theme.styles, name, "")

    def get_color(self, name: str) -> str:
        """Get a color from the current theme, or empty string if not found."""
        return getattr(self._current_theme.colors, name, "")


def get_theme_manager() -> ThemeManager:
    """Get the global theme manager instance."""
    return ThemeManager()
