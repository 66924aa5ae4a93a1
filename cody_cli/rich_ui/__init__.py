"""Rich UI components for cody_cli."""
from .renderer import RichRenderer, get_renderer
from .theme import ThemeManager, Theme, get_theme_manager
from .ascii import ASCIIArt
from .prompt_input import PromptInput, CLICompleter, get_prompt_input
from .menu import filter_models, select_from_list, select_model_interactive

__all__ = [
    'RichRenderer', 'get_renderer',
    'ThemeManager', 'Theme', 'get_theme_manager',
    'ASCIIArt',
    'PromptInput', 'CLICompleter', 'get_prompt_input',
    'filter_models', 'select_from_list', 'select_model_interactive',
]
