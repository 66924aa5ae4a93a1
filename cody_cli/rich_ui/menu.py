"""Interactive menu utilities for cody_cli."""
import asyncio
import logging
import sys
from typing import Any, List, Optional, Tuple

from prompt_toolkit import prompt
from prompt_toolkit.shortcuts import radiolist_dialog
from prompt_toolkit.styles import Style
from rich.console import Console
from rich.prompt import IntPrompt

logger = logging.getLogger(__name__)

console = Console()

# Dialogs get sluggish with very long lists
MAX_DIALOG_ITEMS = 50

DIALOG_STYLE = Style.from_dict({
    'dialog': 'bg:#1e1e1e',
    'dialog frame.label': 'bg:#00aaaa #ffffff bold',
    'dialog.body': 'bg:#1e1e1e #cccccc',
    'dialog shadow': 'bg:#000000',
    'button': 'bg:#004488',
    'button.focused': 'bg:#00aaaa',
    'radio-list': 'bg:#1e1e1e',
    'radio': 'bg:#1e1e1e',
    'radio-checked': '#00aaaa bold',
    'radio-selected': 'bg:#004488',
})


def _run_dialog(dialog):
    """Run a prompt_toolkit dialog, refusing when an event loop is already running."""
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return dialog.run()
    raise RuntimeError("Running in async context")


def filter_models(models: List[str], query: str) -> List[str]:
    """Case-insensitive substring filter."""
    query = query.strip().lower()
    if not query:
        return list(models)
    return [m for m in models if query in m.lower()]


def select_from_list(
    title: str,
    items: List[Tuple[Any, str]],
    description: str = "",
    default: Any = None
) -> Optional[Any]:
    """
    Show an interactive selection menu.

    Args:
        title: Title of the menu
        items: List of (value, label) tuples
        description: Optional description text
        default: Value selected initially

    Returns:
        Selected value or None if cancelled
    """
    if not items:
        console.print("[yellow]No items available to select[/yellow]")
        return None

    values = [value for value, _ in items]
    dialog = radiolist_dialog(
        title=title,
        text=description,
        values=items,
        default=default if default in values else None,
        style=DIALOG_STYLE,
    )
    try:
        return _run_dialog(dialog)
    except (RuntimeError, OSError) as e:
        logger.debug("Dialog unavailable: %s", e)
        console.print("[yellow]Falling back to console selection...[/yellow]\n")

    for idx, (_, label) in enumerate(items, 1):
        console.print(f"  {idx}. {label}")
    choice = IntPrompt.ask(
        "Select number",
        choices=[str(i) for i in range(1, len(items) + 1)],
        console=console,
    )
    return items[choice - 1][0]


def select_model_interactive(models: List[str], current: str = "") -> Optional[str]:
    """
    Pick a model, narrowing long lists with a search query first.

    Args:
        models: Model IDs to choose from
        current: Currently configured model, marked in the list

    Returns:
        The chosen model ID, or None if cancelled
    """
    if not models:
        console.print("[red]No models available[/red]")
        return None

    if not sys.stdin.isatty():
        choice = current or models[0]
        console.print(f"[dim]Using model: {choice}[/dim]")
        return choice

    candidates = list(models)
    while len(candidates) > MAX_DIALOG_ITEMS:
        console.print(
            f"[dim]{len(candidates)} models available. Type part of a name to narrow the list.[/dim]"
        )
        try:
            query = prompt("Search: ")
        except (EOFError, KeyboardInterrupt):
            return None
        narrowed = filter_models(candidates, query)
        if not narrowed:
            console.print("[yellow]No models match[/yellow]")
            continue
        candidates = narrowed

    items = [(m, f"{m} (current)" if m == current else m) for m in candidates]
    return select_from_list(
        title="Select a model",
        items=items,
        description=f"{len(models)} available",
        default=current,
    )
