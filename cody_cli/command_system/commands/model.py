"""Model selection command for cody_cli."""
import asyncio
from typing import Any

from ..base import AsyncSlashCommand, CommandResult
from ...rich_ui.menu import select_model_interactive


async def choose_model(cli) -> str:
    """
    Fetch the model list and let the user pick one.

    Returns:
        The chosen model ID, or "" when nothing was chosen
    """
    models = await cli.fetch_models()
    if not models:
        return ""
    cli.renderer.print()
    cli.renderer.print(f"  [bold]Select a model[/bold] [dim]({len(models)} available)[/dim]")
    # Dialogs start their own event loop
    choice = await asyncio.to_thread(select_model_interactive, models, cli.config.model)
    return choice or ""


class ModelCommand(AsyncSlashCommand):
    """Pick the model used for chat."""

    name = "model"
    description = "Select AI model"
    aliases = ["models", "m"]
    category = "setup"

    async def run_async(self, args: str = "", **kwargs: Any) -> CommandResult:
        cli = kwargs["cli"]
        if not (cli.config.api_url and cli.config.api_key):
            return CommandResult.error("Not connected. Run /setup first.")

        model = await choose_model(cli)
        if not model:
            return CommandResult.info("Model selection cancelled")

        cli.config_manager.update(model=model)
        cli.renderer.print_success(f"Selected {model}")
        cli.connect()
        return CommandResult.success()
