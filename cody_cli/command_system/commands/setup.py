"""Setup command for cody_cli."""
from typing import Any

from ..base import AsyncSlashCommand, CommandResult
from .model import choose_model
from ...constants import DEFAULT_API_URL
from ...llm import ChatClient


class SetupCommand(AsyncSlashCommand):
    """
    Walk through API URL, key and model, test the connection and save.

    Empty answers keep the current values.
    """

    name = "setup"
    description = "Configure API connection"
    aliases = ["init"]
    category = "setup"

    async def run_async(self, args: str = "", **kwargs: Any) -> CommandResult:
        cli = kwargs["cli"]
        renderer = cli.renderer
        manager = cli.config_manager
        config = manager.config

        renderer.print_heading("Setup")
        renderer.print()

        default_url = config.api_url or DEFAULT_API_URL
        url = renderer.prompt_text("  API URL", default=default_url).rstrip("/")
        if url and url != config.api_url:
            manager.update(persist=False, api_url=url)
            cli.model_cache.clear()

        key_display = config.masked_key or "none"
        key = renderer.prompt_text(f"  API Key [{key_display}]", password=True)
        if key:
            manager.update(persist=False, api_key=key)
            cli.model_cache.clear()

        if config.api_url and config.api_key:
            with renderer.console.status("Testing connection"):
                ok, reason = await ChatClient(config, transport=cli.transport).test_connection()
            if ok:
                renderer.print_success("Connection successful")
            else:
                renderer.print_warning(f"Connection failed: {reason}")

        model = await choose_model(cli)
        if model:
            manager.update(persist=False, model=model)
            renderer.print_success(f"Selected {model}")

        manager.save()

        errors = manager.validate()
        if errors:
            return CommandResult.error("Setup incomplete", errors=errors)

        cli.connect()
        return CommandResult.success()
