"""Status command for cody_cli."""
from typing import Any

from ..base import SlashCommand, CommandResult


class StatusCommand(SlashCommand):
    """Show connection settings and session state."""

    name = "status"
    description = "Show current settings"
    aliases = ["st", "info"]
    category = "setup"

    def run(self, args: str = "", **kwargs: Any) -> CommandResult:
        """Execute status command."""
        cli = kwargs["cli"]
        config = cli.config
        renderer = cli.renderer

        connection = "[green]connected[/green]" if cli.connected else "[red]disconnected[/red]"
        if config.api_key:
            key = f"[green]configured[/green] ({config.masked_key})"
        else:
            key = "[red]not set[/red]"

        renderer.print_heading("Status")
        renderer.print_key_values([
            ("Status", connection),
            ("API URL", config.api_url or "not set"),
            ("Model", config.model or "not set"),
            ("API Key", key),
            ("Timeout", f"{config.timeout:g}s"),
            ("Project", str(cli.cwd)),
            ("Messages", str(cli.message_count)),
            ("Auto-save", "ON" if cli.auto_accept else "OFF"),
        ])
        return CommandResult.success()
