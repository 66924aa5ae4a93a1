"""Config command for cody_cli."""
from typing import Any

from ..base import SlashCommand, CommandResult


class ConfigCommand(SlashCommand):
    """Show where configuration lives."""

    name = "config"
    description = "Show config file location"
    aliases = ["cfg", "settings"]
    category = "setup"

    def run(self, args: str = "", **kwargs: Any) -> CommandResult:
        cli = kwargs["cli"]
        config_file = cli.config_manager.config_file
        cli.renderer.print_info(f"Config directory: {config_file.parent}")
        cli.renderer.print_info(f"Config file: {config_file}")
        return CommandResult.success()
