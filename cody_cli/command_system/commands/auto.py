"""Auto-accept toggle for cody_cli."""
from typing import Any

from ..base import SlashCommand, CommandResult


class AutoCommand(SlashCommand):
    """Toggle saving extracted files without asking."""

    name = "auto"
    description = "Toggle auto-accept file saves"
    aliases = ["y"]
    category = "chat"

    def run(self, args: str = "", **kwargs: Any) -> CommandResult:
        cli = kwargs["cli"]
        cli.auto_accept = not cli.auto_accept
        return CommandResult.info(f"Auto-accept: {'ON' if cli.auto_accept else 'OFF'}")
