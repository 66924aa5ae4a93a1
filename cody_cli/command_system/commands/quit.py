"""Quit command for cody_cli."""
from typing import Any

from ..base import SlashCommand, CommandResult


class QuitCommand(SlashCommand):
    """Exit the CLI."""

    name = "quit"
    description = "Exit Cody"
    aliases = ["q", "e", "exit"]

    def run(self, args: str = "", **kwargs: Any) -> CommandResult:
        """Execute quit command."""
        kwargs["cli"].save_session()
        return CommandResult.exit("Goodbye!")
