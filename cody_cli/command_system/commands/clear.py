"""Clear command for cody_cli."""
from typing import Any

from ..base import SlashCommand, CommandResult


class ClearCommand(SlashCommand):
    """Forget the conversation and start fresh."""

    name = "clear"
    description = "Clear conversation history"
    aliases = ["c", "cls"]
    category = "chat"

    def run(self, args: str = "", **kwargs: Any) -> CommandResult:
        """Execute clear command."""
        cli = kwargs["cli"]
        if not cli.connected:
            return CommandResult.info("Not connected")
        cli.reset_conversation()
        return CommandResult.success("Conversation cleared")
