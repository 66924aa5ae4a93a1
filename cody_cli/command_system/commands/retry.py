"""Retry command for cody_cli."""
from typing import Any

from ..base import AsyncSlashCommand, CommandResult
from ...utils import truncate_string


class RetryCommand(AsyncSlashCommand):
    """Send the last user message again."""

    name = "retry"
    description = "Retry last message"
    aliases = ["r!"]
    category = "chat"
    requires_connection = True

    async def run_async(self, args: str = "", **kwargs: Any) -> CommandResult:
        cli = kwargs["cli"]
        message = cli.last_user_message
        if not message:
            return CommandResult.info("No message to retry")

        cli.renderer.print_info(f"Retrying: {truncate_string(message, 53)}")
        await cli.send_message(message)
        return CommandResult.success()
