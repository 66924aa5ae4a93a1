"""Add-file command for cody_cli."""
from typing import Any

from ..base import RequiredArgCommand, AsyncSlashCommand, CommandResult


class AddCommand(RequiredArgCommand, AsyncSlashCommand):
    """Send a file to the model as part of the conversation."""

    name = "add"
    description = "Add file to conversation context"
    aliases = ["a", "include"]
    usage = "<file>"
    category = "files"
    requires_connection = True

    async def run_async(self, args: str = "", **kwargs: Any) -> CommandResult:
        cli = kwargs["cli"]
        path = args.strip()
        loaded = cli.file_loader.load(path)
        if not loaded.success:
            return CommandResult.error(loaded.error)
        if loaded.is_binary:
            return CommandResult.error(loaded.format_for_prompt())

        cli.renderer.print_tool_call("read_file", path)
        message = f"{loaded.format_for_prompt(path)}\n\nWhat would you like me to do?"
        await cli.send_message(message, with_structure=False)
        return CommandResult.success()
