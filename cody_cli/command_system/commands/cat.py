"""File viewing command for cody_cli."""
from typing import Any

from ..base import RequiredArgCommand, CommandResult


class CatCommand(RequiredArgCommand):
    """Print a file with syntax highlighting."""

    name = "cat"
    description = "View file contents"
    aliases = ["show", "read"]
    usage = "<file>"
    category = "files"

    def run(self, args: str = "", **kwargs: Any) -> CommandResult:
        cli = kwargs["cli"]
        loaded = cli.file_loader.load(args)
        if not loaded.success:
            return CommandResult.error(loaded.error)
        if loaded.is_binary:
            return CommandResult.error(loaded.format_for_prompt())

        cli.renderer.print()
        cli.renderer.print_code(loaded.content, loaded.extension or "text", title=loaded.name, max_lines=None)
        return CommandResult.success()
