"""Change-directory command for cody_cli."""
from pathlib import Path
from typing import Any

from ..base import SlashCommand, CommandResult
from ...utils import resolve_path


class CdCommand(SlashCommand):
    """Switch the project directory."""

    name = "cd"
    description = "Change working directory"
    aliases = ["chdir"]
    usage = "<path>"
    category = "shell"

    def run(self, args: str = "", **kwargs: Any) -> CommandResult:
        cli = kwargs["cli"]
        target = resolve_path(args.strip(), cli.cwd) if args.strip() else Path.home()
        if not target.is_dir():
            return CommandResult.error("Directory not found")

        cli.change_directory(target)
        return CommandResult.success(f"Changed to {target}")
