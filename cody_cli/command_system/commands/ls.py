"""Directory listing commands for cody_cli."""
from typing import Any

from ..base import SlashCommand, CommandResult
from ...io_handlers.project_tree import build_tree
from ...utils import resolve_path


class LsCommand(SlashCommand):
    """Show the contents of a directory as a tree."""

    name = "ls"
    description = "List directory contents"
    aliases = ["l", "dir", "list"]
    usage = "[path]"
    category = "files"

    # Depth shown; /tree has no limit
    max_depth = 1

    def run(self, args: str = "", **kwargs: Any) -> CommandResult:
        cli = kwargs["cli"]
        target = resolve_path(args.strip(), cli.cwd) if args.strip() else cli.cwd
        if not target.exists():
            return CommandResult.error("Path not found")
        if not target.is_dir():
            return CommandResult.error(f"Not a directory: {args.strip()}")

        theme = cli.renderer.theme
        cli.renderer.print()
        cli.renderer.print_tree(build_tree(
            target,
            max_depth=self.max_depth,
            dir_style=theme.get_style("directory"),
            folder_icon=cli.renderer.icon("folder"),
        ))
        cli.renderer.print()
        return CommandResult.success()


class TreeCommand(LsCommand):
    """Show the full directory tree."""

    name = "tree"
    description = "Show directory tree"
    aliases = ["t"]
    max_depth = None
