"""Editor command for cody_cli."""
import os
from typing import Any

from ..base import RequiredArgCommand, CommandResult
from ...utils import resolve_path


def get_editor() -> str:
    """The user's editor: $EDITOR, then $VISUAL, then vim."""
    return os.environ.get("EDITOR") or os.environ.get("VISUAL") or "vim"


class EditCommand(RequiredArgCommand):
    """Open a file in the user's editor."""

    name = "edit"
    description = "Edit file in $EDITOR"
    aliases = ["ed", "vi", "vim"]
    usage = "<file>"
    category = "files"

    def run(self, args: str = "", **kwargs: Any) -> CommandResult:
        cli = kwargs["cli"]
        editor = get_editor()
        path = resolve_path(args.strip(), cli.cwd)
        cli.renderer.print_tool_call("edit", f"Opening in {editor}")

        code = cli.runner.run_interactive([editor, str(path)], cwd=cli.cwd)
        if code < 0:
            return CommandResult.error(f"Failed: could not start {editor}")
        return CommandResult.success()
