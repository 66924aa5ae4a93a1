"""Script and shell execution commands for cody_cli."""
from typing import Any

from ..base import RequiredArgCommand, AsyncSlashCommand, CommandResult
from ...io_handlers.bash_runner import CommandResult as ProcessResult
from ...utils import resolve_path


def _show_output(cli, result: ProcessResult) -> None:
    if result.stdout:
        cli.renderer.print()
        cli.renderer.print(result.stdout, markup=False, highlight=False)
    if result.stderr:
        if result.success:
            cli.renderer.print(result.stderr, markup=False, highlight=False)
        else:
            cli.renderer.print_error(result.stderr)


class RunCommand(RequiredArgCommand, AsyncSlashCommand):
    """Run a script with the interpreter for its extension."""

    name = "run"
    description = "Execute a script file"
    aliases = ["x", "exec"]
    usage = "<file>"
    category = "shell"

    async def run_async(self, args: str = "", **kwargs: Any) -> CommandResult:
        cli = kwargs["cli"]
        path = resolve_path(args.strip(), cli.cwd)
        if not path.exists():
            return CommandResult.error("File not found")

        cli.renderer.print_tool_call("run_script", args.strip())
        result = await cli.runner.run_script(path)
        _show_output(cli, result)
        if not result.success:
            return CommandResult.error(f"Exited with code {result.return_code}")
        return CommandResult.success("Completed")


class ShellCommand(RequiredArgCommand, AsyncSlashCommand):
    """Run a shell command in the project directory."""

    name = "sh"
    description = "Run shell command"
    aliases = ["shell", "cmd", "$"]
    usage = "<command>"
    category = "shell"

    async def run_async(self, args: str = "", **kwargs: Any) -> CommandResult:
        cli = kwargs["cli"]
        command = args.strip()
        cli.renderer.print_tool_call("shell", command)
        result = await cli.runner.run_async(command, cwd=cli.cwd)
        _show_output(cli, result)
        if not result.success:
            return CommandResult.error(f"Exited with code {result.return_code}")
        return CommandResult.success()
