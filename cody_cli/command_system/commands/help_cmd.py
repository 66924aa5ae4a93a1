"""Help command for cody_cli."""
from typing import Any

from ..base import SlashCommand, CommandResult
from ..registry import get_command_registry


class HelpCommand(SlashCommand):
    """Display help information."""

    name = "help"
    description = "Show this help"
    aliases = ["h", "?"]
    usage = "[command]"
    examples = ["/help", "/help add"]

    def run(self, args: str = "", **kwargs: Any) -> CommandResult:
        """Execute help command."""
        registry = get_command_registry()

        if args.strip():
            command_name = args.strip().lstrip("/")
            help_text = registry.get_help(command_name)
            if help_text:
                kwargs["cli"].renderer.print(help_text, markup=False)
                return CommandResult.success()
            return CommandResult.error(f"Unknown command: {command_name}")

        kwargs["cli"].renderer.print_commands_help(registry.list_commands())
        return CommandResult.success()
