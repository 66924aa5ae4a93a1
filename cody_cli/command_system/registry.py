"""
Command registry for cody_cli.
Handles command registration, discovery, and lookup.
"""
import importlib
import inspect
import logging
import pkgutil
from pathlib import Path
from typing import Any, Dict, List, Optional

from .base import SlashCommand, CommandResult

logger = logging.getLogger(__name__)


class CommandRegistry:
    """
    Registry for slash commands.

    Supports auto-discovery of commands from the commands package
    and dynamic registration of custom commands.
    """

    _instance: Optional['CommandRegistry'] = None

    def __new__(cls) -> 'CommandRegistry':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self) -> None:
        if self._initialized:
            return
        self._initialized = True
        self._commands: Dict[str, SlashCommand] = {}
        self._aliases: Dict[str, str] = {}
        self._discover_commands()

    def _discover_commands(self) -> None:
        """Auto-discover and register commands from the commands package."""
        from . import commands as commands_package

        package_path = Path(commands_package.__file__).parent

        for module_info in pkgutil.iter_modules([str(package_path)]):
            if module_info.name.startswith('_'):
                continue

            try:
                module = importlib.import_module(
                    f".commands.{module_info.name}",
                    package=__package__
                )
            except ImportError as e:
                logger.warning("Failed to load command module %s: %s", module_info.name, e)
                continue

            for attr_name in dir(module):
                attr = getattr(module, attr_name)
                if (
                    isinstance(attr, type) and
                    issubclass(attr, SlashCommand) and
                    attr.__module__ == module.__name__ and
                    not inspect.isabstract(attr) and
                    not attr_name.startswith('_')
                ):
                    self.register(attr())

    def register(self, command: SlashCommand) -> None:
        """
        Register a command.

        Args:
            command: Command instance to register
        """
        self._commands[command.name] = command

        for alias in command.aliases:
            self._aliases[alias] = command.name

    def unregister(self, name: str) -> bool:
        """
        Unregister a command.

        Args:
            name: Command name

        Returns:
            True if command was unregistered
        """
        if name in self._commands:
            command = self._commands[name]
            for alias in command.aliases:
                self._aliases.pop(alias, None)
            del self._commands[name]
            return True
        return False

    def get(self, name: str) -> Optional[SlashCommand]:
        """
        Get a command by name or alias.

        Args:
            name: Command name or alias, with or without the leading slash

        Returns:
            Command instance or None
        """
        name = name.lower().lstrip("/") or name.lower()

        if name in self._commands:
            return self._commands[name]

        if name in self._aliases:
            return self._commands[self._aliases[name]]

        return None

    async def execute_async(self, name: str, args: str = "", **kwargs: Any) -> CommandResult:
        """
        Execute a command asynchronously.

        Args:
            name: Command name
            args: Command arguments
            **kwargs: Additional context

        Returns:
            CommandResult from execution
        """
        command = self.get(name)

        if command is None:
            return CommandResult.error(
                f"Unknown command: /{name}",
                errors=[f"Unknown command: /{name}", "Type /help for available commands"]
            )

        cli = kwargs.get("cli")
        if command.requires_connection and cli is not None and not cli.connected:
            return CommandResult.error("Not connected. Run /setup first.")

        validation_error = command.validate_args(args)
        if validation_error:
            return CommandResult.error(validation_error)

        logger.debug("Running /%s %s", command.name, args)
        try:
            return await command.run_async(args, **kwargs)
        except Exception as e:
            logger.exception("Command /%s failed", command.name)
            return CommandResult.error(f"Command error: {e}")

    def list_commands(self, include_hidden: bool = False) -> List[dict]:
        """
        List all registered commands.

        Args:
            include_hidden: Whether to include hidden commands

        Returns:
            List of command info dicts
        """
        commands = []
        for name, command in sorted(self._commands.items()):
            if command.hidden and not include_hidden:
                continue
            commands.append({
                "name": name,
                "description": command.description,
                "aliases": command.aliases,
                "usage": command.usage,
                "category": command.category,
            })
        return commands

    def list_command_names(self) -> List[str]:
        """List all command names (including aliases)."""
        names = list(self._commands.keys())
        names.extend(self._aliases.keys())
        return sorted(set(names))

    def get_help(self, name: str) -> Optional[str]:
        """
        Get help text for a command.

        Args:
            name: Command name

        Returns:
            Help text or None
        """
        command = self.get(name)
        if command:
            return command.get_help()
        return None

    def has_command(self, name: str) -> bool:
        """Check if a command exists."""
        return self.get(name) is not None

    @property
    def command_count(self) -> int:
        """Get number of registered commands."""
        return len(self._commands)


_registry: Optional[CommandRegistry] = None


def get_command_registry() -> CommandRegistry:
    """Get the global command registry instance."""
    global _registry
    if _registry is None:
        _registry = CommandRegistry()
    return _registry
