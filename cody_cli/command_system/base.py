"""
Base classes for the command system in cody_cli.
"""
import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional


class CommandStatus(Enum):
    """Status of command execution."""
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass
class CommandResult:
    """Result of a command execution."""
    status: CommandStatus = CommandStatus.SUCCESS
    message: str = ""
    data: Any = None
    should_exit: bool = False
    should_clear: bool = False
    errors: List[str] = field(default_factory=list)

    @property
    def is_success(self) -> bool:
        """Check if command succeeded."""
        return self.status != CommandStatus.ERROR

    @property
    def is_error(self) -> bool:
        """Check if command failed."""
        return self.status == CommandStatus.ERROR

    @classmethod
    def success(cls, message: str = "", data: Any = None) -> 'CommandResult':
        """Create a success result."""
        return cls(status=CommandStatus.SUCCESS, message=message, data=data)

    @classmethod
    def info(cls, message: str) -> 'CommandResult':
        """Create an informational result."""
        return cls(status=CommandStatus.INFO, message=message)

    @classmethod
    def error(cls, message: str, errors: Optional[List[str]] = None) -> 'CommandResult':
        """Create an error result."""
        return cls(
            status=CommandStatus.ERROR,
            message=message,
            errors=errors or [message]
        )

    @classmethod
    def exit(cls, message: str = "Goodbye!") -> 'CommandResult':
        """Create an exit result."""
        return cls(status=CommandStatus.SUCCESS, message=message, should_exit=True)

    @classmethod
    def clear(cls, message: str = "") -> 'CommandResult':
        """Create a clear screen result."""
        return cls(status=CommandStatus.SUCCESS, message=message, should_clear=True)


# Help sections, in display order
CATEGORIES = ["setup", "files", "shell", "chat", "other"]


class SlashCommand(ABC):
    """
    Base class for all slash commands.

    All commands must inherit from this class and implement the run method.
    Commands are auto-discovered and registered based on their class attributes.
    The running CLI is passed to every command as the ``cli`` keyword.
    """

    name: str = ""
    description: str = ""
    aliases: List[str] = []
    usage: str = ""
    examples: List[str] = []
    category: str = "other"
    hidden: bool = False
    requires_connection: bool = False

    def __init__(self) -> None:
        """Initialize the command."""
        if not self.name:
            self.name = self.__class__.__name__.lower().replace("command", "")

    @abstractmethod
    def run(self, args: str = "", **kwargs: Any) -> CommandResult:
        """
        Execute the command.

        Args:
            args: Command arguments as a string
            **kwargs: Additional context (cli)

        Returns:
            CommandResult with execution status
        """
        pass

    async def run_async(self, args: str = "", **kwargs: Any) -> CommandResult:
        """
        Execute the command asynchronously.

        Default implementation calls the sync run method.
        Override for async operations.
        """
        return self.run(args, **kwargs)

    def get_help(self) -> str:
        """Get detailed help text for the command."""
        parts = [
            f"/{self.name} - {self.description}",
        ]

        if self.usage:
            parts.append(f"Usage: /{self.name} {self.usage}")

        if self.aliases:
            parts.append(f"Aliases: {', '.join('/' + a for a in self.aliases)}")

        if self.examples:
            parts.append("Examples:")
            for example in self.examples:
                parts.append(f"  {example}")

        return "\n".join(parts)

    def validate_args(self, args: str) -> Optional[str]:
        """
        Validate command arguments.

        Args:
            args: Arguments string

        Returns:
            Error message if invalid, None if valid
        """
        return None

    def __repr__(self) -> str:
        return f"<SlashCommand /{self.name}>"


class AsyncSlashCommand(SlashCommand):
    """Base class for commands that talk to the network or run processes."""

    def run(self, args: str = "", **kwargs: Any) -> CommandResult:
        """Sync wrapper for callers outside an event loop."""
        return asyncio.run(self.run_async(args, **kwargs))

    @abstractmethod
    async def run_async(self, args: str = "", **kwargs: Any) -> CommandResult:
        """Execute the command asynchronously."""
        pass


class RequiredArgCommand(SlashCommand):
    """Command whose first argument is mandatory."""

    def validate_args(self, args: str) -> Optional[str]:
        if not args.strip():
            return f"Usage: /{self.name} {self.usage}"
        return None
