"""Command system for cody_cli."""
from .base import SlashCommand, AsyncSlashCommand, CommandResult, CommandStatus
from .parser import CommandParser, ParsedInput, split_args
from .registry import CommandRegistry, get_command_registry

__all__ = [
    'SlashCommand', 'AsyncSlashCommand', 'CommandResult', 'CommandStatus',
    'CommandParser', 'ParsedInput', 'split_args',
    'CommandRegistry', 'get_command_registry'
]
