"""I/O handlers for cody_cli."""
from .bash_runner import BashRunner, CommandResult, get_runner, get_script_runner
from .file_loader import FileLoader, LoadedFile
from .file_writer import FileWriter, WriteSummary
from .project_tree import build_tree, get_structure

__all__ = [
    'BashRunner', 'CommandResult', 'get_runner', 'get_script_runner',
    'FileLoader', 'LoadedFile',
    'FileWriter', 'WriteSummary',
    'build_tree', 'get_structure',
]
