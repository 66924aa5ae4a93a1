"""
Project structure rendering.

The same directory walk feeds both the plain-text structure sent to the
model with the first message and the Rich tree shown by /ls and /tree.
"""
from pathlib import Path
from typing import Iterator, Optional, Union

from rich.markup import escape
from rich.tree import Tree

from ..constants import SKIP_DIRS


def _visible_entries(directory: Path) -> list[Path]:
    """Directories first, then files, alphabetically; hidden and skipped names dropped."""
    try:
        entries = [
            e for e in directory.iterdir()
            if not e.name.startswith(".") and e.name not in SKIP_DIRS
        ]
    except OSError:
        return []

    def sort_key(entry: Path) -> tuple[bool, str]:
        try:
            is_dir = entry.is_dir()
        except OSError:
            is_dir = False
        return (not is_dir, entry.name)

    return sorted(entries, key=sort_key)


def _is_dir(path: Path) -> bool:
    try:
        return path.is_dir()
    except OSError:
        return False


def walk_structure(root: Path, max_depth: Optional[int] = None) -> Iterator[tuple[str, Path, bool]]:
    """
    Yield (prefix, path, is_dir) for every visible entry under `root`.

    Args:
        root: Directory to walk
        max_depth: Stop descending below this depth, None for unlimited
    """
    def walk(directory: Path, indent: str, depth: int) -> Iterator[tuple[str, Path, bool]]:
        entries = _visible_entries(directory)
        for index, entry in enumerate(entries):
            last = index == len(entries) - 1
            connector = "└── " if last else "├── "
            is_dir = _is_dir(entry)
            yield indent + connector, entry, is_dir
            if is_dir and (max_depth is None or depth < max_depth):
                yield from walk(entry, indent + ("    " if last else "│   "), depth + 1)

    yield from walk(root, "", 1)


def get_structure(root: Union[str, Path], max_depth: Optional[int] = None) -> str:
    """
    Render the project structure as plain text.

    Args:
        root: Project directory
        max_depth: Optional depth limit

    Returns:
        Tree text starting with the directory name
    """
    root = Path(root)
    lines = [f"{root.name or str(root)}/"]
    for prefix, entry, is_dir in walk_structure(root, max_depth):
        lines.append(f"{prefix}{entry.name}{'/' if is_dir else ''}")
    return "\n".join(lines)


def build_tree(
    root: Union[str, Path],
    max_depth: Optional[int] = None,
    dir_style: str = "cyan",
    folder_icon: str = "📁"
) -> Tree:
    """
    Build a Rich tree of the project for display.

    Args:
        root: Directory to show
        max_depth: Optional depth limit
        dir_style: Style for directory names
        folder_icon: Icon shown before the root

    Returns:
        rich.tree.Tree ready to print
    """
    root = Path(root)
    tree = Tree(f"[{dir_style}]{folder_icon}[/] {escape(root.name or str(root))}/", guide_style="dim")

    def add(parent: Tree, directory: Path, depth: int) -> None:
        for entry in _visible_entries(directory):
            if _is_dir(entry):
                branch = parent.add(f"[{dir_style}]{escape(entry.name)}/[/]")
                if max_depth is None or depth < max_depth:
                    add(branch, entry, depth + 1)
            else:
                parent.add(escape(entry.name))

    add(tree, root, 1)
    return tree
