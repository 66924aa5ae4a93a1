"""
File loader for cody_cli.
Reads files for /cat and /add with binary detection, encoding fallback and size limits.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

from ..utils import format_bytes, resolve_path


@dataclass
class LoadedFile:
    """Represents a loaded file."""
    path: str
    content: str
    size: int = 0
    encoding: str = ""
    is_binary: bool = False
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        """Check if file was loaded successfully."""
        return self.error is None

    @property
    def name(self) -> str:
        return Path(self.path).name

    @property
    def extension(self) -> str:
        return Path(self.path).suffix.lstrip('.')

    def format_for_prompt(self, label: Optional[str] = None) -> str:
        """Format file content for inclusion in a chat message."""
        if self.error:
            return f"[Error loading {self.path}: {self.error}]"

        if self.is_binary:
            return f"[Binary file: {self.path} ({format_bytes(self.size)})]"

        return f"Here's {label or self.name}:\n```\n{self.content}\n```"


class FileLoader:
    """
    Loads file contents for display and for inclusion in prompts.
    """

    MAX_FILE_SIZE = 1024 * 1024  # 1MB
    MAX_TEXT_SIZE = 100 * 1024   # 100KB for text inclusion

    TEXT_EXTENSIONS = {
        '.txt', '.md', '.py', '.js', '.ts', '.jsx', '.tsx',
        '.java', '.c', '.cpp', '.h', '.hpp', '.cs', '.go',
        '.rs', '.rb', '.php', '.swift', '.kt', '.scala',
        '.html', '.css', '.scss', '.json', '.yaml', '.yml',
        '.toml', '.xml', '.sql', '.sh', '.bash', '.ps1', '.bat',
        '.lua', '.pl', '.ini', '.cfg', '.conf', '.rst',
    }

    BINARY_EXTENSIONS = {
        '.png', '.jpg', '.jpeg', '.gif', '.bmp', '.ico', '.webp',
        '.mp3', '.wav', '.ogg', '.mp4', '.avi', '.mkv', '.mov',
        '.pdf', '.zip', '.tar', '.gz', '.rar', '.7z',
        '.exe', '.dll', '.so', '.dylib', '.pyc', '.class', '.o', '.obj',
    }

    ENCODINGS = ['utf-8', 'utf-16', 'latin-1']

    def __init__(self, base_dir: Optional[Union[str, Path]] = None) -> None:
        """
        Initialize file loader.

        Args:
            base_dir: Base directory for relative paths
        """
        self._base_dir = Path(base_dir) if base_dir else Path.cwd()

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    @base_dir.setter
    def base_dir(self, value: Union[str, Path]) -> None:
        self._base_dir = Path(value)

    def load(self, path: str) -> LoadedFile:
        """
        Load a file.

        Args:
            path: File path (absolute, relative or ~-prefixed)

        Returns:
            LoadedFile with contents or error
        """
        file_path = resolve_path(path.strip(), self._base_dir)

        if not file_path.exists():
            return LoadedFile(path=path, content="", error=f"File not found: {path}")
        if not file_path.is_file():
            return LoadedFile(path=path, content="", error=f"Not a file: {path}")

        try:
            size = file_path.stat().st_size
            if size > self.MAX_FILE_SIZE:
                return LoadedFile(
                    path=path,
                    content="",
                    size=size,
                    error=f"File too large: {format_bytes(size)} (max: {format_bytes(self.MAX_FILE_SIZE)})"
                )

            if self._is_binary(file_path):
                return LoadedFile(path=str(file_path), content="", size=size, encoding="binary", is_binary=True)

            content, encoding = self._read_text(file_path)
        except PermissionError:
            return LoadedFile(path=path, content="", error=f"Permission denied: {path}")
        except OSError as e:
            return LoadedFile(path=path, content="", error=str(e))

        if size > self.MAX_TEXT_SIZE:
            content = content[:self.MAX_TEXT_SIZE]
            content += f"\n\n... [truncated, showing first {format_bytes(self.MAX_TEXT_SIZE)} of {format_bytes(size)}]"

        return LoadedFile(path=str(file_path), content=content, size=size, encoding=encoding)

    def _is_binary(self, path: Path) -> bool:
        """Check if a file is binary."""
        suffix = path.suffix.lower()
        if suffix in self.TEXT_EXTENSIONS:
            return False
        if suffix in self.BINARY_EXTENSIONS:
            return True

        with open(path, 'rb') as f:
            chunk = f.read(8192)
        if not chunk:
            return False
        if b'\x00' in chunk:
            return True
        text_chars = bytearray({7, 8, 9, 10, 12, 13, 27} | set(range(0x20, 0x100)) - {0x7f})
        non_text = chunk.translate(None, text_chars)
        return len(non_text) / len(chunk) > 0.30

    def _read_text(self, path: Path) -> Tuple[str, str]:
        """Read text file with encoding detection."""
        for encoding in self.ENCODINGS:
            try:
                with open(path, 'r', encoding=encoding) as f:
                    return f.read(), encoding
            except UnicodeError:
                continue

        with open(path, 'r', encoding='utf-8', errors='replace') as f:
            return f.read(), 'utf-8 (with replacements)'
