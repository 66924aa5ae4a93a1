"""
Shell command and script runner for cody_cli.
Backs the /sh, /run and /edit commands.
"""
import asyncio
import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from ..utils import is_windows

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30

# Interpreter command line for each runnable script extension
SCRIPT_RUNNERS: dict[str, list[str]] = {
    ".js": ["bun"],
    ".ts": ["bun"],
    ".tsx": ["bun"],
    ".jsx": ["bun"],
    ".py": ["python3"],
    ".sh": ["bash"],
    ".ps1": ["powershell", "-File"],
    ".bat": ["cmd", "/c"],
    ".rb": ["ruby"],
    ".go": ["go", "run"],
    ".rs": ["cargo", "script"],
    ".php": ["php"],
    ".pl": ["perl"],
}


@dataclass
class CommandResult:
    """Result of a shell command execution."""
    stdout: str
    stderr: str
    return_code: int
    command: str
    timed_out: bool = False

    @property
    def success(self) -> bool:
        """Check if command succeeded."""
        return self.return_code == 0

    @property
    def output(self) -> str:
        """Get combined output."""
        parts = []
        if self.stdout:
            parts.append(self.stdout)
        if self.stderr:
            parts.append(f"[stderr]\n{self.stderr}")
        return "\n".join(parts) if parts else "(no output)"


def get_script_runner(filename: Union[str, Path]) -> Optional[list[str]]:
    """
    Find the interpreter for a script.

    Args:
        filename: Script path

    Returns:
        Interpreter argv prefix, or None if the extension is not runnable
    """
    runner = SCRIPT_RUNNERS.get(Path(filename).suffix.lower())
    return list(runner) if runner else None


class BashRunner:
    """
    Executes shell commands and scripts.

    Supports command execution with timeout, output capture,
    and cross-platform shell selection.
    """

    DANGEROUS_COMMANDS = {
        "rm -rf /",
        "rm -rf ~",
        ":(){:|:&};:",
        "dd if=/dev/random",
        "mkfs",
        "chmod -R 777 /",
        "> /dev/sda",
    }

    def __init__(
        self,
        shell: Optional[str] = None,
        timeout: int = DEFAULT_TIMEOUT,
        env: Optional[dict] = None
    ) -> None:
        """
        Initialize bash runner.

        Args:
            shell: Shell to use (auto-detected if not provided)
            timeout: Default timeout in seconds
            env: Additional environment variables
        """
        self._shell = shell or self._detect_shell()
        self._timeout = timeout
        self._env = {**os.environ, **(env or {})}

    @property
    def shell(self) -> str:
        return self._shell

    def _detect_shell(self) -> str:
        """Detect the appropriate shell for the platform."""
        if is_windows():
            return "powershell.exe"

        for shell in ["/bin/bash", "/bin/zsh", "/bin/sh"]:
            if os.path.exists(shell):
                return shell

        return os.environ.get("SHELL", "/bin/sh")

    def _is_dangerous(self, command: str) -> bool:
        """Check if a command is potentially dangerous."""
        command_lower = command.lower().strip()
        return any(dangerous in command_lower for dangerous in self.DANGEROUS_COMMANDS)

    def _blocked(self, command: str) -> CommandResult:
        return CommandResult(
            stdout="",
            stderr="Command blocked: potentially dangerous operation",
            return_code=-1,
            command=command
        )

    async def _communicate(
        self,
        process: asyncio.subprocess.Process,
        command: str,
        timeout: float
    ) -> CommandResult:
        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            return CommandResult(
                stdout="",
                stderr=f"Command timed out ({timeout:g}s)",
                return_code=-1,
                command=command,
                timed_out=True
            )

        encoding = 'cp866' if is_windows() else 'utf-8'
        return CommandResult(
            stdout=stdout.decode(encoding, errors='replace').strip() if stdout else "",
            stderr=stderr.decode(encoding, errors='replace').strip() if stderr else "",
            return_code=process.returncode or 0,
            command=command
        )

    async def run_async(
        self,
        command: str,
        timeout: Optional[float] = None,
        cwd: Optional[Union[str, Path]] = None
    ) -> CommandResult:
        """
        Run a shell command asynchronously.

        Args:
            command: Command to execute
            timeout: Timeout in seconds
            cwd: Working directory

        Returns:
            CommandResult with execution results
        """
        if self._is_dangerous(command):
            return self._blocked(command)

        timeout = timeout or self._timeout
        flag = "-Command" if is_windows() else "-c"
        try:
            process = await asyncio.create_subprocess_exec(
                self._shell, flag, command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=cwd,
                env=self._env
            )
        except OSError as e:
            return CommandResult(stdout="", stderr=f"Failed to run command: {e}", return_code=-1, command=command)

        return await self._communicate(process, command, timeout)

    async def run_script(
        self,
        path: Union[str, Path],
        timeout: Optional[float] = None
    ) -> CommandResult:
        """
        Run a script with the interpreter matching its extension.

        The script runs with its own directory as the working directory.

        Args:
            path: Absolute path of the script
            timeout: Timeout in seconds

        Returns:
            CommandResult with execution results
        """
        path = Path(path)
        command = str(path)
        runner = get_script_runner(path)
        if runner is None:
            return CommandResult(
                stdout="",
                stderr=f"No runner configured for this file type: {path.suffix or 'unknown'}",
                return_code=-1,
                command=command
            )
        if not path.is_file():
            return CommandResult(stdout="", stderr=f"File not found: {path.name}", return_code=-1, command=command)

        argv = [*runner, path.name]
        logger.debug("Running script: %s", argv)
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(path.parent),
                env=self._env
            )
        except OSError as e:
            return CommandResult(stdout="", stderr=f"Failed to run command: {e}", return_code=-1, command=command)

        return await self._communicate(process, " ".join(argv), timeout or self._timeout)

    def run_interactive(self, argv: list[str], cwd: Optional[Union[str, Path]] = None) -> int:
        """
        Run a program attached to the terminal, e.g. an editor.

        Args:
            argv: Program and arguments
            cwd: Working directory

        Returns:
            Return code, or -1 if the program could not be started
        """
        try:
            return subprocess.call(argv, cwd=cwd, env=self._env)
        except OSError as e:
            logger.warning("Could not start %s: %s", argv[0], e)
            return -1


_runner: Optional[BashRunner] = None


def get_runner() -> BashRunner:
    """Get the global bash runner instance."""
    global _runner
    if _runner is None:
        _runner = BashRunner()
    return _runner
