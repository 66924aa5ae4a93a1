"""
Interactive input handler using prompt_toolkit for cody_cli.
Provides slash-command and file-path completion with a status toolbar.
"""
import os
from pathlib import Path
from typing import Iterable, List, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.styles import Style


PROMPT_STYLE = Style.from_dict({
    'prompt.online': '#00ff00 bold',
    'prompt.offline': '#ff0000 bold',
    'bottom-toolbar': 'bg:#1a1a1a #666666',
    'completion-menu.completion': 'bg:#262626 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000 bold',
    'completion-menu.meta.completion': 'bg:#262626 #666666',
    'completion-menu.meta.completion.current': 'bg:#00aaaa #000000',
})

# Commands whose first argument is a path
PATH_COMMANDS = frozenset({
    'cat', 'show', 'read', 'add', 'a', 'include', 'edit', 'ed', 'vi', 'vim',
    'run', 'x', 'exec', 'cd', 'chdir', 'ls', 'l', 'dir', 'list', 'tree', 't',
})

MAX_PATH_COMPLETIONS = 30


class CLICompleter(Completer):
    """
    Completes slash command names and, for file commands, paths.
    """

    def __init__(self) -> None:
        self._commands: List[tuple] = []
        self._base_dir: Optional[Path] = None

    def set_commands(self, commands: List[dict]) -> None:
        """Set available slash commands."""
        self._commands = [
            (cmd['name'], cmd['description'][:50])
            for cmd in commands
        ]

    def set_base_dir(self, path: Path) -> None:
        self._base_dir = Path(path)

    def get_completions(self, document: Document, complete_event) -> Iterable[Completion]:
        """Get completions based on current input."""
        text = document.text_before_cursor
        if not text.startswith('/'):
            return

        if ' ' not in text:
            yield from self._get_command_completions(text)
            return

        name, _, arg = text[1:].partition(' ')
        if name.lower() in PATH_COMMANDS and ' ' not in arg:
            yield from self._get_path_completions(arg)

    def _get_command_completions(self, text: str) -> Iterable[Completion]:
        query = text[1:].lower()
        for name, desc in self._commands:
            if name.lower().startswith(query):
                yield Completion(
                    f'/{name}',
                    start_position=-len(text),
                    display=f'/{name}',
                    display_meta=desc
                )

    def _get_path_completions(self, path_text: str) -> Iterable[Completion]:
        base = self._base_dir or Path.cwd()
        path = Path(path_text).expanduser()
        if not path.is_absolute():
            path = base / path

        if not path_text or path_text.endswith(('/', os.sep)):
            search_dir, partial = path, ''
        else:
            search_dir, partial = path.parent, path.name.lower()

        prefix = path_text[:len(path_text) - len(partial)] if partial else path_text
        try:
            entries = sorted(
                (e for e in search_dir.iterdir() if e.name.lower().startswith(partial)),
                key=lambda e: (not e.is_dir(), e.name.lower())
            )
        except OSError:
            return

        for entry in entries[:MAX_PATH_COMPLETIONS]:
            suffix = '/' if entry.is_dir() else ''
            yield Completion(
                f'{prefix}{entry.name}{suffix}',
                start_position=-len(path_text),
                display=f'{entry.name}{suffix}',
                display_meta='[DIR]' if entry.is_dir() else ''
            )


def format_status(cwd: str, model: str) -> str:
    """Bottom toolbar text: directory and model."""
    home = os.path.expanduser('~')
    display_path = '~' + cwd[len(home):] if cwd.startswith(home) else cwd
    return f" {display_path}    |    {model or 'no model'} "


class PromptInput:
    """
    Interactive input handler with prompt_toolkit.
    """

    def __init__(self) -> None:
        self._completer = CLICompleter()
        self._history = InMemoryHistory()
        self._session: Optional[PromptSession] = None
        self._cwd = os.getcwd()
        self._model = ''

    @property
    def completer(self) -> CLICompleter:
        return self._completer

    def set_commands(self, commands: List[dict]) -> None:
        """Set available slash commands."""
        self._completer.set_commands(commands)

    def set_status(self, cwd: Optional[str] = None, model: Optional[str] = None) -> None:
        """Update toolbar info."""
        if cwd is not None:
            self._cwd = cwd
            self._completer.set_base_dir(Path(cwd))
        if model is not None:
            self._model = model

    def _get_toolbar(self) -> HTML:
        return HTML(format_status(self._cwd, self._model).replace('&', '&amp;').replace('<', '&lt;'))

    def _create_session(self) -> PromptSession:
        return PromptSession(
            completer=self._completer,
            complete_while_typing=True,
            history=self._history,
            style=PROMPT_STYLE,
            bottom_toolbar=self._get_toolbar,
            mouse_support=False,
        )

    def get_input(self, icon: str = '❯', connected: bool = True) -> str:
        """
        Read one line of input.

        Args:
            icon: Prompt marker
            connected: Green marker when True, red otherwise

        Returns:
            The line, '/quit' on EOF, or '' on Ctrl+C
        """
        if self._session is None:
            self._session = self._create_session()

        style = 'class:prompt.online' if connected else 'class:prompt.offline'
        try:
            return self._session.prompt([('', '\n  '), (style, icon), ('', ' ')])
        except EOFError:
            return '/quit'
        except KeyboardInterrupt:
            return ''


_prompt_input: Optional[PromptInput] = None


def get_prompt_input() -> PromptInput:
    """Get global prompt input instance."""
    global _prompt_input
    if _prompt_input is None:
        _prompt_input = PromptInput()
    return _prompt_input
