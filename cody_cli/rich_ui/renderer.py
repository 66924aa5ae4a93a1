"""
Rich UI renderer for cody_cli.
Handles rendering of status lines, streamed replies, code, diffs and trees.
"""
import difflib
from typing import Any, Iterable, Optional

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from .ascii import ASCIIArt
from .theme import ThemeManager, get_theme_manager
from ..constants import APP_DESCRIPTION, APP_VERSION

# Lines shown for file previews and /cat before truncating
PREVIEW_LINES = 15
# Changed lines shown in a diff before truncating
DIFF_LINES = 40


class RichRenderer:
    """
    Main renderer for all terminal output.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        """
        Initialize the Rich renderer.

        Args:
            console: Optional Rich Console instance
        """
        self._theme_manager = get_theme_manager()
        self._console = console or Console(
            theme=self._theme_manager.get_rich_theme(),
            highlight=False,
        )
        self._ascii_art = ASCIIArt()

    @property
    def console(self) -> Console:
        """Get the Rich console."""
        return self._console

    @property
    def theme(self) -> ThemeManager:
        """Get the theme manager."""
        return self._theme_manager

    def icon(self, name: str) -> str:
        return self._ascii_art.get_icon(name)

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Print to console with current theme."""
        self._console.print(*args, **kwargs)

    def print_banner(self) -> None:
        """Print the application banner."""
        primary = self._theme_manager.get_color("primary")
        self._console.print()
        self._console.print(
            f"  [bold {primary}]{self.icon('cody')} CODY[/] [dim]v{APP_VERSION}[/dim]"
        )
        self.divider(50)
        self._console.print(
            f"  [dim]{APP_DESCRIPTION}. Type [/dim][yellow]/help[/yellow][dim] for commands.[/dim]"
        )
        self._console.print()

    def divider(self, width: int = 60) -> None:
        width = min(width, self._console.width - 4)
        self._console.print(f"  [dim]{self._ascii_art.divider(width)}[/dim]")

    def print_heading(self, title: str) -> None:
        self._console.print()
        self._console.print(f"  [bold]{escape(title)}[/bold]")
        self.divider()

    def print_success(self, message: str) -> None:
        style = self._theme_manager.get_color("success")
        self._console.print(f"  [{style}]{self.icon('success')}[/] {escape(message)}")

    def print_error(self, message: str) -> None:
        style = self._theme_manager.get_style("error_message")
        self._console.print(f"  [{style}]{self.icon('error')}[/] {escape(message)}")

    def print_warning(self, message: str) -> None:
        style = self._theme_manager.get_style("warning_message")
        self._console.print(f"  [{style}]{self.icon('warning')}[/] {escape(message)}")

    def print_info(self, message: str) -> None:
        style = self._theme_manager.get_color("info")
        self._console.print(f"  [{style}]{self.icon('info')}[/] [dim]{escape(message)}[/dim]")

    def print_tool_call(self, name: str, detail: str = "") -> None:
        """
        Print a one-line notice for an action taken on the user's behalf.

        Args:
            name: Action name, e.g. 'write_file'
            detail: Optional argument preview
        """
        style = self._theme_manager.get_style("tool_call")
        line = Text(f"  {self.icon('tool')} {name}", style=style)
        if detail:
            line.append(f" {detail}", style="dim")
        self._console.print(line)

    def print_file_change(self, filename: str, created: bool) -> None:
        if created:
            style, marker = self._theme_manager.get_style("file_created"), "+"
        else:
            style, marker = self._theme_manager.get_style("file_modified"), "~"
        self._console.print(Text.assemble(("  ", ""), (marker, style), (f" {filename}", "")))

    def begin_reply(self) -> None:
        """Print the assistant marker that precedes a streamed reply."""
        style = self._theme_manager.get_style("assistant_marker")
        self._console.print()
        self._console.print(f"  [{style}]{self.icon('cody')}[/] ", end="")

    def print_delta(self, text: str) -> None:
        """Append a streamed delta verbatim."""
        self._console.print(text, end="", markup=False, highlight=False, soft_wrap=True)

    def end_reply(self) -> None:
        self._console.print()
        self._console.print()

    def print_code(
        self,
        code: str,
        language: str = "text",
        title: Optional[str] = None,
        max_lines: Optional[int] = PREVIEW_LINES
    ) -> None:
        """
        Print syntax-highlighted code.

        Args:
            code: Code string
            language: Lexer name or file extension
            title: Optional title shown above the code
            max_lines: Truncate after this many lines; None shows everything
        """
        border = self._theme_manager.get_style("code_border")
        if title:
            self._console.print(f"  [{border}]┌─ {escape(title)}[/]")

        lines = code.splitlines()
        shown = lines if max_lines is None else lines[:max_lines]
        syntax = Syntax(
            "\n".join(shown),
            language or "text",
            theme="monokai",
            line_numbers=True,
            word_wrap=True,
        )
        self._console.print(syntax)

        if max_lines is not None and len(lines) > max_lines:
            self._console.print(f"  [dim]... {len(lines) - max_lines} more lines[/dim]")

    def print_diff(self, old: Optional[str], new: str, filename: str) -> None:
        """
        Show what writing `new` to `filename` would change.

        Args:
            old: Current file content, or None for a new file
            new: Proposed content
            filename: Name shown in the header
        """
        self._console.print()
        self._console.print(f"  [bold]{escape(filename)}[/bold]")

        if old is None:
            self._console.print(f"  [{self._theme_manager.get_style('diff_added')}]+ New file[/]")
            self.print_code(new, language=Syntax.guess_lexer(filename, code=new), title=filename)
            return

        diff_lines = list(difflib.unified_diff(
            old.splitlines(),
            new.splitlines(),
            fromfile=f"a/{filename}",
            tofile=f"b/{filename}",
            lineterm="",
        ))
        if not diff_lines:
            self._console.print("  [dim]No changes[/dim]")
            return

        added = self._theme_manager.get_style("diff_added")
        removed = self._theme_manager.get_style("diff_removed")
        context = self._theme_manager.get_style("diff_context")
        for line in diff_lines[:DIFF_LINES]:
            if line.startswith(("+++", "---", "@@")):
                style = context
            elif line.startswith("+"):
                style = added
            elif line.startswith("-"):
                style = removed
            else:
                style = ""
            self._console.print(Text(f"  {line}", style=style))
        if len(diff_lines) > DIFF_LINES:
            self._console.print(f"  [dim]... {len(diff_lines) - DIFF_LINES} more lines[/dim]")

    def print_tree(self, tree: Tree) -> None:
        self._console.print(tree)

    def print_key_values(self, rows: Iterable[tuple[str, str]]) -> None:
        """Print aligned label/value rows."""
        table = Table.grid(padding=(0, 2))
        table.add_column(style="dim")
        table.add_column()
        for label, value in rows:
            table.add_row(f"  {label}:", value)
        self._console.print(table)

    def print_commands_help(self, commands: list[dict]) -> None:
        """
        Print help for available commands, grouped by category.

        Args:
            commands: List of dicts with 'name', 'aliases', 'usage', 'description', 'category'
        """
        primary = self._theme_manager.get_color("primary")
        self.print_heading("Commands")
        categories: dict[str, list[dict]] = {}
        for cmd in commands:
            categories.setdefault(cmd.get('category', 'other'), []).append(cmd)

        for category in ("setup", "files", "shell", "chat", "other"):
            cmds = categories.get(category)
            if not cmds:
                continue
            self._console.print()
            self._console.print(f"  [{primary}]{category.title()}[/]")
            for cmd in sorted(cmds, key=lambda c: c['name']):
                aliases = ", ".join(f"/{a}" for a in cmd.get('aliases', []))
                suffix = f" [dim]({escape(aliases)})[/dim]" if aliases else ""
                usage = f"/{cmd['name']} {cmd.get('usage', '')}".rstrip()
                self._console.print(f"    [bold]{escape(usage)}[/bold]{suffix}")
                self._console.print(f"      [dim]{escape(cmd['description'])}[/dim]")
        self._console.print()

    def clear(self) -> None:
        """Clear the console."""
        self._console.clear()

    def rule(self, title: str = "", style: str = "dim") -> None:
        self._console.rule(title, style=style)

    def prompt_confirm(self, message: str, default: bool = False) -> bool:
        """
        Show a confirmation prompt.

        Args:
            message: Confirmation message
            default: Default value

        Returns:
            User's choice
        """
        return Confirm.ask(message, default=default, console=self._console)

    def prompt_choice(self, message: str, choices: list[str], default: str) -> str:
        """Ask for one of `choices`, case-insensitively."""
        answer = Prompt.ask(
            message,
            choices=choices,
            default=default,
            case_sensitive=False,
            console=self._console,
        )
        return answer.lower()

    def prompt_text(self, message: str, default: str = "", password: bool = False) -> str:
        """Ask for free text; an empty answer returns `default`."""
        answer = Prompt.ask(
            message,
            default=default,
            show_default=bool(default) and not password,
            password=password,
            console=self._console,
        )
        return (answer or "").strip()


_renderer: Optional[RichRenderer] = None


def get_renderer() -> RichRenderer:
    """Get the global renderer instance."""
    global _renderer
    if _renderer is None:
        _renderer = RichRenderer()
    return _renderer
