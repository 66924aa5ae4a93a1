"""
Command parser for cody_cli.
Parses user input into slash commands and chat messages.
"""
import re
from dataclasses import dataclass, field
from typing import List

from ..constants import SLASH_PREFIX

# A run of unquoted characters and quoted sections, e.g. src/"my file".py
_TOKEN_PATTERN = re.compile(r'''(?:[^\s"']+|"[^"]*"|'[^']*')+''')


def split_args(args: str) -> List[str]:
    """
    Split an argument string on whitespace, honouring quotes.

    A token wrapped entirely in matching quotes loses them. Unbalanced
    quote characters are dropped.

    Args:
        args: Raw argument string

    Returns:
        List of argument tokens
    """
    tokens = []
    for match in _TOKEN_PATTERN.findall(args.strip()):
        if len(match) >= 2 and match[0] == match[-1] and match[0] in ('"', "'"):
            match = match[1:-1]
        tokens.append(match)
    return tokens


@dataclass
class ParsedInput:
    """Result of parsing user input."""
    type: str  # 'command', 'message', 'empty'
    command: str = ""
    args: str = ""
    argv: List[str] = field(default_factory=list)
    raw: str = ""
    message: str = ""


class CommandParser:
    """
    Parser for user input in the CLI.

    Handles parsing of:
    - Slash commands (/command args)
    - Regular chat messages
    """

    def parse(self, input_text: str) -> ParsedInput:
        """
        Parse user input into a structured result.

        Args:
            input_text: Raw user input

        Returns:
            ParsedInput with parsed components
        """
        text = input_text.strip()

        if not text:
            return ParsedInput(type="empty", raw=input_text)

        if text.startswith(SLASH_PREFIX) and len(text) > len(SLASH_PREFIX):
            return self._parse_command(text)

        return ParsedInput(type="message", message=text, raw=input_text)

    def _parse_command(self, text: str) -> ParsedInput:
        """Parse a slash command."""
        without_prefix = text[len(SLASH_PREFIX):]

        parts = without_prefix.split(maxsplit=1)
        command = parts[0].lower() if parts else ""
        args = parts[1] if len(parts) > 1 else ""

        return ParsedInput(
            type="command",
            command=command,
            args=args,
            argv=split_args(args),
            raw=text
        )
