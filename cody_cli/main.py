"""
Main entry point for cody_cli.
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich.logging import RichHandler

from .constants import APP_NAME, APP_VERSION, APP_DESCRIPTION


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description=APP_DESCRIPTION
    )

    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"{APP_NAME} {APP_VERSION}"
    )

    parser.add_argument(
        "-m", "--model",
        type=str,
        help="Model to use for this run"
    )

    parser.add_argument(
        "--api-url",
        type=str,
        help="Chat endpoint base URL for this run"
    )

    parser.add_argument(
        "--timeout",
        type=float,
        help="Request timeout in seconds"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug output"
    )

    parser.add_argument(
        "-c", "--command",
        type=str,
        help="Execute a single slash command and exit"
    )

    parser.add_argument(
        "-e", "--execute",
        type=str,
        help="Execute a prompt and exit"
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config file"
    )

    return parser.parse_args(argv)


def configure_logging(verbose: bool = False) -> None:
    """
    Send cody_cli log records to the console through Rich.

    Args:
        verbose: Log at DEBUG instead of WARNING
    """
    logger = logging.getLogger("cody_cli")
    logger.handlers.clear()
    handler = RichHandler(show_path=verbose, rich_tracebacks=True, markup=False)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False
    logging.getLogger("httpx").setLevel(logging.WARNING)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    configure_logging(args.verbose)

    from .config import ConfigManager, get_config
    manager = ConfigManager(config_file=args.config) if args.config else get_config()

    # Flags apply to this run only
    overrides = {}
    if args.model:
        overrides["model"] = args.model
    if args.api_url:
        overrides["api_url"] = args.api_url.rstrip("/")
    if args.timeout is not None:
        overrides["timeout"] = args.timeout
    if overrides:
        manager.update(persist=False, **overrides)

    from .cli import CLI
    cli = CLI(config_manager=manager)

    if args.command:
        from .command_system import get_command_registry
        parts = args.command.lstrip("/").split(maxsplit=1)
        name = parts[0] if parts else ""
        cmd_args = parts[1] if len(parts) > 1 else ""
        result = asyncio.run(get_command_registry().execute_async(name, cmd_args, cli=cli))
        if result.message:
            print(result.message)
        return 0 if result.is_success else 1

    if args.execute:
        return cli.execute(args.execute)

    try:
        cli.run()
        return 0
    except KeyboardInterrupt:
        print("\nGoodbye!")
        return 0


if __name__ == "__main__":
    sys.exit(main())
