"""
Main CLI loop for cody_cli.
Handles the interactive command loop and message processing.
"""
import asyncio
import logging
import os
import signal
from pathlib import Path
from typing import Optional

import httpx

from .agent import CodingAgent
from .command_system import CommandParser, CommandResult, get_command_registry
from .command_system.base import CommandStatus
from .config import CodyConfig, ConfigManager, get_config
from .constants import FIRST_MESSAGE_TEMPLATE
from .exceptions import CodyError, RequestTimeoutError, RetryableError, TransportError
from .history import SessionStore, get_session_store
from .io_handlers import BashRunner, FileLoader, FileWriter, get_runner, get_structure
from .llm import ChatClient, ModelCache
from .rich_ui import PromptInput, RichRenderer, get_prompt_input, get_renderer
from .session import SessionOrchestrator, TurnResult, TurnState

logger = logging.getLogger(__name__)


class CLI:
    """
    Main CLI class for cody_cli.

    Manages the interactive command loop, processes user input,
    and coordinates between all components. Slash commands receive
    this object as their ``cli`` context.
    """

    def __init__(
        self,
        config_manager: Optional[ConfigManager] = None,
        renderer: Optional[RichRenderer] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        session_store: Optional[SessionStore] = None,
        model_cache: Optional[ModelCache] = None,
        cwd: Optional[Path] = None
    ) -> None:
        """
        Initialize the CLI.

        Args:
            config_manager: Configuration source, the global one by default
            renderer: Console renderer
            transport: httpx transport for every request, used by tests
            session_store: Where the last project and model are recorded
            model_cache: Cache for the model list
            cwd: Project directory, the process directory by default
        """
        self._config_manager = config_manager or get_config()
        self._renderer = renderer or get_renderer()
        self._transport = transport
        self._sessions = session_store or get_session_store()
        self._model_cache = model_cache or ModelCache()

        self._parser = CommandParser()
        self._commands = get_command_registry()
        self._input: Optional[PromptInput] = None
        self._runner = get_runner()

        self._cwd = Path(cwd) if cwd else Path.cwd()
        self._files = FileLoader(self._cwd)
        self._writer = FileWriter(self._renderer)

        self._agent: Optional[CodingAgent] = None
        self._orchestrator: Optional[SessionOrchestrator] = None
        self._first_message = True
        self._last_user_message: Optional[str] = None
        self._running = False

    @property
    def renderer(self) -> RichRenderer:
        return self._renderer

    @property
    def config_manager(self) -> ConfigManager:
        return self._config_manager

    @property
    def config(self) -> CodyConfig:
        return self._config_manager.config

    @property
    def transport(self) -> Optional[httpx.AsyncBaseTransport]:
        return self._transport

    @property
    def model_cache(self) -> ModelCache:
        return self._model_cache

    @property
    def file_loader(self) -> FileLoader:
        return self._files

    @property
    def runner(self) -> BashRunner:
        return self._runner

    @property
    def agent(self) -> Optional[CodingAgent]:
        return self._agent

    @property
    def orchestrator(self) -> Optional[SessionOrchestrator]:
        return self._orchestrator

    @property
    def connected(self) -> bool:
        return self._agent is not None

    @property
    def cwd(self) -> Path:
        return self._cwd

    @property
    def first_message(self) -> bool:
        """True until a turn carrying the project structure succeeds."""
        return self._first_message

    @property
    def message_count(self) -> int:
        return self._agent.message_count if self._agent else 0

    @property
    def last_user_message(self) -> Optional[str]:
        return self._last_user_message

    @property
    def auto_accept(self) -> bool:
        return self._writer.auto_accept

    @auto_accept.setter
    def auto_accept(self, value: bool) -> None:
        self._writer.auto_accept = value

    @property
    def running(self) -> bool:
        return self._running

    # Session lifecycle

    def connect(self) -> None:
        """Start a fresh agent on the current configuration."""
        config = self.config
        if self._agent is not None:
            self._agent.abort()
        self._agent = CodingAgent(config, transport=self._transport)
        self._orchestrator = SessionOrchestrator(
            self._agent,
            self._renderer.print_delta,
            on_block_open=self._on_block_open,
            working_dir=self._cwd,
        )
        self._first_message = True
        self._renderer.print()
        self._renderer.print_success(f"Connected to {config.model.split('/')[-1]}")
        self.save_session()
        self._refresh_prompt()

    def reset_conversation(self) -> None:
        """Forget the conversation; the next message carries the project structure again."""
        if self._orchestrator is not None:
            self._orchestrator.reset()
        self._first_message = True

    def change_directory(self, path: Path) -> None:
        """Make `path` the project directory."""
        self._cwd = Path(path)
        os.chdir(self._cwd)
        self._files.base_dir = self._cwd
        if self._orchestrator is not None:
            self._orchestrator.working_dir = self._cwd
        self._first_message = True
        self._refresh_prompt()

    def save_session(self) -> None:
        self._sessions.save(str(self._cwd), self.config.model)

    def _on_block_open(self, filename: str) -> None:
        logger.debug("Receiving file %s", filename)

    def _refresh_prompt(self) -> None:
        if self._input is not None:
            self._input.set_status(cwd=str(self._cwd), model=self.config.model)

    # Chat

    async def fetch_models(self) -> list[str]:
        """
        Get the model list, from the cache when it is fresh.

        Returns:
            Sorted model IDs, empty when the endpoint could not be reached
        """
        cached = self._model_cache.load()
        if cached:
            return cached

        client = ChatClient(self.config, transport=self._transport)
        try:
            with self._renderer.console.status("Fetching models"):
                models = await client.list_models()
        except TransportError as e:
            self._renderer.print_error(str(e))
            return []

        if models:
            self._model_cache.save(models)
        return models

    async def send_message(self, text: str, with_structure: bool = True) -> Optional[TurnResult]:
        """
        Run one streamed turn and offer to save the files it produced.

        Args:
            text: What the user asked
            with_structure: Prefix the project structure on the first message

        Returns:
            TurnResult, or None when the turn failed or there is no connection
        """
        if self._orchestrator is None:
            self._renderer.print_warning("Run /setup first")
            return None

        prompt = text
        if with_structure and self._first_message:
            prompt = FIRST_MESSAGE_TEMPLATE.format(
                structure=get_structure(self._cwd),
                message=text,
            )

        self._renderer.begin_reply()
        try:
            result = await self._run_turn(prompt)
        except RetryableError as e:
            self._renderer.end_reply()
            if isinstance(e, RequestTimeoutError):
                self._renderer.print_error("Request timed out. Try /retry")
            else:
                self._renderer.print_error("Request cancelled. Try /retry")
            return None
        except CodyError as e:
            self._renderer.end_reply()
            self._renderer.print_error(str(e))
            return None

        self._renderer.end_reply()
        if with_structure and result.state is TurnState.COMMITTED:
            self._first_message = False

        if not result.reply.strip():
            self._renderer.print_warning("No response")
        if result.artifacts:
            self._writer.process(result.artifacts, self._cwd)
        return result

    async def _run_turn(self, prompt: str) -> TurnResult:
        """Run a turn with Ctrl+C wired to cancellation."""
        loop = asyncio.get_running_loop()
        try:
            loop.add_signal_handler(signal.SIGINT, self._orchestrator.cancel)
            handler_installed = True
        except (NotImplementedError, RuntimeError):
            handler_installed = False

        try:
            return await self._orchestrator.run_turn(prompt)
        finally:
            if handler_installed:
                loop.remove_signal_handler(signal.SIGINT)

    # Input handling

    def process_input(self, user_input: str) -> None:
        """Dispatch one line of input to a command or the model."""
        parsed = self._parser.parse(user_input)

        if parsed.type == "command":
            result = asyncio.run(
                self._commands.execute_async(parsed.command, parsed.args, cli=self)
            )
            self._show_result(result)
        elif parsed.type == "message":
            self.handle_message(parsed.message)

    def handle_message(self, message: str) -> Optional[TurnResult]:
        if not self.connected:
            self._renderer.print_warning("Run /setup first")
            return None
        self._last_user_message = message
        return asyncio.run(self.send_message(message))

    def _show_result(self, result: CommandResult) -> None:
        if result.should_clear:
            self._renderer.clear()

        if result.is_error:
            self._renderer.print_error(result.message)
            for extra in result.errors:
                if extra != result.message:
                    self._renderer.print_info(extra)
        elif result.message:
            if result.should_exit or result.status == CommandStatus.INFO:
                self._renderer.print_info(result.message)
            else:
                self._renderer.print_success(result.message)

        if result.should_exit:
            self._running = False
        self._refresh_prompt()

    def run(self) -> None:
        """Run the interactive loop until /quit or end of input."""
        self._running = True
        self._renderer.print_banner()
        self._renderer.print_info(f"Working in {self._cwd.name or self._cwd}")

        last = self._sessions.load()
        if last and last.last_project and last.last_project != str(self._cwd):
            logger.info("Last session was in %s with %s", last.last_project, last.last_model)

        if self.config.is_complete and not self._config_manager.validate():
            self.connect()
        else:
            self._renderer.print()
            self._renderer.print_warning("Not configured. Run /setup to get started.")

        self._input = get_prompt_input()
        self._input.set_commands(self._commands.list_commands())
        self._refresh_prompt()

        while self._running:
            try:
                user_input = self._input.get_input(
                    icon=self._renderer.icon("user"),
                    connected=self.connected,
                )
                if not user_input.strip():
                    continue
                self.process_input(user_input)
            except KeyboardInterrupt:
                self._renderer.print("\n[dim]Use /quit to exit[/dim]")
            except Exception as e:
                logger.debug("Unexpected error", exc_info=True)
                self._renderer.print_error(f"Unexpected error: {e}")

    def execute(self, prompt: str) -> int:
        """
        Run a single prompt non-interactively.

        Returns:
            Process exit code
        """
        errors = self._config_manager.validate()
        if errors:
            for error in errors:
                self._renderer.print_error(error)
            self._renderer.print_info("Run cody and use /setup to configure")
            return 1

        self.connect()
        result = self.handle_message(prompt)
        self.save_session()
        return 0 if result is not None else 1
