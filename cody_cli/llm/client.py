"""
Chat-completion client for OpenAI-compatible endpoints.
"""
import json
import logging
from typing import Any, AsyncIterator, Optional

import httpx

from ..config import CodyConfig
from ..constants import CONNECTION_TEST_TIMEOUT, MODELS_FETCH_TIMEOUT, OPENROUTER_REFERER, OPENROUTER_TITLE
from ..exceptions import RequestTimeoutError, TransportError
from .request_handle import RequestHandle
from .sse import LineBuffer, parse_line

logger = logging.getLogger(__name__)


class ChatClient:
    """
    HTTP client for a chat-completion endpoint.

    Only one request is in flight at a time: starting a request cancels
    whichever one was running before.
    """

    def __init__(
        self,
        config: CodyConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> None:
        """
        Initialize the client.

        Args:
            config: Endpoint, credentials and generation settings
            transport: Optional httpx transport, used by tests
        """
        self._config = config
        self._transport = transport
        self._current: Optional[RequestHandle] = None

    @property
    def config(self) -> CodyConfig:
        return self._config

    @config.setter
    def config(self, value: CodyConfig) -> None:
        self._config = value

    @property
    def busy(self) -> bool:
        """True while a request is in flight."""
        return self._current is not None

    def _build_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._config.api_key:
            headers["Authorization"] = f"Bearer {self._config.api_key}"
        if "openrouter" in self._config.api_url:
            headers["HTTP-Referer"] = OPENROUTER_REFERER
            headers["X-Title"] = OPENROUTER_TITLE
        return headers

    def _build_payload(self, messages: list[dict], stream: bool) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self._config.model,
            "messages": messages,
            "stream": stream,
        }
        if self._config.max_tokens:
            payload["max_tokens"] = self._config.max_tokens
        if self._config.temperature is not None:
            payload["temperature"] = self._config.temperature
        return payload

    def _make_client(self, timeout: Optional[float] = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._config.api_url.rstrip("/"),
            timeout=timeout if timeout is not None else self._config.timeout,
            transport=self._transport,
        )

    def _start(self) -> RequestHandle:
        if self._current is not None:
            self._current.cancel()
        handle = RequestHandle()
        self._current = handle
        handle.arm_timeout(self._config.timeout)
        return handle

    def _finish(self, handle: RequestHandle) -> None:
        handle.disarm()
        if self._current is handle:
            self._current = None

    def cancel(self) -> None:
        """Cancel the in-flight request, if any."""
        if self._current is not None:
            self._current.cancel()

    async def _send(
        self,
        client: httpx.AsyncClient,
        handle: RequestHandle,
        messages: list[dict],
        stream: bool
    ) -> httpx.Response:
        request = client.build_request(
            "POST",
            "/chat/completions",
            headers=self._build_headers(),
            json=self._build_payload(messages, stream),
        )
        try:
            response = await handle.guard(client.send(request, stream=True))
        except httpx.TimeoutException as e:
            raise RequestTimeoutError("Request timed out") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Connection failed: {e}") from e

        if not response.is_success:
            try:
                body = (await handle.guard(response.aread())).decode("utf-8", errors="replace")
            finally:
                await response.aclose()
            raise TransportError.from_status(response.status_code, body)
        return response

    async def chat(self, messages: list[dict]) -> str:
        """
        Send a non-streaming chat completion request.

        Args:
            messages: List of message dicts with 'role' and 'content'

        Returns:
            The assistant's reply, or an empty string if there is none
        """
        handle = self._start()
        try:
            async with self._make_client() as client:
                response = await self._send(client, handle, messages, stream=False)
                try:
                    raw = await handle.guard(response.aread())
                except httpx.TimeoutException as e:
                    raise RequestTimeoutError("Request timed out") from e
                except httpx.HTTPError as e:
                    raise TransportError(f"Connection failed: {e}") from e
                finally:
                    await response.aclose()
        finally:
            self._finish(handle)

        try:
            data = json.loads(raw)
            return data["choices"][0]["message"]["content"] or ""
        except (ValueError, KeyError, IndexError, TypeError):
            logger.debug("Response carried no message content")
            return ""

    async def chat_stream(self, messages: list[dict]) -> AsyncIterator[str]:
        """
        Send a streaming chat completion request.

        Args:
            messages: List of message dicts

        Yields:
            Text deltas in arrival order

        Raises:
            TransportError: On a non-2xx response or connection failure
            ProtocolError: On an error envelope inside the stream
            RequestTimeoutError: If the request outlives the configured timeout
            RequestCancelledError: If cancel() is called or a newer request starts
        """
        handle = self._start()
        try:
            async with self._make_client() as client:
                response = await self._send(client, handle, messages, stream=True)
                try:
                    buffer = LineBuffer()
                    chunks = response.aiter_text().__aiter__()
                    while True:
                        try:
                            chunk = await handle.guard(chunks.__anext__())
                        except StopAsyncIteration:
                            break
                        except httpx.TimeoutException as e:
                            raise RequestTimeoutError("Request timed out") from e
                        except httpx.HTTPError as e:
                            raise TransportError(f"Connection lost: {e}") from e

                        for line in buffer.feed(chunk):
                            event = parse_line(line)
                            if event is None:
                                continue
                            if event.done:
                                return
                            yield event.content

                    leftover = buffer.flush()
                    if leftover:
                        event = parse_line(leftover)
                        if event is not None and not event.done:
                            yield event.content
                finally:
                    await response.aclose()
        finally:
            self._finish(handle)

    async def list_models(self) -> list[str]:
        """
        List available models from the endpoint.

        Returns:
            Sorted model IDs
        """
        async with self._make_client(timeout=MODELS_FETCH_TIMEOUT) as client:
            try:
                response = await client.get("/models", headers=self._build_headers())
            except httpx.HTTPError as e:
                raise TransportError(f"Connection failed: {e}") from e
            if not response.is_success:
                raise TransportError.from_status(response.status_code, response.text)
            data = response.json()
        return sorted(model["id"] for model in data.get("data", []) if model.get("id"))

    async def test_connection(self) -> tuple[bool, Optional[str]]:
        """
        Check that the endpoint is reachable and accepts the credentials.

        Returns:
            (True, None) on success, (False, reason) otherwise
        """
        async with self._make_client(timeout=CONNECTION_TEST_TIMEOUT) as client:
            try:
                response = await client.get("/models", headers=self._build_headers())
            except httpx.HTTPError as e:
                return False, str(e) or type(e).__name__
        if response.is_success:
            return True, None
        return False, f"HTTP {response.status_code}: {response.text[:200]}"
