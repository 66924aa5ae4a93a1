"""
In-memory chat endpoint for tests.

Responses are served through httpx.MockTransport so the real client code
path (request building, streaming, line buffering) runs without a network.
"""
import asyncio
import json
from typing import Iterable, Optional

import httpx

from cody_cli.config import CodyConfig


def make_config(**overrides) -> CodyConfig:
    """A complete configuration pointing at a fake endpoint."""
    values = dict(
        api_url="https://api.test/v1",
        api_key="sk-test-1234",
        model="vendor/test-model",
        timeout=5.0,
    )
    values.update(overrides)
    return CodyConfig(**values)


def delta_line(content: str) -> str:
    """One SSE event carrying a content delta."""
    return "data: " + json.dumps({"choices": [{"delta": {"content": content}}]}, ensure_ascii=False) + "\n\n"


def sse_body(deltas: Iterable[str], done: bool = True) -> str:
    """A full SSE response body for the given deltas."""
    body = "".join(delta_line(d) for d in deltas)
    if done:
        body += "data: [DONE]\n\n"
    return body


def split_at(text: str, offsets: Iterable[int]) -> list[str]:
    """Cut `text` at the given offsets, dropping empty pieces."""
    points = sorted({o for o in offsets if 0 < o < len(text)})
    pieces = []
    start = 0
    for point in points:
        pieces.append(text[start:point])
        start = point
    pieces.append(text[start:])
    return [p for p in pieces if p]


class ChunkStream(httpx.AsyncByteStream):
    """
    Response body delivered as the given chunks.

    With hang=True the stream never ends after the last chunk.
    """

    def __init__(self, chunks: Iterable[str], hang: bool = False) -> None:
        self._chunks = [c.encode("utf-8") if isinstance(c, str) else c for c in chunks]
        self._hang = hang
        self.closed = False

    async def __aiter__(self):
        for chunk in self._chunks:
            await asyncio.sleep(0)
            yield chunk
        if self._hang:
            await asyncio.Event().wait()

    async def aclose(self) -> None:
        self.closed = True


class FakeEndpoint:
    """
    Serves queued responses and records every request.

    Each call to /chat/completions pops the next queued response; /models
    returns `models`.
    """

    def __init__(self, models: Optional[list[str]] = None) -> None:
        self.requests: list[httpx.Request] = []
        self.models = models or []
        self._queue: list[tuple[int, list[str], bool]] = []
        self.streams: list[ChunkStream] = []

    def queue_stream(self, chunks: Iterable[str], status: int = 200, hang: bool = False) -> None:
        self._queue.append((status, list(chunks), hang))

    def queue_reply(self, deltas: Iterable[str]) -> None:
        self.queue_stream([sse_body(deltas)])

    def payload(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/models"):
            return httpx.Response(200, json={"data": [{"id": m} for m in self.models]})

        status, chunks, hang = self._queue.pop(0)
        stream = ChunkStream(chunks, hang=hang)
        self.streams.append(stream)
        return httpx.Response(status, headers={"Content-Type": "text/event-stream"}, stream=stream)


async def collect(stream) -> list[str]:
    """Drain an async iterator into a list."""
    return [item async for item in stream]
