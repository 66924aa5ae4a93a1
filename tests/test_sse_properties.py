"""
Property-based tests for SSE line buffering and parsing.
"""

import allure
import pytest
from hypothesis import given, settings, strategies as st

from cody_cli.exceptions import ProtocolError
from cody_cli.llm.sse import LineBuffer, SSEEvent, parse_line

from fakes import delta_line, sse_body, split_at


@allure.feature("SSE Parsing")
@allure.story("Line buffering is independent of chunk boundaries")
@allure.severity(allure.severity_level.CRITICAL)
@settings(max_examples=100)
@given(
    deltas=st.lists(st.text(min_size=1, max_size=20), min_size=1, max_size=8),
    offsets=st.lists(st.integers(min_value=0, max_value=2000), max_size=12),
)
def test_line_buffer_split_invariance(deltas: list[str], offsets: list[int]):
    """Feeding a body in any number of pieces yields the same complete lines."""
    body = sse_body(deltas)

    whole = LineBuffer()
    expected = whole.feed(body)

    split = LineBuffer()
    lines = []
    for piece in split_at(body, offsets):
        lines.extend(split.feed(piece))

    assert lines == expected
    assert split.flush() == whole.flush() == ""


@allure.feature("SSE Parsing")
@allure.story("Partial trailing line is held back")
def test_line_buffer_holds_partial_line():
    buffer = LineBuffer()
    assert buffer.feed("data: {\"a\"") == []
    assert buffer.pending == "data: {\"a\""
    assert buffer.feed(": 1}\r\nnext") == ["data: {\"a\": 1}"]
    assert buffer.flush() == "next"
    assert buffer.pending == ""


@allure.feature("SSE Parsing")
@allure.story("Content deltas")
@settings(max_examples=100)
@given(content=st.text(min_size=1, max_size=50))
def test_parse_line_returns_delta_content(content: str):
    event = parse_line(delta_line(content).strip())
    assert event == SSEEvent(content=content)


@allure.feature("SSE Parsing")
@allure.story("Stream end marker")
@pytest.mark.parametrize("line", ["data: [DONE]", "data:[DONE]", "  data: [DONE]  "])
def test_parse_line_done(line: str):
    assert parse_line(line) == SSEEvent(done=True)


@allure.feature("SSE Parsing")
@allure.story("Parse noise is skipped")
@pytest.mark.parametrize("line", [
    "",
    ": keep-alive comment",
    "event: message",
    "data: {not json",
    "data: {\"choices\": []}",
    "data: {\"choices\": [{\"delta\": {}}]}",
    "data: {\"choices\": [{\"delta\": {\"role\": \"assistant\"}}]}",
    "data: [1, 2, 3]",
    "{broken",
])
def test_parse_line_skips_noise(line: str):
    assert parse_line(line) is None


@allure.feature("SSE Parsing")
@allure.story("Error envelopes are hard failures")
@allure.severity(allure.severity_level.CRITICAL)
@pytest.mark.parametrize("line, message", [
    ("data: {\"error\": {\"message\": \"Rate limit exceeded\", \"code\": 429}}", "Rate limit exceeded"),
    ("data: {\"error\": \"model overloaded\"}", "model overloaded"),
    ("{\"error\": {\"message\": \"Invalid key\"}}", "Invalid key"),
])
def test_parse_line_raises_on_error_envelope(line: str, message: str):
    with pytest.raises(ProtocolError) as exc_info:
        parse_line(line)
    assert message in str(exc_info.value)
