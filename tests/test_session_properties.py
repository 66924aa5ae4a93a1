"""
End-to-end turn tests: orchestrator, agent, client and extractor together.
"""
import asyncio

import allure
import pytest
from hypothesis import given, settings, strategies as st

from cody_cli.agent import CodingAgent
from cody_cli.exceptions import (
    ProtocolError,
    RequestCancelledError,
    RequestTimeoutError,
    TransportError,
)
from cody_cli.session import SessionOrchestrator, TurnState

from fakes import FakeEndpoint, make_config, sse_body, split_at

HELLO_DELTAS = ['Sure!\n```pyt', 'hon:hello.py\nprint("hi")\n``', '`\nDone.']
HELLO_TEXT = "".join(HELLO_DELTAS)


def make_session(tmp_path, endpoint, **config):
    agent = CodingAgent(make_config(**config), transport=endpoint.transport, system_prompt="sys")
    shown = []
    opened = []
    orchestrator = SessionOrchestrator(
        agent, shown.append, on_block_open=opened.append, working_dir=tmp_path
    )
    return orchestrator, shown, opened


def roles(orchestrator):
    return [(m.role, m.content) for m in orchestrator.agent.history]


@allure.feature("Session")
@allure.story("A reply with a file block")
@allure.severity(allure.severity_level.CRITICAL)
def test_turn_extracts_file_and_commits(tmp_path):
    endpoint = FakeEndpoint()
    endpoint.queue_reply(HELLO_DELTAS)
    orchestrator, shown, opened = make_session(tmp_path, endpoint)

    result = asyncio.run(orchestrator.run_turn("make hello.py"))

    assert result.state is TurnState.COMMITTED
    assert result.reply == HELLO_TEXT
    assert "".join(shown) == HELLO_TEXT
    assert opened == ["hello.py"]
    assert [(a.filename, a.content, a.is_new) for a in result.artifacts] == [
        ("hello.py", 'print("hi")', True)
    ]
    assert roles(orchestrator) == [
        ("system", "sys"),
        ("user", "make hello.py"),
        ("assistant", HELLO_TEXT),
    ]
    assert orchestrator.state is TurnState.IDLE
    assert orchestrator.last_state is TurnState.COMMITTED


@allure.feature("Session")
@allure.story("Artifacts do not depend on how the wire is chunked")
@settings(max_examples=50, deadline=None)
@given(offsets=st.lists(st.integers(min_value=0, max_value=400), max_size=12))
def test_wire_chunking_invariance(tmp_path_factory, offsets):
    tmp_path = tmp_path_factory.mktemp("proj")
    endpoint = FakeEndpoint()
    body = sse_body(HELLO_DELTAS)
    endpoint.queue_stream(split_at(body, offsets))
    orchestrator, _, _ = make_session(tmp_path, endpoint)

    result = asyncio.run(orchestrator.run_turn("go"))

    assert result.reply == HELLO_TEXT
    assert [(a.filename, a.content) for a in result.artifacts] == [("hello.py", 'print("hi")')]


@allure.feature("Session")
@allure.story("Unterminated block at end of stream")
def test_unterminated_block_flushed(tmp_path):
    endpoint = FakeEndpoint()
    endpoint.queue_reply(["```python:cut.py\n", "x = 1\n"])
    orchestrator, _, _ = make_session(tmp_path, endpoint)

    result = asyncio.run(orchestrator.run_turn("go"))

    assert [(a.filename, a.content) for a in result.artifacts] == [("cut.py", "x = 1")]


@allure.feature("Session")
@allure.story("Existing files are not new")
def test_existing_file_marked(tmp_path):
    (tmp_path / "hello.py").write_text("old")
    endpoint = FakeEndpoint()
    endpoint.queue_reply(HELLO_DELTAS)
    orchestrator, _, _ = make_session(tmp_path, endpoint)

    result = asyncio.run(orchestrator.run_turn("go"))

    assert result.artifacts[0].is_new is False


@allure.feature("Session")
@allure.story("Failed turns leave no trace")
@allure.severity(allure.severity_level.CRITICAL)
@pytest.mark.parametrize("chunks,status,error", [
    (['data: {"choices":[{"delta":{"content":"```python:a.py\\nx"}}]}\n\n',
      'data: {"error":{"message":"overloaded"}}\n\n'], 200, ProtocolError),
    (["upstream down"], 502, TransportError),
])
def test_failed_turn(tmp_path, chunks, status, error):
    endpoint = FakeEndpoint()
    endpoint.queue_reply(["first answer"])
    endpoint.queue_stream(chunks, status=status)
    orchestrator, _, _ = make_session(tmp_path, endpoint)

    asyncio.run(orchestrator.run_turn("first"))
    before = roles(orchestrator)

    with pytest.raises(error):
        asyncio.run(orchestrator.run_turn("second"))

    assert roles(orchestrator) == before
    assert orchestrator.state is TurnState.IDLE
    assert orchestrator.last_state is TurnState.FAILED


@allure.feature("Session")
@allure.story("Timeouts fail the turn")
def test_timeout_fails_turn(tmp_path):
    endpoint = FakeEndpoint()
    endpoint.queue_stream([sse_body(["```python:slow.py\npartial"], done=False)], hang=True)
    orchestrator, shown, _ = make_session(tmp_path, endpoint, timeout=0.2)

    with pytest.raises(RequestTimeoutError):
        asyncio.run(orchestrator.run_turn("go"))

    assert shown == ["```python:slow.py\npartial"]
    assert roles(orchestrator) == [("system", "sys")]
    assert orchestrator.last_state is TurnState.FAILED


@allure.feature("Session")
@allure.story("Cancel fails the turn and the next one succeeds")
def test_cancel_then_next_turn(tmp_path):
    endpoint = FakeEndpoint()
    endpoint.queue_stream([sse_body(["```python:gone.py\nhalf"], done=False)], hang=True)
    endpoint.queue_reply(["fine"])
    orchestrator, _, _ = make_session(tmp_path, endpoint)

    async def cancelled_turn():
        asyncio.get_running_loop().call_later(0.05, orchestrator.cancel)
        await orchestrator.run_turn("go")

    with pytest.raises(RequestCancelledError):
        asyncio.run(cancelled_turn())

    result = asyncio.run(orchestrator.run_turn("again"))
    assert result.reply == "fine"
    assert result.artifacts == []
    assert roles(orchestrator) == [("system", "sys"), ("user", "again"), ("assistant", "fine")]
    assert endpoint.payload(-1)["messages"] == [
        {"role": "system", "content": "sys"},
        {"role": "user", "content": "again"},
    ]


@allure.feature("Session")
@allure.story("Empty replies")
def test_empty_reply(tmp_path):
    endpoint = FakeEndpoint()
    endpoint.queue_reply([])
    orchestrator, _, _ = make_session(tmp_path, endpoint)

    result = asyncio.run(orchestrator.run_turn("hello?"))

    assert result.reply == ""
    assert result.state is TurnState.EMPTY
    assert result.artifacts == []
    assert orchestrator.last_state is TurnState.EMPTY
    assert orchestrator.state is TurnState.IDLE
    assert roles(orchestrator) == [("system", "sys")]


@allure.feature("Session")
@allure.story("Reset")
def test_reset_clears_history(tmp_path):
    endpoint = FakeEndpoint()
    endpoint.queue_reply(["one"])
    orchestrator, _, _ = make_session(tmp_path, endpoint)
    asyncio.run(orchestrator.run_turn("q"))

    orchestrator.reset()

    assert roles(orchestrator) == [("system", "sys")]
    assert orchestrator.last_state is TurnState.IDLE
