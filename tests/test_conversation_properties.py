"""
Property-based tests for conversation commit and rollback.
"""
import asyncio

import allure
import pytest
from hypothesis import given, settings, strategies as st

from cody_cli.conversation import ConversationState
from cody_cli.exceptions import RequestCancelledError, TransportError

SYSTEM = "You are a test assistant."

delta_strategy = st.text(min_size=1, max_size=20)


def make_factory(deltas, error=None, seen=None):
    """Stream factory yielding `deltas` and then raising `error`, if given."""
    async def factory(messages):
        if seen is not None:
            seen.append(messages)
        for delta in deltas:
            await asyncio.sleep(0)
            yield delta
        if error is not None:
            raise error
    return factory


async def drain(conversation, text, factory):
    received = []
    async for delta in conversation.stream_turn(text, factory):
        received.append(delta)
    return received


def snapshot(conversation):
    return [(m.role, m.content) for m in conversation.messages]


@st.composite
def history_strategy(draw):
    """A conversation with some committed turns already in it."""
    conversation = ConversationState(SYSTEM)
    for _ in range(draw(st.integers(min_value=0, max_value=3))):
        user = draw(st.text(min_size=1, max_size=20))
        reply = draw(st.lists(delta_strategy, min_size=1, max_size=3))
        asyncio.run(drain(conversation, user, make_factory(reply)))
    return conversation


@allure.feature("Conversation")
@allure.story("Failed turns leave the log unchanged")
@allure.severity(allure.severity_level.CRITICAL)
@settings(max_examples=100, deadline=None)
@given(
    conversation=history_strategy(),
    deltas=st.lists(delta_strategy, max_size=5),
    error=st.sampled_from([
        TransportError("Connection lost"),
        RequestCancelledError("Request cancelled"),
    ]),
)
def test_rollback_restores_log(conversation, deltas, error):
    before = snapshot(conversation)

    with pytest.raises(type(error)):
        asyncio.run(drain(conversation, "doomed", make_factory(deltas, error)))

    assert snapshot(conversation) == before


@allure.feature("Conversation")
@allure.story("Completed turns append user then assistant")
@allure.severity(allure.severity_level.CRITICAL)
@settings(max_examples=100, deadline=None)
@given(
    conversation=history_strategy(),
    user=st.text(min_size=1, max_size=30),
    deltas=st.lists(delta_strategy, min_size=1, max_size=8),
)
def test_commit_appends_pair(conversation, user, deltas):
    before = snapshot(conversation)

    received = asyncio.run(drain(conversation, user, make_factory(deltas)))

    after = snapshot(conversation)
    assert received == deltas
    assert after[:len(before)] == before
    assert after[len(before):] == [("user", user), ("assistant", "".join(deltas))]
    assert conversation.last_response == "".join(deltas)


@allure.feature("Conversation")
@allure.story("The request sees the log with the new user message")
def test_factory_receives_wire_messages():
    conversation = ConversationState(SYSTEM)
    seen = []
    asyncio.run(drain(conversation, "hello", make_factory(["hi"], seen=seen)))

    assert seen == [[
        {"role": "system", "content": SYSTEM},
        {"role": "user", "content": "hello"},
    ]]


@allure.feature("Conversation")
@allure.story("Empty replies roll back")
def test_empty_reply_rolls_back():
    conversation = ConversationState(SYSTEM)
    received = asyncio.run(drain(conversation, "anything?", make_factory([])))

    assert received == []
    assert snapshot(conversation) == [("system", SYSTEM)]
    assert conversation.message_count == 0


@allure.feature("Conversation")
@allure.story("Consumer closing the stream early rolls back")
def test_early_close_rolls_back():
    conversation = ConversationState(SYSTEM)

    async def take_one():
        stream = conversation.stream_turn("stop early", make_factory(["a", "b", "c"]))
        first = await stream.__anext__()
        await stream.aclose()
        return first

    assert asyncio.run(take_one()) == "a"
    assert snapshot(conversation) == [("system", SYSTEM)]


@allure.feature("Conversation")
@allure.story("Rollback removes only its own user message")
def test_rollback_by_identity():
    conversation = ConversationState(SYSTEM)
    first = conversation.begin_turn("same text")
    first.append("reply")
    conversation.commit(first)
    second = conversation.begin_turn("same text")

    conversation.rollback(second)
    conversation.rollback(second)

    assert snapshot(conversation) == [
        ("system", SYSTEM),
        ("user", "same text"),
        ("assistant", "reply"),
    ]
    assert conversation.commit(second) is False


@allure.feature("Conversation")
@allure.story("Non-streaming turns")
def test_send_turn_commit_and_rollback():
    conversation = ConversationState(SYSTEM)

    async def ok(messages):
        return "full reply"

    async def broken(messages):
        raise TransportError("API Error (500): boom", status_code=500)

    assert asyncio.run(conversation.send_turn("q1", ok)) == "full reply"
    with pytest.raises(TransportError):
        asyncio.run(conversation.send_turn("q2", broken))

    assert snapshot(conversation) == [
        ("system", SYSTEM),
        ("user", "q1"),
        ("assistant", "full reply"),
    ]


@allure.feature("Conversation")
@allure.story("Clear and system prompt updates")
def test_clear_and_update_system_prompt():
    conversation = ConversationState(SYSTEM)
    asyncio.run(drain(conversation, "hi", make_factory(["hello"])))
    conversation.update_system_prompt("Project: demo")
    conversation.update_system_prompt("Project: other")

    assert conversation.system_prompt == f"{SYSTEM}\n\nProject: other"
    assert conversation.message_count == 2

    conversation.clear()
    assert snapshot(conversation) == [("system", f"{SYSTEM}\n\nProject: other")]
    assert conversation.last_response is None


@allure.feature("Conversation")
@allure.story("messages returns a copy")
def test_messages_is_a_copy():
    conversation = ConversationState(SYSTEM)
    conversation.messages.append(object())
    assert conversation.message_count == 0
