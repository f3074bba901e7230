import asyncio
from datetime import datetime, timezone

import pytest

from hcw_assistant.services.assistant.conversation_store import ConversationStore
from hcw_assistant.services.assistant.envelope import ResponseEnvelope

from fixtures.fake_backends import FakeSessionStore


def _clock():
    return datetime(2024, 3, 15, 10, 0, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_appends_keep_order(session_store):
    store = ConversationStore(session_store, clock=_clock)

    assert await store.append_exchange("s-1", "u-1", "first", ResponseEnvelope(content="one"))
    assert await store.append_exchange("s-1", "u-1", "second", ResponseEnvelope(content="two"))

    history = await store.history("s-1")
    assert [h["userMessage"] for h in history] == ["first", "second"]
    assert history[0] == {
        "timestamp": "2024-03-15T10:00:00+00:00",
        "userMessage": "first",
        "assistantResponse": {"type": "text", "content": "one", "actions": [], "insights": []},
        "type": "exchange",
    }
    assert session_store.rows["s-1"]["staff_user_id"] == "u-1"


@pytest.mark.asyncio
async def test_sessions_are_independent(session_store):
    store = ConversationStore(session_store, clock=_clock)
    await store.append_exchange("s-1", "u-1", "a", ResponseEnvelope(content="x"))
    await store.append_exchange("s-2", "u-2", "b", ResponseEnvelope(content="y"))

    assert len(await store.history("s-1")) == 1
    assert len(await store.history("s-2")) == 1
    assert await store.history("missing") == []


@pytest.mark.asyncio
async def test_concurrent_appends_in_one_process_are_not_lost(session_store):
    store = ConversationStore(session_store, clock=_clock)

    results = await asyncio.gather(*[
        store.append_exchange("s-1", "u-1", f"q{i}", ResponseEnvelope(content=f"a{i}"))
        for i in range(10)
    ])

    assert all(results)
    assert len(await store.history("s-1")) == 10


@pytest.mark.asyncio
async def test_write_failure_is_reported_not_raised():
    store = ConversationStore(FakeSessionStore(fail_writes=True), clock=_clock)
    assert await store.append_exchange("s-1", "u-1", "q", ResponseEnvelope(content="a")) is False
