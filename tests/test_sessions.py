from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from fakes import FakeTransport, let_tasks_run
from primesummarizer.app.sessions import ChatSessionRegistry
from primesummarizer.modules.summarize.domain.models import FormatOptions

OPTIONS = FormatOptions(trim=True)


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def make_registry(transport: FakeTransport, clock: FakeClock, **kwargs) -> ChatSessionRegistry:
    bot = MagicMock()
    bot.send_message = AsyncMock(return_value=SimpleNamespace(message_id=1))
    bot.edit_message_text = AsyncMock()
    params = dict(
        min_chars=5,
        require_credentials=False,
        debounce_seconds=10.0,
        display_limit=3,
        idle_ttl=60.0,
        max_sessions=50,
        clock=clock,
    )
    params.update(kwargs)
    return ChatSessionRegistry(bot, transport, **params)


@pytest.mark.asyncio
async def test_idle_sessions_are_evicted(transport: FakeTransport) -> None:
    clock = FakeClock()
    registry = make_registry(transport, clock)

    first = await registry.get(1)
    clock.now = 61.0
    await registry.get(2)

    assert registry.find(1) is None
    assert len(registry) == 1
    assert first.controller.in_flight is None
    await registry.close_all()


@pytest.mark.asyncio
async def test_recent_use_keeps_session(transport: FakeTransport) -> None:
    clock = FakeClock()
    registry = make_registry(transport, clock)

    session = await registry.get(1)
    clock.now = 50.0
    assert registry.find(1) is session
    clock.now = 100.0
    await registry.get(2)

    assert registry.find(1) is session
    await registry.close_all()


@pytest.mark.asyncio
async def test_registry_is_capped(transport: FakeTransport) -> None:
    registry = make_registry(transport, FakeClock(), max_sessions=10)

    for chat_id in range(1000):
        await registry.get(chat_id)

    assert len(registry) == 10
    assert registry.find(999) is not None
    assert registry.find(0) is None
    await registry.close_all()


@pytest.mark.asyncio
async def test_busy_session_survives_eviction(transport: FakeTransport) -> None:
    clock = FakeClock()
    registry = make_registry(transport, clock)

    session = await registry.get(1)
    session.fire("a text that is long enough", OPTIONS)
    clock.now = 1000.0
    await registry.get(2)

    assert registry.find(1) is session
    await let_tasks_run()
    transport.release_all()
    await session.controller.wait_settled()
    await registry.close_all()


@pytest.mark.asyncio
async def test_cancel_drops_debounced_submission(transport: FakeTransport) -> None:
    registry = make_registry(transport, FakeClock())
    session = await registry.get(1)

    session.fire("typing in live mode", OPTIONS, live=True)
    assert session.busy

    assert await session.cancel()
    assert not session.busy
    await let_tasks_run()
    assert transport.calls == []
    await registry.close_all()


@pytest.mark.asyncio
async def test_cancel_with_nothing_pending(transport: FakeTransport) -> None:
    registry = make_registry(transport, FakeClock())
    session = await registry.get(1)
    assert not await session.cancel()
    await registry.close_all()
