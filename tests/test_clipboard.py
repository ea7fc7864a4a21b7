from __future__ import annotations

import pytest

from primesummarizer.modules.summarize.services.clipboard import copy_text
from primesummarizer.modules.summarize.utils.text import join_sentences


class RecordingClipboard:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.written: list[str] = []

    async def write_text(self, content: str) -> None:
        if self.fail:
            raise RuntimeError("clipboard unavailable")
        self.written.append(content)


@pytest.mark.asyncio
async def test_primary_writer_is_used() -> None:
    clipboard = RecordingClipboard()
    fallback_calls: list[str] = []
    assert await copy_text(clipboard, "summary", fallback=fallback_calls.append)
    assert clipboard.written == ["summary"]
    assert fallback_calls == []


@pytest.mark.asyncio
async def test_sync_fallback_runs_when_writer_fails() -> None:
    fallback_calls: list[str] = []
    copied = await copy_text(RecordingClipboard(fail=True), join_sentences(["a", "b"]), fallback=fallback_calls.append)
    assert copied
    assert fallback_calls == ["a\nb"]


@pytest.mark.asyncio
async def test_async_fallback_is_awaited() -> None:
    seen: list[str] = []

    async def fallback(content: str) -> None:
        seen.append(content)

    assert await copy_text(RecordingClipboard(fail=True), "text", fallback=fallback)
    assert seen == ["text"]


@pytest.mark.asyncio
async def test_failures_are_swallowed() -> None:
    def broken(_: str) -> None:
        raise OSError("no clipboard at all")

    assert not await copy_text(RecordingClipboard(fail=True), "text", fallback=broken)
    assert not await copy_text(RecordingClipboard(fail=True), "text")
