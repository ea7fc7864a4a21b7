from __future__ import annotations

import asyncio
import logging
from html import escape
from typing import Optional

from aiogram import Bot
from aiogram.enums import ParseMode
from aiogram.exceptions import TelegramBadRequest
from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup, Message

from ..modules.summarize.domain.models import ControllerSnapshot
from ..modules.summarize.services.projection import UiView, project
from ..modules.summarize.utils.text import format_stats, render_summary_html

logger = logging.getLogger(__name__)

CANCEL_CALLBACK = "summarize:cancel"
COPY_SUMMARY_CALLBACK = "summarize:copy_summary"
COPY_SENTENCES_CALLBACK = "summarize:copy_sentences"


def _cancel_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[[InlineKeyboardButton(text="✖️ Cancel", callback_data=CANCEL_CALLBACK)]]
    )


def _copy_keyboard(view: UiView) -> InlineKeyboardMarkup | None:
    row: list[InlineKeyboardButton] = []
    if view.summary_text:
        row.append(InlineKeyboardButton(text="📋 Copy summary", callback_data=COPY_SUMMARY_CALLBACK))
    if view.highlights:
        row.append(InlineKeyboardButton(text="📋 Copy sentences", callback_data=COPY_SENTENCES_CALLBACK))
    return InlineKeyboardMarkup(inline_keyboard=[row]) if row else None


class ChatPresenter:
    """Renders controller snapshots for one chat as Telegram messages."""

    def __init__(self, bot: Bot, chat_id: int, *, display_limit: Optional[int] = None) -> None:
        self._bot = bot
        self._chat_id = chat_id
        self._display_limit = display_limit
        self._view = UiView()
        self._rendered = UiView()
        self._status: Optional[Message] = None
        self._lock = asyncio.Lock()
        self._tasks: set[asyncio.Task] = set()

    @property
    def view(self) -> UiView:
        return self._view

    def on_snapshot(self, snapshot: ControllerSnapshot) -> None:
        self._view = project(self._view, snapshot, display_limit=self._display_limit)
        task = asyncio.create_task(self._render_latest())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def drain(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _render_latest(self) -> None:
        async with self._lock:
            view = self._view
            if view == self._rendered:
                return
            if view.loading:
                await self._show_loading(view)
            else:
                await self._show_settled(view)
            self._rendered = view

    async def _show_loading(self, view: UiView) -> None:
        text = f"⏳ Summarizing… ({view.char_count} characters)\n🧹 {format_stats(view.cleanup)}"
        if view.error:
            text += f"\n⚠️ {escape(view.error)}"
        if self._status is None or not await self._edit_status(text, _cancel_keyboard()):
            self._status = await self._bot.send_message(self._chat_id, text, reply_markup=_cancel_keyboard())

    async def _show_settled(self, view: UiView) -> None:
        if view.error:
            text = f"⚠️ {escape(view.error)}"
            markup = None
        else:
            text = render_summary_html(view.summary_text, view.highlights)
            markup = _copy_keyboard(view)
        edited = self._status is not None and await self._edit_status(text, markup)
        self._status = None
        if not edited:
            await self._bot.send_message(self._chat_id, text, parse_mode=ParseMode.HTML, reply_markup=markup)

    async def _edit_status(self, text: str, markup: InlineKeyboardMarkup | None) -> bool:
        assert self._status is not None
        try:
            await self._bot.edit_message_text(
                text,
                chat_id=self._chat_id,
                message_id=self._status.message_id,
                parse_mode=ParseMode.HTML,
                reply_markup=markup,
            )
        except TelegramBadRequest as exc:
            if "message is not modified" in str(exc):
                return True
            logger.debug("Could not edit status message in chat %s: %s", self._chat_id, exc)
            return False
        return True


class ChatClipboard:
    """Sends copy-friendly code blocks: the chat's stand-in for a clipboard."""

    def __init__(self, bot: Bot, chat_id: int) -> None:
        self._bot = bot
        self._chat_id = chat_id

    async def write_text(self, content: str) -> None:
        if not content:
            raise ValueError("nothing to copy")
        await self._bot.send_message(
            self._chat_id,
            f"<pre><code>{escape(content)}</code></pre>",
            parse_mode=ParseMode.HTML,
        )
