from __future__ import annotations

import logging

from aiogram import F, Router
from aiogram.types import CallbackQuery, Message

from ...modules.summarize.domain.models import SubmitOutcome
from ...modules.summarize.services.clipboard import copy_text
from ...modules.summarize.services.credentials import CredentialService
from ...modules.summarize.services.preferences import PreferencesService
from ...modules.summarize.utils.text import join_sentences
from ..presenter import CANCEL_CALLBACK, COPY_SENTENCES_CALLBACK, COPY_SUMMARY_CALLBACK, ChatClipboard
from ..sessions import ChatSessionRegistry

logger = logging.getLogger(__name__)

ALERT_LIMIT = 200


def create_summarize_router(
    sessions: ChatSessionRegistry,
    preferences: PreferencesService,
    credentials: CredentialService,
) -> Router:
    router = Router(name="summarize_handler")

    async def _fire(message: Message, *, edited: bool) -> None:
        assert message.text is not None
        user_id = message.from_user.id if message.from_user else message.chat.id
        prefs = await preferences.get(user_id)
        if edited and not prefs.live_mode:
            return
        creds = await credentials.get(user_id)
        session = await sessions.get(message.chat.id)
        outcome = session.fire(message.text, prefs.options, creds, live=prefs.live_mode)
        if outcome is SubmitOutcome.DUPLICATE:
            logger.debug("Chat %s resent the last summarized text", message.chat.id)

    @router.message(F.text & ~F.via_bot & ~F.text.startswith("/"))
    async def handle_text(message: Message) -> None:
        await _fire(message, edited=False)

    @router.edited_message(F.text & ~F.text.startswith("/"))
    async def handle_edit(message: Message) -> None:
        await _fire(message, edited=True)

    @router.callback_query(F.data == CANCEL_CALLBACK)
    async def cancel(callback: CallbackQuery) -> None:
        session = sessions.find(callback.message.chat.id) if callback.message else None
        if session is None or not await session.cancel():
            await callback.answer("Nothing to cancel")
            return
        await callback.answer("Request cancelled.")

    @router.callback_query(F.data.in_({COPY_SUMMARY_CALLBACK, COPY_SENTENCES_CALLBACK}))
    async def copy(callback: CallbackQuery) -> None:
        chat_id = callback.message.chat.id if callback.message else callback.from_user.id
        session = sessions.find(chat_id)
        if session is None:
            await callback.answer("This summary has expired", show_alert=True)
            return
        view = session.presenter.view
        if callback.data == COPY_SUMMARY_CALLBACK:
            content = view.summary_text
        else:
            content = join_sentences(view.highlights)

        if not content:
            await callback.answer("Nothing to copy")
            return

        answered = False

        async def alert(text: str) -> None:
            nonlocal answered
            answered = True
            await callback.answer(text[:ALERT_LIMIT], show_alert=True)

        copied = await copy_text(ChatClipboard(callback.bot, chat_id), content, fallback=alert)
        if not answered:
            await callback.answer("Copied" if copied else "Could not copy")

    return router
