from __future__ import annotations

from aiogram import F, Router
from aiogram.types import Message


def create_unsupported_router() -> Router:
    router = Router(name="unsupported")

    @router.message(~F.via_bot)
    async def handle_unknown(message: Message) -> None:
        if message.text:
            if message.text.startswith("/"):
                await message.answer("Unknown command. See /help.")
            return
        if message.caption:
            await message.answer("Please send the text itself, not a file or photo caption.")
            return
        await message.answer("I can only summarize text messages :(")

    return router
