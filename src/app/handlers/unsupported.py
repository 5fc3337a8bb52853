from __future__ import annotations

from aiogram import F, Router
from aiogram.types import Message

UNSUPPORTED_TEXT = "I only understand commands. Send /help to see them."


def create_unsupported_router() -> Router:
    router = Router(name="unsupported")

    @router.message(~F.via_bot)
    async def handle_unknown(message: Message) -> None:
        if message.text and message.text.startswith("/"):
            # Unknown or admin-only command, stay silent
            return
        await message.answer(UNSUPPORTED_TEXT)

    return router
