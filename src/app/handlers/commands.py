from __future__ import annotations

from aiogram import Router
from aiogram.filters import Command
from aiogram.types import Message

from ...modules.profiles.utils.slug_generator import supported_languages

START_TEXT_TEMPLATE = (
    "🤖 HolaCupid slug assistant. I build SEO-friendly profile URLs in {languages}.\n\n"
    "Admin commands:\n"
    "/slugs \"First name\" \"Location\" - preview slugs without saving\n"
    "/profile_add \"First name\" \"Location\" - create a profile with its slugs\n"
    "/profile [lang] [slug] - find a profile by slug\n"
    "/slug_parse [lang] [slug] - recover name and location from a slug\n"
    "/backfill - generate slugs for profiles that have none"
)


def _start_text() -> str:
    return START_TEXT_TEMPLATE.format(languages=", ".join(supported_languages()))


def create_commands_router() -> Router:
    router = Router(name="commands")

    @router.message(Command("start", "help"))
    async def start(message: Message) -> None:
        await message.answer(_start_text())

    return router
