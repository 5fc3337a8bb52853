"""
Admin commands for profile slug management.
"""
import logging
import shlex
from html import escape
from typing import Mapping, Optional

import aiosqlite
from aiogram import Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message

from src.modules.profiles.domain.models import SUPPORTED_LANGUAGES, BackfillReport, LanguageCode, Profile
from src.modules.profiles.services.backfill_service import BackfillService
from src.modules.profiles.services.profile_service import ProfileService
from src.modules.profiles.utils.slug_generator import parse_slug, supported_languages
from src.modules.shared.services.anti_spam import AntiSpamGuard

logger = logging.getLogger(__name__)

BUSY_TEXT = "⏳ Not so fast, please wait a moment..."
BACKFILL_GUARD_KEY = "backfill"


def _get_command_args(command: CommandObject | None) -> str:
    """Extract command arguments."""
    if command is None or not command.args:
        return ""
    return command.args.strip()


def _is_admin(user_id: int | None, admins: frozenset[int]) -> bool:
    # Strict whitelist: an empty whitelist denies everyone
    if not admins or user_id is None:
        return False
    return user_id in admins


def _parse_profile_args(args: str) -> tuple[str, str]:
    """
    Parse first name and location arguments.

    Supports:
    - "María José" "Santo Domingo"
    - María Santo Domingo (first token is the name, the rest the location)

    Returns:
        Tuple of (first_name, location)
    """
    if not args:
        raise ValueError("First name and location are required")

    try:
        parts = shlex.split(args)
    except ValueError:
        # Unbalanced quotes, fall back to simple split
        parts = args.split()

    if len(parts) < 2:
        raise ValueError("First name and location are required")

    return parts[0], " ".join(parts[1:])


def _parse_language_args(args: str) -> tuple[LanguageCode, str]:
    """
    Parse "<lang> <slug>" arguments.

    Returns:
        Tuple of (language, slug)
    """
    parts = args.split()
    if len(parts) != 2:
        raise ValueError("Expected a language code and a slug")

    language, slug = parts
    try:
        return LanguageCode(language.lower()), slug
    except ValueError:
        raise ValueError(
            f"Unknown language '{language}', use one of: {', '.join(supported_languages())}"
        ) from None


def _format_slugs(slugs: Mapping[LanguageCode, Optional[str]]) -> str:
    return "\n".join(
        f"{lang.value}: {escape(slugs.get(lang) or '(none)')}" for lang in SUPPORTED_LANGUAGES
    )


def _format_profile(profile: Profile) -> str:
    return (
        f"🆔 {profile.profile_id} | {escape(profile.first_name)}, {escape(profile.location)}\n"
        f"📅 {profile.created_at.strftime('%Y-%m-%d %H:%M UTC')}\n\n"
        f"{_format_slugs(profile.slugs)}"
    )


def _format_report(report: BackfillReport) -> str:
    lines = [
        "🔧 Slug backfill finished",
        f"Profiles needing slugs: {report.candidates}",
        f"Processed: {report.processed}",
        f"Failed: {report.failed_count}",
        f"📈 {report.profiles_with_slugs}/{report.total_profiles} profiles now have slugs",
    ]
    if report.failed:
        lines.append("Failed IDs: " + ", ".join(str(profile_id) for profile_id in report.failed))
    return "\n".join(lines)


def create_profiles_admin_router(
    profile_service: ProfileService,
    backfill_service: BackfillService,
    guard: AntiSpamGuard,
    admin_user_ids: frozenset[int]
) -> Router:
    """
    Create router for profile slug admin commands.

    Commands:
    - /slugs <first_name> <location> - Preview slugs without saving
    - /profile_add <first_name> <location> - Create profile with slugs
    - /profile <lang> <slug> - Find profile by slug
    - /slug_parse <lang> <slug> - Recover name and location from a slug
    - /backfill - Generate slugs for profiles missing them

    Args:
        profile_service: Profile service instance
        backfill_service: Backfill service instance
        guard: Anti-spam guard
        admin_user_ids: Set of admin user IDs who can use these commands
    """
    router = Router(name="profiles_admin")

    @router.message(Command("slugs"))
    async def cmd_slugs_preview(message: Message, command: CommandObject) -> None:
        user = message.from_user
        if not user or not _is_admin(user.id, admin_user_ids):
            return

        args = _get_command_args(command)
        if not args:
            await message.answer(
                "ℹ️ Usage: /slugs [first_name] [location]\n\n"
                "Shows the slugs a new profile would get, nothing is saved.\n\n"
                "Example: /slugs \"María\" \"Santo Domingo\""
            )
            return

        if not await guard.try_acquire(user.id):
            await message.answer(BUSY_TEXT)
            return

        try:
            first_name, location = _parse_profile_args(args)
            slugs = await profile_service.preview_slugs(first_name, location)
            await message.answer(f"👀 Slug preview:\n\n{_format_slugs(slugs)}", parse_mode="HTML")

        except ValueError as e:
            await message.answer(f"❌ Error: {escape(str(e))}")

        finally:
            await guard.release(user.id)

    @router.message(Command("profile_add"))
    async def cmd_profile_add(message: Message, command: CommandObject) -> None:
        user = message.from_user
        if not user or not _is_admin(user.id, admin_user_ids):
            return

        args = _get_command_args(command)
        if not args:
            await message.answer(
                "ℹ️ Usage: /profile_add [first_name] [location]\n\n"
                "Creates a profile and assigns its multilingual slugs.\n\n"
                "Example: /profile_add \"Juan\" \"Puerto Plata\""
            )
            return

        if not await guard.try_acquire(user.id):
            await message.answer(BUSY_TEXT)
            return

        try:
            first_name, location = _parse_profile_args(args)
            profile = await profile_service.create_profile(first_name, location)
            await message.answer(f"✅ Profile created!\n\n{_format_profile(profile)}", parse_mode="HTML")

        except ValueError as e:
            await message.answer(f"❌ Error: {escape(str(e))}")

        except aiosqlite.IntegrityError:
            logger.warning("Slug collision while creating profile, another write took the same slug", exc_info=True)
            await message.answer("❌ Another profile took the same slug just now, please try again.")

        finally:
            await guard.release(user.id)

    @router.message(Command("profile"))
    async def cmd_profile_lookup(message: Message, command: CommandObject) -> None:
        user = message.from_user
        if not user or not _is_admin(user.id, admin_user_ids):
            return

        args = _get_command_args(command)
        if not args:
            await message.answer(
                "ℹ️ Usage: /profile [lang] [slug]\n\n"
                "Example: /profile es maria-de-santo-domingo-republica-dominicana"
            )
            return

        try:
            language, slug = _parse_language_args(args)
            profile = await profile_service.get_profile_by_slug(language, slug)
        except ValueError as e:
            await message.answer(f"❌ Error: {escape(str(e))}")
            return

        if not profile:
            await message.answer("❌ Profile not found.")
            return

        await message.answer(_format_profile(profile), parse_mode="HTML")

    @router.message(Command("slug_parse"))
    async def cmd_slug_parse(message: Message, command: CommandObject) -> None:
        user = message.from_user
        if not user or not _is_admin(user.id, admin_user_ids):
            return

        args = _get_command_args(command)
        try:
            language, slug = _parse_language_args(args)
        except ValueError as e:
            await message.answer(
                f"❌ Error: {escape(str(e))}\n\nUsage: /slug_parse [lang] [slug]"
            )
            return

        parsed = parse_slug(slug, language)
        if parsed.is_empty:
            await message.answer("🤷 This slug does not follow the profile slug format.")
            return

        await message.answer(
            f"👤 First name: {escape(parsed.first_name or '')}\n"
            f"📍 Location: {escape(parsed.location or '')}",
            parse_mode="HTML"
        )

    @router.message(Command("backfill"))
    async def cmd_backfill(message: Message) -> None:
        user = message.from_user
        if not user or not _is_admin(user.id, admin_user_ids):
            return

        if not await guard.try_acquire(user.id):
            await message.answer(BUSY_TEXT)
            return

        # One backfill at a time per process, whoever started it
        if not await guard.try_acquire(BACKFILL_GUARD_KEY, cooldown=False):
            await guard.release(user.id)
            await message.answer("⏳ A backfill is already running.")
            return

        try:
            await message.answer("🔄 Generating slugs for profiles without them...")
            report = await backfill_service.run()
            await message.answer(_format_report(report))

        except Exception as e:
            logger.error(f"Backfill error: {e}", exc_info=True)
            await message.answer("❌ Backfill failed, see logs for details.")

        finally:
            await guard.release(BACKFILL_GUARD_KEY)
            await guard.release(user.id)

    return router
