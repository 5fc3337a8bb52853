from __future__ import annotations

import logging
from dataclasses import dataclass

from aiogram import Dispatcher

from .config import AppConfig
from .handlers.commands import create_commands_router
from .handlers.unsupported import create_unsupported_router
from ..modules.profiles.handlers.admin_commands import create_profiles_admin_router
from ..modules.profiles.infrastructure.storage import SQLiteProfileRepository
from ..modules.profiles.services.backfill_service import BackfillService
from ..modules.profiles.services.profile_service import ProfileService
from ..modules.profiles.services.slug_service import SlugService
from ..modules.shared.services.anti_spam import AntiSpamGuard

logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    config: AppConfig
    profile_repository: SQLiteProfileRepository
    slug_service: SlugService
    profile_service: ProfileService
    backfill_service: BackfillService
    anti_spam: AntiSpamGuard

    @classmethod
    async def build(cls, config: AppConfig) -> "AppContainer":
        profile_repository = SQLiteProfileRepository(config.storage_path)
        await profile_repository.initialize()

        slug_service = SlugService(max_attempts=config.slug_max_attempts)
        profile_service = ProfileService(profile_repository, slug_service)
        backfill_service = BackfillService(profile_repository, slug_service)
        logger.info("Profile store ready at %s", config.storage_path)

        return cls(
            config=config,
            profile_repository=profile_repository,
            slug_service=slug_service,
            profile_service=profile_service,
            backfill_service=backfill_service,
            anti_spam=AntiSpamGuard(),
        )

    def create_dispatcher(self) -> Dispatcher:
        admin_user_ids = frozenset(self.config.admin_user_ids)
        if not admin_user_ids:
            logger.warning("ADMIN_USER_IDS is empty, admin commands will ignore everyone")

        dispatcher = Dispatcher()
        dispatcher.include_router(
            create_profiles_admin_router(
                profile_service=self.profile_service,
                backfill_service=self.backfill_service,
                guard=self.anti_spam,
                admin_user_ids=admin_user_ids,
            )
        )
        dispatcher.include_router(create_commands_router())
        dispatcher.include_router(create_unsupported_router())
        return dispatcher
