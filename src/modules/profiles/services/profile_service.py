"""
Profile service for profile creation and slug lookups.
"""
import logging
from typing import Optional

from src.modules.profiles.domain.interfaces import ProfileRepository
from src.modules.profiles.domain.models import LanguageCode, Profile, SlugBundle, SlugInput
from src.modules.profiles.services.slug_service import SlugService

logger = logging.getLogger(__name__)


class ProfileService:

    def __init__(self, repository: ProfileRepository, slug_service: SlugService):
        self._repository = repository
        self._slug_service = slug_service

    async def create_profile(self, first_name: str, location: str) -> Profile:
        data = self._validate(first_name, location)

        existing_slugs = await self._repository.get_existing_slugs()
        slugs = self._slug_service.generate_for_profile(data, existing_slugs)

        profile = await self._repository.create_profile(data.first_name, data.location, slugs)
        logger.info("Created profile %s with slug %s", profile.profile_id, slugs[LanguageCode.EN])
        return profile

    async def preview_slugs(self, first_name: str, location: str) -> SlugBundle:
        data = self._validate(first_name, location)
        existing_slugs = await self._repository.get_existing_slugs()
        return self._slug_service.generate_for_profile(data, existing_slugs)

    async def get_profile(self, profile_id: int) -> Optional[Profile]:
        return await self._repository.get_profile_by_id(profile_id)

    async def get_profile_by_slug(self, language: LanguageCode | str, slug: str) -> Optional[Profile]:
        return await self._repository.get_profile_by_slug(LanguageCode(language), slug.strip())

    @staticmethod
    def _validate(first_name: str, location: str) -> SlugInput:
        if not first_name or not first_name.strip():
            raise ValueError("First name is required and cannot be empty")

        if not location or not location.strip():
            raise ValueError("Location is required and cannot be empty")

        return SlugInput(first_name=first_name.strip(), location=location.strip())
