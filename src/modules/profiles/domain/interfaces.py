"""
Domain interfaces for profiles module.
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from src.modules.profiles.domain.models import LanguageCode, Profile, SlugBundle


class ProfileRepository(ABC):
    """Repository interface for profile persistence."""

    @abstractmethod
    async def create_profile(self, first_name: str, location: str, slugs: SlugBundle) -> Profile:
        """
        Create a new profile with its slugs.

        Args:
            first_name: Profile first name
            location: City or region as submitted
            slugs: One slug per supported language

        Returns:
            Created profile
        """
        pass

    @abstractmethod
    async def get_profile_by_id(self, profile_id: int) -> Optional[Profile]:
        """
        Get profile by ID.

        Args:
            profile_id: Profile identifier

        Returns:
            Profile or None if not found
        """
        pass

    @abstractmethod
    async def get_profile_by_slug(self, language: LanguageCode, slug: str) -> Optional[Profile]:
        """
        Get profile by its slug in one language.

        Args:
            language: Language whose slug column is searched
            slug: URL-safe identifier

        Returns:
            Profile or None if not found
        """
        pass

    @abstractmethod
    async def list_profiles_missing_slugs(self) -> List[Profile]:
        """
        List profiles with at least one empty slug, ordered by ascending ID.

        Returns:
            Profiles needing slug generation
        """
        pass

    @abstractmethod
    async def get_existing_slugs(self) -> Dict[LanguageCode, set[str]]:
        """
        Get every non-empty persisted slug, per language.

        Returns:
            Mapping of language to the set of its persisted slugs
        """
        pass

    @abstractmethod
    async def update_slugs(self, profile_id: int, slugs: SlugBundle) -> bool:
        """
        Overwrite all slugs of a profile.

        Args:
            profile_id: Profile identifier
            slugs: One slug per supported language

        Returns:
            True if updated, False if the profile does not exist
        """
        pass

    @abstractmethod
    async def count_profiles(self) -> tuple[int, int]:
        """
        Count profiles.

        Returns:
            Tuple of (total profiles, profiles with every slug set)
        """
        pass
