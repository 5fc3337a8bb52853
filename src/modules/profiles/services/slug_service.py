"""
Slug orchestration for single profiles and backfill batches.
"""
import logging
from typing import AbstractSet, Dict, Mapping, Optional

from src.modules.profiles.domain.models import SUPPORTED_LANGUAGES, LanguageCode, SlugBundle, SlugInput
from src.modules.profiles.utils.slug_generator import (
    DEFAULT_MAX_ATTEMPTS,
    compose_slugs,
    ensure_unique,
    validate_slug,
)

logger = logging.getLogger(__name__)


class SlugService:

    def __init__(self, max_attempts: int = DEFAULT_MAX_ATTEMPTS):
        self._max_attempts = max_attempts

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def generate_for_profile(
        self,
        data: SlugInput,
        existing_slugs: Optional[Mapping[LanguageCode, AbstractSet[str]]] = None,
        saved_slugs: Optional[Mapping[LanguageCode, Optional[str]]] = None
    ) -> SlugBundle:
        """
        Compose a profile's slugs and make each one unique within its language.

        Args:
            data: First name and location of the profile
            existing_slugs: Slugs already persisted, per language
            saved_slugs: The profile's own persisted slugs, kept as they are

        Returns:
            One slug per supported language
        """
        existing_slugs = existing_slugs or {}
        saved_slugs = saved_slugs or {}
        base_slugs = compose_slugs(data)

        bundle: SlugBundle = {}
        for lang in SUPPORTED_LANGUAGES:
            if saved_slugs.get(lang):
                bundle[lang] = saved_slugs[lang]
                continue

            taken = existing_slugs.get(lang, frozenset())
            bundle[lang] = ensure_unique(base_slugs[lang], taken, self._max_attempts)

            if not validate_slug(bundle[lang]):
                logger.warning("Malformed %s slug %r for first name %r", lang.value, bundle[lang], data.first_name)

        return bundle

    def start_batch(self, seed: Mapping[LanguageCode, AbstractSet[str]]) -> "SlugBatch":
        return SlugBatch(self, seed)


class SlugBatch:
    """
    Per-language slug sets that grow as a batch assigns bundles.

    Seeded from the persisted slugs; every assigned bundle is added before the
    next profile is resolved, so two profiles in one run never share a slug.
    """

    def __init__(self, service: SlugService, seed: Mapping[LanguageCode, AbstractSet[str]]):
        self._service = service
        self._taken: Dict[LanguageCode, set[str]] = {
            lang: set(seed.get(lang, ())) for lang in SUPPORTED_LANGUAGES
        }

    def assign(
        self,
        data: SlugInput,
        saved_slugs: Optional[Mapping[LanguageCode, Optional[str]]] = None
    ) -> SlugBundle:
        bundle = self._service.generate_for_profile(data, self._taken, saved_slugs)
        for lang, slug in bundle.items():
            self._taken[lang].add(slug)
        return bundle

    def taken(self, language: LanguageCode) -> frozenset[str]:
        return frozenset(self._taken[language])
