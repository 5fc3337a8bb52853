"""
Integration tests for profile service, repository and slug backfill.
"""
import sqlite3
from pathlib import Path

import pytest
import pytest_asyncio

from src.modules.profiles.domain.models import SUPPORTED_LANGUAGES, LanguageCode
from src.modules.profiles.infrastructure.storage import SQLiteProfileRepository
from src.modules.profiles.services.backfill_service import BackfillService
from src.modules.profiles.services.profile_service import ProfileService
from src.modules.profiles.services.slug_service import SlugService


MARIA_EN = "maria-from-santo-domingo-dominican-republic"


@pytest_asyncio.fixture
async def repository(tmp_path: Path):
    """Create a temporary repository for testing."""
    db_path = tmp_path / "test_profiles.db"
    repo = SQLiteProfileRepository(db_path)
    await repo.initialize()
    return repo


@pytest_asyncio.fixture
async def profile_service(repository):
    return ProfileService(repository, SlugService())


@pytest_asyncio.fixture
async def backfill_service(repository):
    return BackfillService(repository, SlugService())


class TestProfileCreation:
    """Test profile creation with slugs."""

    @pytest.mark.asyncio
    async def test_create_profile_assigns_all_slugs(self, profile_service):
        profile = await profile_service.create_profile("María", "Santo Domingo")

        assert profile.profile_id > 0
        assert profile.first_name == "María"
        assert profile.has_all_slugs
        assert profile.slug_for(LanguageCode.EN) == MARIA_EN
        assert profile.slug_for(LanguageCode.DE) == "maria-aus-santo-domingo-dominikanische-republik"

    @pytest.mark.asyncio
    async def test_create_profile_strips_input(self, profile_service):
        profile = await profile_service.create_profile("  Juan ", " Puerto Plata ")

        assert profile.first_name == "Juan"
        assert profile.location == "Puerto Plata"
        assert profile.slug_for(LanguageCode.PT) == "juan-de-puerto-plata-republica-dominicana"

    @pytest.mark.asyncio
    async def test_create_profile_collision(self, profile_service):
        first = await profile_service.create_profile("María", "Santo Domingo")
        second = await profile_service.create_profile("Maria", "Santo Domingo")

        for lang in SUPPORTED_LANGUAGES:
            assert second.slugs[lang] == f"{first.slugs[lang]}-2"

    @pytest.mark.asyncio
    async def test_create_profile_avoids_slug_of_partial_profile(self, profile_service, repository):
        base_en = "ana-from-santiago-dominican-republic"
        await repository.create_profile("Ana", "Santiago", {LanguageCode.EN: base_en})

        profile = await profile_service.create_profile("Ana", "Santiago")

        assert profile.slugs[LanguageCode.EN] == f"{base_en}-2"
        assert profile.slugs[LanguageCode.ES] == "ana-de-santiago-republica-dominicana"

    @pytest.mark.asyncio
    async def test_create_profile_empty_first_name(self, profile_service):
        with pytest.raises(ValueError, match="First name is required"):
            await profile_service.create_profile("   ", "Santiago")

    @pytest.mark.asyncio
    async def test_create_profile_empty_location(self, profile_service):
        with pytest.raises(ValueError, match="Location is required"):
            await profile_service.create_profile("Ana", "")

    @pytest.mark.asyncio
    async def test_preview_does_not_persist(self, profile_service, repository):
        slugs = await profile_service.preview_slugs("Ana", "La Romana")

        assert slugs[LanguageCode.IT] == "ana-da-la-romana-repubblica-dominicana"
        assert await repository.count_profiles() == (0, 0)


class TestProfileLookup:
    """Test lookups by id and per-language slug."""

    @pytest.mark.asyncio
    async def test_get_profile_by_slug(self, profile_service):
        created = await profile_service.create_profile("María", "Santo Domingo")

        by_es = await profile_service.get_profile_by_slug("es", "maria-de-santo-domingo-republica-dominicana")
        by_en = await profile_service.get_profile_by_slug(LanguageCode.EN, MARIA_EN)

        assert by_es is not None and by_es.profile_id == created.profile_id
        assert by_en is not None and by_en.profile_id == created.profile_id

    @pytest.mark.asyncio
    async def test_slug_is_language_specific(self, profile_service):
        await profile_service.create_profile("María", "Santo Domingo")

        assert await profile_service.get_profile_by_slug("de", MARIA_EN) is None

    @pytest.mark.asyncio
    async def test_get_profile_not_found(self, profile_service):
        assert await profile_service.get_profile(999) is None
        assert await profile_service.get_profile_by_slug("en", "nobody") is None

    @pytest.mark.asyncio
    async def test_get_profile_unknown_language(self, profile_service):
        with pytest.raises(ValueError):
            await profile_service.get_profile_by_slug("fr", MARIA_EN)


class TestRepository:
    """Test store-level behavior the backfill relies on."""

    @pytest.mark.asyncio
    async def test_missing_slugs_ordered_by_id(self, repository, profile_service):
        await profile_service.create_profile("Ana", "Santiago")
        pending_b = await repository.create_profile("Bea", "Santiago", {})
        pending_c = await repository.create_profile("Carla", "Santiago", {LanguageCode.EN: "carla-x"})

        missing = await repository.list_profiles_missing_slugs()

        assert [p.profile_id for p in missing] == [pending_b.profile_id, pending_c.profile_id]
        assert missing[0].slugs[LanguageCode.EN] is None

    @pytest.mark.asyncio
    async def test_existing_slugs_include_partial_profiles(self, repository, profile_service):
        await profile_service.create_profile("Ana", "Santiago")
        await repository.create_profile("Carla", "Santiago", {LanguageCode.EN: "carla-x", LanguageCode.ES: ""})
        await repository.create_profile("Bea", "Santiago", {})

        existing = await repository.get_existing_slugs()

        assert set(existing) == set(SUPPORTED_LANGUAGES)
        assert existing[LanguageCode.EN] == {"ana-from-santiago-dominican-republic", "carla-x"}
        assert existing[LanguageCode.ES] == {"ana-de-santiago-republica-dominicana"}

    @pytest.mark.asyncio
    async def test_duplicate_slug_rejected_by_store(self, repository):
        slugs = {LanguageCode.EN: "same-slug"}
        await repository.create_profile("Ana", "Santiago", slugs)

        with pytest.raises(sqlite3.IntegrityError):
            await repository.create_profile("Ana", "Santiago", slugs)

    @pytest.mark.asyncio
    async def test_update_slugs_missing_profile(self, repository, profile_service):
        slugs = await profile_service.preview_slugs("Ana", "Santiago")
        assert await repository.update_slugs(42, slugs) is False


class TestBackfill:
    """Test backfill of profiles created without slugs."""

    @pytest.mark.asyncio
    async def test_backfill_assigns_unique_slugs(self, repository, profile_service, backfill_service):
        existing = await profile_service.create_profile("María", "Santo Domingo")
        second = await repository.create_profile("María", "Santo Domingo", {})
        third = await repository.create_profile("Maria", "Santo Domingo", {})
        juan = await repository.create_profile("Juan", "Puerto Plata", {})

        report = await backfill_service.run()

        assert report.candidates == 3
        assert report.processed == 3
        assert report.failed == []
        assert (report.total_profiles, report.profiles_with_slugs) == (4, 4)

        second = await repository.get_profile_by_id(second.profile_id)
        third = await repository.get_profile_by_id(third.profile_id)
        juan = await repository.get_profile_by_id(juan.profile_id)

        assert existing.slugs[LanguageCode.EN] == MARIA_EN
        assert second.slugs[LanguageCode.EN] == f"{MARIA_EN}-2"
        assert third.slugs[LanguageCode.EN] == f"{MARIA_EN}-3"
        assert juan.slugs[LanguageCode.PT] == "juan-de-puerto-plata-republica-dominicana"

        for lang in SUPPORTED_LANGUAGES:
            values = [existing.slugs[lang], second.slugs[lang], third.slugs[lang]]
            assert len(set(values)) == 3

    @pytest.mark.asyncio
    async def test_backfill_nothing_to_do(self, profile_service, backfill_service):
        await profile_service.create_profile("Ana", "Santiago")

        report = await backfill_service.run()

        assert report.candidates == 0
        assert report.processed == 0
        assert (report.total_profiles, report.profiles_with_slugs) == (1, 1)

    @pytest.mark.asyncio
    async def test_backfill_is_rerunnable(self, repository, backfill_service):
        await repository.create_profile("Ana", "Santiago", {})

        first = await backfill_service.run()
        second = await backfill_service.run()

        assert first.processed == 1
        assert second.candidates == 0

    @pytest.mark.asyncio
    async def test_backfill_completes_partial_profiles(self, repository, backfill_service):
        partial = await repository.create_profile(
            "Ana", "La Romana", {LanguageCode.EN: "ana-from-la-romana-dominican-republic"}
        )

        report = await backfill_service.run()
        updated = await repository.get_profile_by_id(partial.profile_id)

        assert report.processed == 1
        assert updated.has_all_slugs
        assert updated.slugs[LanguageCode.EN] == "ana-from-la-romana-dominican-republic"

    @pytest.mark.asyncio
    async def test_backfill_respects_slugs_held_by_later_partial_profile(self, repository, backfill_service):
        base_en = "ana-from-la-romana-dominican-republic"
        base_es = "ana-de-la-romana-republica-dominicana"
        pending = await repository.create_profile("Ana", "La Romana", {})
        partial = await repository.create_profile("Ana", "La Romana", {LanguageCode.EN: base_en})

        report = await backfill_service.run()

        assert report.failed == []
        assert report.processed == 2
        assert (report.total_profiles, report.profiles_with_slugs) == (2, 2)

        pending = await repository.get_profile_by_id(pending.profile_id)
        partial = await repository.get_profile_by_id(partial.profile_id)
        assert partial.slugs[LanguageCode.EN] == base_en
        assert pending.slugs[LanguageCode.EN] == f"{base_en}-2"
        assert pending.slugs[LanguageCode.ES] == base_es
        assert partial.slugs[LanguageCode.ES] == f"{base_es}-2"

    @pytest.mark.asyncio
    async def test_backfill_never_reissues_persisted_slug(self, repository, profile_service, backfill_service):
        await profile_service.create_profile("Ana", "Santiago")
        await repository.create_profile("Ana", "Santiago", {LanguageCode.DE: "ana-aus-santiago-dominikanische-republik-2"})
        await repository.create_profile("Ana", "Santiago", {})
        await repository.create_profile("Ana", "Santiago", {})

        report = await backfill_service.run()

        assert report.failed == []
        assert (report.total_profiles, report.profiles_with_slugs) == (4, 4)
        existing = await repository.get_existing_slugs()
        for lang in SUPPORTED_LANGUAGES:
            assert len(existing[lang]) == 4

    @pytest.mark.asyncio
    async def test_backfill_keeps_earlier_writes_when_later_fail(self, repository, backfill_service, monkeypatch):
        ana = await repository.create_profile("Ana", "Santiago", {})
        bea = await repository.create_profile("Bea", "Santiago", {})
        carla = await repository.create_profile("Carla", "Santiago", {})

        original_update = repository.update_slugs

        async def flaky_update(profile_id, slugs):
            if profile_id == bea.profile_id:
                raise RuntimeError("connection lost")
            return await original_update(profile_id, slugs)

        monkeypatch.setattr(repository, "update_slugs", flaky_update)

        report = await backfill_service.run()

        assert report.failed == [bea.profile_id]
        assert report.processed == 2
        assert (await repository.get_profile_by_id(ana.profile_id)).has_all_slugs
        assert not (await repository.get_profile_by_id(bea.profile_id)).has_all_slugs
        assert (await repository.get_profile_by_id(carla.profile_id)).has_all_slugs
