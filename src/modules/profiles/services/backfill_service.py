"""
Backfill of multilingual slugs for profiles created before slug support.
"""
import logging

from src.modules.profiles.domain.interfaces import ProfileRepository
from src.modules.profiles.domain.models import SUPPORTED_LANGUAGES, BackfillReport, SlugInput
from src.modules.profiles.services.slug_service import SlugService

logger = logging.getLogger(__name__)


class BackfillService:

    def __init__(self, repository: ProfileRepository, slug_service: SlugService):
        self._repository = repository
        self._slug_service = slug_service

    async def run(self) -> BackfillReport:
        """
        Assign slugs to every profile missing one, in ascending ID order.

        Each profile is written on its own; a failed write is logged and
        recorded, and the run continues with the next profile.
        Slugs a profile already has are kept, only its missing ones are filled.
        """
        report = BackfillReport()

        profiles = await self._repository.list_profiles_missing_slugs()
        report.candidates = len(profiles)
        logger.info("Found %s profiles needing slugs", report.candidates)

        if profiles:
            existing_slugs = await self._repository.get_existing_slugs()
            batch = self._slug_service.start_batch(existing_slugs)
            logger.info("Existing slugs loaded for uniqueness checking")

            for profile in profiles:
                try:
                    slugs = batch.assign(
                        SlugInput(first_name=profile.first_name, location=profile.location),
                        saved_slugs=profile.slugs,
                    )
                    updated = await self._repository.update_slugs(profile.profile_id, slugs)
                except Exception as e:
                    logger.error(f"Error processing profile {profile.profile_id}: {e}", exc_info=True)
                    report.failed.append(profile.profile_id)
                    continue

                if not updated:
                    logger.warning("Profile %s disappeared before its slugs were written", profile.profile_id)
                    report.failed.append(profile.profile_id)
                    continue

                report.processed += 1
                logger.info(
                    "Generated slugs for profile %s: %s",
                    profile.profile_id,
                    ", ".join(f"{lang.value}={slugs[lang]}" for lang in SUPPORTED_LANGUAGES),
                )

        report.total_profiles, report.profiles_with_slugs = await self._repository.count_profiles()
        logger.info(
            "Backfill finished: %s processed, %s failed, %s/%s profiles have slugs",
            report.processed,
            report.failed_count,
            report.profiles_with_slugs,
            report.total_profiles,
        )
        return report
