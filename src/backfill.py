from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path


if __package__ in {None, ""}:
    project_root = Path(__file__).resolve().parent.parent
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))
    from src.app.config import AppConfig  # type: ignore
    from src.app.di import AppContainer  # type: ignore
else:
    from .app.config import AppConfig
    from .app.di import AppContainer

logger = logging.getLogger("src.backfill")


async def main() -> int:
    config = AppConfig()
    config.ensure_dirs()
    logging.basicConfig(
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        level=getattr(logging, config.log_level.upper(), logging.INFO),
    )

    try:
        container = await AppContainer.build(config)
        report = await container.backfill_service.run()
    except Exception:
        logger.exception("Slug backfill failed")
        return 1

    if report.candidates == 0:
        logger.info("All profiles already have slugs")
    return 1 if report.failed else 0


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
