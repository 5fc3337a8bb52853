from __future__ import annotations

import re

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    telegram_bot_token: Optional[str] = Field(None, alias="TELEGRAM_BOT_TOKEN")

    storage_path: Path = Field(Path("./data/profiles.db"), alias="STORAGE_PATH")
    slug_max_attempts: int = Field(
        100,
        ge=2,
        le=10_000,
        alias="SLUG_MAX_ATTEMPTS",
        description="Highest numeric suffix tried before falling back to a timestamp",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field("INFO", alias="LOG_LEVEL")

    # Keep the raw env value as a string to avoid dotenv provider attempting JSON decode
    admin_user_ids_raw: Optional[str] = Field(None, alias="ADMIN_USER_IDS")

    @property
    def admin_user_ids(self) -> set[int]:
        raw = self.admin_user_ids_raw
        if raw is None or raw == "":
            return set()
        # Support comma/space/semicolon separation
        tokens = [token for token in re.split(r"[\s,;]+", raw.strip()) if token]
        ids: set[int] = set()
        for token in tokens:
            try:
                ids.add(int(token))
            except ValueError:
                # ignore non-integer tokens
                continue
        return ids

    def ensure_dirs(self) -> None:
        self.storage_path.parent.mkdir(parents=True, exist_ok=True)
