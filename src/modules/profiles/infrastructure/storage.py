"""
SQLite-based repository for profiles and their slugs.
"""
from datetime import UTC, datetime
from pathlib import Path
from typing import Dict, List, Optional

import aiosqlite

from src.modules.profiles.domain.interfaces import ProfileRepository
from src.modules.profiles.domain.models import SUPPORTED_LANGUAGES, LanguageCode, Profile, SlugBundle
from src.modules.profiles.utils.slug_generator import SLUG_FIELD_NAMES


_SLUG_COLUMNS = [SLUG_FIELD_NAMES[lang] for lang in SUPPORTED_LANGUAGES]
_PROFILE_COLUMNS = "profile_id, first_name, location, created_at, " + ", ".join(_SLUG_COLUMNS)
_HAS_ALL_SLUGS = " AND ".join(f"({col} IS NOT NULL AND {col} != '')" for col in _SLUG_COLUMNS)
_MISSING_ANY_SLUG = " OR ".join(f"({col} IS NULL OR {col} = '')" for col in _SLUG_COLUMNS)


class SQLiteProfileRepository(ProfileRepository):

    def __init__(self, db_path: Path):
        self.db_path = db_path

    async def initialize(self) -> None:
        slug_columns = ",\n".join(f"                    {col} TEXT" for col in _SLUG_COLUMNS)

        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(f"""
                CREATE TABLE IF NOT EXISTS profiles (
                    profile_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    first_name TEXT NOT NULL,
                    location TEXT NOT NULL,
                    created_at TEXT NOT NULL,
{slug_columns}
                )
            """)

            for col in _SLUG_COLUMNS:
                await db.execute(f"""
                    CREATE UNIQUE INDEX IF NOT EXISTS idx_profiles_{col}
                    ON profiles({col})
                    WHERE {col} IS NOT NULL AND {col} != ''
                """)

            await db.commit()

    async def create_profile(self, first_name: str, location: str, slugs: SlugBundle) -> Profile:
        now = datetime.now(UTC)
        placeholders = ", ".join("?" * len(_SLUG_COLUMNS))

        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                f"""
                INSERT INTO profiles (first_name, location, created_at, {", ".join(_SLUG_COLUMNS)})
                VALUES (?, ?, ?, {placeholders})
                """,
                (first_name, location, now.isoformat(), *(slugs.get(lang) for lang in SUPPORTED_LANGUAGES))
            )
            profile_id = cursor.lastrowid
            await db.commit()
            await cursor.close()

        return Profile(
            profile_id=profile_id,
            first_name=first_name,
            location=location,
            slugs={lang: slugs.get(lang) for lang in SUPPORTED_LANGUAGES},
            created_at=now
        )

    async def get_profile_by_id(self, profile_id: int) -> Optional[Profile]:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                f"SELECT {_PROFILE_COLUMNS} FROM profiles WHERE profile_id = ?",
                (profile_id,)
            )
            row = await cursor.fetchone()
            await cursor.close()

        if not row:
            return None

        return self._row_to_profile(row)

    async def get_profile_by_slug(self, language: LanguageCode, slug: str) -> Optional[Profile]:
        column = SLUG_FIELD_NAMES[LanguageCode(language)]

        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                f"SELECT {_PROFILE_COLUMNS} FROM profiles WHERE {column} = ?",
                (slug,)
            )
            row = await cursor.fetchone()
            await cursor.close()

        if not row:
            return None

        return self._row_to_profile(row)

    async def list_profiles_missing_slugs(self) -> List[Profile]:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                f"SELECT {_PROFILE_COLUMNS} FROM profiles WHERE {_MISSING_ANY_SLUG} ORDER BY profile_id"
            )
            rows = await cursor.fetchall()
            await cursor.close()

        return [self._row_to_profile(row) for row in rows]

    async def get_existing_slugs(self) -> Dict[LanguageCode, set[str]]:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(f"SELECT {', '.join(_SLUG_COLUMNS)} FROM profiles")
            rows = await cursor.fetchall()
            await cursor.close()

        # Partially slugged profiles count too, their saved slugs are already live
        existing: Dict[LanguageCode, set[str]] = {lang: set() for lang in SUPPORTED_LANGUAGES}
        for row in rows:
            for lang, slug in zip(SUPPORTED_LANGUAGES, row):
                if slug:
                    existing[lang].add(slug)

        return existing

    async def update_slugs(self, profile_id: int, slugs: SlugBundle) -> bool:
        assignments = ", ".join(f"{col} = ?" for col in _SLUG_COLUMNS)

        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                f"UPDATE profiles SET {assignments} WHERE profile_id = ?",
                (*(slugs[lang] for lang in SUPPORTED_LANGUAGES), profile_id)
            )
            affected = cursor.rowcount
            await db.commit()
            await cursor.close()

        return affected > 0

    async def count_profiles(self) -> tuple[int, int]:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                f"""
                SELECT
                    COUNT(*),
                    COALESCE(SUM(CASE WHEN {_HAS_ALL_SLUGS} THEN 1 ELSE 0 END), 0)
                FROM profiles
                """
            )
            row = await cursor.fetchone()
            await cursor.close()

        return row[0], row[1]

    def _row_to_profile(self, row) -> Profile:
        return Profile(
            profile_id=row[0],
            first_name=row[1],
            location=row[2],
            created_at=datetime.fromisoformat(row[3]).replace(tzinfo=UTC),
            slugs={lang: row[4 + index] or None for index, lang in enumerate(SUPPORTED_LANGUAGES)}
        )
