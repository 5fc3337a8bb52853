"""
Domain models for profiles module.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional


class LanguageCode(str, Enum):
    EN = "en"
    ES = "es"
    DE = "de"
    IT = "it"
    NL = "nl"
    PT = "pt"


SUPPORTED_LANGUAGES: tuple[LanguageCode, ...] = tuple(LanguageCode)

SlugBundle = Dict[LanguageCode, str]


@dataclass(frozen=True)
class SlugInput:
    first_name: str
    location: str


@dataclass(frozen=True)
class ParsedSlug:
    first_name: Optional[str] = None
    location: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.first_name is None and self.location is None


@dataclass(frozen=True)
class Profile:
    profile_id: int
    first_name: str
    location: str
    slugs: Dict[LanguageCode, Optional[str]]
    created_at: datetime

    @property
    def has_all_slugs(self) -> bool:
        return all(self.slugs.get(lang) for lang in SUPPORTED_LANGUAGES)

    def slug_for(self, language: LanguageCode) -> Optional[str]:
        return self.slugs.get(language)


@dataclass
class BackfillReport:
    candidates: int = 0
    processed: int = 0
    failed: List[int] = field(default_factory=list)
    total_profiles: int = 0
    profiles_with_slugs: int = 0

    @property
    def failed_count(self) -> int:
        return len(self.failed)
