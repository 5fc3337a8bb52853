"""
Multilingual SEO slug generation for profile URLs.

Slug format (per language): {first-name}-{from}-{city}-{country}
"""
import logging
import re
import time
import unicodedata
from typing import AbstractSet, Mapping, Optional

from src.modules.profiles.domain.models import (
    SUPPORTED_LANGUAGES,
    LanguageCode,
    ParsedSlug,
    SlugBundle,
    SlugInput,
)

logger = logging.getLogger(__name__)


DEFAULT_MAX_ATTEMPTS = 100
SLUG_PATTERN = re.compile(r'^[a-z0-9]+(-[a-z0-9]+)*$')

_COMBINING_MARKS = re.compile(r'[\u0300-\u036f]')
_INVALID_CHARS = re.compile(r'[^a-z0-9\s-]')
_WHITESPACE = re.compile(r'\s+')
_HYPHENS = re.compile(r'-+')


def _same_in_every_language(fragment: str) -> Mapping[LanguageCode, str]:
    return {lang: fragment for lang in SUPPORTED_LANGUAGES}


# Curated fragments for the high-traffic Dominican cities
LOCATION_TRANSLATIONS: Mapping[str, Mapping[LanguageCode, str]] = {
    'Santiago': _same_in_every_language('santiago'),
    'Santo Domingo': _same_in_every_language('santo-domingo'),
    'La Romana': _same_in_every_language('la-romana'),
    'San Pedro de Macorís': _same_in_every_language('san-pedro-de-macoris'),
    'Puerto Plata': _same_in_every_language('puerto-plata'),
    'Punta Cana': _same_in_every_language('punta-cana'),
}

COUNTRY_TRANSLATIONS: Mapping[LanguageCode, str] = {
    LanguageCode.EN: 'dominican-republic',
    LanguageCode.ES: 'republica-dominicana',
    LanguageCode.DE: 'dominikanische-republik',
    LanguageCode.IT: 'repubblica-dominicana',
    LanguageCode.NL: 'dominicaanse-republiek',
    LanguageCode.PT: 'republica-dominicana',
}

FROM_PREPOSITIONS: Mapping[LanguageCode, str] = {
    LanguageCode.EN: 'from',
    LanguageCode.ES: 'de',
    LanguageCode.DE: 'aus',
    LanguageCode.IT: 'da',
    LanguageCode.NL: 'uit',
    LanguageCode.PT: 'de',
}

SLUG_FIELD_NAMES: Mapping[LanguageCode, str] = {
    lang: f"slug_{lang.value}" for lang in SUPPORTED_LANGUAGES
}


def normalize(text: str) -> str:
    """
    Normalize text for use inside a URL slug.

    Rules:
    - Convert to lowercase
    - Decompose accented characters and drop the combining marks
    - Remove everything except [a-z0-9], whitespace and hyphens
    - Replace whitespace runs with a single hyphen
    - Collapse multiple hyphens
    - Strip leading/trailing hyphens

    Args:
        text: Input text to normalize

    Returns:
        Normalized slug fragment, possibly empty

    Examples:
        >>> normalize("María José")
        'maria-jose'
        >>> normalize("San Pedro de Macorís")
        'san-pedro-de-macoris'
    """
    text = text.lower()
    text = unicodedata.normalize('NFD', text)
    text = _COMBINING_MARKS.sub('', text)
    text = _INVALID_CHARS.sub('', text)
    text = text.strip()
    text = _WHITESPACE.sub('-', text)
    text = _HYPHENS.sub('-', text)
    return text.strip('-')


def resolve_location_slug(location: str, language: LanguageCode | str) -> str:
    """
    Get the slug fragment for a location in the given language.

    Curated translations are matched verbatim (case-sensitive); any other
    location falls back to its normalized form.
    """
    language = LanguageCode(language)
    translation = LOCATION_TRANSLATIONS.get(location)
    if translation and translation.get(language):
        return translation[language]
    return normalize(location)


def compose_slugs(data: SlugInput) -> SlugBundle:
    """
    Compose the base slug of a profile for every supported language.

    A first name without any ASCII letter or digit yields a slug starting
    with a hyphen; callers reject empty names upstream.
    """
    first_name = normalize(data.first_name)
    slugs: SlugBundle = {}
    for lang in SUPPORTED_LANGUAGES:
        location = resolve_location_slug(data.location, lang)
        slugs[lang] = f"{first_name}-{FROM_PREPOSITIONS[lang]}-{location}-{COUNTRY_TRANSLATIONS[lang]}"
    return slugs


def ensure_unique(
    base_slug: str,
    existing_slugs: AbstractSet[str],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> str:
    """
    Resolve slug collision by appending numeric suffix.

    Suffixes are tried in ascending order starting at 2. When every suffix up
    to max_attempts is taken, a millisecond timestamp is appended instead,
    bumped past any stamp already taken.
    The caller owns existing_slugs and must add the returned value itself.

    Args:
        base_slug: Slug composed for the profile
        existing_slugs: Slugs already taken for the same language
        max_attempts: Highest numeric suffix to try

    Returns:
        A slug absent from existing_slugs

    Examples:
        >>> ensure_unique("ana-x", {"ana-x"})
        'ana-x-2'
        >>> ensure_unique("ana-x", {"ana-x", "ana-x-2"})
        'ana-x-3'
    """
    if base_slug not in existing_slugs:
        return base_slug

    for counter in range(2, max_attempts + 1):
        candidate = f"{base_slug}-{counter}"
        if candidate not in existing_slugs:
            return candidate

    stamp = int(time.time() * 1000)
    while f"{base_slug}-{stamp}" in existing_slugs:
        stamp += 1
    fallback = f"{base_slug}-{stamp}"
    logger.warning("Suffixes 2..%s exhausted for %s, using %s", max_attempts, base_slug, fallback)
    return fallback


def parse_slug(slug: str, language: LanguageCode | str) -> ParsedSlug:
    """
    Best-effort inverse of compose_slugs, for display and debugging only.

    Accents and case are lost during normalization, so the result never
    identifies a profile.
    """
    language = LanguageCode(language)
    preposition = FROM_PREPOSITIONS[language]
    country = COUNTRY_TRANSLATIONS[language]

    without_country = slug.replace(f"-{country}", '', 1)
    parts = without_country.split(f"-{preposition}-", 1)

    if len(parts) == 2:
        return ParsedSlug(
            first_name=parts[0].replace('-', ' '),
            location=parts[1].replace('-', ' '),
        )

    return ParsedSlug()


def validate_slug(slug: Optional[str]) -> bool:
    if not slug:
        return False
    return bool(SLUG_PATTERN.fullmatch(slug))


def slug_field_name(language: str) -> str:
    """Get the store column holding slugs for a language (slug_en if unknown)."""
    try:
        return SLUG_FIELD_NAMES[LanguageCode(language)]
    except ValueError:
        return SLUG_FIELD_NAMES[LanguageCode.EN]


def supported_languages() -> list[str]:
    return [lang.value for lang in SUPPORTED_LANGUAGES]
