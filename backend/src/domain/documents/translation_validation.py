"""Per-locale title/description validation.

Pure functions, no I/O. All configured locales must be present; a partial
set is a validation failure, never a partial success.
"""

from typing import Dict, Iterable, List, Sequence

from .errors import (
    DescriptionInvalidError,
    DuplicateTranslationError,
    MissingTranslationError,
    TitleInvalidError,
    UnsupportedLocaleError,
)
from .models import TranslationInput


TITLE_MAX_LENGTH = 100
DESCRIPTION_MIN_LENGTH = 5
DESCRIPTION_MAX_LENGTH = 500

DEFAULT_REQUIRED_LOCALES = ("pt", "es", "it")


def validate_title(locale: str, title: str) -> str:
    """Validate and trim a title.

    Raises:
        TitleInvalidError: If blank after trimming or longer than 100 chars
    """
    value = (title or "").strip()
    if not value:
        raise TitleInvalidError(locale, f"Title for locale '{locale}' cannot be empty")
    if len(value) > TITLE_MAX_LENGTH:
        raise TitleInvalidError(
            locale,
            f"Title for locale '{locale}' exceeds {TITLE_MAX_LENGTH} characters (got {len(value)})",
        )
    return value


def validate_description(locale: str, description: str) -> str:
    """Validate and trim a description.

    Raises:
        DescriptionInvalidError: If shorter than 5 or longer than 500 chars
            after trimming
    """
    value = (description or "").strip()
    if len(value) < DESCRIPTION_MIN_LENGTH:
        raise DescriptionInvalidError(
            locale,
            f"Description for locale '{locale}' must have at least "
            f"{DESCRIPTION_MIN_LENGTH} characters (got {len(value)})",
        )
    if len(value) > DESCRIPTION_MAX_LENGTH:
        raise DescriptionInvalidError(
            locale,
            f"Description for locale '{locale}' exceeds {DESCRIPTION_MAX_LENGTH} characters (got {len(value)})",
        )
    return value


def validate_translations(
    translations: Iterable[TranslationInput],
    required_locales: Sequence[str] = DEFAULT_REQUIRED_LOCALES,
) -> Dict[str, TranslationInput]:
    """Validate a complete set of translations.

    Locales are checked in sorted order so the first reported error does not
    depend on the order the client sent them in.

    Args:
        translations: One entry per locale
        required_locales: The configured locale set; every one must be
            present and no other locale is accepted

    Returns:
        Trimmed translations keyed by locale, ordered by locale

    Raises:
        DuplicateTranslationError: A locale appears more than once
        UnsupportedLocaleError: A locale outside the configured set
        MissingTranslationError: A configured locale is absent
        TitleInvalidError / DescriptionInvalidError: Field rules violated

    Example:
        >>> result = validate_translations(
        ...     [TranslationInput("pt", " Prova ", "Descrição longa")],
        ...     required_locales=["pt"],
        ... )
        >>> result["pt"].title
        'Prova'
    """
    by_locale: Dict[str, TranslationInput] = {}
    for translation in translations:
        locale = (translation.locale or "").strip()
        if locale in by_locale:
            raise DuplicateTranslationError(locale)
        by_locale[locale] = translation

    required = set(required_locales)
    unexpected: List[str] = sorted(set(by_locale) - required)
    if unexpected:
        raise UnsupportedLocaleError(unexpected[0])

    for locale in sorted(required):
        if locale not in by_locale:
            raise MissingTranslationError(locale)

    validated: Dict[str, TranslationInput] = {}
    for locale in sorted(required):
        translation = by_locale[locale]
        validated[locale] = TranslationInput(
            locale=locale,
            title=validate_title(locale, translation.title),
            description=validate_description(locale, translation.description),
        )

    return validated
