"""Unit tests for locale translation validation"""

import pytest

from domain.documents import TranslationInput, validate_translations
from domain.documents.errors import (
    DescriptionInvalidError,
    DuplicateTranslationError,
    MissingTranslationError,
    TitleInvalidError,
    UnsupportedLocaleError,
)

LOCALES = ("pt", "es", "it")


def _t(locale, title="Título", description="Descrição da aula"):
    return TranslationInput(locale=locale, title=title, description=description)


def _complete(**overrides):
    return [overrides.get(loc, _t(loc)) for loc in LOCALES]


class TestValidateTranslations:
    """Test all-or-nothing translation validation"""

    def test_complete_set_returns_trimmed_values_by_locale(self):
        """Test values are trimmed and keyed in locale order"""
        result = validate_translations(
            _complete(pt=_t("pt", "  Prova  ", "  Resumo da prova  ")),
            LOCALES,
        )

        assert list(result) == ["es", "it", "pt"]
        assert result["pt"].title == "Prova"
        assert result["pt"].description == "Resumo da prova"

    def test_missing_locale(self):
        """Test a configured locale that is absent is reported"""
        with pytest.raises(MissingTranslationError) as exc_info:
            validate_translations([_t("pt"), _t("es")], LOCALES)

        assert exc_info.value.locale == "it"

    def test_missing_locale_wins_over_field_errors(self):
        """Test completeness is checked before field rules"""
        with pytest.raises(MissingTranslationError):
            validate_translations([_t("pt", title=""), _t("es")], LOCALES)

    def test_duplicate_locale(self):
        with pytest.raises(DuplicateTranslationError) as exc_info:
            validate_translations(_complete() + [_t("pt")], LOCALES)

        assert exc_info.value.locale == "pt"

    def test_unsupported_locale(self):
        """Test locales outside the configured set are rejected"""
        with pytest.raises(UnsupportedLocaleError) as exc_info:
            validate_translations(_complete() + [_t("fr")], LOCALES)

        assert exc_info.value.locale == "fr"

    def test_blank_title(self):
        with pytest.raises(TitleInvalidError) as exc_info:
            validate_translations(_complete(es=_t("es", title="   ")), LOCALES)

        assert exc_info.value.locale == "es"

    def test_title_length_limit(self):
        """Test 100 characters pass and 101 fail"""
        validate_translations(_complete(it=_t("it", title="a" * 100)), LOCALES)

        with pytest.raises(TitleInvalidError):
            validate_translations(_complete(it=_t("it", title="a" * 101)), LOCALES)

    def test_description_length_limits(self):
        """Test descriptions must be 5..500 characters after trimming"""
        validate_translations(_complete(pt=_t("pt", description="  abcde  ")), LOCALES)

        with pytest.raises(DescriptionInvalidError):
            validate_translations(_complete(pt=_t("pt", description=" abcd ")), LOCALES)

        with pytest.raises(DescriptionInvalidError):
            validate_translations(_complete(pt=_t("pt", description="a" * 501)), LOCALES)

    def test_first_error_independent_of_input_order(self):
        """Test errors are reported in sorted locale order"""
        bad = [_t("pt", title=""), _t("es", title=""), _t("it")]

        with pytest.raises(TitleInvalidError) as first:
            validate_translations(bad, LOCALES)
        with pytest.raises(TitleInvalidError) as second:
            validate_translations(list(reversed(bad)), LOCALES)

        assert first.value.locale == second.value.locale == "es"
