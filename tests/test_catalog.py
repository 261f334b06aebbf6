"""Tests for the catalog model."""

import pytest

from locbridge.errors import ConflictError, FormatError, ValidationError
from locbridge.models.catalog import (
    Catalog,
    CatalogEntry,
    ExtractionState,
    PlainTranslation,
    PluralTranslation,
    TranslationState,
    new_catalog,
    normalize_language_code,
    same_language,
    upsert_translation,
    validate,
)
from locbridge.models.language_file import LanguageFile, guess_language_code


@pytest.mark.parametrize("raw, expected", [
    ("en", "en"),
    ("EN", "en"),
    ("pt_br", "pt-BR"),
    ("pt-br", "pt-BR"),
    ("zh-hans", "zh-Hans"),
    ("ZH_HANT_tw", "zh-Hant-TW"),
    ("es-419", "es-419"),
])
def test_normalize_language_code(raw, expected):
    assert normalize_language_code(raw) == expected


@pytest.mark.parametrize("raw", ["", "   ", "en us", "fr!"])
def test_normalize_language_code_rejects_invalid(raw):
    with pytest.raises(FormatError):
        normalize_language_code(raw)


def test_same_language_ignores_case_and_separator():
    assert same_language("pt_BR", "pt-br")
    assert not same_language("pt", "pt-BR")


class TestStates:
    def test_translation_state_aliases(self):
        assert TranslationState.from_wire("stale") is TranslationState.NEEDS_REVIEW
        assert TranslationState.from_wire("reviewed") is TranslationState.TRANSLATED

    def test_unknown_translation_state(self):
        with pytest.raises(FormatError):
            TranslationState.from_wire("done")

    def test_extraction_state_missing_means_translated(self):
        assert ExtractionState.from_wire(None) is ExtractionState.TRANSLATED
        assert ExtractionState.from_wire("extracted_with_value") is ExtractionState.TRANSLATED
        assert ExtractionState.from_wire("migrated") is ExtractionState.MANUAL

    def test_extraction_state_to_wire(self):
        assert ExtractionState.TRANSLATED.to_wire() is None
        assert ExtractionState.STALE.to_wire() == "stale"


class TestUpsert:
    def test_upsert_returns_new_snapshot(self):
        empty = new_catalog("en")
        catalog = upsert_translation(empty, "hello", "en", PlainTranslation("Hello"))

        assert len(empty) == 0
        assert catalog.entries["hello"].get("en") == PlainTranslation("Hello")

    def test_last_write_wins(self):
        catalog = new_catalog("en")
        catalog = upsert_translation(catalog, "hello", "fr", PlainTranslation("Salut"))
        catalog = upsert_translation(catalog, "hello", "FR", PlainTranslation("Bonjour"))

        entry = catalog.entries["hello"]
        assert list(entry.translations) == ["fr"]
        assert entry.get("fr").value == "Bonjour"

    def test_comment_kept_when_not_given(self):
        catalog = new_catalog("en")
        catalog = upsert_translation(catalog, "k", "en", PlainTranslation("v"), comment="note")
        catalog = upsert_translation(catalog, "k", "fr", PlainTranslation("w"))

        assert catalog.entries["k"].comment == "note"

    def test_plural_without_other_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            upsert_translation(new_catalog("en"), "items", "en", PluralTranslation({"one": "1 item"}))
        assert exc_info.value.issues[0].code == "invalid_translation"

    def test_unknown_plural_category_is_rejected(self):
        with pytest.raises(ValidationError):
            upsert_translation(
                new_catalog("en"), "items", "en",
                PluralTranslation({"several": "x", "other": "y"}),
            )

    def test_strict_conflict(self):
        catalog = upsert_translation(new_catalog("en"), "k", "fr", PlainTranslation("a"))

        with pytest.raises(ConflictError):
            upsert_translation(catalog, "k", "fr", PlainTranslation("b"), strict=True)

        # Same value and empty existing values are not conflicts
        assert upsert_translation(catalog, "k", "fr", PlainTranslation("a"), strict=True) == catalog
        empty = upsert_translation(new_catalog("en"), "k", "fr", PlainTranslation(""))
        upsert_translation(empty, "k", "fr", PlainTranslation("b"), strict=True)


class TestCatalog:
    def test_languages_source_first(self, sample_catalog):
        assert sample_catalog.languages == ("en", "de", "fr")

    def test_resolve_falls_back_to_key_for_source(self):
        catalog = upsert_translation(new_catalog("en"), "Done", "fr", PlainTranslation("Terminé"))

        assert catalog.resolve("Done", "en") == PlainTranslation("Done")
        assert catalog.resolve("Done", "de") is None
        assert catalog.resolve("missing", "en") is None

    def test_source_value_of_plural(self, sample_catalog):
        assert sample_catalog.get_source_value("items") == "%d items"

    def test_has_translation(self, sample_catalog):
        assert sample_catalog.entries["greeting"].has_translation("FR")
        assert not sample_catalog.entries["Cancel"].has_translation("fr")


class TestValidate:
    def test_valid_catalog(self, sample_catalog):
        assert validate(sample_catalog) == []

    def test_reports_instead_of_raising(self):
        catalog = Catalog(
            source_language="EN",
            entries={
                "a": CatalogEntry(
                    key="b",
                    translations={
                        "fr": PluralTranslation({"one": "x"}),
                        "FR": PlainTranslation("y"),
                    },
                ),
            },
        )

        codes = {issue.code for issue in validate(catalog)}
        assert codes == {
            "language_not_canonical",
            "key_mismatch",
            "duplicate_language",
            "invalid_translation",
        }


class TestLanguageFile:
    def test_kind(self):
        assert LanguageFile("fr.lproj/Localizable.stringsdict", "", "fr").kind == "stringsdict"
        assert LanguageFile("Localizable.strings", "", "fr").kind == "strings"
        assert LanguageFile("strings.xml", "", "fr").kind == ""

    @pytest.mark.parametrize("name, expected", [
        ("fr.lproj/Localizable.strings", "fr"),
        ("App/Resources/pt-BR.lproj/Localizable.stringsdict", "pt-br"),
        ("zh-Hans.lproj", "zh-hans"),
        ("de.strings", "de"),
        ("Base.lproj/Localizable.strings", ""),
        ("Localizable.strings", ""),
    ])
    def test_guess_language_code(self, name, expected):
        assert guess_language_code(name) == expected
