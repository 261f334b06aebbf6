"""Tests for merging legacy files into catalogs."""

import json

import pytest

from locbridge.errors import AmbiguousLanguageError, ConflictError, EmptyInputError, FormatError
from locbridge.formats.android_writer import generate_all_android_xml
from locbridge.formats.xcstrings_writer import generate_ios_string_catalog
from locbridge.models.catalog import (
    ExtractionState,
    PlainTranslation,
    PluralTranslation,
    new_catalog,
    upsert_translation,
)
from locbridge.models.language_file import LanguageFile
from locbridge.services.merge_service import (
    MergeService,
    infer_source_language,
    merge_and_parse_strings,
    merge_strings_into_catalog,
)


def test_hello_scenario(hello_files):
    result = merge_and_parse_strings(hello_files)
    catalog = result.catalog

    assert result.source_language == "en"
    assert list(catalog.entries) == ["hello"]
    assert catalog.entries["hello"].translations == {
        "en": PlainTranslation("Hello"),
        "fr": PlainTranslation("Bonjour"),
    }
    assert sorted(generate_all_android_xml(catalog).paths()) == [
        "values-fr/strings.xml",
        "values/strings.xml",
    ]


def test_items_stringsdict_scenario(items_stringsdict):
    files = [LanguageFile("en.lproj/Localizable.stringsdict", items_stringsdict, "en")]
    catalog = merge_and_parse_strings(files).catalog

    android = generate_all_android_xml(catalog)["en"]
    assert '<plurals name="items">' in android
    assert '<item quantity="one">%d item</item>' in android
    assert '<item quantity="other">%d items</item>' in android

    data = json.loads(generate_ios_string_catalog(catalog))
    plural = data["strings"]["items"]["localizations"]["en"]["variations"]["plural"]
    assert list(plural) == ["one", "other"]


class TestSourceLanguage:
    def test_english_wins_regardless_of_order(self):
        files = [LanguageFile("fr.strings", "", "fr"), LanguageFile("en.strings", "", "EN")]
        assert infer_source_language(files) == "en"

    def test_first_file_otherwise(self):
        files = [LanguageFile("de.strings", "", "de"), LanguageFile("fr.strings", "", "fr")]
        assert infer_source_language(files) == "de"

    def test_explicit_source_language(self, hello_files):
        result = merge_and_parse_strings(hello_files, source_language="fr")
        assert result.catalog.source_language == "fr"
        assert result.languages == ("fr", "en")


def test_empty_input():
    with pytest.raises(EmptyInputError, match="No files to process"):
        merge_and_parse_strings([])


def test_merge_is_idempotent(hello_files):
    once = merge_and_parse_strings(hello_files[:1]).catalog
    twice = merge_and_parse_strings([hello_files[0], hello_files[0]]).catalog
    assert once == twice


def test_later_file_wins():
    files = [
        LanguageFile("a/fr.lproj/Localizable.strings", '"k" = "premier";', "fr"),
        LanguageFile("b/fr.lproj/Localizable.strings", '"k" = "second";', "fr"),
    ]
    result = MergeService().merge_files(files)

    assert result.catalog.entries["k"].get("fr").value == "second"
    assert len(result.warnings) == 1
    assert "fr" in result.warnings[0]


def test_strict_mode_rejects_duplicate_languages():
    files = [
        LanguageFile("a/fr.strings", '"k" = "x";', "fr"),
        LanguageFile("b/fr.strings", '"k" = "y";', "FR"),
    ]
    with pytest.raises(AmbiguousLanguageError) as exc_info:
        MergeService(strict=True).merge_files(files)
    assert exc_info.value.file_names == ["a/fr.strings", "b/fr.strings"]


def test_strings_and_stringsdict_for_one_language_are_not_ambiguous(items_stringsdict):
    files = [
        LanguageFile("en.lproj/Localizable.strings", '"hello" = "Hello";', "en"),
        LanguageFile("en.lproj/Localizable.stringsdict", items_stringsdict, "en"),
    ]
    result = MergeService(strict=True).merge_files(files)

    assert result.warnings == []
    assert isinstance(result.catalog.entries["items"].get("en"), PluralTranslation)


def test_comments_and_extraction_state():
    files = [LanguageFile("en.strings", '/* Button */\n"ok" = "OK";', "en")]
    entry = merge_and_parse_strings(files).catalog.entries["ok"]

    assert entry.comment == "Button"
    assert entry.extraction_state is ExtractionState.MANUAL


def test_errors_name_the_file():
    files = [
        LanguageFile("en.lproj/Localizable.strings", '"a" = "A";', "en"),
        LanguageFile("fr.lproj/Localizable.strings", '"a" = "A"\n', "fr"),
    ]
    with pytest.raises(FormatError) as exc_info:
        merge_and_parse_strings(files)

    error = exc_info.value
    assert error.file_name == "fr.lproj/Localizable.strings"
    assert error.line == 1
    assert str(error).startswith("fr.lproj/Localizable.strings:1: ")


def test_missing_language_code():
    with pytest.raises(FormatError, match="Missing language code"):
        merge_and_parse_strings([LanguageFile("Localizable.strings", "", "")])


def test_unsupported_file_type():
    with pytest.raises(FormatError, match="Unsupported file type"):
        merge_and_parse_strings([LanguageFile("strings.xml", "<resources/>", "en")])


class TestMergeIntoCatalog:
    def test_existing_keys_keep_their_state(self):
        catalog = upsert_translation(new_catalog("en"), "hello", "en", PlainTranslation("Hello"))
        files = [
            LanguageFile("de.strings", '"hello" = "Hallo";\n"new_key" = "Neu";', "de"),
        ]
        result = merge_strings_into_catalog(catalog, files)

        assert result.source_language == "en"
        assert result.catalog.entries["hello"].extraction_state is ExtractionState.TRANSLATED
        assert result.catalog.entries["hello"].get("de").value == "Hallo"
        assert result.catalog.entries["new_key"].extraction_state is ExtractionState.MANUAL

    def test_strict_conflict(self):
        catalog = upsert_translation(new_catalog("en"), "hello", "de", PlainTranslation("Hallo"))
        files = [LanguageFile("de.strings", '"hello" = "Servus";', "de")]

        with pytest.raises(ConflictError):
            merge_strings_into_catalog(catalog, files, strict=True)
