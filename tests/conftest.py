"""Shared fixtures for the locbridge test suite."""

import json

import pytest

from locbridge.models.catalog import (
    ExtractionState,
    PlainTranslation,
    PluralTranslation,
    TranslationState,
    new_catalog,
    upsert_translation,
)
from locbridge.models.language_file import LanguageFile
from locbridge.services.catalog_merge_service import CatalogFile

ITEMS_STRINGSDICT = """<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE plist PUBLIC "-//Apple//DTD PLIST 1.0//EN" "http://www.apple.com/DTDs/PropertyList-1.0.dtd">
<plist version="1.0">
<dict>
    <key>items</key>
    <dict>
        <key>NSStringLocalizedFormatKey</key>
        <string>%#@count@</string>
        <key>count</key>
        <dict>
            <key>NSStringFormatSpecTypeKey</key>
            <string>NSStringPluralRuleType</string>
            <key>NSStringFormatValueTypeKey</key>
            <string>d</string>
            <key>one</key>
            <string>%d item</string>
            <key>other</key>
            <string>%d items</string>
        </dict>
    </dict>
</dict>
</plist>
"""


def make_file(path: str, content: str, lang_code: str) -> LanguageFile:
    return LanguageFile(name=path, content=content, lang_code=lang_code)


@pytest.fixture
def hello_files():
    """English and French .strings files with one shared key."""
    return [
        make_file("en.lproj/Localizable.strings", '"hello" = "Hello";\n', "en"),
        make_file("fr.lproj/Localizable.strings", '"hello" = "Bonjour";\n', "fr"),
    ]


@pytest.fixture
def items_stringsdict():
    return ITEMS_STRINGSDICT


@pytest.fixture
def sample_catalog():
    """A catalog exercising plain, plural, commented and stale entries."""
    catalog = new_catalog("en")
    catalog = upsert_translation(
        catalog, "greeting", "en", PlainTranslation("Hello, %@!"),
        comment="Shown on the home screen",
    )
    catalog = upsert_translation(
        catalog, "greeting", "de", PlainTranslation("Hallo, %@!"),
    )
    catalog = upsert_translation(
        catalog, "greeting", "fr", PlainTranslation("Bonjour, %@ !", TranslationState.NEEDS_REVIEW),
    )
    catalog = upsert_translation(
        catalog, "items", "en", PluralTranslation({"one": "%d item", "other": "%d items"}),
    )
    catalog = upsert_translation(
        catalog, "items", "de", PluralTranslation({"one": "%d Element", "other": "%d Elemente"}),
    )
    catalog = upsert_translation(catalog, "Cancel", "en", PlainTranslation("Cancel"))
    catalog = upsert_translation(catalog, "Cancel", "de", PlainTranslation("Abbrechen"))
    catalog = upsert_translation(
        catalog, "old_banner", "de", PlainTranslation("Alt"),
        extraction_state=ExtractionState.STALE,
    )
    return catalog


def string_unit(value: str, state: str = "translated") -> dict:
    return {"stringUnit": {"state": state, "value": value}}


def xcstrings(strings: dict, source_language: str = "en") -> str:
    return json.dumps({"sourceLanguage": source_language, "strings": strings, "version": "1.0"})


APP_XCSTRINGS = xcstrings({
    "greeting": {"localizations": {"en": string_unit("Hello"), "fr": string_unit("Bonjour")}},
    "Cancel": {"localizations": {"fr": string_unit("Annuler")}},
})

WIDGET_XCSTRINGS = xcstrings({
    "greeting": {"localizations": {
        "en": string_unit("Hello"),
        "fr": string_unit("Salut"),
        "de": string_unit("Hallo"),
    }},
    "Done": {"comment": "Button title", "localizations": {"fr": string_unit("Terminé")}},
})


@pytest.fixture
def conflicting_catalogs():
    """Two String Catalogs that disagree on the French 'greeting'."""
    return [
        CatalogFile("app.xcstrings", APP_XCSTRINGS),
        CatalogFile("widget.xcstrings", WIDGET_XCSTRINGS),
    ]
