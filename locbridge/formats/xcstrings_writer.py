"""Writer for Apple's .xcstrings JSON format (Xcode 15+)."""

import json
import logging
from typing import Any, Dict, Optional

from ..models.catalog import (
    Catalog,
    CatalogEntry,
    ExtractionState,
    PlainTranslation,
    PluralTranslation,
    Translation,
    TranslationState,
    normalize_language_code,
    same_language,
)
from ..validation.catalog_validator import ensure_valid
from .plural_rules import ordered_variants

log = logging.getLogger(__name__)


class XCStringsWriter:
    """Writer for .xcstrings content."""

    def __init__(self, include_stale: bool = False):
        self.include_stale = include_stale

    def to_string(self, catalog: Catalog, source_language: Optional[str] = None) -> str:
        """
        Convert a Catalog to a JSON string.

        Args:
            catalog: The catalog to convert
            source_language: Overrides the catalog's source language

        Returns:
            JSON string representation
        """
        ensure_valid(catalog)
        data = self._to_dict(catalog, source_language or catalog.source_language)
        return json.dumps(data, indent=2, ensure_ascii=False)

    def _to_dict(self, catalog: Catalog, source_language: str) -> Dict[str, Any]:
        """Convert a Catalog to a dictionary for JSON serialization."""
        source_language = normalize_language_code(source_language)

        # Catalog order, not alphabetical, keeps diffs small
        strings_dict = {}
        skipped = 0
        for key, entry in catalog.entries.items():
            if entry.extraction_state is ExtractionState.STALE and not self.include_stale:
                skipped += 1
                continue
            strings_dict[key] = self._entry_to_dict(entry, source_language)

        if skipped:
            log.info("Left out %d stale entries", skipped)

        return {
            "sourceLanguage": source_language,
            "strings": strings_dict,
            "version": catalog.version,
        }

    def _entry_to_dict(self, entry: CatalogEntry, source_language: str) -> Dict[str, Any]:
        """Convert a CatalogEntry to dictionary."""
        entry_dict: Dict[str, Any] = {}

        if entry.comment:
            entry_dict["comment"] = entry.comment

        extraction_state = entry.extraction_state.to_wire()
        if extraction_state:
            entry_dict["extractionState"] = extraction_state

        localizations_dict = {}
        for lang in sorted(entry.translations):
            translation = entry.translations[lang]
            if same_language(lang, source_language) and self._is_key_echo(entry.key, translation):
                continue
            localizations_dict[lang] = self._localization_to_dict(translation)

        if localizations_dict:
            entry_dict["localizations"] = localizations_dict

        return entry_dict

    @staticmethod
    def _is_key_echo(key: str, translation: Translation) -> bool:
        """A source value identical to its key adds nothing to the file."""
        return (
            isinstance(translation, PlainTranslation)
            and translation.value == key
            and translation.state is TranslationState.TRANSLATED
        )

    def _localization_to_dict(self, translation: Translation) -> Dict[str, Any]:
        """Convert a Translation to dictionary."""
        if isinstance(translation, PluralTranslation):
            return {
                "variations": {
                    "plural": {
                        category: {"stringUnit": {"state": "translated", "value": value}}
                        for category, value in ordered_variants(translation.variants)
                    }
                }
            }

        return {
            "stringUnit": {
                "state": translation.state.value,
                "value": translation.value,
            }
        }


def generate_ios_string_catalog(
    catalog: Catalog,
    source_language: Optional[str] = None,
    *,
    include_stale: bool = False,
) -> str:
    """Render a Catalog as ``Localizable.xcstrings`` JSON text."""
    return XCStringsWriter(include_stale=include_stale).to_string(catalog, source_language)
