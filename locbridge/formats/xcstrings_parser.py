"""Parser for Apple's .xcstrings JSON format (Xcode 15+)."""

import json
import logging
from typing import Any, Dict, List, Tuple

from ..errors import FormatError
from ..models.catalog import (
    PLURAL_CATEGORIES,
    Catalog,
    CatalogEntry,
    ExtractionState,
    PlainTranslation,
    PluralTranslation,
    Translation,
    TranslationState,
    normalize_language_code,
)
from .plural_rules import ordered_variants

log = logging.getLogger(__name__)


class XCStringsParser:
    """Parser for .xcstrings content."""

    def parse_string(self, content: str) -> Tuple[Catalog, Tuple[str, ...]]:
        """
        Parse .xcstrings content from a string.

        Document-level problems raise at once. Problems inside entries are
        collected and raised together as one FormatError.

        Args:
            content: JSON string content

        Returns:
            Tuple of (Catalog, languages found including the source language)
        """
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise FormatError(f"Invalid JSON: {e.msg}", line=e.lineno) from e

        if not isinstance(data, dict):
            raise FormatError("A String Catalog must be a JSON object")

        catalog = self._parse_data(data)
        return catalog, catalog.languages

    def _parse_data(self, data: Dict[str, Any]) -> Catalog:
        """Parse the JSON data structure into our model."""
        source_language = data.get("sourceLanguage")
        if not isinstance(source_language, str) or not source_language.strip():
            raise FormatError("Missing 'sourceLanguage'")
        source_language = normalize_language_code(source_language)

        strings = data.get("strings")
        if not isinstance(strings, dict):
            raise FormatError("Missing or invalid 'strings' object")

        version = data.get("version", "1.0")
        entries: Dict[str, CatalogEntry] = {}
        errors: List[FormatError] = []

        for key, entry_data in strings.items():
            try:
                entries[key] = self._parse_string_entry(key, entry_data)
            except FormatError as e:
                errors.append(e.with_context(key=key))

        if errors:
            raise FormatError.aggregate(errors)

        log.debug("Parsed String Catalog with %d keys", len(entries))
        return Catalog(source_language=source_language, entries=entries, version=str(version))

    def _parse_string_entry(self, key: str, entry_data: Any) -> CatalogEntry:
        """Parse a single string entry."""
        if not isinstance(entry_data, dict):
            raise FormatError("Entry must be a JSON object")

        comment = entry_data.get("comment")
        extraction_state = ExtractionState.from_wire(entry_data.get("extractionState"))

        localizations = entry_data.get("localizations", {})
        if not isinstance(localizations, dict):
            raise FormatError("'localizations' must be a JSON object")

        translations: Dict[str, Translation] = {}
        errors: List[FormatError] = []
        for lang, loc_data in localizations.items():
            try:
                language = normalize_language_code(lang)
                if language in translations:
                    raise FormatError(f"Duplicate localization for '{language}'")
                translations[language] = self._parse_localization(loc_data)
            except FormatError as e:
                errors.append(e.with_context(language=lang, key=key))

        if errors:
            raise FormatError.aggregate(errors)

        return CatalogEntry(
            key=key,
            comment=comment if isinstance(comment, str) else None,
            translations=translations,
            extraction_state=extraction_state,
        )

    def _parse_localization(self, loc_data: Any) -> Translation:
        """Parse a localization entry."""
        if not isinstance(loc_data, dict):
            raise FormatError("Localization must be a JSON object")

        variations = loc_data.get("variations")
        if variations is not None:
            if not isinstance(variations, dict) or "plural" not in variations:
                kinds = ", ".join(sorted(variations)) if isinstance(variations, dict) else "?"
                raise FormatError(f"Unsupported variations ({kinds}); only 'plural' is supported")
            return self._parse_plural(variations["plural"])

        if "stringUnit" in loc_data:
            return self._parse_string_unit(loc_data["stringUnit"])

        raise FormatError("Localization has neither 'stringUnit' nor plural 'variations'")

    def _parse_string_unit(self, su: Any) -> PlainTranslation:
        if not isinstance(su, dict):
            raise FormatError("'stringUnit' must be a JSON object")
        value = su.get("value", "")
        if not isinstance(value, str):
            raise FormatError("'stringUnit.value' must be a string")
        return PlainTranslation(
            value=value,
            state=TranslationState.from_wire(su.get("state", "new")),
        )

    def _parse_plural(self, plural: Any) -> PluralTranslation:
        if not isinstance(plural, dict):
            raise FormatError("'variations.plural' must be a JSON object")

        variants: Dict[str, str] = {}
        for category, variant in plural.items():
            if category not in PLURAL_CATEGORIES:
                raise FormatError(f"Unknown plural category '{category}'")
            variants[category] = self._parse_string_unit(
                variant.get("stringUnit") if isinstance(variant, dict) else None
            ).value

        if "other" not in variants:
            raise FormatError("Plural variations are missing 'other'")
        return PluralTranslation(variants=dict(ordered_variants(variants)))


def parse_string_catalog(content: str) -> Tuple[Catalog, Tuple[str, ...]]:
    """Parse .xcstrings JSON into a Catalog and the languages it covers."""
    return XCStringsParser().parse_string(content)
