"""Data models for the conversion engine."""

from .catalog import (
    PLURAL_CATEGORIES,
    Catalog,
    CatalogEntry,
    ExtractionState,
    PlainTranslation,
    PluralTranslation,
    Translation,
    TranslationState,
    ValidationIssue,
    new_catalog,
    normalize_language_code,
    same_language,
    upsert_translation,
    validate,
)
from .language_file import LanguageFile, guess_language_code

__all__ = [
    "PLURAL_CATEGORIES",
    "Catalog",
    "CatalogEntry",
    "ExtractionState",
    "PlainTranslation",
    "PluralTranslation",
    "Translation",
    "TranslationState",
    "ValidationIssue",
    "new_catalog",
    "normalize_language_code",
    "same_language",
    "upsert_translation",
    "validate",
    "LanguageFile",
    "guess_language_code",
]
