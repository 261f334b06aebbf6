"""Coverage statistics and duplicate detection for catalogs."""

from dataclasses import dataclass, field
from typing import Dict, List

from ..models.catalog import Catalog, PlainTranslation, PluralTranslation, TranslationState


@dataclass
class DuplicateValue:
    """A trimmed value shared by several keys."""

    value: str
    keys: List[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.keys)


def get_catalog_stats(catalog: Catalog) -> dict:
    """
    Summarize a catalog.

    Coverage is counted per language: "translated" values, "pending" ones
    (state new or needs_review, or empty) and "missing" keys.
    """
    total = len(catalog)
    coverage: Dict[str, dict] = {}

    for language in catalog.languages:
        translated = pending = 0
        for key in catalog.entries:
            translation = catalog.resolve(key, language)
            if translation is None:
                continue
            if translation.is_empty or (
                isinstance(translation, PlainTranslation)
                and translation.state is not TranslationState.TRANSLATED
            ):
                pending += 1
            else:
                translated += 1

        coverage[language] = {
            "translated": translated,
            "pending": pending,
            "missing": total - translated - pending,
            "total": total,
            "percent": round(translated / total * 100, 1) if total else 0.0,
        }

    return {
        "total_keys": total,
        "source_language": catalog.source_language,
        "languages": list(catalog.languages),
        "plural_keys": sum(
            1 for entry in catalog.entries.values()
            if any(isinstance(t, PluralTranslation) for t in entry.translations.values())
        ),
        "coverage": coverage,
    }


def find_duplicate_values(catalog: Catalog) -> List[DuplicateValue]:
    """
    List values used by more than one key, across all languages.

    Plural variants are reported as ``key.category``. Most shared values
    come first.
    """
    value_to_keys: Dict[str, List[str]] = {}

    def add(value: str, key: str) -> None:
        trimmed = value.strip()
        if not trimmed:
            return
        keys = value_to_keys.setdefault(trimmed, [])
        if key not in keys:
            keys.append(key)

    for key, entry in catalog.entries.items():
        for translation in entry.translations.values():
            if isinstance(translation, PluralTranslation):
                for category, value in translation.variants.items():
                    add(value, f"{key}.{category}")
            else:
                add(translation.value, key)

    duplicates = [
        DuplicateValue(value=value, keys=keys)
        for value, keys in value_to_keys.items()
        if len(keys) > 1
    ]
    return sorted(duplicates, key=lambda d: d.count, reverse=True)
