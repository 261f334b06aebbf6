"""Data model for translated string catalogs."""

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple, Union

from ..errors import ConflictError, FormatError, ValidationError

# ICU plural categories, in the order every output format uses.
PLURAL_CATEGORIES = ("zero", "one", "two", "few", "many", "other")

_SUBTAG_PATTERN = re.compile(r"^[A-Za-z0-9]+$")


def normalize_language_code(code: str) -> str:
    """
    Return the canonical form of a BCP-47-ish language code.

    ``pt_br`` -> ``pt-BR``, ``ZH-hans`` -> ``zh-Hans``, ``EN`` -> ``en``.
    """
    if code is None or not str(code).strip():
        raise FormatError("Language code is empty")

    parts = str(code).strip().replace("_", "-").split("-")
    if any(not _SUBTAG_PATTERN.match(part) for part in parts):
        raise FormatError(f"Invalid language code: {code!r}")

    normalized = [parts[0].lower()]
    for part in parts[1:]:
        if len(part) == 4 and part.isalpha():
            normalized.append(part.title())  # script
        elif (len(part) == 2 and part.isalpha()) or (len(part) == 3 and part.isdigit()):
            normalized.append(part.upper())  # region
        else:
            normalized.append(part.lower())
    return "-".join(normalized)


def same_language(first: str, second: str) -> bool:
    """Case-insensitive language code comparison."""
    return first.replace("_", "-").casefold() == second.replace("_", "-").casefold()


class TranslationState(str, Enum):
    """State of a single translated value."""

    NEW = "new"
    NEEDS_REVIEW = "needs_review"
    TRANSLATED = "translated"

    @classmethod
    def from_wire(cls, value: str) -> "TranslationState":
        state = _TRANSLATION_STATE_ALIASES.get(value)
        if state is None:
            raise FormatError(f"Unknown translation state: {value!r}")
        return state


_TRANSLATION_STATE_ALIASES = {
    "new": TranslationState.NEW,
    "needs_review": TranslationState.NEEDS_REVIEW,
    "stale": TranslationState.NEEDS_REVIEW,
    "flagged": TranslationState.NEEDS_REVIEW,
    "translated": TranslationState.TRANSLATED,
    "reviewed": TranslationState.TRANSLATED,
}


class ExtractionState(str, Enum):
    """Whether a key is still in sync with the source code."""

    TRANSLATED = "translated"
    NEEDS_REVIEW = "needs_review"
    STALE = "stale"
    MANUAL = "manual"

    @classmethod
    def from_wire(cls, value: Optional[str]) -> "ExtractionState":
        if value is None:
            return cls.TRANSLATED
        state = _EXTRACTION_STATE_ALIASES.get(value)
        if state is None:
            raise FormatError(f"Unknown extraction state: {value!r}")
        return state

    def to_wire(self) -> Optional[str]:
        """String Catalog value, None when the field is left out."""
        if self is ExtractionState.TRANSLATED:
            return None
        return self.value


_EXTRACTION_STATE_ALIASES = {
    "extracted_with_value": ExtractionState.TRANSLATED,
    "translated": ExtractionState.TRANSLATED,
    "needs_review": ExtractionState.NEEDS_REVIEW,
    "stale": ExtractionState.STALE,
    "manual": ExtractionState.MANUAL,
    "migrated": ExtractionState.MANUAL,
}


@dataclass(frozen=True)
class PlainTranslation:
    """A single string value for one language."""

    value: str
    state: TranslationState = TranslationState.TRANSLATED

    @property
    def is_empty(self) -> bool:
        return self.value == ""


@dataclass(frozen=True)
class PluralTranslation:
    """Authored plural variants for one language, keyed by plural category."""

    variants: Dict[str, str]

    def __post_init__(self):
        object.__setattr__(self, "variants", dict(self.variants))

    @property
    def other(self) -> Optional[str]:
        return self.variants.get("other")

    @property
    def is_empty(self) -> bool:
        return all(value == "" for value in self.variants.values())


Translation = Union[PlainTranslation, PluralTranslation]


def translation_problems(translation: Translation) -> List[str]:
    """Describe every invariant a translation breaks (empty list when valid)."""
    if isinstance(translation, PlainTranslation):
        if not isinstance(translation.value, str):
            return ["value must be a string"]
        return []

    if not isinstance(translation, PluralTranslation):
        return [f"unsupported translation type {type(translation).__name__}"]

    problems = []
    for category, value in translation.variants.items():
        if category not in PLURAL_CATEGORIES:
            problems.append(f"unknown plural category '{category}'")
        elif not isinstance(value, str):
            problems.append(f"plural category '{category}' must be a string")
    if "other" not in translation.variants:
        problems.append("plural variants must define 'other'")
    return problems


@dataclass(frozen=True)
class ValidationIssue:
    """A single finding reported by catalog validation."""

    code: str
    message: str
    severity: str = "error"  # error, warning
    key: Optional[str] = None
    language: Optional[str] = None

    def __str__(self) -> str:
        where = []
        if self.key is not None:
            where.append(f"'{self.key}'")
        if self.language:
            where.append(f"({self.language})")
        prefix = " ".join(where)
        return f"{prefix}: {self.message}" if prefix else self.message


@dataclass(frozen=True)
class CatalogEntry:
    """One translatable key with its translations."""

    key: str
    comment: Optional[str] = None
    translations: Dict[str, Translation] = field(default_factory=dict)
    extraction_state: ExtractionState = ExtractionState.TRANSLATED

    def __post_init__(self):
        object.__setattr__(self, "translations", dict(self.translations))

    def get(self, language: str) -> Optional[Translation]:
        """Translation for a language, matched case-insensitively."""
        if language in self.translations:
            return self.translations[language]
        for code, translation in self.translations.items():
            if same_language(code, language):
                return translation
        return None

    def has_translation(self, language: str) -> bool:
        """Check if this entry has a non-empty translation for the language."""
        translation = self.get(language)
        return translation is not None and not translation.is_empty


@dataclass(frozen=True)
class Catalog:
    """
    The canonical set of translated strings.

    A catalog is treated as immutable: ``upsert_translation`` and the parsers
    return new snapshots instead of editing one in place.
    """

    source_language: str
    entries: Dict[str, CatalogEntry] = field(default_factory=dict)
    version: str = "1.0"

    def __post_init__(self):
        object.__setattr__(self, "entries", dict(self.entries))

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, key: object) -> bool:
        return key in self.entries

    @property
    def languages(self) -> Tuple[str, ...]:
        """Source language first, then other languages in first-seen order."""
        seen = [self.source_language]
        for entry in self.entries.values():
            for language in entry.translations:
                if not any(same_language(language, known) for known in seen):
                    seen.append(language)
        return tuple(seen)

    def is_source_language(self, language: str) -> bool:
        return same_language(language, self.source_language)

    def resolve(self, key: str, language: str) -> Optional[Translation]:
        """
        Get the translation for a key, falling back to the key itself for
        the source language.
        """
        entry = self.entries.get(key)
        if entry is None:
            return None
        translation = entry.get(language)
        if translation is None and self.is_source_language(language):
            return PlainTranslation(value=key, state=TranslationState.TRANSLATED)
        return translation

    def translations_for(self, language: str) -> Iterator[Tuple[CatalogEntry, Translation]]:
        """Yield (entry, translation) pairs for a language in key order."""
        for key, entry in self.entries.items():
            translation = self.resolve(key, language)
            if translation is not None:
                yield entry, translation

    def get_source_value(self, key: str) -> str:
        """Get the source language value for a key ('other' for plurals)."""
        translation = self.resolve(key, self.source_language)
        if isinstance(translation, PluralTranslation):
            return translation.other or key
        if translation is None:
            return key
        return translation.value


def new_catalog(source_language: str, version: str = "1.0") -> Catalog:
    """Create an empty catalog for a source language."""
    return Catalog(source_language=normalize_language_code(source_language), version=version)


def upsert_translation(
    catalog: Catalog,
    key: str,
    language: str,
    translation: Translation,
    *,
    comment: Optional[str] = None,
    extraction_state: Optional[ExtractionState] = None,
    strict: bool = False,
) -> Catalog:
    """
    Insert or overwrite a translation and return the new catalog.

    Last write wins. With ``strict=True`` a non-empty translation is never
    replaced by a different one; ConflictError is raised instead.
    """
    if not isinstance(key, str):
        raise ValidationError(f"Catalog keys must be strings, got {type(key).__name__}")

    language = normalize_language_code(language)
    problems = translation_problems(translation)
    if problems:
        issues = [
            ValidationIssue(code="invalid_translation", message=problem, key=key, language=language)
            for problem in problems
        ]
        raise ValidationError(
            f"Invalid translation for '{key}' ({language}): " + "; ".join(problems),
            issues,
        )

    existing = catalog.entries.get(key)
    if existing is None:
        entry = CatalogEntry(
            key=key,
            comment=comment,
            translations={language: translation},
            extraction_state=extraction_state or ExtractionState.TRANSLATED,
        )
    else:
        translations = {
            code: value for code, value in existing.translations.items()
            if not same_language(code, language)
        }
        current = existing.get(language)
        if strict and current is not None and not current.is_empty and current != translation:
            raise ConflictError(key, language)
        translations[language] = translation
        entry = replace(
            existing,
            translations=translations,
            comment=comment if comment is not None else existing.comment,
            extraction_state=extraction_state or existing.extraction_state,
        )

    entries = dict(catalog.entries)
    entries[key] = entry
    return replace(catalog, entries=entries)


def validate(catalog: Catalog) -> List[ValidationIssue]:
    """
    Check the catalog invariants.

    Never raises: every violation comes back as a ValidationIssue so the
    caller decides whether to warn or abort.
    """
    issues: List[ValidationIssue] = []

    try:
        if normalize_language_code(catalog.source_language) != catalog.source_language:
            issues.append(ValidationIssue(
                code="language_not_canonical",
                message=f"Source language '{catalog.source_language}' is not in canonical form",
                severity="warning",
            ))
    except FormatError as e:
        issues.append(ValidationIssue(code="invalid_language", message=e.message))

    for key, entry in catalog.entries.items():
        if entry.key != key:
            issues.append(ValidationIssue(
                code="key_mismatch",
                message=f"Entry is stored under '{key}' but its key is '{entry.key}'",
                key=key,
            ))

        seen: List[str] = []
        for language, translation in entry.translations.items():
            if any(same_language(language, other) for other in seen):
                issues.append(ValidationIssue(
                    code="duplicate_language",
                    message=f"Language '{language}' appears more than once",
                    key=key,
                    language=language,
                ))
            seen.append(language)

            try:
                normalize_language_code(language)
            except FormatError as e:
                issues.append(ValidationIssue(
                    code="invalid_language", message=e.message, key=key, language=language
                ))

            for problem in translation_problems(translation):
                issues.append(ValidationIssue(
                    code="invalid_translation", message=problem, key=key, language=language
                ))

    return issues
