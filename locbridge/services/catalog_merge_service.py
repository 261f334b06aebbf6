"""Merges several String Catalogs into one, with conflict detection."""

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Mapping, NamedTuple, Optional, Sequence, Tuple

from ..errors import EmptyInputError, FormatError, UnresolvedConflictError
from ..formats.plural_rules import ordered_variants
from ..formats.xcstrings_parser import XCStringsParser
from ..models.catalog import (
    Catalog,
    CatalogEntry,
    PlainTranslation,
    PluralTranslation,
    Translation,
    new_catalog,
    same_language,
    upsert_translation,
)

log = logging.getLogger(__name__)


class CatalogFile(NamedTuple):
    """An already-read .xcstrings document."""

    name: str
    content: str


@dataclass
class CatalogConflict:
    """A key whose translations differ between input catalogs."""

    key: str
    languages: List[str] = field(default_factory=list)
    # file name -> translations of the key in that file
    versions: Dict[str, Dict[str, Translation]] = field(default_factory=dict)

    @property
    def file_names(self) -> List[str]:
        return list(self.versions)


@dataclass
class CatalogFileStats:
    """What one input catalog contributed."""

    name: str
    source_language: str
    key_count: int
    language_count: int


class CatalogMergeResult(NamedTuple):
    """Merged catalog, the conflicts found, warnings and per-file statistics."""

    catalog: Catalog
    conflicts: List[CatalogConflict]
    warnings: List[str]
    files: List[CatalogFileStats]
    shared_keys: int


def _effective_translations(catalog: Catalog, entry: CatalogEntry) -> Dict[str, Translation]:
    """Entry translations with the omitted source value filled in from the key."""
    translations = dict(entry.translations)
    if entry.get(catalog.source_language) is None:
        translations[catalog.source_language] = PlainTranslation(entry.key)
    return translations


def _comparable(translation: Translation) -> tuple:
    if isinstance(translation, PluralTranslation):
        return ("plural", tuple(ordered_variants(translation.variants)))
    return ("plain", translation.value)


def prefer_file(conflicts: Sequence[CatalogConflict], file_name: str) -> Dict[str, str]:
    """Resolve every conflict that ``file_name`` takes part in with its version."""
    return {
        conflict.key: file_name
        for conflict in conflicts
        if file_name in conflict.versions
    }


class CatalogMergeService:
    """
    Combines .xcstrings documents key by key.

    The first catalog decides the source language and version. Keys whose
    non-empty translations disagree between files are conflicts: each one
    is settled by a resolution naming the file to take the key from, or
    (outside strict mode) by the last file that has it.
    """

    def __init__(self, strict: bool = False):
        self.strict = strict
        self.parser = XCStringsParser()

    def analyze(self, files: Sequence[CatalogFile]) -> Tuple[List[CatalogConflict], List[str]]:
        """Find conflicts and source language mismatches without merging."""
        parsed = self._parse_all(files)
        return self._find_conflicts(parsed), self._source_language_warnings(parsed)

    def merge(
        self,
        files: Sequence[CatalogFile],
        resolutions: Optional[Mapping[str, str]] = None,
    ) -> CatalogMergeResult:
        """
        Merge catalogs in input order.

        Args:
            files: The .xcstrings documents to combine
            resolutions: Key -> name of the file whose version of the key wins

        Returns:
            CatalogMergeResult with the merged catalog and a merge report
        """
        if not files:
            raise EmptyInputError()

        parsed = self._parse_all(files)
        resolutions = dict(resolutions or {})
        self._check_resolutions(parsed, resolutions)

        conflicts = self._find_conflicts(parsed)
        warnings = self._source_language_warnings(parsed)

        unresolved = [conflict for conflict in conflicts if conflict.key not in resolutions]
        if unresolved and self.strict:
            raise UnresolvedConflictError([conflict.key for conflict in unresolved])
        for conflict in unresolved:
            message = (
                f"'{conflict.key}' differs between {', '.join(conflict.file_names)} "
                f"({', '.join(conflict.languages)}); keeping {conflict.file_names[-1]}"
            )
            log.warning(message)
            warnings.append(message)

        _, first = parsed[0]
        catalog = new_catalog(first.source_language, version=first.version)
        for name, source in parsed:
            for key, entry in source.entries.items():
                chosen = resolutions.get(key)
                if chosen is not None and chosen != name:
                    continue
                catalog = self._apply_entry(catalog, entry, _effective_translations(source, entry))
            log.debug("Merged %d keys from %s", len(source), name)

        # Keys keep the order they first appear in, whichever file supplied them
        key_files: Dict[str, int] = {}
        for _, source in parsed:
            for key in source.entries:
                key_files[key] = key_files.get(key, 0) + 1
        catalog = replace(catalog, entries={key: catalog.entries[key] for key in key_files})

        log.info(
            "Merged %d catalogs into %d keys (%d conflicts)",
            len(parsed), len(catalog), len(conflicts),
        )
        return CatalogMergeResult(
            catalog=catalog,
            conflicts=conflicts,
            warnings=warnings,
            files=[
                CatalogFileStats(
                    name=name,
                    source_language=source.source_language,
                    key_count=len(source),
                    language_count=len(source.languages),
                )
                for name, source in parsed
            ],
            shared_keys=sum(1 for count in key_files.values() if count > 1),
        )

    def _apply_entry(
        self,
        catalog: Catalog,
        entry: CatalogEntry,
        translations: Dict[str, Translation],
    ) -> Catalog:
        for language, translation in translations.items():
            current = catalog.entries.get(entry.key)
            if translation.is_empty and current is not None and current.has_translation(language):
                continue
            catalog = upsert_translation(
                catalog,
                entry.key,
                language,
                translation,
                comment=entry.comment,
                extraction_state=entry.extraction_state,
            )
        return catalog

    def _find_conflicts(self, parsed: List[Tuple[str, Catalog]]) -> List[CatalogConflict]:
        """Keys with more than one distinct non-empty translation for a language."""
        seen: Dict[str, Dict[str, Dict[str, Translation]]] = {}
        for name, source in parsed:
            for key, entry in source.entries.items():
                seen.setdefault(key, {})[name] = _effective_translations(source, entry)

        conflicts = []
        for key, versions in seen.items():
            if len(versions) < 2:
                continue
            languages: List[str] = []
            for translations in versions.values():
                for language in translations:
                    if not any(same_language(language, known) for known in languages):
                        languages.append(language)

            conflicting = []
            for language in languages:
                values = {
                    _comparable(translation)
                    for translations in versions.values()
                    for code, translation in translations.items()
                    if same_language(code, language) and not translation.is_empty
                }
                if len(values) > 1:
                    conflicting.append(language)

            if conflicting:
                conflicts.append(CatalogConflict(key=key, languages=conflicting, versions=versions))
        return conflicts

    def _source_language_warnings(self, parsed: List[Tuple[str, Catalog]]) -> List[str]:
        if not parsed:
            return []
        first_name, first = parsed[0]
        warnings = []
        for name, source in parsed[1:]:
            if not same_language(source.source_language, first.source_language):
                message = (
                    f"{name} uses source language '{source.source_language}', "
                    f"{first_name} uses '{first.source_language}'; "
                    f"the merged catalog uses '{first.source_language}'"
                )
                log.warning(message)
                warnings.append(message)
        return warnings

    def _check_resolutions(
        self,
        parsed: List[Tuple[str, Catalog]],
        resolutions: Mapping[str, str],
    ) -> None:
        catalogs = dict(parsed)
        errors = []
        for key, name in resolutions.items():
            if name not in catalogs:
                errors.append(FormatError(f"Resolution names unknown file '{name}'", key=key))
            elif key not in catalogs[name]:
                errors.append(FormatError(f"'{name}' has no entry for this key", key=key))
        if errors:
            raise FormatError.aggregate(errors)

    def _parse_all(self, files: Sequence[CatalogFile]) -> List[Tuple[str, Catalog]]:
        """Parse every file, raising one FormatError that covers all of them."""
        parsed: List[Tuple[str, Catalog]] = []
        errors: List[FormatError] = []
        names = set()
        for file in files:
            if file.name in names:
                errors.append(FormatError("File is given more than once", file_name=file.name))
                continue
            names.add(file.name)
            try:
                catalog, _ = self.parser.parse_string(file.content)
            except FormatError as e:
                errors.append(e.with_context(file_name=file.name))
                continue
            parsed.append((file.name, catalog))
        if errors:
            raise FormatError.aggregate(errors)
        return parsed


def merge_string_catalogs(
    files: Sequence[CatalogFile],
    resolutions: Optional[Mapping[str, str]] = None,
    *,
    strict: bool = False,
) -> CatalogMergeResult:
    """Merge several .xcstrings documents into one catalog."""
    return CatalogMergeService(strict=strict).merge(files, resolutions)
