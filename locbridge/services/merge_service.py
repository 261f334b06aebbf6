"""Merges per-language legacy files into a single catalog."""

import logging
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

from ..errors import AmbiguousLanguageError, EmptyInputError, FormatError
from ..formats.strings_parser import ParsedStrings, StringsParser
from ..models.catalog import (
    Catalog,
    ExtractionState,
    new_catalog,
    normalize_language_code,
    same_language,
    upsert_translation,
)
from ..models.language_file import LanguageFile

log = logging.getLogger(__name__)

# A file in this language becomes the source language when none is given
PREFERRED_SOURCE_LANGUAGE = "en"


class MergeResult(NamedTuple):
    """Outcome of a merge: the catalog, its source language, languages and warnings."""

    catalog: Catalog
    source_language: str
    languages: Tuple[str, ...]
    warnings: List[str]


def infer_source_language(files: Sequence[LanguageFile]) -> str:
    """
    "en" when any file is English, otherwise the first file's language.

    Depends on file order. The result decides which localization the String
    Catalog treats as canonical.
    """
    for file in files:
        if same_language(file.lang_code.strip(), PREFERRED_SOURCE_LANGUAGE):
            return PREFERRED_SOURCE_LANGUAGE
    return normalize_language_code(files[0].lang_code)


class MergeService:
    """Folds .strings/.stringsdict files into a Catalog, in input order."""

    def __init__(self, strict: bool = False):
        self.strict = strict
        self.parser = StringsParser()

    def merge_files(
        self,
        files: Sequence[LanguageFile],
        source_language: Optional[str] = None,
    ) -> MergeResult:
        """
        Merge legacy files into a new catalog.

        Files are applied in order; for the same key and language the later
        file wins.
        """
        if not files:
            raise EmptyInputError()

        self._check_language_codes(files)
        source = (
            normalize_language_code(source_language)
            if source_language
            else infer_source_language(files)
        )
        log.info("Merging %d files with source language %s", len(files), source)
        return self._merge(new_catalog(source), files)

    def merge_into(self, catalog: Catalog, files: Sequence[LanguageFile]) -> MergeResult:
        """Merge legacy files into an existing catalog, keeping its source language."""
        self._check_language_codes(files)
        return self._merge(catalog, files)

    def _merge(self, catalog: Catalog, files: Sequence[LanguageFile]) -> MergeResult:
        parsed = self._parse_all(files)
        warnings = self._check_duplicates(files)

        for file, strings in zip(files, parsed):
            for key, translation in strings.translations.items():
                catalog = upsert_translation(
                    catalog,
                    key,
                    strings.language,
                    translation,
                    comment=strings.comments.get(key),
                    extraction_state=(
                        None if key in catalog.entries else ExtractionState.MANUAL
                    ),
                    strict=self.strict,
                )
            log.debug("Merged %d keys from %s (%s)", len(strings), file.name, strings.language)

        return MergeResult(
            catalog=catalog,
            source_language=catalog.source_language,
            languages=catalog.languages,
            warnings=warnings,
        )

    def _check_language_codes(self, files: Sequence[LanguageFile]) -> None:
        errors = []
        for file in files:
            if not file.lang_code or not file.lang_code.strip():
                errors.append(FormatError("Missing language code", file_name=file.name))
                continue
            try:
                normalize_language_code(file.lang_code)
            except FormatError as e:
                errors.append(e.with_context(file_name=file.name))
        if errors:
            raise FormatError.aggregate(errors)

    def _check_duplicates(self, files: Sequence[LanguageFile]) -> List[str]:
        """Find files of the same kind for the same language."""
        seen: Dict[Tuple[str, str], Tuple[str, List[str]]] = {}
        for file in files:
            language = normalize_language_code(file.lang_code)
            slot = (language.casefold(), file.kind)
            seen.setdefault(slot, (language, []))[1].append(file.name)

        warnings = []
        for (_, kind), (language, names) in seen.items():
            if len(names) < 2:
                continue
            if self.strict:
                raise AmbiguousLanguageError(language, names)
            message = (
                f"{len(names)} .{kind} files for '{language}' ({', '.join(names)}); "
                f"later files override earlier ones"
            )
            log.warning(message)
            warnings.append(message)
        return warnings

    def _parse_all(self, files: Sequence[LanguageFile]) -> List[ParsedStrings]:
        """Parse every file, raising one FormatError that covers all of them."""
        parsed: List[ParsedStrings] = []
        errors: List[FormatError] = []
        for file in files:
            try:
                parsed.append(self._parse(file))
            except FormatError as e:
                errors.append(e.with_context(file_name=file.name, language=file.lang_code))
        if errors:
            raise FormatError.aggregate(errors)
        return parsed

    def _parse(self, file: LanguageFile) -> ParsedStrings:
        if file.is_stringsdict:
            return self.parser.parse_stringsdict(file.content, file.lang_code)
        if file.is_strings:
            return self.parser.parse_strings(file.content, file.lang_code)
        raise FormatError("Unsupported file type, expected .strings or .stringsdict")


def merge_and_parse_strings(
    files: Sequence[LanguageFile],
    *,
    strict: bool = False,
    source_language: Optional[str] = None,
) -> MergeResult:
    """Merge per-language .strings/.stringsdict files into one catalog."""
    return MergeService(strict=strict).merge_files(files, source_language=source_language)


def merge_strings_into_catalog(
    catalog: Catalog,
    files: Sequence[LanguageFile],
    *,
    strict: bool = False,
) -> MergeResult:
    """Fold legacy files into an existing catalog."""
    return MergeService(strict=strict).merge_into(catalog, files)
