"""Conversion workflows over legacy files and String Catalogs."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from ..config import config
from ..formats.android_writer import AndroidResources, AndroidWriter
from ..formats.strings_writer import StringsWriter
from ..formats.xcstrings_parser import XCStringsParser
from ..formats.xcstrings_writer import XCStringsWriter
from ..models.catalog import Catalog
from ..models.language_file import LanguageFile
from .catalog_merge_service import (
    CatalogConflict,
    CatalogFile,
    CatalogFileStats,
    CatalogMergeService,
)
from .merge_service import MergeService

log = logging.getLogger(__name__)


@dataclass
class CombineResult:
    """Outputs of combining legacy files into a String Catalog."""

    catalog: Catalog
    xcstrings: str
    android: AndroidResources
    warnings: List[str] = field(default_factory=list)

    @property
    def source_language(self) -> str:
        return self.catalog.source_language

    @property
    def languages(self) -> Tuple[str, ...]:
        return self.catalog.languages


@dataclass
class CatalogMergeOutput(CombineResult):
    """Outputs of merging String Catalogs, with the merge report."""

    conflicts: List[CatalogConflict] = field(default_factory=list)
    files: List[CatalogFileStats] = field(default_factory=list)
    shared_keys: int = 0


@dataclass
class ExtractResult:
    """Outputs of extracting a String Catalog into per-language files."""

    catalog: Catalog
    languages: Tuple[str, ...]
    strings_files: Dict[str, str]
    android: AndroidResources


class ConversionService:
    """
    Runs the conversion workflows end to end.

    Every method takes raw file content and returns raw output content;
    nothing here touches the file system.
    """

    def __init__(
        self,
        strict: Optional[bool] = None,
        include_stale: Optional[bool] = None,
        table_name: Optional[str] = None,
    ):
        self.strict = config.strict if strict is None else strict
        self.include_stale = config.include_stale if include_stale is None else include_stale
        self.table_name = table_name or config.table_name

        self.parser = XCStringsParser()
        self.writer = XCStringsWriter(include_stale=self.include_stale)
        self.strings_writer = StringsWriter(table_name=self.table_name)
        self.android_writer = AndroidWriter()

    def combine(
        self,
        files: Sequence[LanguageFile],
        source_language: Optional[str] = None,
    ) -> CombineResult:
        """
        Merge per-language .strings/.stringsdict files and render them as a
        String Catalog and Android resources.
        """
        merger = MergeService(strict=self.strict)
        result = merger.merge_files(
            files,
            source_language=source_language or config.source_language or None,
        )
        catalog = result.catalog
        log.info("Combined %d keys in %d languages", len(catalog), len(catalog.languages))

        return CombineResult(
            catalog=catalog,
            xcstrings=self.writer.to_string(catalog),
            android=self.android_writer.generate(catalog),
            warnings=list(result.warnings),
        )

    def extract(self, content: str) -> ExtractResult:
        """Split a String Catalog into .strings/.stringsdict files and Android resources."""
        catalog, languages = self.parser.parse_string(content)
        log.info("Extracting %d keys in %d languages", len(catalog), len(languages))

        return ExtractResult(
            catalog=catalog,
            languages=languages,
            strings_files=self.strings_writer.generate_all(catalog, languages),
            android=self.android_writer.generate(catalog, languages),
        )

    def merge_into_catalog(self, content: str, files: Sequence[LanguageFile]) -> CombineResult:
        """Fold legacy files into an existing String Catalog."""
        catalog, _ = self.parser.parse_string(content)
        result = MergeService(strict=self.strict).merge_into(catalog, files)

        return CombineResult(
            catalog=result.catalog,
            xcstrings=self.writer.to_string(result.catalog),
            android=self.android_writer.generate(result.catalog),
            warnings=list(result.warnings),
        )

    def merge_catalogs(
        self,
        files: Sequence[CatalogFile],
        resolutions: Optional[Mapping[str, str]] = None,
    ) -> CatalogMergeOutput:
        """Combine several String Catalogs, applying the chosen conflict resolutions."""
        result = CatalogMergeService(strict=self.strict).merge(files, resolutions)

        return CatalogMergeOutput(
            catalog=result.catalog,
            xcstrings=self.writer.to_string(result.catalog),
            android=self.android_writer.generate(result.catalog),
            warnings=list(result.warnings),
            conflicts=list(result.conflicts),
            files=list(result.files),
            shared_keys=result.shared_keys,
        )
