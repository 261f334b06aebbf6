"""Conversion workflows built on top of the codecs."""

from .catalog_merge_service import (
    CatalogConflict,
    CatalogFile,
    CatalogFileStats,
    CatalogMergeResult,
    CatalogMergeService,
    merge_string_catalogs,
    prefer_file,
)
from .catalog_stats import DuplicateValue, find_duplicate_values, get_catalog_stats
from .conversion_service import (
    CatalogMergeOutput,
    CombineResult,
    ConversionService,
    ExtractResult,
)
from .merge_service import (
    MergeResult,
    MergeService,
    infer_source_language,
    merge_and_parse_strings,
    merge_strings_into_catalog,
)

__all__ = [
    "CatalogConflict",
    "CatalogFile",
    "CatalogFileStats",
    "CatalogMergeOutput",
    "CatalogMergeResult",
    "CatalogMergeService",
    "CombineResult",
    "ConversionService",
    "DuplicateValue",
    "ExtractResult",
    "MergeResult",
    "MergeService",
    "find_duplicate_values",
    "get_catalog_stats",
    "infer_source_language",
    "merge_and_parse_strings",
    "merge_string_catalogs",
    "merge_strings_into_catalog",
    "prefer_file",
]
