"""REST API routes."""

import logging
from typing import Optional
from fastapi import APIRouter, Request, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ...errors import LocalizationError
from ...formats.android_writer import AndroidResources
from ...formats.xcstrings_parser import XCStringsParser
from ...models.catalog import PluralTranslation, Translation, same_language
from ...models.language_file import LanguageFile, guess_language_code
from ...services.catalog_merge_service import (
    CatalogConflict,
    CatalogFile,
    CatalogMergeService,
    prefer_file,
)
from ...services.catalog_stats import find_duplicate_values, get_catalog_stats
from ...services.conversion_service import CombineResult, ConversionService
from ...validation.catalog_validator import validate_catalog

log = logging.getLogger(__name__)

router = APIRouter()


# Request models
class LanguageFileModel(BaseModel):
    name: str
    content: str
    lang_code: str = ""

    def to_language_file(self) -> LanguageFile:
        return LanguageFile(
            name=self.name,
            content=self.content,
            lang_code=self.lang_code or guess_language_code(self.name),
        )


class CombineRequest(BaseModel):
    files: list[LanguageFileModel]
    source_language: Optional[str] = None
    strict: Optional[bool] = None


class ContentRequest(BaseModel):
    content: str


class MergeRequest(BaseModel):
    content: str
    files: list[LanguageFileModel]
    strict: Optional[bool] = None


class ProjectRequest(BaseModel):
    content: str


class CatalogFileModel(BaseModel):
    name: str
    content: str

    def to_catalog_file(self) -> CatalogFile:
        return CatalogFile(name=self.name, content=self.content)


class AnalyzeCatalogsRequest(BaseModel):
    files: list[CatalogFileModel]


class MergeCatalogsRequest(BaseModel):
    files: list[CatalogFileModel]
    resolutions: dict[str, str] = {}
    prefer: Optional[str] = None
    strict: Optional[bool] = None


async def localization_error_handler(request: Request, exc: LocalizationError) -> JSONResponse:
    """Turn library errors into 400 responses."""
    log.info("%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=400,
        content={"error": type(exc).__name__, "details": exc.details_list()},
    )


def _android_payload(android: AndroidResources) -> dict:
    return {
        "files": android.paths(),
        "renamed_keys": dict(android.renamed_keys),
    }


def _combine_payload(result: CombineResult) -> dict:
    return {
        "source_language": result.source_language,
        "languages": list(result.languages),
        "key_count": len(result.catalog),
        "xcstrings": result.xcstrings,
        "android": _android_payload(result.android),
        "warnings": result.warnings,
    }


# Conversion endpoints
@router.post("/combine")
async def combine(body: CombineRequest):
    """Combine .strings/.stringsdict files into a String Catalog and Android resources."""
    service = ConversionService(strict=body.strict)
    result = service.combine(
        [f.to_language_file() for f in body.files],
        source_language=body.source_language,
    )
    return _combine_payload(result)


@router.post("/extract")
async def extract(body: ContentRequest):
    """Extract a String Catalog into .strings/.stringsdict files and Android resources."""
    result = ConversionService().extract(body.content)
    return {
        "source_language": result.catalog.source_language,
        "languages": list(result.languages),
        "key_count": len(result.catalog),
        "strings_files": result.strings_files,
        "android": _android_payload(result.android),
    }


@router.post("/merge")
async def merge(body: MergeRequest):
    """Merge .strings/.stringsdict files into an existing String Catalog."""
    service = ConversionService(strict=body.strict)
    result = service.merge_into_catalog(
        body.content,
        [f.to_language_file() for f in body.files],
    )
    return _combine_payload(result)


def _translation_payload(translation: Translation):
    if isinstance(translation, PluralTranslation):
        return dict(translation.variants)
    return translation.value


def _conflict_payload(conflict: CatalogConflict) -> dict:
    return {
        "key": conflict.key,
        "languages": list(conflict.languages),
        "versions": {
            name: {
                language: _translation_payload(translation)
                for language, translation in translations.items()
                if any(same_language(language, code) for code in conflict.languages)
            }
            for name, translations in conflict.versions.items()
        },
    }


@router.post("/catalogs/conflicts")
async def analyze_catalogs(body: AnalyzeCatalogsRequest):
    """List conflicts and source language mismatches between String Catalogs."""
    conflicts, warnings = CatalogMergeService().analyze(
        [f.to_catalog_file() for f in body.files]
    )
    return {
        "conflicts": [_conflict_payload(c) for c in conflicts],
        "warnings": warnings,
    }


@router.post("/catalogs/merge")
async def merge_catalogs(body: MergeCatalogsRequest):
    """Merge String Catalogs, applying the chosen conflict resolutions."""
    files = [f.to_catalog_file() for f in body.files]

    resolutions = {}
    if body.prefer:
        if body.prefer not in {f.name for f in files}:
            raise HTTPException(400, f"Unknown file '{body.prefer}'")
        conflicts, _ = CatalogMergeService().analyze(files)
        resolutions.update(prefer_file(conflicts, body.prefer))
    resolutions.update(body.resolutions)

    result = ConversionService(strict=body.strict).merge_catalogs(files, resolutions)
    return {
        **_combine_payload(result),
        "conflicts": [_conflict_payload(c) for c in result.conflicts],
        "files": [
            {
                "name": stats.name,
                "source_language": stats.source_language,
                "key_count": stats.key_count,
                "language_count": stats.language_count,
            }
            for stats in result.files
        ],
        "shared_keys": result.shared_keys,
    }


# Analysis endpoints
@router.post("/stats")
async def stats(body: ContentRequest):
    """Get coverage statistics and duplicate values for a String Catalog."""
    catalog, _ = XCStringsParser().parse_string(body.content)
    return {
        **get_catalog_stats(catalog),
        "duplicates": [
            {"value": d.value, "keys": d.keys, "count": d.count}
            for d in find_duplicate_values(catalog)
        ],
    }


@router.post("/validate")
async def validate(body: ContentRequest):
    """Validate a String Catalog."""
    catalog, _ = XCStringsParser().parse_string(body.content)
    issues = validate_catalog(catalog)
    return {
        "valid": not any(issue.severity == "error" for issue in issues),
        "issues": [
            {
                "code": issue.code,
                "severity": issue.severity,
                "key": issue.key,
                "language": issue.language,
                "message": issue.message,
            }
            for issue in issues
        ],
    }


# Project endpoints
@router.get("/projects")
async def list_projects(request: Request):
    """List stored projects."""
    storage = request.app.state.project_storage
    return {"projects": [p.to_dict() for p in storage.list_projects()]}


@router.put("/projects/{project_id}")
async def save_project(request: Request, project_id: str, body: ProjectRequest):
    """Store a String Catalog under a project id."""
    storage = request.app.state.project_storage
    if not storage.is_valid_id(project_id):
        raise HTTPException(400, "Invalid project id")

    catalog, languages = XCStringsParser().parse_string(body.content)
    metadata = storage.save(
        project_id,
        body.content,
        source_language=catalog.source_language,
        languages=list(languages),
        key_count=len(catalog),
    )
    return metadata.to_dict()


@router.get("/projects/{project_id}")
async def get_project(request: Request, project_id: str):
    """Get a stored project with its catalog content."""
    storage = request.app.state.project_storage

    metadata = storage.get_metadata(project_id)
    content = storage.get_content(project_id)
    if metadata is None or content is None:
        raise HTTPException(404, "Project not found")

    return {**metadata.to_dict(), "content": content}


@router.delete("/projects/{project_id}")
async def delete_project(request: Request, project_id: str):
    """Delete a stored project."""
    storage = request.app.state.project_storage

    if not storage.delete(project_id):
        raise HTTPException(404, "Project not found")

    return {"status": "deleted"}
