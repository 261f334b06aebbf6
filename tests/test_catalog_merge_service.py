"""Tests for merging String Catalogs into one."""

import json

import pytest

from locbridge.errors import EmptyInputError, FormatError, UnresolvedConflictError
from locbridge.models.catalog import PlainTranslation
from locbridge.services.catalog_merge_service import (
    CatalogFile,
    CatalogMergeService,
    merge_string_catalogs,
    prefer_file,
)
from locbridge.services.conversion_service import ConversionService


def _unit(value, state="translated"):
    return {"stringUnit": {"state": state, "value": value}}


def _catalog(name, strings, source_language="en"):
    content = json.dumps({"sourceLanguage": source_language, "strings": strings})
    return CatalogFile(name, content)


class TestConflicts:
    def test_detects_differing_translation(self, conflicting_catalogs):
        conflicts, warnings = CatalogMergeService().analyze(conflicting_catalogs)

        assert warnings == []
        assert len(conflicts) == 1
        conflict = conflicts[0]
        assert conflict.key == "greeting"
        assert conflict.languages == ["fr"]
        assert conflict.file_names == ["app.xcstrings", "widget.xcstrings"]
        assert conflict.versions["app.xcstrings"]["fr"] == PlainTranslation("Bonjour")

    def test_matching_values_are_not_conflicts(self):
        files = [
            _catalog("a.xcstrings", {"k": {"localizations": {"fr": _unit("Oui")}}}),
            _catalog("b.xcstrings", {"k": {"localizations": {"fr": _unit("Oui", "needs_review")}}}),
        ]
        conflicts, _ = CatalogMergeService().analyze(files)
        assert conflicts == []

    def test_empty_values_are_not_conflicts(self):
        files = [
            _catalog("a.xcstrings", {"k": {"localizations": {"fr": _unit("Oui")}}}),
            _catalog("b.xcstrings", {"k": {"localizations": {"fr": _unit("", "new")}}}),
        ]
        result = merge_string_catalogs(files)

        assert result.conflicts == []
        assert result.catalog.entries["k"].get("fr") == PlainTranslation("Oui")

    def test_omitted_source_value_counts_as_the_key(self):
        files = [
            _catalog("a.xcstrings", {"Done": {}}),
            _catalog("b.xcstrings", {"Done": {"localizations": {"en": _unit("Done!")}}}),
        ]
        conflicts, _ = CatalogMergeService().analyze(files)

        assert [(c.key, c.languages) for c in conflicts] == [("Done", ["en"])]

    def test_prefer_file(self, conflicting_catalogs):
        conflicts, _ = CatalogMergeService().analyze(conflicting_catalogs)

        assert prefer_file(conflicts, "widget.xcstrings") == {"greeting": "widget.xcstrings"}
        assert prefer_file(conflicts, "other.xcstrings") == {}


class TestMerge:
    def test_union_of_keys(self, conflicting_catalogs):
        result = merge_string_catalogs(conflicting_catalogs, {"greeting": "widget.xcstrings"})
        catalog = result.catalog

        assert list(catalog.entries) == ["greeting", "Cancel", "Done"]
        assert catalog.source_language == "en"
        assert catalog.entries["Done"].comment == "Button title"
        assert catalog.entries["Cancel"].get("fr") == PlainTranslation("Annuler")
        assert result.shared_keys == 1
        assert [(f.name, f.key_count, f.language_count) for f in result.files] == [
            ("app.xcstrings", 2, 2),
            ("widget.xcstrings", 2, 3),
        ]

    def test_last_file_wins_without_resolution(self, conflicting_catalogs):
        result = merge_string_catalogs(conflicting_catalogs)

        assert result.catalog.entries["greeting"].get("fr") == PlainTranslation("Salut")
        assert len(result.warnings) == 1
        assert "'greeting' differs" in result.warnings[0]
        assert "keeping widget.xcstrings" in result.warnings[0]

    def test_resolution_takes_whole_key_from_chosen_file(self, conflicting_catalogs):
        result = merge_string_catalogs(conflicting_catalogs, {"greeting": "app.xcstrings"})
        greeting = result.catalog.entries["greeting"]

        assert greeting.get("fr") == PlainTranslation("Bonjour")
        assert greeting.get("de") is None
        assert result.warnings == []
        assert [c.key for c in result.conflicts] == ["greeting"]

    def test_strict_requires_resolutions(self, conflicting_catalogs):
        with pytest.raises(UnresolvedConflictError) as exc_info:
            merge_string_catalogs(conflicting_catalogs, strict=True)
        assert exc_info.value.keys == ["greeting"]

        result = merge_string_catalogs(
            conflicting_catalogs, {"greeting": "widget.xcstrings"}, strict=True
        )
        assert result.catalog.entries["greeting"].get("de") == PlainTranslation("Hallo")

    def test_source_language_mismatch(self):
        files = [
            _catalog("app.xcstrings", {"Cancel": {"localizations": {"fr": _unit("Annuler")}}}),
            _catalog(
                "legacy.xcstrings",
                {"Speichern": {"localizations": {"fr": _unit("Enregistrer")}}},
                source_language="de",
            ),
        ]
        result = merge_string_catalogs(files)

        assert result.catalog.source_language == "en"
        assert result.warnings == [
            "legacy.xcstrings uses source language 'de', app.xcstrings uses 'en'; "
            "the merged catalog uses 'en'"
        ]
        # The implicit German source value survives as an explicit translation
        assert result.catalog.entries["Speichern"].get("de") == PlainTranslation("Speichern")


class TestErrors:
    def test_no_files(self):
        with pytest.raises(EmptyInputError):
            merge_string_catalogs([])

    def test_parse_errors_name_the_file(self, conflicting_catalogs):
        files = conflicting_catalogs + [CatalogFile("broken.xcstrings", "{")]
        with pytest.raises(FormatError) as exc_info:
            merge_string_catalogs(files)

        assert exc_info.value.file_name == "broken.xcstrings"
        assert exc_info.value.line == 1

    def test_same_file_twice(self, conflicting_catalogs):
        with pytest.raises(FormatError, match="more than once"):
            merge_string_catalogs(conflicting_catalogs + [conflicting_catalogs[0]])

    def test_unknown_file_in_resolution(self, conflicting_catalogs):
        with pytest.raises(FormatError, match="unknown file 'nope.xcstrings'"):
            merge_string_catalogs(conflicting_catalogs, {"greeting": "nope.xcstrings"})

    def test_resolution_file_without_the_key(self, conflicting_catalogs):
        with pytest.raises(FormatError, match="has no entry") as exc_info:
            merge_string_catalogs(conflicting_catalogs, {"Cancel": "widget.xcstrings"})
        assert exc_info.value.key == "Cancel"


def test_conversion_service_renders_merged_catalog(conflicting_catalogs):
    result = ConversionService(strict=False).merge_catalogs(
        conflicting_catalogs, {"greeting": "app.xcstrings"}
    )
    data = json.loads(result.xcstrings)

    assert data["sourceLanguage"] == "en"
    assert data["strings"]["greeting"]["localizations"]["fr"]["stringUnit"]["value"] == "Bonjour"
    assert data["strings"]["Done"]["comment"] == "Button title"
    assert "en" not in data["strings"]["Cancel"].get("localizations", {})
    assert sorted(result.android.paths()) == ["values-fr/strings.xml", "values/strings.xml"]
    assert result.shared_keys == 1
