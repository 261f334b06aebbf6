"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from locbridge.formats.xcstrings_writer import generate_ios_string_catalog
from locbridge.web.app import create_app


@pytest.fixture
def client(tmp_path):
    return TestClient(create_app(storage_dir=tmp_path / "projects"))


@pytest.fixture
def catalog_json(sample_catalog):
    return generate_ios_string_catalog(sample_catalog)


HELLO_FILES = [
    {"name": "en.lproj/Localizable.strings", "content": '"hello" = "Hello";'},
    {"name": "fr.lproj/Localizable.strings", "content": '"hello" = "Bonjour";', "lang_code": "fr"},
]


def test_combine(client):
    response = client.post("/api/combine", json={"files": HELLO_FILES})

    assert response.status_code == 200
    body = response.json()
    assert body["source_language"] == "en"
    assert body["languages"] == ["en", "fr"]
    assert '"Bonjour"' in body["xcstrings"]
    assert sorted(body["android"]["files"]) == ["values-fr/strings.xml", "values/strings.xml"]


def test_combine_format_error(client):
    files = [{"name": "en.strings", "content": '"a" = "b"', "lang_code": "en"}]
    response = client.post("/api/combine", json={"files": files})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "FormatError"
    assert body["details"] == ["en.strings:1: Missing ';' after value for key 'a'"]


def test_combine_empty(client):
    response = client.post("/api/combine", json={"files": []})
    assert response.status_code == 400
    assert response.json()["error"] == "EmptyInputError"


def test_extract(client, catalog_json):
    response = client.post("/api/extract", json={"content": catalog_json})

    assert response.status_code == 200
    body = response.json()
    assert "de.lproj/Localizable.stringsdict" in body["strings_files"]
    assert "values-de/strings.xml" in body["android"]["files"]


def test_merge(client, catalog_json):
    files = [{"name": "it.strings", "content": '"Cancel" = "Annulla";', "lang_code": "it"}]
    response = client.post("/api/merge", json={"content": catalog_json, "files": files})

    assert response.status_code == 200
    assert "it" in response.json()["languages"]


def test_stats(client, catalog_json):
    response = client.post("/api/stats", json={"content": catalog_json})

    assert response.status_code == 200
    body = response.json()
    assert body["total_keys"] == 3
    assert body["coverage"]["fr"]["pending"] == 1
    assert body["duplicates"] == []


def test_validate(client, catalog_json):
    response = client.post("/api/validate", json={"content": catalog_json})

    assert response.status_code == 200
    assert response.json() == {"valid": True, "issues": []}


def test_project_lifecycle(client, catalog_json):
    response = client.put("/api/projects/demo-app", json={"content": catalog_json})
    assert response.status_code == 200
    assert response.json()["key_count"] == 3

    response = client.get("/api/projects/demo-app")
    assert response.status_code == 200
    assert response.json()["content"] == catalog_json
    assert response.json()["languages"] == ["en", "de", "fr"]

    assert [p["project_id"] for p in client.get("/api/projects").json()["projects"]] == ["demo-app"]

    assert client.delete("/api/projects/demo-app").json() == {"status": "deleted"}
    assert client.get("/api/projects/demo-app").status_code == 404
    assert client.delete("/api/projects/demo-app").status_code == 404


def test_project_rejects_invalid_content(client):
    response = client.put("/api/projects/demo", json={"content": "[]"})
    assert response.status_code == 400
    assert response.json()["error"] == "FormatError"


def test_project_rejects_invalid_id(client, catalog_json):
    response = client.put("/api/projects/..hidden", json={"content": catalog_json})
    assert response.status_code == 400


def _catalog_files(conflicting_catalogs):
    return [{"name": f.name, "content": f.content} for f in conflicting_catalogs]


def test_catalog_conflicts(client, conflicting_catalogs):
    response = client.post(
        "/api/catalogs/conflicts", json={"files": _catalog_files(conflicting_catalogs)}
    )

    assert response.status_code == 200
    assert response.json() == {
        "conflicts": [{
            "key": "greeting",
            "languages": ["fr"],
            "versions": {
                "app.xcstrings": {"fr": "Bonjour"},
                "widget.xcstrings": {"fr": "Salut"},
            },
        }],
        "warnings": [],
    }


def test_merge_catalogs(client, conflicting_catalogs):
    response = client.post("/api/catalogs/merge", json={
        "files": _catalog_files(conflicting_catalogs),
        "resolutions": {"greeting": "app.xcstrings"},
        "strict": True,
    })

    assert response.status_code == 200
    body = response.json()
    assert body["key_count"] == 3
    assert body["shared_keys"] == 1
    assert body["warnings"] == []
    assert [f["name"] for f in body["files"]] == ["app.xcstrings", "widget.xcstrings"]
    assert '"Bonjour"' in body["xcstrings"]
    assert '"Salut"' not in body["xcstrings"]


def test_merge_catalogs_prefer(client, conflicting_catalogs):
    response = client.post("/api/catalogs/merge", json={
        "files": _catalog_files(conflicting_catalogs),
        "prefer": "widget.xcstrings",
        "strict": True,
    })

    assert response.status_code == 200
    assert '"Salut"' in response.json()["xcstrings"]


def test_merge_catalogs_unresolved_in_strict_mode(client, conflicting_catalogs):
    response = client.post("/api/catalogs/merge", json={
        "files": _catalog_files(conflicting_catalogs),
        "strict": True,
    })

    assert response.status_code == 400
    assert response.json() == {
        "error": "UnresolvedConflictError",
        "details": ["No resolution for conflicting key 'greeting'"],
    }
