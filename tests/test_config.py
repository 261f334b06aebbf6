"""Tests for environment-driven configuration."""

from locbridge.config import Config


def test_defaults(monkeypatch):
    for name in ("LOCBRIDGE_STRICT", "LOCBRIDGE_TABLE_NAME", "LOCBRIDGE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    config = Config()

    assert config.strict is False
    assert config.table_name == "Localizable"
    assert config.log_level == "WARNING"
    assert config.validate() == []


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("LOCBRIDGE_STRICT", "yes")
    monkeypatch.setenv("LOCBRIDGE_INCLUDE_STALE", "1")
    monkeypatch.setenv("LOCBRIDGE_SOURCE_LANGUAGE", "de")
    monkeypatch.setenv("LOCBRIDGE_LOG_LEVEL", "debug")

    config = Config()

    assert config.strict is True
    assert config.include_stale is True
    assert config.source_language == "de"
    assert config.log_level == "DEBUG"


def test_validate_reports_problems(monkeypatch):
    monkeypatch.setenv("LOCBRIDGE_TABLE_NAME", "strings/Localizable")
    monkeypatch.setenv("LOCBRIDGE_LOG_LEVEL", "LOUD")

    errors = Config().validate()

    assert len(errors) == 2
    assert "LOCBRIDGE_TABLE_NAME" in errors[0]
    assert "LOCBRIDGE_LOG_LEVEL" in errors[1]
