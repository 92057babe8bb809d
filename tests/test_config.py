"""Tests for connection settings."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from pgbgwriter.config import ConnectionSettings, load_settings


class TestLoadSettings:
    def test_load_file(self, config_file: Path):
        settings = load_settings(config_file)

        assert settings.dsn == "host=db1 user=monitor"
        assert settings.database == "postgres"
        assert settings.connect_timeout == 5
        assert settings.statement_timeout == 15000
        assert settings.detect_version is True

    def test_empty_file_gives_defaults(self, tmp_path: Path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        settings = load_settings(path)
        assert settings == ConnectionSettings()

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "nope.yaml")

    def test_invalid_value(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        path.write_text("connect_timeout: soon\n")

        with pytest.raises(ValidationError):
            load_settings(path)


class TestConnectionSettings:
    def test_overrides_applied(self):
        settings = ConnectionSettings(dsn="host=a", database="one")
        updated = settings.with_overrides(dsn="host=b", database="two")

        assert updated.dsn == "host=b"
        assert updated.database == "two"
        assert settings.dsn == "host=a"

    def test_empty_overrides_ignored(self):
        settings = ConnectionSettings(dsn="host=a", database="one")
        assert settings.with_overrides(dsn=None, database="") == settings

    def test_connect_kwargs(self):
        kwargs = ConnectionSettings(database="app", port=5433).connect_kwargs()

        assert kwargs["dbname"] == "app"
        assert kwargs["port"] == 5433
        assert kwargs["host"] is None
        assert kwargs["options"] == "-c statement_timeout=30000"

    def test_statement_timeout_disabled(self):
        kwargs = ConnectionSettings(statement_timeout=0).connect_kwargs()
        assert "options" not in kwargs
