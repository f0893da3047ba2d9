"""Unit tests for engine settings loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from workflow_trigger_engine.engine.config import EngineSettings


def test_settings_defaults(clean_env: pytest.MonkeyPatch) -> None:
    settings = EngineSettings()

    assert settings.log_level == "INFO"
    assert settings.catalog_path is None
    assert settings.unknown_as_webhook is False
    assert settings.stop_at_first_missing is True


def test_settings_load_from_env(clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
    catalog = tmp_path / "catalog.json"
    catalog.write_text("[]", encoding="utf-8")
    clean_env.setenv("LOG_LEVEL", "DEBUG")
    clean_env.setenv("TRIGGER_ENGINE_CATALOG_PATH", str(catalog))
    clean_env.setenv("TRIGGER_ENGINE_UNKNOWN_AS_WEBHOOK", "true")
    clean_env.setenv("TRIGGER_ENGINE_STOP_AT_FIRST_MISSING", "false")

    settings = EngineSettings()

    assert settings.log_level == "DEBUG"
    assert settings.catalog_path == catalog
    assert settings.unknown_as_webhook is True
    assert settings.stop_at_first_missing is False


def test_settings_load_from_dotenv(clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
    (tmp_path / ".env").write_text(
        "\n".join(["LOG_LEVEL=WARNING", "TRIGGER_ENGINE_UNKNOWN_AS_WEBHOOK=1", ""]),
        encoding="utf-8",
    )

    settings = EngineSettings()

    assert settings.log_level == "WARNING"
    assert settings.unknown_as_webhook is True


def test_settings_reject_unknown_log_level(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("LOG_LEVEL", "LOUD")

    with pytest.raises(ValidationError, match="LOG_LEVEL"):
        EngineSettings()


def test_settings_reject_missing_catalog_file(
    clean_env: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    clean_env.setenv("TRIGGER_ENGINE_CATALOG_PATH", str(tmp_path / "missing.json"))

    with pytest.raises(ValidationError, match="TRIGGER_ENGINE_CATALOG_PATH"):
        EngineSettings()
