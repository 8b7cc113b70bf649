"""Tests for pydantic-settings-backed shared configuration loading."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from packages.catalog_shared.config import load_settings, resolve_component_settings
from resources.adapters.categories_api import CategoriesApiSettings
from services.state.category_cache import CategoryCacheSettings


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop ambient CATALOG_ variables so tests see only their own sources."""
    for key in list(os.environ):
        if key.startswith("CATALOG_"):
            monkeypatch.delenv(key)


def _write_config(tmp_path: Path) -> Path:
    config_file = tmp_path / "catalog.yaml"
    config_file.write_text(
        "\n".join(
            [
                "logging:",
                "  level: WARNING",
                "  json_output: false",
                "components:",
                "  adapter:",
                "    categories_api:",
                "      base_url: http://categories.internal:8080/",
                "      timeout_seconds: 3",
                "  service:",
                "    category_cache:",
                "      read_ordering: completion_order",
            ]
        ),
        encoding="utf-8",
    )
    return config_file


def test_load_settings_uses_model_defaults_when_sources_missing(
    tmp_path: Path,
) -> None:
    """Settings should fall back to model defaults when env and YAML are absent."""
    settings = load_settings(config_path=tmp_path / "missing.yaml")
    api = resolve_component_settings(
        settings=settings,
        component_id="adapter_categories_api",
        model=CategoriesApiSettings,
    )

    assert settings.logging.level == "INFO"
    assert settings.logging.json_output is True
    assert settings.logging.service == "catalog"
    assert api.base_url == "http://127.0.0.1:3000"
    assert api.timeout_seconds == 10.0


def test_load_settings_reads_yaml_component_sections(tmp_path: Path) -> None:
    """YAML values should populate logging and grouped component settings."""
    settings = load_settings(config_path=_write_config(tmp_path))

    api = resolve_component_settings(
        settings=settings,
        component_id="adapter_categories_api",
        model=CategoriesApiSettings,
    )
    cache = resolve_component_settings(
        settings=settings,
        component_id="service_category_cache",
        model=CategoryCacheSettings,
    )

    assert settings.logging.level == "WARNING"
    assert settings.logging.json_output is False
    assert api.base_url == "http://categories.internal:8080"
    assert api.timeout_seconds == 3.0
    assert cache.read_ordering == "completion_order"


def test_load_settings_precedence_init_over_env_over_yaml(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Init params should override env, env should override YAML."""
    config_file = _write_config(tmp_path)
    monkeypatch.setenv("CATALOG_LOGGING__LEVEL", "ERROR")
    monkeypatch.setenv(
        "CATALOG_COMPONENTS__ADAPTER__CATEGORIES_API__TIMEOUT_SECONDS", "7"
    )

    from_env = load_settings(config_path=config_file)
    from_init = load_settings(
        config_path=config_file, logging={"level": "DEBUG"}
    )
    api = resolve_component_settings(
        settings=from_env,
        component_id="adapter_categories_api",
        model=CategoriesApiSettings,
    )

    assert from_env.logging.level == "ERROR"
    assert from_env.logging.json_output is False
    assert api.timeout_seconds == 7.0
    assert from_init.logging.level == "DEBUG"


@pytest.mark.parametrize(
    "component_id",
    ["categories_api", "adapter_", "substrate_postgres", ""],
)
def test_resolve_component_settings_rejects_invalid_ids(component_id: str) -> None:
    """Component ids must be ``<kind>_<name>`` with a known kind."""
    with pytest.raises(ValueError):
        resolve_component_settings(
            settings=load_settings(),
            component_id=component_id,
            model=CategoryCacheSettings,
        )
