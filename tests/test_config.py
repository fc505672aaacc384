"""Tests for engine settings."""

import pytest
from pydantic import ValidationError

from conftest import make_settings
from unmark.config import DEFAULT_PROFILE_PATH, get_settings


def test_defaults() -> None:
    settings = make_settings()
    assert settings.strategy == "auto"
    assert settings.profile_path is None
    assert settings.alpha_map_dir is None
    assert settings.max_concurrency == 4
    assert settings.resolved_profile_path == DEFAULT_PROFILE_PATH
    assert DEFAULT_PROFILE_PATH.exists()


def test_environment_overrides(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("UNMARK_STRATEGY", "fill")
    monkeypatch.setenv("UNMARK_ALPHA_MAP_DIR", str(tmp_path))
    monkeypatch.setenv("UNMARK_MAX_CONCURRENCY", "2")

    settings = make_settings()

    assert settings.strategy == "fill"
    assert settings.alpha_map_dir == tmp_path
    assert settings.max_concurrency == 2


@pytest.mark.parametrize(
    "overrides",
    [
        {"strategy": "magic"},
        {"fill_smoothing": 4},
        {"fill_falloff": 0},
        {"fill_texture": 1.5},
        {"max_concurrency": 0},
    ],
)
def test_invalid_settings(overrides: dict) -> None:
    with pytest.raises(ValidationError):
        make_settings(**overrides)


def test_get_settings_is_cached() -> None:
    assert get_settings() is get_settings()
