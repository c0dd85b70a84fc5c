"""Configuration settings behaviour tests."""

from __future__ import annotations

import pytest

from app.config import SEARCH_SERVICES, Settings


def test_defaults_cover_public_omdb_keys() -> None:
    """Without configuration the public OMDb keys rotate in order."""

    settings = Settings(_env_file=None)

    assert settings.omdb_api_keys == ("thewdb", "trilogy", "564727fa")
    assert settings.tmdb_api_keys == ()
    assert settings.search_services == SEARCH_SERVICES
    assert settings.search_result_limit == 8
    assert settings.latest_content_ratio == pytest.approx(0.35)


def test_api_keys_accept_comma_separated_values() -> None:
    """Keys should be split, stripped and de-duplicated in order."""

    settings = Settings(_env_file=None, OMDB_API_KEYS=" first, second ,first,,")

    assert settings.omdb_api_keys == ("first", "second")


def test_single_key_environment_alias(monkeypatch: pytest.MonkeyPatch) -> None:
    """The singular environment variable should populate the rotation list."""

    monkeypatch.setenv("TMDB_API_KEY", "tmdb-key")

    settings = Settings(_env_file=None)

    assert settings.tmdb_api_keys == ("tmdb-key",)


def test_search_services_are_case_insensitive() -> None:
    settings = Settings(_env_file=None, SEARCH_SERVICES="OMDb, TVMaze")

    assert settings.search_services == ("omdb", "tvmaze")


def test_blank_search_services_defaults() -> None:
    """Blank search services should fall back to every service."""

    settings = Settings(_env_file=None, SEARCH_SERVICES="")

    assert settings.search_services == SEARCH_SERVICES


def test_unknown_search_service_raises() -> None:
    with pytest.raises(ValueError, match="Unknown search services configured"):
        Settings(_env_file=None, SEARCH_SERVICES="omdb,netflix")


def test_latest_ratio_is_bounded() -> None:
    with pytest.raises(ValueError):
        Settings(_env_file=None, LATEST_CONTENT_RATIO=1.5)
