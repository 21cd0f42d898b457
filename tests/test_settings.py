import pytest

from charles_sturt_scraper.settings import (
    DEFAULT_SEARCH_URL,
    MAX_PAGES,
    ScraperSettings,
    get_settings,
    reset_settings_cache,
)


@pytest.fixture(autouse=True)
def _clear_cache():
    reset_settings_cache()
    yield
    reset_settings_cache()


def test_defaults(monkeypatch):
    for name in (
        "CS_SCRAPER_URL",
        "CS_SCRAPER_DATABASE",
        "CS_SCRAPER_MAX_PAGES",
        "CS_SCRAPER_CONFLICT_POLICY",
        "CS_SCRAPER_TIMEOUT",
        "CS_SCRAPER_RETRIES",
        "CS_SCRAPER_BACKOFF",
        "CS_SCRAPER_MIN_INTERVAL",
    ):
        monkeypatch.delenv(name, raising=False)
    settings = get_settings()
    assert settings.search_url == DEFAULT_SEARCH_URL
    assert settings.database_path == "data.sqlite"
    assert settings.max_pages == MAX_PAGES == 50
    assert settings.conflict_policy == "ignore"
    assert settings.retries == 2
    assert settings.backoff_s == 1.0


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("CS_SCRAPER_DATABASE", "/tmp/apps.sqlite")
    monkeypatch.setenv("CS_SCRAPER_MAX_PAGES", "7")
    monkeypatch.setenv("CS_SCRAPER_CONFLICT_POLICY", "REPLACE")
    monkeypatch.setenv("CS_SCRAPER_TIMEOUT", "12.5")
    settings = get_settings()
    assert settings.database_path == "/tmp/apps.sqlite"
    assert settings.max_pages == 7
    assert settings.conflict_policy == "replace"
    assert settings.timeout == 12.5


def test_invalid_env_values_fall_back(monkeypatch):
    monkeypatch.setenv("CS_SCRAPER_MAX_PAGES", "lots")
    monkeypatch.setenv("CS_SCRAPER_CONFLICT_POLICY", "merge")
    settings = ScraperSettings.from_env()
    assert settings.max_pages == MAX_PAGES
    assert settings.conflict_policy == "ignore"


def test_max_pages_is_capped(monkeypatch):
    monkeypatch.setenv("CS_SCRAPER_MAX_PAGES", "1000")
    assert ScraperSettings.from_env().max_pages == MAX_PAGES
    assert ScraperSettings.from_env().override(max_pages=500).max_pages == MAX_PAGES
    assert ScraperSettings.from_env().override(max_pages=0).max_pages == 1


def test_override_ignores_none_and_validates_policy():
    base = ScraperSettings.from_env()
    assert base.override(database_path=None) == base
    assert base.override(conflict_policy="Replace").conflict_policy == "replace"
    with pytest.raises(ValueError):
        base.override(conflict_policy="merge")
