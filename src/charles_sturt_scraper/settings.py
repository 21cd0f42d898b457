from __future__ import annotations

import os
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Optional


MAX_PAGES = 50

DEFAULT_SEARCH_URL = (
    "https://eproperty.charlessturt.sa.gov.au/eProperty/P1/eTrack/"
    "eTrackApplicationSearchResults.aspx?Field=S&Period=L28&r=P1.WEBGUEST"
    "&f=%24P1.ETR.SEARCH.SL28"
)

CONFLICT_POLICIES = ("ignore", "replace")


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(str(raw).strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(str(raw).strip())
    except ValueError:
        return default


def clamp_max_pages(value: Optional[int]) -> int:
    if value is None:
        return MAX_PAGES
    return max(1, min(int(value), MAX_PAGES))


@dataclass(frozen=True)
class ScraperSettings:
    """Runtime settings for one scrape.

    Values come from ``CS_SCRAPER_*`` env vars; CLI flags override them via
    :meth:`override`. ``max_pages`` can be lowered but never exceeds
    :data:`MAX_PAGES`.
    """

    search_url: str
    database_path: str
    max_pages: int
    conflict_policy: str
    timeout: float
    retries: int
    backoff_s: float
    min_interval_s: float

    @classmethod
    def from_env(cls) -> "ScraperSettings":
        policy = _env_str("CS_SCRAPER_CONFLICT_POLICY", "ignore").lower()
        if policy not in CONFLICT_POLICIES:
            policy = "ignore"
        return cls(
            search_url=_env_str("CS_SCRAPER_URL", DEFAULT_SEARCH_URL),
            database_path=_env_str("CS_SCRAPER_DATABASE", "data.sqlite"),
            max_pages=clamp_max_pages(_env_int("CS_SCRAPER_MAX_PAGES", MAX_PAGES)),
            conflict_policy=policy,
            timeout=_env_float("CS_SCRAPER_TIMEOUT", 30.0),
            retries=max(0, _env_int("CS_SCRAPER_RETRIES", 2)),
            backoff_s=max(0.0, _env_float("CS_SCRAPER_BACKOFF", 1.0)),
            min_interval_s=max(0.0, _env_float("CS_SCRAPER_MIN_INTERVAL", 1.0)),
        )

    def override(self, **changes) -> "ScraperSettings":
        """Return a copy with the non-None ``changes`` applied."""

        applied = {k: v for k, v in changes.items() if v is not None}
        if "max_pages" in applied:
            applied["max_pages"] = clamp_max_pages(applied["max_pages"])
        if "conflict_policy" in applied:
            policy = str(applied["conflict_policy"]).strip().lower()
            if policy not in CONFLICT_POLICIES:
                raise ValueError(f"Unknown conflict policy: {applied['conflict_policy']!r}")
            applied["conflict_policy"] = policy
        return replace(self, **applied)


@lru_cache(maxsize=1)
def get_settings() -> ScraperSettings:
    return ScraperSettings.from_env()


def reset_settings_cache() -> None:
    """Test helper to force env re-read."""

    get_settings.cache_clear()
