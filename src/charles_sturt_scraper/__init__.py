"""Package initializer for `charles_sturt_scraper`."""

from .run_result import RunResult
from .scraper import ApplicationsScraper

__all__ = ["ApplicationsScraper", "RunResult"]
