from __future__ import annotations

import logging
import time
import urllib.parse
import urllib.request
from dataclasses import dataclass
from typing import Callable, Mapping, Optional

import requests


logger = logging.getLogger("cs_scraper.http")

RETRY_STATUS = {429, 500, 502, 503, 504}

DEFAULT_USER_AGENT = "CharlesSturtScraper/1.0"

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class FetchError(RuntimeError):
    """A page could not be retrieved (network failure or non-2xx status)."""

    def __init__(self, message: str, *, url: str, status: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status = status


@dataclass
class _RateLimiter:
    min_interval_s: float = 1.0
    _last_at: Optional[float] = None

    def wait(self, sleep_fn: Callable[[float], None] = time.sleep) -> None:
        now = time.monotonic()
        if self._last_at is not None:
            remaining = self.min_interval_s - (now - self._last_at)
            if remaining > 0:
                sleep_fn(remaining)
        self._last_at = time.monotonic()


class HttpTransport:
    """Blocking transport used by the pagination driver.

    ``get`` and ``post`` return the response body and raise :class:`FetchError`
    on network failure or a non-success status. Statuses in
    :data:`RETRY_STATUS` are retried ``retries`` times, waiting
    ``backoff_s``, ``2 * backoff_s``, ... between attempts.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        retries: int = 2,
        backoff_s: float = 1.0,
        min_interval_s: float = 1.0,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[requests.Session] = None,
        sleep_fn: Callable[[float], None] = time.sleep,
    ):
        self.timeout = timeout
        self.retries = max(0, int(retries))
        self.backoff_s = backoff_s
        self.sleep_fn = sleep_fn
        self._limiter = _RateLimiter(min_interval_s=min_interval_s)
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "User-Agent": user_agent,
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                "Accept-Language": "en-AU,en;q=0.9",
            }
        )

    def get(self, url: str) -> str:
        return self.request("GET", url)

    def post(
        self,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        form_fields: Optional[Mapping[str, str]] = None,
    ) -> str:
        return self.request("POST", url, data=dict(form_fields or {}), headers=headers)

    def request(
        self,
        method: str,
        url: str,
        *,
        data: Optional[dict[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> str:
        parsed = urllib.parse.urlparse(url)
        if parsed.scheme == "file":
            return self._read_file(parsed, url, method)

        self._limiter.wait(self.sleep_fn)
        backoffs = [0.0] + [self.backoff_s * (2**i) for i in range(self.retries)]
        last_error: Optional[FetchError] = None
        for delay in backoffs:
            if delay:
                logger.debug("Retrying %s %s in %.2fs: %s", method, url, delay, last_error)
                self.sleep_fn(delay)
            try:
                resp = self._session.request(
                    method,
                    url,
                    data=data,
                    headers=dict(headers or {}),
                    timeout=self.timeout,
                )
            except requests.RequestException as exc:
                last_error = FetchError(f"{method} {url} failed: {exc}", url=url)
                last_error.__cause__ = exc
                continue
            if resp.ok:
                return resp.text
            last_error = FetchError(
                f"{method} {url} returned HTTP {resp.status_code}",
                url=url,
                status=resp.status_code,
            )
            if resp.status_code not in RETRY_STATUS:
                break
        raise last_error

    @staticmethod
    def _read_file(parsed: urllib.parse.ParseResult, url: str, method: str) -> str:
        # Saved pages carry no server-side view state to post back to.
        if method != "GET":
            raise FetchError(f"Cannot {method} to a local file: {url}", url=url)
        path = urllib.request.url2pathname(parsed.path)
        try:
            with open(path, "rb") as handle:
                return handle.read().decode("utf-8", errors="replace")
        except OSError as exc:
            raise FetchError(f"Cannot read {url}: {exc}", url=url) from exc

    def close(self) -> None:
        self._session.close()
