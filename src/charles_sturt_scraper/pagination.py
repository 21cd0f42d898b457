"""Postback pagination over the eTrack results grid.

The grid exposes no reliable "last page" marker. Pages are requested one at
a time with the hidden tokens of the previous response until the server
rejects a postback or :data:`MAX_PAGES` is reached.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Mapping, Optional, Protocol

from charles_sturt_scraper.extract import extract_page
from charles_sturt_scraper.http_client import FORM_CONTENT_TYPE, FetchError
from charles_sturt_scraper.models import CandidateRecord, ExtractedPage, PostbackTokens
from charles_sturt_scraper.settings import MAX_PAGES, clamp_max_pages


logger = logging.getLogger("cs_scraper.pagination")

GRID_EVENT_TARGET = "ctl00$Content$cusResultsGrid$repWebGrid$ctl00$grdWebGridTabularView"


class Transport(Protocol):
    def get(self, url: str) -> str:
        ...

    def post(
        self,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        form_fields: Optional[Mapping[str, str]] = None,
    ) -> str:
        ...


class FirstPageFetchError(RuntimeError):
    """The first results page could not be fetched; nothing can follow."""


@dataclass(frozen=True)
class Page:
    index: int
    extracted: ExtractedPage

    @property
    def candidates(self) -> tuple[CandidateRecord, ...]:
        return self.extracted.candidates

    @property
    def tokens(self) -> PostbackTokens:
        return self.extracted.tokens


def build_page_form(page_index: int, tokens: PostbackTokens) -> dict[str, str]:
    form = {
        "__EVENTARGUMENT": f"Page${page_index}",
        "__EVENTTARGET": GRID_EVENT_TARGET,
    }
    form.update(tokens.as_form_fields())
    return form


class PageSequence:
    """Finite, restartable sequence of result pages.

    Every ``iter()`` starts a fresh run from page 1. A failed first fetch
    raises :class:`FirstPageFetchError`; a failed later fetch ends the
    sequence quietly. After a run, :attr:`stop_reason` says why it ended.
    """

    def __init__(self, transport: Transport, url: str, max_pages: int = MAX_PAGES):
        self.transport = transport
        self.url = url
        self.max_pages = clamp_max_pages(max_pages)
        self.declared_page_count: Optional[int] = None
        self.stop_reason: Optional[str] = None

    def __iter__(self) -> Iterator[Page]:
        self.stop_reason = None
        logger.info("Retrieving page: %s", self.url)
        try:
            html = self.transport.get(self.url)
        except FetchError as exc:
            raise FirstPageFetchError(f"Could not retrieve {self.url}: {exc}") from exc

        page = Page(index=1, extracted=extract_page(html))
        self.declared_page_count = page.extracted.page_count
        if page.extracted.page_count == 1:
            logger.info("There is 1 page to parse.")
        else:
            logger.info("There are at least %d pages to parse.", page.extracted.page_count)

        logger.info("Parsing page 1.")
        yield page

        tokens = page.tokens
        for page_index in range(2, self.max_pages + 1):
            try:
                html = self.transport.post(
                    self.url,
                    headers={"Content-Type": FORM_CONTENT_TYPE},
                    form_fields=build_page_form(page_index, tokens),
                )
            except FetchError as exc:
                self.stop_reason = f"Reached the last page: {exc}"
                logger.info(self.stop_reason)
                return
            page = Page(index=page_index, extracted=extract_page(html))
            tokens = page.tokens
            logger.info("Parsing page %d.", page_index)
            yield page

        self.stop_reason = f"Reached the {self.max_pages} page limit"
        logger.info(self.stop_reason)
