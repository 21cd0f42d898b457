"""HTML extraction for the eTrack search results grid.

Parsing is pure (no network I/O) so it can be exercised with saved pages.
"""
from __future__ import annotations

from bs4 import BeautifulSoup

from charles_sturt_scraper.models import CandidateRecord, ExtractedPage, PostbackTokens


ROW_SELECTOR = "table.grid tr.normalRow, table.grid tr.alternateRow"
PAGER_CELL_SELECTOR = "tr.pagerRow td"
EVENT_VALIDATION_SELECTOR = "input[name='__EVENTVALIDATION']"
VIEW_STATE_SELECTOR = "input[name='__VIEWSTATE']"


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def row_cells(tr) -> list[str]:
    return [td.get_text().strip() for td in tr.find_all("td", recursive=False)]


def extract_candidates(soup: BeautifulSoup) -> list[CandidateRecord]:
    out: list[CandidateRecord] = []
    for tr in soup.select(ROW_SELECTOR):
        candidate = CandidateRecord.from_cells(row_cells(tr))
        if candidate is not None:
            out.append(candidate)
    return out


def _input_value(soup: BeautifulSoup, selector: str) -> str | None:
    node = soup.select_one(selector)
    if node is None:
        return None
    return node.get("value")


def extract_tokens(soup: BeautifulSoup) -> PostbackTokens:
    return PostbackTokens(
        event_validation=_input_value(soup, EVENT_VALIDATION_SELECTOR),
        view_state=_input_value(soup, VIEW_STATE_SELECTOR),
    )


def discover_page_count(soup: BeautifulSoup) -> int:
    """Lower bound on the number of result pages.

    The pager row lists one cell per visible page link plus one extra cell;
    pages beyond the visible window are not counted.
    """

    return max(1, len(soup.select(PAGER_CELL_SELECTOR)) - 1)


def extract_page(html: str) -> ExtractedPage:
    soup = _soup(html)
    return ExtractedPage(
        candidates=tuple(extract_candidates(soup)),
        tokens=extract_tokens(soup),
        page_count=discover_page_count(soup),
    )


def extract(html: str) -> tuple[tuple[CandidateRecord, ...], PostbackTokens]:
    page = extract_page(html)
    return page.candidates, page.tokens
