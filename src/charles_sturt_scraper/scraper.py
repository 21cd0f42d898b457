from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Callable, Dict, List, Optional
from uuid import uuid4

from charles_sturt_scraper.pagination import PageSequence, Transport
from charles_sturt_scraper.run_result import RunResult
from charles_sturt_scraper.settings import DEFAULT_SEARCH_URL, MAX_PAGES
from charles_sturt_scraper.storage import ApplicationStore
from charles_sturt_scraper.validation import validate_candidate


logger = logging.getLogger("cs_scraper.run")


class ApplicationsScraper:
    """Scrapes every results page once and stores the valid applications.

    Records are validated and written one at a time, in page order. Storage
    errors propagate and abort the run.
    """

    def __init__(
        self,
        store: ApplicationStore,
        transport: Transport,
        url: str = DEFAULT_SEARCH_URL,
        max_pages: int = MAX_PAGES,
        today: Optional[Callable[[], date]] = None,
        log_fn: Optional[Callable[[Dict], None]] = None,
        storage_path: Optional[str] = None,
    ):
        self.store = store
        self.transport = transport
        self.url = url
        self.max_pages = max_pages
        self.today = today
        self.log_fn = log_fn
        self.storage_path = storage_path
        self.last_log_entries: List[Dict] = []

    def run(self) -> RunResult:
        result = RunResult(
            run_id=uuid4().hex,
            started_at=datetime.now(timezone.utc).isoformat(),
            finished_at="",
            url=self.url,
            storage_path=self.storage_path,
        )
        self.last_log_entries = []
        pages = PageSequence(self.transport, self.url, max_pages=self.max_pages)

        for page in pages:
            result.declared_page_count = pages.declared_page_count
            result.pages_fetched += 1
            inserted = already_present = skipped = 0

            for candidate in page.candidates:
                record = validate_candidate(candidate, today=self.today)
                if record is None:
                    skipped += 1
                    continue
                if self.store.upsert(record):
                    inserted += 1
                    logger.info(
                        '    Inserted: application "%s" with address "%s" and description "%s" into the database.',
                        record.reference_id,
                        record.address,
                        record.description,
                    )
                else:
                    already_present += 1
                    logger.info(
                        '    Skipped: application "%s" with address "%s" and description "%s" because it was already present in the database.',
                        record.reference_id,
                        record.address,
                        record.description,
                    )

            result.inserted += inserted
            result.already_present += already_present
            result.skipped += skipped
            entry = {
                "page": page.index,
                "items_found": inserted + already_present,
                "inserted": inserted,
                "already_present": already_present,
                "skipped": skipped,
                "status": "success",
            }
            self.last_log_entries.append(entry)
            if self.log_fn:
                self.log_fn(entry)

        result.stop_reason = pages.stop_reason
        if result.declared_page_count and result.pages_fetched < result.declared_page_count:
            result.warnings.append(
                f"Fetched {result.pages_fetched} of at least {result.declared_page_count} pages"
            )
        result.finished_at = datetime.now(timezone.utc).isoformat()
        logger.info("Complete.")
        return result
