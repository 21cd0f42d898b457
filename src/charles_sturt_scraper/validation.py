from __future__ import annotations

import logging
import re
from datetime import date
from typing import Callable, Optional

from charles_sturt_scraper.dates import DEFAULT_DATE_PATTERN, parse_date
from charles_sturt_scraper.models import CandidateRecord, NormalizedRecord


logger = logging.getLogger("cs_scraper.validation")

REFERENCE_PATTERN = re.compile(r"^[0-9]{3}/[0-9]{1,5}/[0-9]{2}$")

DEFAULT_DESCRIPTION = "No description provided"

INFORMATION_URL_TEMPLATE = (
    "https://eproperty.charlessturt.sa.gov.au/eProperty/P1/eTrack/"
    "eTrackApplicationDetails.aspx?r=P1.WEBGUEST&f=%24P1.ETR.APPDET.VIW"
    "&ApplicationId={0}"
)

COMMENT_URL = "mailto:council@charlessturt.sa.gov.au"


def is_valid_reference(value: Optional[str]) -> bool:
    return bool(value) and REFERENCE_PATTERN.match(value) is not None


def build_information_url(reference_id: str) -> str:
    return INFORMATION_URL_TEMPLATE.replace("{0}", reference_id)


def validate_candidate(
    candidate: CandidateRecord,
    *,
    today: Optional[Callable[[], date]] = None,
    date_pattern: str = DEFAULT_DATE_PATTERN,
) -> Optional[NormalizedRecord]:
    """Turn a grid row into a :class:`NormalizedRecord`, or ``None``.

    Rows whose application number is not a council reference, or whose
    address is blank, are dropped. The grid interleaves such rows with data,
    so a rejection is not an error.
    """

    reference_id = (candidate.application_number or "").strip()
    address = (candidate.address or "").strip()

    if not is_valid_reference(reference_id):
        logger.debug("Dropping row with application number %r", reference_id)
        return None
    if not address:
        logger.debug("Dropping application %s without an address", reference_id)
        return None

    description = (candidate.description or "").strip() or DEFAULT_DESCRIPTION
    scrape_date = (today or date.today)().isoformat()

    return NormalizedRecord(
        reference_id=reference_id,
        address=address,
        description=description,
        information_url=build_information_url(reference_id),
        comment_url=COMMENT_URL,
        scrape_date=scrape_date,
        received_date=parse_date(candidate.received_date_text, date_pattern),
    )
