"""Record types flowing through the scrape pipeline."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from pydantic import BaseModel


@dataclass(frozen=True)
class CandidateRecord:
    """An unvalidated grid row, decoded positionally."""

    application_number: str
    received_date_text: str
    description: str
    address: str

    @classmethod
    def from_cells(cls, cells: Sequence[str]) -> Optional["CandidateRecord"]:
        # Header, pager and footer rows carry fewer than four cells.
        if len(cells) < 4:
            return None
        application_number, received_date_text, description, address = cells[:4]
        return cls(
            application_number=application_number,
            received_date_text=received_date_text,
            description=description,
            address=address,
        )


@dataclass(frozen=True)
class PostbackTokens:
    """Hidden ASP.NET form state echoed back on the next postback."""

    event_validation: Optional[str] = None
    view_state: Optional[str] = None

    def as_form_fields(self) -> dict[str, str]:
        fields: dict[str, str] = {}
        if self.event_validation is not None:
            fields["__EVENTVALIDATION"] = self.event_validation
        if self.view_state is not None:
            fields["__VIEWSTATE"] = self.view_state
        return fields


@dataclass(frozen=True)
class ExtractedPage:
    candidates: tuple[CandidateRecord, ...]
    tokens: PostbackTokens
    page_count: int


class NormalizedRecord(BaseModel):
    reference_id: str
    address: str
    description: str
    information_url: str
    comment_url: str
    scrape_date: str  # ISO-8601 date: YYYY-MM-DD
    received_date: str = ""  # ISO-8601 date or "" when unknown
    on_notice_from: Optional[str] = None
    on_notice_to: Optional[str] = None

    def to_row(self) -> dict[str, Optional[str]]:
        """Column mapping for the ``data`` table."""

        return {
            "council_reference": self.reference_id,
            "address": self.address,
            "description": self.description,
            "info_url": self.information_url,
            "comment_url": self.comment_url,
            "date_scraped": self.scrape_date,
            "date_received": self.received_date,
            "on_notice_from": self.on_notice_from,
            "on_notice_to": self.on_notice_to,
        }
