from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class RunResult:
    run_id: str
    started_at: str
    finished_at: str
    url: str
    storage_path: Optional[str]
    declared_page_count: Optional[int] = None
    pages_fetched: int = 0
    inserted: int = 0
    already_present: int = 0
    skipped: int = 0
    stop_reason: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "run_id": self.run_id,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "url": self.url,
            "storage_path": self.storage_path,
            "declared_page_count": self.declared_page_count,
            "pages_fetched": self.pages_fetched,
            "inserted": self.inserted,
            "already_present": self.already_present,
            "skipped": self.skipped,
            "stop_reason": self.stop_reason,
            "warnings": list(self.warnings),
        }
