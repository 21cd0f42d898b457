from __future__ import annotations

import sqlite3
from enum import Enum
from typing import Optional, Protocol

from charles_sturt_scraper.models import NormalizedRecord


COLUMNS = (
    "council_reference",
    "address",
    "description",
    "info_url",
    "comment_url",
    "date_scraped",
    "date_received",
    "on_notice_from",
    "on_notice_to",
)


class ConflictPolicy(str, Enum):
    IGNORE = "ignore"  # keep the first stored copy of an application
    REPLACE = "replace"  # overwrite with the latest scrape


class ApplicationStore(Protocol):
    def upsert(self, record: NormalizedRecord) -> bool:
        ...


def ensure_schema(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS data (
            council_reference TEXT PRIMARY KEY,
            address TEXT,
            description TEXT,
            info_url TEXT,
            comment_url TEXT,
            date_scraped TEXT,
            date_received TEXT,
            on_notice_from TEXT,
            on_notice_to TEXT
        )
        """
    )
    conn.commit()


class SQLiteApplicationStore:
    """Single-table store keyed by council reference.

    :meth:`upsert` returns ``True`` only when the reference was not stored
    before. With :attr:`ConflictPolicy.REPLACE` an existing row is
    overwritten, with :attr:`ConflictPolicy.IGNORE` it is left untouched.
    """

    def __init__(self, path: str, conflict_policy=ConflictPolicy.IGNORE):
        self.path = path
        self.conflict_policy = ConflictPolicy(conflict_policy)
        self.conn = sqlite3.connect(self.path)
        ensure_schema(self.conn)

    def __enter__(self) -> "SQLiteApplicationStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def exists(self, reference_id: str) -> bool:
        row = self.conn.execute(
            "SELECT 1 FROM data WHERE council_reference = ? LIMIT 1",
            (reference_id,),
        ).fetchone()
        return row is not None

    def upsert(self, record: NormalizedRecord) -> bool:
        row = record.to_row()
        existing = self.exists(record.reference_id)

        if existing and self.conflict_policy is ConflictPolicy.IGNORE:
            return False

        if existing:
            assignments = ", ".join(f"{col}=?" for col in COLUMNS[1:])
            self.conn.execute(
                f"UPDATE data SET {assignments} WHERE council_reference=?",
                tuple(row[col] for col in COLUMNS[1:]) + (record.reference_id,),
            )
        else:
            placeholders = ", ".join("?" for _ in COLUMNS)
            self.conn.execute(
                f"INSERT INTO data ({', '.join(COLUMNS)}) VALUES ({placeholders})",
                tuple(row[col] for col in COLUMNS),
            )
        self.conn.commit()
        return not existing

    def get(self, reference_id: str) -> Optional[dict]:
        cur = self.conn.execute(
            f"SELECT {', '.join(COLUMNS)} FROM data WHERE council_reference = ?",
            (reference_id,),
        )
        row = cur.fetchone()
        if row is None:
            return None
        return dict(zip(COLUMNS, row))

    def count(self) -> int:
        return self.conn.execute("SELECT COUNT(*) FROM data").fetchone()[0]

    def close(self) -> None:
        self.conn.close()
