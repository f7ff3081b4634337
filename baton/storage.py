"""Storage backends for outcome records."""

from __future__ import annotations

from datetime import datetime, UTC
from pathlib import Path
from threading import Lock
from typing import List, Optional, Protocol
import json
import logging
import os
import sqlite3

from baton.schemas import OutcomeRecord

logger = logging.getLogger("baton.storage")


class OutcomeStore(Protocol):
    """Append-only outcome log interface."""

    def append(self, record: OutcomeRecord) -> OutcomeRecord:
        ...

    def read_all(self) -> List[OutcomeRecord]:
        ...

    def count(self) -> int:
        ...

    def close(self) -> None:
        ...


class InMemoryOutcomeStore:
    """In-memory outcome log, for tests and ephemeral routers."""

    def __init__(self):
        self._records: List[OutcomeRecord] = []
        self._lock = Lock()

    def append(self, record: OutcomeRecord) -> OutcomeRecord:
        with self._lock:
            self._records.append(record)
        return record

    def read_all(self) -> List[OutcomeRecord]:
        return list(self._records)

    def count(self) -> int:
        return len(self._records)

    def close(self) -> None:
        pass


class JSONLOutcomeStore:
    """
    JSON Lines file-based outcome log.

    Each line is a complete JSON object representing one OutcomeRecord.
    Appends are serialized by a lock and written as a single line, so
    concurrent writers never interleave records. The file grows without
    bound.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = Lock()

    def append(self, record: OutcomeRecord) -> OutcomeRecord:
        """Append record to the JSONL file."""
        line = json.dumps(record.to_dict()) + "\n"
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # Terminate a line left partial by an interrupted write
            if self._ends_mid_line():
                line = "\n" + line
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(line)
        return record

    def _ends_mid_line(self) -> bool:
        if not self.path.exists() or self.path.stat().st_size == 0:
            return False
        with open(self.path, "rb") as f:
            f.seek(-1, os.SEEK_END)
            return f.read(1) != b"\n"

    def read_all(self) -> List[OutcomeRecord]:
        """Read all records. Corrupt lines are skipped."""
        if not self.path.exists():
            return []

        records = []
        with open(self.path, "r", encoding="utf-8", errors="replace") as f:
            for lineno, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    records.append(OutcomeRecord.from_dict(json.loads(line)))
                except (ValueError, KeyError, TypeError) as e:
                    logger.warning("Skipping corrupt outcome at %s:%d (%s)", self.path, lineno, e)
        return records

    def count(self) -> int:
        if not self.path.exists():
            return 0
        with open(self.path, "r", encoding="utf-8", errors="replace") as f:
            return sum(1 for line in f if line.strip())

    def close(self) -> None:
        pass


class SQLiteOutcomeStore:
    """SQLite-backed outcome log."""

    def __init__(self, db_path: str = "baton.db"):
        self._lock = Lock()
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL;")
        self._init_schema()

    def _init_schema(self) -> None:
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS outcomes (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                backend_id TEXT NOT NULL,
                task_type TEXT NOT NULL,
                domain TEXT NOT NULL,
                latency_ms REAL NOT NULL,
                prompt_units INTEGER NOT NULL,
                completion_units INTEGER NOT NULL,
                cost REAL NOT NULL,
                success INTEGER NOT NULL,
                quality_score REAL,
                timestamp TEXT NOT NULL
            )
            """
        )
        self._conn.execute("CREATE INDEX IF NOT EXISTS idx_outcomes_backend ON outcomes(backend_id)")
        self._conn.commit()

    def append(self, record: OutcomeRecord) -> OutcomeRecord:
        with self._lock:
            self._conn.execute(
                """
                INSERT INTO outcomes (backend_id, task_type, domain, latency_ms, prompt_units,
                                      completion_units, cost, success, quality_score, timestamp)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.backend_id,
                    record.task_type,
                    record.domain,
                    record.latency_ms,
                    record.prompt_units,
                    record.completion_units,
                    record.cost,
                    1 if record.success else 0,
                    record.quality_score,
                    record.timestamp.isoformat(),
                ),
            )
            self._conn.commit()
        return record

    def _row_to_record(self, row: sqlite3.Row) -> OutcomeRecord:
        timestamp = datetime.fromisoformat(row["timestamp"])
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=UTC)
        return OutcomeRecord(
            backend_id=row["backend_id"],
            task_type=row["task_type"],
            domain=row["domain"],
            latency_ms=row["latency_ms"],
            prompt_units=row["prompt_units"],
            completion_units=row["completion_units"],
            cost=row["cost"],
            success=bool(row["success"]),
            quality_score=row["quality_score"],
            timestamp=timestamp,
        )

    def read_all(self) -> List[OutcomeRecord]:
        with self._lock:
            rows = self._conn.execute("SELECT * FROM outcomes ORDER BY id ASC").fetchall()
        return [self._row_to_record(row) for row in rows]

    def count(self) -> int:
        with self._lock:
            row = self._conn.execute("SELECT COUNT(*) FROM outcomes").fetchone()
        return row[0]

    def close(self) -> None:
        self._conn.close()


def open_store(kind: str, path: Optional[Path] = None) -> OutcomeStore:
    """Open an outcome store by kind ("memory", "jsonl" or "sqlite")."""
    if kind == "memory":
        return InMemoryOutcomeStore()
    if path is None:
        raise ValueError(f"{kind} store requires a path")
    if kind == "jsonl":
        return JSONLOutcomeStore(path)
    if kind == "sqlite":
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        return SQLiteOutcomeStore(db_path=str(path))
    raise ValueError(f"Unknown store kind: {kind}")
