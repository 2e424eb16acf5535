"""Top-five score storage.

Two interchangeable stores share one interface (``submit`` returns the
new entry id, ``fetch_top`` the ranked entries) and one retention rule:
entries are ranked by descending score with a stable sort, so earlier
submissions stay ahead of later ones on ties, and only the best five
survive. Each store serializes its own access, so handlers may call it
from worker threads.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from collections.abc import Iterable
from dataclasses import asdict, dataclass, field
from datetime import date as _date
from pathlib import Path

logger = logging.getLogger(__name__)

TOP_N = 5
DEFAULT_NAME = "Anonymous"
STORAGE_KEY = "snake_game_leaderboard"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS leaderboard (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    score INTEGER NOT NULL,
    date TEXT NOT NULL
);
"""


class LeaderboardError(RuntimeError):
    """Raised when the store cannot be read or written."""


def _today() -> str:
    return _date.today().isoformat()


@dataclass
class LeaderboardEntry:
    """One submitted score."""

    name: str
    score: int
    date: str = field(default_factory=_today)

    def __post_init__(self) -> None:
        self.name = normalize_name(self.name)
        if self.score < 0:
            raise ValueError("score must be >= 0.")

    def to_dict(self) -> dict:
        return asdict(self)


def normalize_name(name: str | None) -> str:
    """Strip the name and fall back to ``Anonymous`` when empty."""
    name = (name or "").strip()
    return name or DEFAULT_NAME


def rank_entries(
    entries: Iterable[LeaderboardEntry], limit: int = TOP_N,
) -> list[LeaderboardEntry]:
    """Stable-sort by descending score and keep the first *limit*."""
    return sorted(entries, key=lambda e: e.score, reverse=True)[:limit]


class SqliteLeaderboard:
    """Leaderboard persisted in a single SQLite table.

    Args:
        path: Database file. Parent directories are created as needed;
            ``":memory:"`` keeps everything in process.
        limit: Number of entries retained.
    """

    def __init__(self, path: str | Path = "db.sqlite3", limit: int = TOP_N) -> None:
        self.path = str(path)
        self.limit = limit
        self._lock = threading.Lock()
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        try:
            self._conn = sqlite3.connect(self.path, check_same_thread=False)
            self._conn.executescript(_SCHEMA)
        except sqlite3.Error as exc:
            raise LeaderboardError(f"Cannot open leaderboard: {exc}") from exc
        logger.info("Leaderboard table ready at %s.", self.path)

    def submit(self, name: str | None, score: int, date: str | None = None) -> int:
        """Record a score, evict everything outside the top entries.

        Returns the row id of the inserted entry.
        """
        entry = LeaderboardEntry(name=name, score=score, date=date or _today())
        try:
            with self._lock, self._conn:
                cur = self._conn.execute(
                    "INSERT INTO leaderboard (name, score, date) VALUES (?, ?, ?)",
                    (entry.name, entry.score, entry.date),
                )
                row_id = cur.lastrowid
                self._conn.execute(
                    "DELETE FROM leaderboard WHERE id NOT IN ("
                    " SELECT id FROM leaderboard"
                    " ORDER BY score DESC, id ASC LIMIT ?)",
                    (self.limit,),
                )
        except sqlite3.Error as exc:
            logger.error("Failed to save score: %s", exc)
            raise LeaderboardError(str(exc)) from exc
        logger.info("Score saved with id %d: %s %d.", row_id, entry.name, entry.score)
        return row_id

    def fetch_top(self) -> list[LeaderboardEntry]:
        """Return up to ``limit`` entries, highest score first."""
        try:
            with self._lock:
                rows = self._conn.execute(
                    "SELECT name, score, date FROM leaderboard"
                    " ORDER BY score DESC, id ASC LIMIT ?",
                    (self.limit,),
                ).fetchall()
        except sqlite3.Error as exc:
            logger.error("Failed to read leaderboard: %s", exc)
            raise LeaderboardError(str(exc)) from exc
        return [LeaderboardEntry(name=n, score=s, date=d) for n, s, d in rows]

    def close(self) -> None:
        with self._lock:
            self._conn.close()


class JsonLeaderboard:
    """On-device leaderboard kept under a fixed key in a JSON document.

    The entry list has the same ``{name, score, date}`` shape as the
    server rows. The last issued id is kept next to it under
    ``"<key>:last_id"`` so both stores hand out ids from ``submit``.
    """

    def __init__(
        self,
        path: str | Path,
        key: str = STORAGE_KEY,
        limit: int = TOP_N,
    ) -> None:
        self.path = Path(path)
        self.key = key
        self.limit = limit
        self._lock = threading.Lock()

    @property
    def _id_key(self) -> str:
        return f"{self.key}:last_id"

    def _read_document(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            doc = json.loads(self.path.read_text())
        except (OSError, json.JSONDecodeError) as exc:
            raise LeaderboardError(f"Cannot read {self.path}: {exc}") from exc
        if not isinstance(doc, dict):
            raise LeaderboardError(f"{self.path} does not hold a JSON object.")
        return doc

    def _entries(self, doc: dict) -> list[LeaderboardEntry]:
        try:
            entries = [LeaderboardEntry(**item) for item in doc.get(self.key, [])]
        except (TypeError, ValueError) as exc:
            raise LeaderboardError(f"Malformed leaderboard data: {exc}") from exc
        return rank_entries(entries, self.limit)

    def fetch_top(self) -> list[LeaderboardEntry]:
        """Return the stored entries, highest score first."""
        with self._lock:
            return self._entries(self._read_document())

    def submit(self, name: str | None, score: int, date: str | None = None) -> int:
        """Record a score, evict everything outside the top entries.

        Returns the id issued to the new entry.
        """
        entry = LeaderboardEntry(name=name, score=score, date=date or _today())
        with self._lock:
            doc = self._read_document()
            entries = self._entries(doc)
            try:
                entry_id = int(doc.get(self._id_key, 0)) + 1
            except (TypeError, ValueError) as exc:
                raise LeaderboardError(f"Malformed id counter: {exc}") from exc

            ranked = rank_entries([*entries, entry], self.limit)
            doc[self.key] = [e.to_dict() for e in ranked]
            doc[self._id_key] = entry_id
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self.path.write_text(json.dumps(doc, indent=2))
            except OSError as exc:
                logger.error("Failed to save score: %s", exc)
                raise LeaderboardError(str(exc)) from exc

        logger.info("Score saved locally with id %d: %s %d.", entry_id, entry.name, score)
        return entry_id

    def close(self) -> None:
        """Nothing to release; present for interface parity."""
