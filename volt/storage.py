"""Persistence of saved requests in SQLite."""

from __future__ import annotations

import json
import sqlite3
import threading
from pathlib import Path
from typing import Protocol

from volt.request import Request

_SCHEMA = """
CREATE TABLE IF NOT EXISTS requests (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL DEFAULT '',
    method TEXT NOT NULL,
    url TEXT NOT NULL,
    headers TEXT NOT NULL DEFAULT '{}',
    body TEXT NOT NULL DEFAULT ''
);
"""


class RequestNotFoundError(LookupError):
    """Raised when deleting a request that does not exist."""


class RequestStore(Protocol):
    """What the interface needs from a request store."""

    def save(self, request: Request) -> None: ...

    def load(self) -> list[Request]: ...

    def delete(self, request_id: int) -> None: ...

    def get_all_urls(self) -> list[str]: ...


def _serialize_headers(headers: dict[str, str] | None) -> str:
    return json.dumps(headers, sort_keys=True, separators=(",", ":"))


def _deserialize_headers(text: str) -> dict[str, str]:
    return json.loads(text) or {}


class SQLiteStorage:
    """A request store backed by an SQLite database file (or ``:memory:``)."""

    def __init__(self, db_path: str | Path) -> None:
        path = str(db_path)
        if path != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(path, check_same_thread=False)
        with self._conn:
            self._conn.executescript(_SCHEMA)

    def __enter__(self) -> SQLiteStorage:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def save(self, request: Request) -> None:
        """Insert ``request`` and set its ``id``."""
        with self._lock, self._conn:
            cursor = self._conn.execute(
                "INSERT INTO requests (name, method, url, headers, body) VALUES (?, ?, ?, ?, ?)",
                (
                    request.name,
                    request.method,
                    request.url,
                    _serialize_headers(request.headers),
                    request.body,
                ),
            )
        request.id = cursor.lastrowid

    def load(self) -> list[Request]:
        """Return every saved request."""
        with self._lock:
            rows = self._conn.execute(
                "SELECT id, name, method, url, headers, body FROM requests ORDER BY id"
            ).fetchall()
        return [
            Request(
                id=row_id,
                name=name,
                method=method,
                url=url,
                headers=_deserialize_headers(headers),
                body=body,
            )
            for row_id, name, method, url, headers, body in rows
        ]

    def delete(self, request_id: int) -> None:
        """Delete a request, raising :class:`RequestNotFoundError` if absent."""
        with self._lock, self._conn:
            cursor = self._conn.execute("DELETE FROM requests WHERE id = ?", (request_id,))
        if cursor.rowcount == 0:
            raise RequestNotFoundError(f"request not found: {request_id}")

    def get_all_urls(self) -> list[str]:
        """Return each distinct saved URL once."""
        with self._lock:
            rows = self._conn.execute("SELECT DISTINCT url FROM requests").fetchall()
        return [url for (url,) in rows]

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()