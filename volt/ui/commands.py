"""Messages and deferred commands exchanged between the interface panes."""

from __future__ import annotations

import queue
import sqlite3
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from volt.loadtest import (
    JobConfig,
    LoadTestCompleteMsg,
    LoadTestStartMsg,
    LoadTestStatsMsg,
)
from volt.request import Request
from volt.storage import RequestStore

Cmd = Callable[[], object]


@dataclass
class RequestsLoadingMsg:
    """Saved requests were loaded, or loading failed."""

    requests: list[Request] = field(default_factory=list)
    error: Exception | None = None


@dataclass
class RequestSavedMsg:
    """A request was saved, or saving failed."""

    request: Request
    error: Exception | None = None


@dataclass
class RequestDeletedMsg:
    """A request was deleted, or deleting failed."""

    request_id: int
    error: Exception | None = None


@dataclass
class SetRequestPaneRequestMsg:
    """Asks the request editor to show ``request``."""

    request: Request


def set_request_pane_request_cmd(request: Request) -> Cmd:
    """Command that asks the request editor to show ``request``."""

    def command() -> SetRequestPaneRequestMsg:
        return SetRequestPaneRequestMsg(request=request)

    return command


def delete_request_cmd(db: RequestStore, request_id: int) -> Cmd:
    """Command that deletes a saved request."""

    def command() -> RequestDeletedMsg:
        try:
            db.delete(request_id)
        except (LookupError, sqlite3.Error) as exc:
            return RequestDeletedMsg(request_id=request_id, error=exc)
        return RequestDeletedMsg(request_id=request_id)

    return command


def save_request_cmd(db: RequestStore, request: Request) -> Cmd:
    """Command that saves ``request``, setting its id."""

    def command() -> RequestSavedMsg:
        try:
            db.save(request)
        except (sqlite3.Error, TypeError, ValueError) as exc:
            return RequestSavedMsg(request=request, error=exc)
        return RequestSavedMsg(request=request)

    return command


def load_requests_cmd(db: RequestStore) -> Cmd:
    """Command that loads every saved request."""

    def command() -> RequestsLoadingMsg:
        try:
            requests = db.load()
        except (sqlite3.Error, ValueError) as exc:
            return RequestsLoadingMsg(error=exc)
        return RequestsLoadingMsg(requests=requests)

    return command


def start_load_test_cmd(config: JobConfig) -> Cmd:
    """Command that asks the application to start a load test."""

    def command() -> LoadTestStartMsg:
        return LoadTestStartMsg(config=config)

    return command


def wait_for_load_test_updates_cmd(updates: queue.Queue, total_requests: int) -> Cmd:
    """Command that waits for the next statistics update of a running test."""

    def command() -> LoadTestStatsMsg | LoadTestCompleteMsg:
        stats = updates.get()
        if stats is None:
            return LoadTestCompleteMsg(stats=None, duration=0.0)

        if stats.completed_requests >= stats.total_requests:
            end = stats.end_time if stats.end_time is not None else time.time()
            return LoadTestCompleteMsg(stats=stats, duration=end - stats.start_time)

        progress = stats.completed_requests / total_requests if total_requests > 0 else 0.0
        return LoadTestStatsMsg(stats=stats, progress=progress)

    return command