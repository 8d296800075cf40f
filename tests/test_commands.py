import queue
import sqlite3

import pytest

from volt.loadtest import (
    JobConfig,
    LoadTestCompleteMsg,
    LoadTestStartMsg,
    LoadTestStats,
    LoadTestStatsMsg,
)
from volt.request import Request
from volt.storage import RequestNotFoundError, SQLiteStorage
from volt.ui.commands import (
    RequestDeletedMsg,
    SetRequestPaneRequestMsg,
    delete_request_cmd,
    load_requests_cmd,
    save_request_cmd,
    set_request_pane_request_cmd,
    start_load_test_cmd,
    wait_for_load_test_updates_cmd,
)


@pytest.fixture
def db():
    store = SQLiteStorage(":memory:")
    yield store
    store.close()


def _request():
    return Request(
        name="test",
        method="GET",
        url="http://localhost:8080",
        headers={"Content-Type": "application/json"},
        body="test",
    )


def test_set_request_pane_request_cmd():
    request = _request()
    assert set_request_pane_request_cmd(request)() == SetRequestPaneRequestMsg(request=request)


def test_save_then_load(db):
    request = _request()
    saved = save_request_cmd(db, request)()
    assert saved.request is request
    assert saved.error is None
    loaded = load_requests_cmd(db)()
    assert loaded.error is None
    assert loaded.requests == [request]


def test_delete_existing(db):
    request = _request()
    save_request_cmd(db, request)()
    msg = delete_request_cmd(db, request.id)()
    assert msg == RequestDeletedMsg(request_id=request.id)
    assert load_requests_cmd(db)().requests == []


def test_delete_missing_reports_error(db):
    msg = delete_request_cmd(db, 999)()
    assert msg.request_id == 999
    assert isinstance(msg.error, RequestNotFoundError)


def test_load_from_closed_store_reports_error():
    store = SQLiteStorage(":memory:")
    store.close()
    msg = load_requests_cmd(store)()
    assert msg.requests == []
    assert isinstance(msg.error, sqlite3.Error)


def test_start_load_test_cmd():
    config = JobConfig(request=_request(), concurrency=2, total_requests=10)
    msg = start_load_test_cmd(config)()
    assert isinstance(msg, LoadTestStartMsg)
    assert msg.config is config


def test_wait_reports_end_of_stream():
    updates = queue.Queue()
    updates.put(None)
    assert wait_for_load_test_updates_cmd(updates, 10)() == LoadTestCompleteMsg(
        stats=None, duration=0.0
    )


def test_wait_reports_progress():
    stats = LoadTestStats(total_requests=4, start_time=100.0, completed_requests=2)
    updates = queue.Queue()
    updates.put(stats)
    msg = wait_for_load_test_updates_cmd(updates, 4)()
    assert isinstance(msg, LoadTestStatsMsg)
    assert msg.stats is stats
    assert msg.progress == 0.5


def test_wait_progress_without_total_is_zero():
    stats = LoadTestStats(total_requests=4, start_time=100.0, completed_requests=2)
    updates = queue.Queue()
    updates.put(stats)
    assert wait_for_load_test_updates_cmd(updates, 0)().progress == 0.0


def test_wait_reports_completion():
    stats = LoadTestStats(
        total_requests=10, start_time=100.0, end_time=104.0, completed_requests=10
    )
    updates = queue.Queue()
    updates.put(stats)
    msg = wait_for_load_test_updates_cmd(updates, 10)()
    assert isinstance(msg, LoadTestCompleteMsg)
    assert msg.stats is stats
    assert msg.duration == 4.0