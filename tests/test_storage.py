import pytest

from volt.request import Request
from volt.storage import RequestNotFoundError, SQLiteStorage


@pytest.fixture
def db():
    store = SQLiteStorage(":memory:")
    yield store
    store.close()


def test_save_load_delete(db):
    req = Request(
        name="test",
        method="GET",
        url="http://localhost:8080",
        headers={"Content-Type": "application/json"},
        body="test",
    )
    db.save(req)
    assert req.id > 0

    requests = db.load()
    assert len(requests) == 1
    assert requests[0] == req
    assert requests[0].id > 0

    db.delete(req.id)
    assert db.load() == []


def test_load_empty(db):
    assert db.load() == []


def test_delete_non_existent(db):
    with pytest.raises(RequestNotFoundError, match="request not found: 999"):
        db.delete(999)


def test_multiple_requests(db):
    requests = [
        Request(
            name="test1",
            method="GET",
            url="http://localhost:8080",
            headers={"Content-Type": "application/json"},
            body="test",
        ),
        Request(name="test2", method="POST", url="http://localhost:8080", headers={}),
        Request(name="test3", method="PUT", url="http://broken;??/asd", headers={}),
    ]
    for req in requests:
        db.save(req)

    loaded = db.load()
    assert len(loaded) == len(requests)
    for req in requests:
        assert req in loaded
    assert len({req.id for req in requests}) == len(requests)


def test_get_all_urls_multiple(db):
    requests = [
        Request(name="test1", method="GET", url="http://localhost:8080",
                headers={"Content-Type": "application/json"}, body="test"),
        Request(name="Not a distinct URL", method="GET", url="http://localhost:8080",
                headers={"Content-Type": "application/json"}, body="test"),
        Request(name="Mostly the same URL, but still distinct", method="GET",
                url="http://localhost:9090/test",
                headers={"Content-Type": "application/json"}, body="test"),
        Request(name="test2", method="POST", url="http://google.com/api", headers={}),
        Request(name="test2", method="POST", url="http://google.com/api", headers={}),
        Request(name="test3", method="PUT", url="http://broken;??/asd", headers={}),
    ]
    for req in requests:
        db.save(req)

    urls = db.get_all_urls()
    assert len(urls) == 4
    for req in requests:
        assert req.url in urls


def test_get_all_urls_none(db):
    assert db.get_all_urls() == []


def test_persists_to_file(tmp_path):
    path = tmp_path / "nested" / "dir" / "volt.db"
    req = Request(name="kept", method="GET", url="http://localhost", headers={"A": "b"})
    with SQLiteStorage(path) as store:
        store.save(req)
    assert path.exists()
    with SQLiteStorage(path) as store:
        assert store.load() == [req]


def test_empty_headers_round_trip(db):
    req = Request(name="plain", method="GET", url="http://localhost")
    db.save(req)
    assert db.load()[0].headers == {}