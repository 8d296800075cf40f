import pytest

from volt.request import GET, InvalidRequestError, Request


@pytest.mark.parametrize(
    "fields",
    [
        {"method": ""},
        {"url": ""},
        {"name": "name too longname too longname too longname too long"},
        {"method": "GETT", "url": "http://localhost"},
        {"method": GET, "url": "htt://localhost:8080"},
    ],
    ids=["empty method", "empty url", "name too long", "invalid method", "invalid url"],
)
def test_validate_rejects(fields):
    with pytest.raises(InvalidRequestError):
        Request(**fields).validate()


@pytest.mark.parametrize(
    "fields",
    [
        {"method": GET, "url": "http://localhost"},
        {"id": 1234, "method": GET, "url": "http://localhost"},
        {"name": "test", "method": GET, "url": "http://localhost"},
        {
            "method": GET,
            "url": "http://localhost",
            "headers": {"Content-Type": "application/json"},
        },
        {"method": GET, "url": "http://localhost", "body": "test"},
    ],
    ids=["valid", "valid with id", "valid with name", "valid with headers", "valid with body"],
)
def test_validate_accepts(fields):
    request = Request(**fields)
    assert request.validate() is None


def test_validate_messages():
    with pytest.raises(InvalidRequestError, match="method is required"):
        Request(url="http://localhost").validate()
    with pytest.raises(InvalidRequestError, match="invalid method: GETT"):
        Request(method="GETT", url="http://localhost").validate()


def test_too_many_headers():
    headers = {f"h{i}": "v" for i in range(101)}
    with pytest.raises(InvalidRequestError, match="too many headers: 101"):
        Request(method=GET, url="http://localhost", headers=headers).validate()


def test_body_too_long():
    with pytest.raises(InvalidRequestError, match="body too long"):
        Request(method=GET, url="http://localhost", body="x" * 10001).validate()


def test_default_request():
    request = Request.default()
    assert request.name == "None"
    assert request.method == GET
    assert request.url == "https://:"
    assert request.headers == {}
    assert request.body == ""