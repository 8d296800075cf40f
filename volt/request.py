"""The HTTP request model that is edited, saved and sent."""

from __future__ import annotations

from dataclasses import dataclass, field

GET = "GET"
POST = "POST"
PUT = "PUT"
DELETE = "DELETE"
PATCH = "PATCH"

VALID_METHODS = (GET, POST, PUT, PATCH, DELETE)

MAX_NAME_LENGTH = 40
MAX_HEADERS = 100
MAX_BODY_LENGTH = 10000


class InvalidRequestError(ValueError):
    """Raised when a request fails validation."""


@dataclass
class Request:
    """An HTTP request as the user describes it."""

    id: int = 0
    name: str = ""
    method: str = ""
    url: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""

    @classmethod
    def default(cls) -> Request:
        """The request shown in a fresh editor."""
        return cls(name="None", method=GET, url="https://:", headers={}, body="")

    def validate(self) -> None:
        """Raise :class:`InvalidRequestError` if the request cannot be sent."""
        if len(self.name) > MAX_NAME_LENGTH:
            raise InvalidRequestError(f"name too long: {self.name}")
        if not self.method:
            raise InvalidRequestError("method is required")
        if not self.url:
            raise InvalidRequestError("url is required")
        if self.method not in VALID_METHODS:
            raise InvalidRequestError(f"invalid method: {self.method}")
        if not self.url.startswith("http"):
            raise InvalidRequestError(f"invalid url: {self.url}")
        if self.headers and len(self.headers) > MAX_HEADERS:
            raise InvalidRequestError(f"too many headers: {len(self.headers)}")
        if len(self.body) > MAX_BODY_LENGTH:
            raise InvalidRequestError(f"body too long: {len(self.body)}")