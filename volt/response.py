"""The result of sending a single request."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Response:
    """An HTTP response, or the error that prevented one.

    ``duration`` is in seconds; ``headers`` maps each name to all its values.
    """

    status_code: int = 0
    status: str = ""
    headers: dict[str, list[str]] = field(default_factory=dict)
    body: str = ""
    duration: float = 0.0
    error: str = ""
    round_trip: bool = False

    def parse_content_type(self) -> str:
        """Return the first Content-Type value, or an empty string."""
        for name, values in self.headers.items():
            if name.lower() == "content-type" and values:
                return values[0]
        return ""


@dataclass
class ResultMsg:
    """Message carrying a finished response back to the interface."""

    response: Response

    def __str__(self) -> str:
        if self.response.error:
            return self.response.error
        millis = int(self.response.duration * 1000)
        return f"{self.response.status_code} that took: {millis} ms"