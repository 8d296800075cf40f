"""Client for sending single interactive requests."""

from __future__ import annotations

import time

import requests
from requests.adapters import HTTPAdapter

from volt.request import Request
from volt.response import Response

TIMEOUT = 10.0


def _canonical_header(name: str) -> str:
    return "-".join(part.capitalize() for part in name.split("-"))


class Client:
    """Sends requests and times them.

    With ``round_trip`` set, timing covers connection, headers and body;
    otherwise it starts once the response headers have arrived.
    """

    def __init__(self, timeout: float = 0.0, round_trip: bool = False) -> None:
        self.timeout = timeout or TIMEOUT
        self.round_trip = round_trip
        self._session = requests.Session()
        self._session.headers.pop("Accept-Encoding", None)
        adapter = HTTPAdapter(pool_connections=10, pool_maxsize=10)
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def send(self, request: Request) -> Response:
        """Send ``request``; failures are reported in ``Response.error``."""
        start = time.perf_counter()
        try:
            with self._session.request(
                request.method,
                request.url,
                headers=dict(request.headers or {}),
                data=request.body.encode() if request.body else None,
                timeout=self.timeout,
                stream=True,
            ) as res:
                if not self.round_trip:
                    start = time.perf_counter()
                body = res.content
                headers: dict[str, list[str]] = {}
                for name in res.raw.headers:
                    headers.setdefault(_canonical_header(name), []).extend(
                        res.raw.headers.getlist(name)
                    )
        except requests.RequestException as exc:
            return Response(error=str(exc))
        duration = time.perf_counter() - start
        return Response(
            status=f"{res.status_code} {res.reason}".strip(),
            status_code=res.status_code,
            body=body.decode("utf-8", errors="replace"),
            headers=headers,
            duration=duration,
            round_trip=self.round_trip,
        )

    def toggle_round_trip(self) -> None:
        """Switch between round-trip and first-byte timing."""
        self.round_trip = not self.round_trip

    def close(self) -> None:
        """Release pooled connections."""
        self._session.close()