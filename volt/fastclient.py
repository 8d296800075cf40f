"""Lean HTTP client used by load-test workers."""

from __future__ import annotations

from dataclasses import dataclass

import requests
from requests.adapters import HTTPAdapter

MIN_POOL_SIZE = 500


@dataclass(frozen=True)
class CompiledRequest:
    """A request prepared once and sent many times."""

    method: str
    url: str
    headers: tuple[tuple[str, str], ...] = ()
    body: bytes | None = None


class FastClient:
    """Connection-pooling client shared by all workers of a load test."""

    def __init__(self, timeout: float, concurrency: int = 1) -> None:
        self.timeout = timeout
        self._session = requests.Session()
        self._session.headers.pop("Accept-Encoding", None)
        pool_size = max(MIN_POOL_SIZE, concurrency)
        adapter = HTTPAdapter(pool_connections=1, pool_maxsize=pool_size)
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)

    def __enter__(self) -> FastClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def do(self, compiled: CompiledRequest) -> tuple[int, int]:
        """Send ``compiled`` and return ``(status, content_length)``.

        The content length is -1 when the response does not declare one.
        Transport failures raise :class:`requests.RequestException`.
        """
        response = self._session.request(
            compiled.method,
            compiled.url,
            headers=dict(compiled.headers),
            data=compiled.body,
            timeout=self.timeout,
            allow_redirects=False,
        )
        try:
            _ = response.content
        finally:
            response.close()
        length = response.headers.get("Content-Length")
        return response.status_code, int(length) if length is not None else -1

    def close(self) -> None:
        """Release pooled connections."""
        self._session.close()