"""HTTP download helper for result images."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from imagelab.exceptions import FetchFailedError


@dataclass(frozen=True, slots=True)
class FetchResponse:
    """Status and body of a completed GET request."""

    status_code: int
    content: bytes
    reason: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def raise_for_status(self) -> None:
        if not self.ok:
            raise FetchFailedError(self.status_code, self.reason)


class HttpFetcher:
    """Downloads result files with a shared ``httpx.AsyncClient``."""

    def __init__(self, client: httpx.AsyncClient | None = None, *, timeout: float = 60.0) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    async def fetch(self, url: str) -> FetchResponse:
        """Issue a single GET request; network errors propagate unchanged."""

        response = await self._client.get(url)
        return FetchResponse(
            status_code=response.status_code,
            content=response.content,
            reason=response.reason_phrase,
        )

    async def close(self) -> None:
        """Close the HTTP client when this fetcher created it."""

        if self._owns_client:
            await self._client.aclose()
