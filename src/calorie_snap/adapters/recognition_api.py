"""HTTP client for the recognition gateway."""

from dataclasses import dataclass
from typing import Protocol
from urllib.parse import urljoin

import httpx


class RecognitionApi(Protocol):
    """Interface for the gateway's HTTP surface."""

    async def analyze(self, payload: dict[str, object]) -> dict[str, object]:
        """POST an analyze request and return the decoded JSON body."""

    async def health(self) -> dict[str, object]:
        """Return the gateway health document."""


@dataclass
class HttpxRecognitionApi(RecognitionApi):
    """HTTPX-backed gateway client."""

    endpoint: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 30

    @classmethod
    def create(
        cls, endpoint: str, timeout_seconds: float = 30
    ) -> "HttpxRecognitionApi":
        """Create a gateway client with a managed httpx session."""
        return cls(
            endpoint=endpoint,
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def analyze(self, payload: dict[str, object]) -> dict[str, object]:
        """POST the encoded image; non-2xx responses raise HTTPStatusError."""
        response = await self.http_client.post(
            self.endpoint, json=payload, timeout=self.timeout_seconds
        )
        response.raise_for_status()
        return response.json()

    async def health(self) -> dict[str, object]:
        """GET /api/health on the same server."""
        url = urljoin(self.endpoint, "/api/health")
        response = await self.http_client.get(url, timeout=10)
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
