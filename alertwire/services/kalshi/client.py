"""Read-only Kalshi client for event metadata.

Only the public events endpoint is used, so no request signing is needed.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from .config import KalshiConfig
from .exceptions import KalshiAPIError, KalshiNotFoundError, KalshiRateLimitError
from .models import Event

logger = logging.getLogger(__name__)


class KalshiClient:
    """Looks up event metadata for the alert category check."""

    def __init__(
        self,
        config: KalshiConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or KalshiConfig()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> KalshiClient:
        self._client = httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout_seconds,
            limits=httpx.Limits(
                max_connections=self.config.max_connections,
                max_keepalive_connections=self.config.max_keepalive_connections,
            ),
            transport=self._transport,
        )
        return self

    async def __aexit__(
        self,
        exc_type: type | None,
        exc_val: Exception | None,
        exc_tb: Any,
    ) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("Closed KalshiClient")

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("KalshiClient must be used as async context manager")
        return self._client

    async def _get(self, path: str) -> dict[str, Any]:
        """GET a public resource, backing off on 429 and retrying timeouts.

        Raises:
            KalshiNotFoundError: 404.
            KalshiAPIError: other error statuses, network failures, or retries exhausted.
        """
        attempts = max(self.config.max_retries, 1)
        last_error: Exception | None = None

        for attempt in range(attempts):
            try:
                response = await self.client.get(path)
            except httpx.TimeoutException as e:
                last_error = e
                logger.warning(f"Kalshi timeout on {path} ({attempt + 1}/{attempts})")
                continue
            except httpx.RequestError as e:
                raise KalshiAPIError(f"Kalshi request failed: {e}") from e

            if response.status_code == 404:
                raise KalshiNotFoundError(f"Not found: {path}", status_code=404)
            if response.status_code == 429:
                last_error = KalshiRateLimitError("Rate limited", status_code=429)
                wait = self.config.backoff_seconds * 2**attempt
                logger.warning(f"Kalshi rate limited, waiting {wait}s")
                await asyncio.sleep(wait)
                continue
            if response.status_code >= 400:
                raise KalshiAPIError(
                    f"Kalshi returned {response.status_code} for {path}",
                    status_code=response.status_code,
                )
            return response.json()

        raise KalshiAPIError(f"Kalshi lookup gave up after {attempts} attempts: {last_error}")

    async def get_event(self, event_ticker: str) -> Event:
        data = await self._get(f"events/{event_ticker}")
        event_data = data.get("event")
        if not event_data:
            raise KalshiNotFoundError(f"Event not found: {event_ticker}", status_code=404)
        return Event.from_api(event_data)

    async def get_event_category(self, event_ticker: str) -> str | None:
        """Category label as Kalshi reports it (e.g. "Sports"), or None."""
        event = await self.get_event(event_ticker)
        return event.category


def create_kalshi_client(settings: Any) -> KalshiClient:
    """Factory function to create KalshiClient from application settings."""
    config = KalshiConfig(
        base_url=settings.kalshi.base_url,
        timeout_seconds=settings.kalshi.timeout_seconds,
    )
    return KalshiClient(config)
