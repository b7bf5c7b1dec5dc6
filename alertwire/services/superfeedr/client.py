"""Superfeedr PubSubHubbub client."""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
from typing import Any
from urllib.parse import quote

import httpx

from .config import SuperfeedrConfig
from .exceptions import SubscriptionError, SubscriptionTimeoutError
from .models import HubMode

logger = logging.getLogger(__name__)

SIGNATURE_PREFIX = "sha1="
SECRET_BYTES = 16


def build_topic_url(query: str, track_url: str = "http://track.superfeedr.com/") -> str:
    """Tracking topic for a search query, percent-encoded like encodeURIComponent."""
    encoded = quote(query, safe="!~*'()")
    return f"{track_url}?query={encoded}"


def generate_secret() -> str:
    """Random per-subscription HMAC key (32 hex chars)."""
    return secrets.token_hex(SECRET_BYTES)


def compute_signature(raw_body: bytes | str, secret: str) -> str:
    if isinstance(raw_body, str):
        raw_body = raw_body.encode("utf-8")
    digest = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha1).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_signature(
    raw_body: bytes | str,
    signature_header: str | None,
    secret: str,
) -> bool:
    """Check an X-Hub-Signature header against the body; never raises."""
    if not signature_header or not secret:
        return False
    if not signature_header.startswith(SIGNATURE_PREFIX):
        return False

    expected = compute_signature(raw_body, secret)
    if len(signature_header) != len(expected):
        return False
    try:
        return hmac.compare_digest(
            signature_header.encode("ascii"), expected.encode("ascii")
        )
    except UnicodeEncodeError:
        return False


class SuperfeedrClient:
    """Subscribes tracking topics to the hub with a signed callback."""

    def __init__(
        self,
        config: SuperfeedrConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or SuperfeedrConfig()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

        if not self.config.has_credentials:
            logger.warning("Superfeedr credentials not set - subscriptions will stay pending")

    async def __aenter__(self) -> SuperfeedrClient:
        auth = (
            httpx.BasicAuth(self.config.login, self.config.token)
            if self.config.has_credentials
            else None
        )
        self._client = httpx.AsyncClient(
            timeout=self.config.timeout_seconds,
            auth=auth,
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
            logger.info("Closed SuperfeedrClient")

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("SuperfeedrClient must be used as async context manager")
        return self._client

    def topic_for(self, query: str) -> str:
        return build_topic_url(query, self.config.track_url)

    async def _post(self, data: dict[str, str]) -> httpx.Response:
        return await self.client.post(
            self.config.hub_url,
            data=data,
            headers={"Accept": "application/json"},
        )

    async def subscribe(
        self,
        topic: str,
        secret: str,
        callback_url: str | None = None,
    ) -> None:
        """Synchronously verified subscribe.

        Raises:
            SubscriptionError: hub answered non-2xx or the request failed.
            SubscriptionTimeoutError: no answer within the timeout.
        """
        data = {
            "hub.mode": HubMode.SUBSCRIBE.value,
            "hub.topic": topic,
            "hub.callback": callback_url or self.config.callback_url,
            "hub.secret": secret,
            "hub.verify": "sync",
            "format": "json",
        }

        try:
            response = await self._post(data)
        except httpx.TimeoutException as e:
            raise SubscriptionTimeoutError(
                f"Subscribe timed out after {self.config.timeout_seconds}s: {e}"
            )
        except httpx.RequestError as e:
            raise SubscriptionError(f"Subscribe request failed: {e}")

        if not response.is_success:
            raise SubscriptionError(
                f"Subscribe rejected with status {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        logger.info(f"Subscribed to topic: {topic}")

    async def unsubscribe(self, topic: str, callback_url: str | None = None) -> bool:
        """Unsubscribe a topic. Returns False on failure; never raises."""
        data = {
            "hub.mode": HubMode.UNSUBSCRIBE.value,
            "hub.topic": topic,
            "hub.callback": callback_url or self.config.callback_url,
            "hub.verify": "sync",
        }

        try:
            response = await self._post(data)
        except httpx.HTTPError as e:
            logger.error(f"Unsubscribe failed for {topic}: {e}")
            return False

        if not response.is_success:
            logger.error(
                f"Unsubscribe rejected for {topic}: {response.status_code} {response.text}"
            )
            return False

        logger.info(f"Unsubscribed from topic: {topic}")
        return True


def create_superfeedr_client(settings: Any) -> SuperfeedrClient:
    """Factory building the hub client from application settings."""
    config = SuperfeedrConfig(
        hub_url=settings.hub.hub_url,
        track_url=settings.hub.track_url,
        callback_url=settings.webhook_callback_url,
        login=settings.superfeedr_login,
        token=settings.superfeedr_token,
        timeout_seconds=settings.hub.timeout_seconds,
    )
    return SuperfeedrClient(config)
