"""Resend transactional email client."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from alertwire.services.delivery import Channel, DeliveryResult

from .config import ResendConfig
from .exceptions import ResendConfigError
from .models import EmailMessage

logger = logging.getLogger(__name__)


class ResendClient:
    """Async email sender over the Resend REST API."""

    def __init__(
        self,
        config: ResendConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or ResendConfig()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

        if not self.config.is_configured:
            logger.warning("Resend API key not set - email delivery disabled")

    async def __aenter__(self) -> ResendClient:
        self._client = httpx.AsyncClient(
            base_url=self.config.api_base_url,
            timeout=self.config.timeout_seconds,
            headers={"Authorization": f"Bearer {self.config.api_key}"},
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
            logger.info("Closed ResendClient")

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("ResendClient must be used as async context manager")
        return self._client

    def _failure(self, to: str, error: str) -> DeliveryResult:
        return DeliveryResult(success=False, channel=Channel.EMAIL, recipient=to, error=error)

    async def send_email(
        self,
        to: str,
        subject: str,
        html: str,
        text: str,
    ) -> DeliveryResult:
        """Send one email. Never raises for provider, timeout or config failures."""
        if not self.config.is_configured:
            return self._failure(to, str(ResendConfigError("Resend not configured")))
        if not to:
            return self._failure(to, "No email address")

        message = EmailMessage(
            from_address=self.config.from_address,
            to=[to],
            subject=subject,
            html=html,
            text=text,
        )

        try:
            response = await self.client.post("/emails", json=message.to_api())
        except httpx.TimeoutException:
            return self._failure(
                to, f"Email send timed out after {self.config.timeout_seconds}s"
            )
        except httpx.RequestError as e:
            return self._failure(to, f"Email request failed: {e}")

        if not response.is_success:
            try:
                detail = response.json().get("message", response.text)
            except ValueError:
                detail = response.text
            return self._failure(to, f"Resend API error {response.status_code}: {detail}")

        try:
            message_id = response.json().get("id")
        except ValueError:
            message_id = None
        logger.debug(f"Email sent to {to} (id: {message_id})")
        return DeliveryResult(
            success=True,
            channel=Channel.EMAIL,
            recipient=to,
            provider_message_id=message_id,
        )


def create_resend_client(settings: Any) -> ResendClient:
    """Factory function to create ResendClient from application settings."""
    config = ResendConfig(
        api_key=settings.resend_api_key,
        from_address=settings.email_from,
        api_base_url=settings.email.api_base_url,
        timeout_seconds=settings.email.timeout_seconds,
    )
    return ResendClient(config)
