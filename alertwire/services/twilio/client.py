"""Twilio programmable SMS client."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from alertwire.services.delivery import Channel, DeliveryResult

from .config import TwilioConfig
from .exceptions import TwilioConfigError
from .models import mask_phone

logger = logging.getLogger(__name__)


class TwilioClient:
    """Async SMS sender over the Twilio REST API."""

    def __init__(
        self,
        config: TwilioConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or TwilioConfig()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

        if not self.config.is_configured:
            logger.warning("Twilio credentials not set - SMS delivery disabled")

    async def __aenter__(self) -> TwilioClient:
        self._client = httpx.AsyncClient(
            base_url=self.config.api_base_url,
            timeout=self.config.timeout_seconds,
            auth=httpx.BasicAuth(self.config.account_sid, self.config.auth_token),
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
            logger.info("Closed TwilioClient")

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("TwilioClient must be used as async context manager")
        return self._client

    def _failure(self, to: str, error: str) -> DeliveryResult:
        return DeliveryResult(
            success=False, channel=Channel.SMS, recipient=mask_phone(to), error=error
        )

    async def send_sms(self, to: str, body: str) -> DeliveryResult:
        """Send one SMS. Never raises for provider, timeout or config failures."""
        if not self.config.is_configured:
            return self._failure(to, str(TwilioConfigError("Twilio not configured")))
        if not to:
            return self._failure(to, "No phone number")

        endpoint = f"/Accounts/{self.config.account_sid}/Messages.json"
        try:
            response = await self.client.post(
                endpoint,
                data={"To": to, "From": self.config.from_number, "Body": body},
            )
        except httpx.TimeoutException:
            return self._failure(
                to, f"SMS send timed out after {self.config.timeout_seconds}s"
            )
        except httpx.RequestError as e:
            return self._failure(to, f"SMS request failed: {e}")

        if not response.is_success:
            try:
                detail = response.json().get("message", response.text)
            except ValueError:
                detail = response.text
            return self._failure(to, f"Twilio API error {response.status_code}: {detail}")

        try:
            sid = response.json().get("sid")
        except ValueError:
            sid = None
        logger.debug(f"SMS sent to {mask_phone(to)} (sid: {sid})")
        return DeliveryResult(
            success=True,
            channel=Channel.SMS,
            recipient=mask_phone(to),
            provider_message_id=sid,
        )


def create_twilio_client(settings: Any) -> TwilioClient:
    """Factory function to create TwilioClient from application settings."""
    config = TwilioConfig(
        account_sid=settings.twilio_account_sid,
        auth_token=settings.twilio_auth_token,
        from_number=settings.twilio_phone_number,
        api_base_url=settings.sms.api_base_url,
        timeout_seconds=settings.sms.timeout_seconds,
    )
    return TwilioClient(config)
