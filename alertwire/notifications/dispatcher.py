"""Inbound hub deliveries fanned out to every subscribed user and channel.

The hub only ever sees a non-2xx answer when the signature check fails.
Everything else, including parse errors and failed sends, is acknowledged so
the hub does not retry and re-notify users whose sends succeeded.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable

from pydantic import ValidationError

from alertwire.alerts.directory import Contact, UserDirectory
from alertwire.config import Settings, get_settings
from alertwire.exceptions import NotFoundError
from alertwire.markets.tickers import format_event_title
from alertwire.services.delivery import Channel, DeliveryResult
from alertwire.services.resend import ResendClient
from alertwire.services.superfeedr import HubNotification, verify_signature
from alertwire.services.twilio import TwilioClient, mask_phone
from alertwire.storage.models import UserAlert
from alertwire.storage.registry import WebhookRegistry

from .formatting import email_html, email_subject, email_text, sms_body
from .models import Article, DispatchSummary

logger = logging.getLogger(__name__)

Response = tuple[int, dict[str, Any]]


class NotificationDispatcher:
    """Verifies hub pushes and delivers each article to each active alert."""

    def __init__(
        self,
        registry: WebhookRegistry,
        directory: UserDirectory,
        email_client: ResendClient,
        sms_client: TwilioClient | None = None,
        settings: Settings | None = None,
    ):
        self.registry = registry
        self.directory = directory
        self.email_client = email_client
        self.sms_client = sms_client
        self.settings = settings or get_settings()

    async def handle_delivery(self, raw_body: bytes, signature: str | None) -> Response:
        """Process one hub push; returns (http_status, json_body)."""
        try:
            return await self._handle_delivery(raw_body, signature)
        except Exception:
            logger.exception("Unhandled error processing hub delivery")
            return 200, {
                "received": True,
                "error": "Internal error - logged for investigation",
            }

    async def _handle_delivery(self, raw_body: bytes, signature: str | None) -> Response:
        try:
            notification = HubNotification.model_validate_json(raw_body)
        except ValidationError as e:
            logger.error(f"Failed to parse hub payload: {e.error_count()} error(s)")
            return 200, {"received": True, "error": "Invalid JSON"}

        topic = notification.topic
        if not topic:
            logger.error("No topic URL in hub payload")
            return 200, {"received": True, "error": "No topic URL"}

        webhooks = await self.registry.get_webhooks_by_topic(topic)
        if not webhooks:
            logger.warning(f"No webhook found for topic: {topic}")
            return 200, {"received": True, "stale": True}

        if not any(verify_signature(raw_body, signature, w.secret) for w in webhooks):
            logger.error(f"Invalid signature for topic: {topic}")
            return 401, {"error": "Invalid signature"}

        event_tickers = [w.event_ticker for w in webhooks]
        if not notification.items:
            logger.info(f"No items in payload for {', '.join(event_tickers)}")
            return 200, {"received": True, "items": 0}

        alerts = await self.registry.active_alerts_for_events(event_tickers)
        if not alerts:
            logger.info(f"No active alerts for {', '.join(event_tickers)}")
            return 200, {"received": True, "alerts": 0}

        titles = {
            w.event_ticker: w.event_title or format_event_title(w.event_ticker)
            for w in webhooks
        }
        articles = [Article.from_hub_item(item) for item in notification.items]

        summary = await self.fan_out(articles, alerts, titles)
        summary.items = len(articles)

        logger.info(
            f"Processed notification for {', '.join(event_tickers)}: "
            f"items={summary.items} users={summary.users} "
            f"emails={summary.emails_sent}/{summary.emails_sent + summary.emails_failed} "
            f"sms={summary.sms_sent}/{summary.sms_sent + summary.sms_failed}"
        )
        return 200, summary.to_response()

    async def fan_out(
        self,
        articles: list[Article],
        alerts: list[UserAlert],
        titles: dict[str, str],
    ) -> DispatchSummary:
        """Send every (article, alert, channel) combination; waits for all of them."""
        user_ids = sorted({alert.user_id for alert in alerts})
        contacts = await self.directory.get_contacts(user_ids)
        semaphore = asyncio.Semaphore(max(self.settings.dispatch.max_concurrency, 1))
        sms_enabled = self.settings.dispatch.sms_enabled and self.sms_client is not None

        sends: list[Awaitable[DeliveryResult]] = []
        for article in articles:
            for alert in alerts:
                contact = contacts.get(alert.user_id)
                event_title = titles.get(alert.event_ticker) or format_event_title(
                    alert.event_ticker
                )
                sends.append(
                    self._bounded(
                        semaphore,
                        alert,
                        Channel.EMAIL,
                        self._send_email(contact, alert, event_title, article),
                    )
                )
                if sms_enabled and contact is not None and contact.has_phone:
                    sends.append(
                        self._bounded(
                            semaphore,
                            alert,
                            Channel.SMS,
                            self._send_sms(contact, event_title, article),
                        )
                    )

        summary = DispatchSummary(users=len(user_ids))
        for result in await asyncio.gather(*sends):
            summary.record(result)
        return summary

    async def _bounded(
        self,
        semaphore: asyncio.Semaphore,
        alert: UserAlert,
        channel: Channel,
        send: Awaitable[DeliveryResult],
    ) -> DeliveryResult:
        async with semaphore:
            try:
                result = await send
            except Exception as e:
                result = DeliveryResult(
                    success=False,
                    channel=channel,
                    recipient=alert.user_id,
                    error=f"Unexpected sender error: {e}",
                )

        if not result.success:
            logger.error(
                f"Failed to send {channel.value}: user_id={alert.user_id} "
                f"event_ticker={alert.event_ticker} error={result.error}"
            )
        return result

    async def _send_email(
        self,
        contact: Contact | None,
        alert: UserAlert,
        event_title: str,
        article: Article,
    ) -> DeliveryResult:
        if contact is None or not contact.email:
            return DeliveryResult(
                success=False,
                channel=Channel.EMAIL,
                recipient=alert.user_id,
                error="No email address on file",
            )
        return await self.email_client.send_email(
            to=contact.email,
            subject=email_subject(event_title),
            html=email_html(event_title, article),
            text=email_text(event_title, article),
        )

    async def _send_sms(
        self,
        contact: Contact,
        event_title: str,
        article: Article,
    ) -> DeliveryResult:
        body = sms_body(
            event_title,
            article,
            max_length=self.settings.sms.max_length,
            max_event_title_length=self.settings.sms.max_event_title_length,
        )
        logger.debug(f"Sending SMS to {mask_phone(contact.phone_number)}")
        return await self.sms_client.send_sms(contact.phone_number, body)

    async def send_test_notification(
        self,
        event_ticker: str,
        article: Article | None = None,
    ) -> dict[str, Any]:
        """Deliver a synthetic article to an event's active alerts, unsigned.

        Raises:
            NotFoundError: no webhook exists for the event.
        """
        webhook = await self.registry.get_webhook(event_ticker)
        if webhook is None:
            raise NotFoundError(f"No webhook found for event: {event_ticker}")

        alerts = await self.registry.active_alerts_for_events([event_ticker])
        if not alerts:
            return {
                "success": True,
                "message": "No active alerts found for this event",
                "eventTicker": event_ticker,
                "usersNotified": 0,
            }

        event_title = webhook.event_title or format_event_title(event_ticker)
        article = article or Article(
            title=f"Test Alert: {event_ticker}",
            summary="This is a test notification to verify your webhook integration is working correctly.",
            url="https://example.com/test-article",
            source="Webhook Test",
            published_at=datetime.now(timezone.utc),
        )

        summary = await self.fan_out([article], alerts, {event_ticker: event_title})
        logger.info(
            f"Sent test notifications for {event_ticker}: "
            f"emailsSent={summary.emails_sent} emailsFailed={summary.emails_failed}"
        )
        return {
            "success": True,
            "eventTicker": event_ticker,
            "eventTitle": event_title,
            "article": article.model_dump(mode="json"),
            "usersNotified": summary.users,
            "emailsSent": summary.emails_sent,
            "emailsFailed": summary.emails_failed,
            "smsSent": summary.sms_sent,
            "smsFailed": summary.sms_failed,
            "results": [
                {
                    "channel": r.channel.value,
                    "recipient": r.recipient,
                    "success": r.success,
                    "error": r.error,
                }
                for r in summary.results
            ],
        }
