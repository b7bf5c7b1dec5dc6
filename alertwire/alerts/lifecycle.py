"""Alert lifecycle: add, remove and toggle alerts over shared hub subscriptions.

EventWebhook state machine:
    (none) --subscribe ok--> ACTIVE
    (none) --hub 401-------> PENDING
    (none) --other failure-> nothing persisted, SubscriptionUnavailableError
    ACTIVE --last alert removed, unsubscribe ok----> UNSUBSCRIBED
    ACTIVE --last alert removed, unsubscribe failed-> ACTIVE with count 0
    ACTIVE --alert added while unsubscribing-------> re-subscribed, or FAILED
    UNSUBSCRIBED, EXPIRED, FAILED --alert added--> re-subscribed with the stored topic and secret
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from pydantic import BaseModel

from alertwire.config import Settings, get_settings
from alertwire.exceptions import (
    AlertQuotaExceededError,
    CategoryUnsupportedError,
    DuplicateAlertError,
    ForbiddenError,
    NotFoundError,
    SubscriptionUnavailableError,
)
from alertwire.markets.tickers import parse_ticker
from alertwire.queries.models import QueryResult
from alertwire.services.superfeedr import (
    SubscriptionError,
    SubscriptionTimeoutError,
    SuperfeedrClient,
    generate_secret,
)
from alertwire.storage.models import AlertStatus, EventWebhook, UserAlert, WebhookStatus
from alertwire.storage.registry import WebhookConflictError, WebhookRegistry

from .directory import UNLIMITED, UserDirectory

logger = logging.getLogger(__name__)

RETRY_MESSAGE = "Failed to create alert. Please try again."
DORMANT_STATUSES = (
    WebhookStatus.UNSUBSCRIBED.value,
    WebhookStatus.EXPIRED.value,
    WebhookStatus.FAILED.value,
)


class QueryGenerator(Protocol):
    async def generate(self, ticker: str, title_hint: str | None = None) -> QueryResult: ...


class MarketLookup(Protocol):
    async def get_event_category(self, event_ticker: str) -> str | None: ...


class AlertView(BaseModel):
    """An alert joined with the state of its shared subscription."""

    id: UUID
    user_id: str
    market_ticker: str
    event_ticker: str
    status: str
    created_at: datetime
    event_title: str | None = None
    webhook_status: str
    search_query: str


class AlertLifecycleManager:
    """Owns every transition of UserAlert rows and their EventWebhook."""

    def __init__(
        self,
        registry: WebhookRegistry,
        hub: SuperfeedrClient,
        query_generator: QueryGenerator,
        directory: UserDirectory,
        market_lookup: MarketLookup | None = None,
        settings: Settings | None = None,
    ):
        self.registry = registry
        self.hub = hub
        self.query_generator = query_generator
        self.directory = directory
        self.market_lookup = market_lookup
        self.settings = settings or get_settings()

    async def add_alert(
        self,
        user_id: str,
        market_ticker: str,
        event_title: str | None = None,
    ) -> UserAlert:
        """Create an alert, subscribing the event's topic on first interest.

        Raises:
            MalformedTickerError, CategoryUnsupportedError, DuplicateAlertError,
            AlertQuotaExceededError, SubscriptionUnavailableError
        """
        parsed = parse_ticker(market_ticker)
        market_ticker = market_ticker.strip()
        event_ticker = parsed.event_ticker

        await self._check_category(event_ticker)

        if await self.registry.find_alert(user_id, market_ticker) is not None:
            raise DuplicateAlertError("You already have an alert for this market")

        await self._check_quota(user_id)
        await self._ensure_webhook(event_ticker, event_title)

        alert, webhook_status = await self.registry.add_alert(
            user_id, market_ticker, event_ticker
        )
        if webhook_status in DORMANT_STATUSES:
            # Topic was released between the webhook check and the increment
            webhook = await self.registry.get_webhook(event_ticker)
            try:
                await self._reactivate(webhook)
            except SubscriptionUnavailableError:
                await self.registry.remove_alert(alert)
                raise
        return alert

    async def remove_alert(self, user_id: str, alert_id: UUID | str) -> None:
        """Delete an alert; unsubscribe the topic once nobody references it."""
        alert = await self._owned_alert(user_id, alert_id, "delete")
        remaining = await self.registry.remove_alert(alert)

        if remaining <= 0:
            webhook = await self.registry.get_webhook(alert.event_ticker)
            if webhook is not None and webhook.status not in DORMANT_STATUSES:
                await self._release_topic(webhook)

        logger.info(f"Removed alert {alert.id} for {user_id} ({alert.event_ticker})")

    async def toggle_alert(self, user_id: str, alert_id: UUID | str) -> UserAlert:
        """Flip ACTIVE and PAUSED. The subscriber count is untouched."""
        alert = await self._owned_alert(user_id, alert_id, "modify")
        new_status = (
            AlertStatus.PAUSED
            if alert.status == AlertStatus.ACTIVE.value
            else AlertStatus.ACTIVE
        )
        updated = await self.registry.set_alert_status(alert.id, new_status)
        logger.info(f"Alert {alert.id} is now {new_status.value}")
        return updated

    async def list_alerts(self, user_id: str) -> list[AlertView]:
        rows = await self.registry.list_alerts(user_id)
        return [
            AlertView(
                id=alert.id,
                user_id=alert.user_id,
                market_ticker=alert.market_ticker,
                event_ticker=alert.event_ticker,
                status=alert.status,
                created_at=alert.created_at,
                event_title=webhook.event_title,
                webhook_status=webhook.status,
                search_query=webhook.search_query,
            )
            for alert, webhook in rows
        ]

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    async def _check_category(self, event_ticker: str) -> None:
        if self.market_lookup is None:
            return

        try:
            category = await self.market_lookup.get_event_category(event_ticker)
        except Exception as e:
            logger.warning(f"Could not verify category for {event_ticker}: {e}")
            return

        blocked = {c.lower() for c in self.settings.alerts.blocked_categories}
        if category and category.lower() in blocked:
            raise CategoryUnsupportedError(
                f"{category} events are not currently supported. "
                f"We focus on crypto and economic markets."
            )

    async def _check_quota(self, user_id: str) -> None:
        limit = await self.directory.get_alert_limit(user_id)
        if limit == UNLIMITED:
            return
        count = await self.registry.count_alerts(user_id)
        if count >= limit:
            tier = await self.directory.get_tier(user_id)
            raise AlertQuotaExceededError(
                f"Your {tier} plan allows {limit} alert(s). Upgrade to add more."
            )

    async def _owned_alert(self, user_id: str, alert_id: UUID | str, action: str) -> UserAlert:
        try:
            alert_uuid = alert_id if isinstance(alert_id, UUID) else UUID(str(alert_id))
        except ValueError:
            raise NotFoundError("Alert not found")

        alert = await self.registry.get_alert(alert_uuid)
        if alert is None:
            raise NotFoundError("Alert not found")
        if alert.user_id != user_id:
            raise ForbiddenError(f"You can only {action} your own alerts")
        return alert

    # ------------------------------------------------------------------
    # Hub subscription
    # ------------------------------------------------------------------

    async def _subscribe(self, topic: str, secret: str, event_ticker: str) -> WebhookStatus:
        """Subscribe and map the outcome onto a webhook status.

        Raises:
            SubscriptionUnavailableError: any failure other than hub 401.
        """
        try:
            await self.hub.subscribe(topic, secret)
        except SubscriptionError as e:
            if e.is_unauthenticated:
                logger.warning(
                    f"Hub credentials not configured, {event_ticker} stays PENDING"
                )
                return WebhookStatus.PENDING
            logger.error(f"Failed to subscribe {event_ticker}: {e} {e.body}")
            raise SubscriptionUnavailableError(RETRY_MESSAGE) from e
        except SubscriptionTimeoutError as e:
            logger.error(f"Hub timeout subscribing {event_ticker}: {e}")
            raise SubscriptionUnavailableError(RETRY_MESSAGE) from e
        return WebhookStatus.ACTIVE

    async def _live_webhook_for_topic(
        self, topic: str, exclude: str | None = None
    ) -> EventWebhook | None:
        for webhook in await self.registry.get_webhooks_by_topic(topic):
            if webhook.event_ticker != exclude and webhook.status not in DORMANT_STATUSES:
                return webhook
        return None

    async def _ensure_webhook(self, event_ticker: str, event_title: str | None) -> EventWebhook:
        webhook = await self.registry.get_webhook(event_ticker)
        if webhook is not None:
            if webhook.status in DORMANT_STATUSES:
                await self._reactivate(webhook)
            return webhook

        result = await self.query_generator.generate(event_ticker, event_title)
        topic = self.hub.topic_for(result.query)

        shared = await self._live_webhook_for_topic(topic)
        if shared is not None:
            # Same topic means same hub subscription; only one secret can be live
            secret = shared.secret
            status = WebhookStatus(shared.status)
            subscribed_here = False
            logger.info(f"{event_ticker} shares topic with {shared.event_ticker}")
        else:
            secret = generate_secret()
            status = await self._subscribe(topic, secret, event_ticker)
            subscribed_here = True

        try:
            return await self.registry.create_webhook(
                event_ticker=event_ticker,
                topic=topic,
                secret=secret,
                search_query=result.query,
                status=status,
                event_title=event_title,
            )
        except WebhookConflictError:
            existing = await self.registry.get_webhook(event_ticker)
            if existing is None:
                raise SubscriptionUnavailableError(RETRY_MESSAGE)
            logger.info(f"EventWebhook for {event_ticker} created concurrently, reusing it")
            if subscribed_here:
                await self._settle_lost_race(topic, existing)
            return existing

    async def _settle_lost_race(self, our_topic: str, winner: EventWebhook) -> None:
        """Leave the hub pointing at the winner's topic and secret."""
        if winner.topic != our_topic:
            if not await self.registry.get_webhooks_by_topic(our_topic):
                await self.hub.unsubscribe(our_topic)
            return

        try:
            await self.hub.subscribe(winner.topic, winner.secret)
        except (SubscriptionError, SubscriptionTimeoutError) as e:
            logger.error(
                f"Could not restore secret for {winner.event_ticker} after race: {e}"
            )

    async def _reactivate(self, webhook: EventWebhook) -> None:
        shared = await self._live_webhook_for_topic(webhook.topic, exclude=webhook.event_ticker)
        if shared is not None:
            status = WebhookStatus(shared.status)
            await self.registry.set_webhook_status(
                webhook.event_ticker, status, secret=shared.secret
            )
            webhook.secret = shared.secret
        else:
            status = await self._subscribe(webhook.topic, webhook.secret, webhook.event_ticker)
            await self.registry.set_webhook_status(webhook.event_ticker, status)
        webhook.status = status.value
        logger.info(f"Reactivated {webhook.event_ticker} as {status.value}")

    async def _release_topic(self, webhook: EventWebhook) -> None:
        """Best-effort unsubscribe once no event on the topic has subscribers."""
        if await self.registry.topic_subscriber_total(webhook.topic) > 0:
            logger.info(f"Topic for {webhook.event_ticker} still shared, keeping subscription")
            return

        if not await self.hub.unsubscribe(webhook.topic):
            logger.error(
                f"Failed to unsubscribe {webhook.event_ticker}; "
                f"status stays {webhook.status} with no subscribers"
            )
            return

        await self.registry.mark_topic_unsubscribed(webhook.topic)
        if await self.registry.topic_subscriber_total(webhook.topic) == 0:
            logger.info(f"Unsubscribed {webhook.event_ticker}")
            return

        # An alert was added while the hub call was in flight
        logger.warning(f"{webhook.event_ticker} regained subscribers, re-subscribing")
        try:
            status = await self._subscribe(webhook.topic, webhook.secret, webhook.event_ticker)
        except SubscriptionUnavailableError:
            logger.error(
                f"Could not re-subscribe {webhook.event_ticker}; marked FAILED "
                f"until the next alert is added"
            )
            status = WebhookStatus.FAILED
        await self.registry.set_topic_status(webhook.topic, status)


def create_lifecycle_manager(
    registry: WebhookRegistry,
    hub: SuperfeedrClient,
    query_generator: QueryGenerator,
    settings: Settings,
    market_lookup: Any | None = None,
) -> AlertLifecycleManager:
    return AlertLifecycleManager(
        registry=registry,
        hub=hub,
        query_generator=query_generator,
        directory=UserDirectory(registry, settings.alerts),
        market_lookup=market_lookup,
        settings=settings,
    )
