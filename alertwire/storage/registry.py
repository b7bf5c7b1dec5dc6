"""Webhook registry: EventWebhook and UserAlert persistence.

Every change to ``subscriber_count`` happens in the same transaction as the
UserAlert insert or delete it accounts for.
"""

from __future__ import annotations

import logging
from typing import Sequence
from uuid import UUID

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from alertwire.exceptions import DuplicateAlertError, NotFoundError

from .models import AlertStatus, EventWebhook, UserAlert, UserContact, WebhookStatus

logger = logging.getLogger(__name__)


class WebhookConflictError(Exception):
    """Another writer created the EventWebhook for this event first."""

    def __init__(self, event_ticker: str):
        super().__init__(f"EventWebhook already exists for {event_ticker}")
        self.event_ticker = event_ticker


class WebhookRegistry:
    """Async repository over the subscription tables."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    # ------------------------------------------------------------------
    # EventWebhook
    # ------------------------------------------------------------------

    async def get_webhook(self, event_ticker: str) -> EventWebhook | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(EventWebhook).where(EventWebhook.event_ticker == event_ticker)
            )
            return result.scalar_one_or_none()

    async def get_webhooks_by_topic(self, topic: str) -> list[EventWebhook]:
        """All webhooks sharing a topic, oldest first."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(EventWebhook)
                .where(EventWebhook.topic == topic)
                .order_by(EventWebhook.created_at)
            )
            return list(result.scalars().all())

    async def create_webhook(
        self,
        event_ticker: str,
        topic: str,
        secret: str,
        search_query: str,
        status: WebhookStatus,
        event_title: str | None = None,
    ) -> EventWebhook:
        """Insert a webhook with zero subscribers.

        Raises:
            WebhookConflictError: a row for this event ticker already exists.
        """
        webhook = EventWebhook(
            event_ticker=event_ticker,
            event_title=event_title,
            topic=topic,
            secret=secret,
            search_query=search_query,
            status=status.value,
            subscriber_count=0,
        )
        async with self._session_factory() as session:
            session.add(webhook)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise WebhookConflictError(event_ticker) from e

        logger.info(f"Created EventWebhook {event_ticker} ({status.value})")
        return webhook

    async def set_webhook_status(
        self,
        event_ticker: str,
        status: WebhookStatus,
        secret: str | None = None,
    ) -> None:
        values = {"status": status.value}
        if secret is not None:
            values["secret"] = secret
        async with self._session_factory() as session:
            await session.execute(
                update(EventWebhook)
                .where(EventWebhook.event_ticker == event_ticker)
                .values(**values)
            )
            await session.commit()

    async def topic_subscriber_total(self, topic: str) -> int:
        """Summed subscriber count of every webhook sharing a topic."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(func.coalesce(func.sum(EventWebhook.subscriber_count), 0)).where(
                    EventWebhook.topic == topic
                )
            )
            return int(result.scalar_one())

    async def set_topic_status(self, topic: str, status: WebhookStatus) -> None:
        async with self._session_factory() as session:
            await session.execute(
                update(EventWebhook)
                .where(EventWebhook.topic == topic)
                .values(status=status.value)
            )
            await session.commit()

    async def mark_topic_unsubscribed(self, topic: str) -> int:
        """Mark the topic's webhooks UNSUBSCRIBED, skipping any that regained subscribers.

        Returns the number of rows marked.
        """
        async with self._session_factory() as session:
            result = await session.execute(
                update(EventWebhook)
                .where(
                    EventWebhook.topic == topic,
                    EventWebhook.subscriber_count == 0,
                )
                .values(status=WebhookStatus.UNSUBSCRIBED.value)
            )
            await session.commit()
            return result.rowcount

    # ------------------------------------------------------------------
    # UserAlert
    # ------------------------------------------------------------------

    async def get_alert(self, alert_id: UUID) -> UserAlert | None:
        async with self._session_factory() as session:
            return await session.get(UserAlert, alert_id)

    async def find_alert(self, user_id: str, market_ticker: str) -> UserAlert | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(UserAlert).where(
                    UserAlert.user_id == user_id,
                    UserAlert.market_ticker == market_ticker,
                )
            )
            return result.scalar_one_or_none()

    async def count_alerts(self, user_id: str) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                select(func.count()).select_from(UserAlert).where(UserAlert.user_id == user_id)
            )
            return int(result.scalar_one())

    async def list_alerts(self, user_id: str) -> list[tuple[UserAlert, EventWebhook]]:
        """User's alerts with their webhooks, newest first."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(UserAlert, EventWebhook)
                .join(EventWebhook, UserAlert.event_ticker == EventWebhook.event_ticker)
                .where(UserAlert.user_id == user_id)
                .order_by(UserAlert.created_at.desc())
            )
            return [(alert, webhook) for alert, webhook in result.all()]

    async def active_alerts_for_events(
        self, event_tickers: Sequence[str]
    ) -> list[UserAlert]:
        """ACTIVE alerts attached to any of the given events."""
        if not event_tickers:
            return []
        async with self._session_factory() as session:
            result = await session.execute(
                select(UserAlert)
                .where(
                    UserAlert.event_ticker.in_(list(event_tickers)),
                    UserAlert.status == AlertStatus.ACTIVE.value,
                )
                .order_by(UserAlert.created_at)
            )
            return list(result.scalars().all())

    async def add_alert(
        self,
        user_id: str,
        market_ticker: str,
        event_ticker: str,
    ) -> tuple[UserAlert, str]:
        """Create an ACTIVE alert and increment its webhook's count atomically.

        Returns the alert and the webhook status seen by the increment.

        Raises:
            DuplicateAlertError: (user_id, market_ticker) already exists.
            NotFoundError: no webhook for event_ticker.
        """
        alert = UserAlert(
            user_id=user_id,
            market_ticker=market_ticker,
            event_ticker=event_ticker,
            status=AlertStatus.ACTIVE.value,
        )
        async with self._session_factory() as session:
            async with session.begin():
                result = await session.execute(
                    update(EventWebhook)
                    .where(EventWebhook.event_ticker == event_ticker)
                    .values(subscriber_count=EventWebhook.subscriber_count + 1)
                    .returning(EventWebhook.status)
                )
                webhook_status = result.scalar_one_or_none()
                if webhook_status is None:
                    raise NotFoundError(f"No webhook for event {event_ticker}")

                session.add(alert)
                try:
                    await session.flush()
                except IntegrityError as e:
                    raise DuplicateAlertError(
                        "You already have an alert for this market"
                    ) from e

        logger.info(f"Created alert {alert.id} for {user_id} on {market_ticker}")
        return alert, webhook_status

    async def remove_alert(self, alert: UserAlert) -> int:
        """Delete an alert and decrement its webhook's count atomically.

        Returns the post-decrement subscriber count (clamped at 0).
        """
        async with self._session_factory() as session:
            async with session.begin():
                deleted = await session.execute(
                    delete(UserAlert).where(UserAlert.id == alert.id)
                )
                if deleted.rowcount != 1:
                    raise NotFoundError("Alert not found")

                await session.execute(
                    update(EventWebhook)
                    .where(EventWebhook.event_ticker == alert.event_ticker)
                    .values(
                        subscriber_count=case(
                            (EventWebhook.subscriber_count > 0, EventWebhook.subscriber_count - 1),
                            else_=0,
                        )
                    )
                )
                result = await session.execute(
                    select(EventWebhook.subscriber_count).where(
                        EventWebhook.event_ticker == alert.event_ticker
                    )
                )
                remaining = result.scalar_one_or_none() or 0

        logger.info(f"Removed alert {alert.id} ({alert.event_ticker} now has {remaining})")
        return remaining

    async def set_alert_status(self, alert_id: UUID, status: AlertStatus) -> UserAlert:
        async with self._session_factory() as session:
            async with session.begin():
                alert = await session.get(UserAlert, alert_id)
                if alert is None:
                    raise NotFoundError("Alert not found")
                alert.status = status.value
        return alert

    # ------------------------------------------------------------------
    # UserContact
    # ------------------------------------------------------------------

    async def get_contacts(self, user_ids: Sequence[str]) -> dict[str, UserContact]:
        if not user_ids:
            return {}
        async with self._session_factory() as session:
            result = await session.execute(
                select(UserContact).where(UserContact.user_id.in_(list(user_ids)))
            )
            return {contact.user_id: contact for contact in result.scalars().all()}

    async def upsert_contact(
        self,
        user_id: str,
        email: str | None,
        phone_number: str | None = None,
        tier: str | None = None,
    ) -> UserContact:
        async with self._session_factory() as session:
            async with session.begin():
                contact = await session.get(UserContact, user_id)
                if contact is None:
                    contact = UserContact(user_id=user_id, tier=tier or "FREE")
                    session.add(contact)
                contact.email = email
                contact.phone_number = phone_number
                if tier:
                    contact.tier = tier
        return contact
