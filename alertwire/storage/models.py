"""Subscription and alert tables."""

from datetime import datetime, timezone
from enum import StrEnum
from uuid import uuid4

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)

from .database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WebhookStatus(StrEnum):
    ACTIVE = "ACTIVE"
    PENDING = "PENDING"
    FAILED = "FAILED"
    UNSUBSCRIBED = "UNSUBSCRIBED"
    EXPIRED = "EXPIRED"


class AlertStatus(StrEnum):
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    EXPIRED = "EXPIRED"


def _status_check(column: str, enum_cls: type[StrEnum], name: str) -> CheckConstraint:
    values = ", ".join(f"'{member.value}'" for member in enum_cls)
    return CheckConstraint(f"{column} IN ({values})", name=name)


class TimestampMixin:
    """Mixin that adds created_at and updated_at fields to models."""

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        comment="When the record was created",
    )

    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        comment="When the record was last updated",
    )


class UUIDMixin:
    """Mixin that adds UUID primary key."""

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
        nullable=False,
        comment="Unique identifier",
    )


class EventWebhook(Base, UUIDMixin, TimestampMixin):
    """One hub subscription per tracked market event, shared by reference."""

    __tablename__ = "event_webhooks"

    event_ticker = Column(String(64), nullable=False, unique=True, index=True)
    event_title = Column(String(255), nullable=True)
    topic = Column(Text, nullable=False, index=True)
    secret = Column(String(64), nullable=False)
    search_query = Column(Text, nullable=False)
    status = Column(String(16), nullable=False, default=WebhookStatus.PENDING.value)
    subscriber_count = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("subscriber_count >= 0", name="non_negative_subscriber_count"),
        _status_check("status", WebhookStatus, "valid_webhook_status"),
    )

    def __repr__(self) -> str:
        return (
            f"<EventWebhook {self.event_ticker} status={self.status} "
            f"subscribers={self.subscriber_count}>"
        )


class UserAlert(Base, UUIDMixin, TimestampMixin):
    """A user's request to be notified about news for one market."""

    __tablename__ = "user_alerts"

    user_id = Column(String(64), nullable=False, index=True)
    market_ticker = Column(String(64), nullable=False)
    event_ticker = Column(
        String(64),
        ForeignKey("event_webhooks.event_ticker"),
        nullable=False,
        index=True,
    )
    status = Column(String(16), nullable=False, default=AlertStatus.ACTIVE.value)

    __table_args__ = (
        UniqueConstraint("user_id", "market_ticker", name="uq_user_market_alert"),
        _status_check("status", AlertStatus, "valid_alert_status"),
    )

    def __repr__(self) -> str:
        return f"<UserAlert {self.user_id} {self.market_ticker} status={self.status}>"


class UserContact(Base, TimestampMixin):
    """Local mirror of the user directory: where to deliver and which tier."""

    __tablename__ = "user_contacts"

    user_id = Column(String(64), primary_key=True)
    email = Column(String(255), nullable=True)
    phone_number = Column(String(32), nullable=True)
    tier = Column(String(16), nullable=False, default="FREE")
