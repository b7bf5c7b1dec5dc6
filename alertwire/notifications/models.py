"""Notification models."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from alertwire.services.delivery import Channel, DeliveryResult
from alertwire.services.superfeedr.models import HubItem

DEFAULT_ARTICLE_TITLE = "News Update"
DEFAULT_ARTICLE_URL = "#"


class Article(BaseModel):
    """One news item as delivered to users."""

    title: str
    url: str
    summary: str | None = None
    source: str | None = None
    published_at: datetime | None = None

    @classmethod
    def from_hub_item(cls, item: HubItem) -> Article:
        published_at = None
        if item.published:
            published_at = datetime.fromtimestamp(item.published, tz=timezone.utc)
        return cls(
            title=item.title or DEFAULT_ARTICLE_TITLE,
            url=item.permalink_url or DEFAULT_ARTICLE_URL,
            summary=item.summary or None,
            source=item.actor.display_name if item.actor else None,
            published_at=published_at,
        )


class DispatchSummary(BaseModel):
    """Counts reported back to the hub after a fan-out."""

    items: int = 0
    users: int = 0
    emails_sent: int = 0
    emails_failed: int = 0
    sms_sent: int = 0
    sms_failed: int = 0
    results: list[DeliveryResult] = Field(default_factory=list)

    def record(self, result: DeliveryResult) -> None:
        self.results.append(result)
        if result.channel == Channel.EMAIL:
            if result.success:
                self.emails_sent += 1
            else:
                self.emails_failed += 1
        elif result.success:
            self.sms_sent += 1
        else:
            self.sms_failed += 1

    def to_response(self) -> dict:
        return {
            "received": True,
            "items": self.items,
            "users": self.users,
            "emailsSent": self.emails_sent,
            "emailsFailed": self.emails_failed,
            "smsSent": self.sms_sent,
            "smsFailed": self.sms_failed,
        }
