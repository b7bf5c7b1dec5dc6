"""Superfeedr hub models."""

from enum import StrEnum

from pydantic import BaseModel, Field


class HubMode(StrEnum):
    SUBSCRIBE = "subscribe"
    UNSUBSCRIBE = "unsubscribe"


class HubActor(BaseModel):
    display_name: str | None = Field(default=None, alias="displayName")


class HubItem(BaseModel):
    """One entry pushed by the hub."""

    id: str | int | None = None
    title: str | None = None
    summary: str | None = None
    permalink_url: str | None = Field(default=None, alias="permalinkUrl")
    published: float | None = None
    actor: HubActor | None = None


class HubStatus(BaseModel):
    feed: str | None = None
    code: int | None = None


class HubNotification(BaseModel):
    """JSON body of a hub push notification."""

    status: HubStatus | None = None
    items: list[HubItem] = Field(default_factory=list)

    @property
    def topic(self) -> str | None:
        return self.status.feed if self.status else None
