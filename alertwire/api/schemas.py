"""Request and response bodies for the HTTP API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateAlertRequest(CamelModel):
    market_ticker: str = Field(min_length=1)
    event_title: str | None = None


class AlertResponse(CamelModel):
    id: UUID
    market_ticker: str
    event_ticker: str
    status: str
    created_at: datetime
    event_title: str | None = None
    webhook_status: str | None = None
    search_query: str | None = None


class RemoveAlertResponse(CamelModel):
    success: bool = True


class TestArticleRequest(CamelModel):
    title: str | None = None
    summary: str | None = None
    url: str | None = None
    source: str | None = None


class TestDeliveryRequest(CamelModel):
    event_ticker: str | None = None
    article: TestArticleRequest | None = None
