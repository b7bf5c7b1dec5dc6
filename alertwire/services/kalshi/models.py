from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class Event(BaseModel):
    event_ticker: str
    series_ticker: str = ""
    title: str = ""
    sub_title: str = ""
    category: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Event:
        return cls(
            event_ticker=data.get("event_ticker", ""),
            series_ticker=data.get("series_ticker", ""),
            title=data.get("title", ""),
            sub_title=data.get("sub_title", ""),
            category=data.get("category") or None,
        )
