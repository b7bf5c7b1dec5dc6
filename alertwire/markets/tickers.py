"""Kalshi ticker parsing.

Ticker hierarchy:
- Series: KXBTC (market family)
- Event:  KXBTC-25DEC05 (a trackable event, the granularity alerts subscribe at)
- Market: KXBTC-25DEC05-T100000 (one outcome inside the event)
"""

from __future__ import annotations

import re

from pydantic import BaseModel, Field

from alertwire.exceptions import MalformedTickerError

from .entities import CATEGORY_ENTITIES, EVENT_TITLES, SERIES_CATEGORIES

_ENTITY_CODE = re.compile(r"^KX([A-Z]+)")
_EVENT_DATE = re.compile(r"^(\d{2}[A-Z]{3}\d{2})")


class ParsedTicker(BaseModel):
    """Components of a Kalshi market or event ticker."""

    series: str
    event_ticker: str
    event_date: str | None = None
    entities: list[str] = Field(default_factory=list)
    category: str | None = None
    market_ticker: str | None = None


def resolve_category(series: str) -> str | None:
    """Longest-prefix match of a series against the category table."""
    matches = [prefix for prefix in SERIES_CATEGORIES if series.startswith(prefix)]
    if not matches:
        return None
    return SERIES_CATEGORIES[max(matches, key=len)]


def parse_ticker(ticker: str) -> ParsedTicker:
    """Parse a market or event ticker.

    Examples:
        "KXBTC-25DEC05" -> series "KXBTC", category "crypto", entities ["BTC"]
        "KXFED-25JAN-Y" -> event_ticker "KXFED-25JAN", market_ticker "KXFED-25JAN-Y"

    Raises:
        MalformedTickerError: fewer than two non-empty dash-segments.
    """
    raw = (ticker or "").strip()
    parts = raw.split("-")
    if len(parts) < 2 or not parts[0] or not parts[1]:
        raise MalformedTickerError(f"Invalid ticker format: {ticker!r}")

    series, event_part = parts[0], parts[1]
    category = resolve_category(series)
    entities: list[str] = []

    entity_table = CATEGORY_ENTITIES.get(category or "")
    if entity_table is not None:
        event_date: str | None = event_part
        code_match = _ENTITY_CODE.match(series)
        if code_match and code_match.group(1) in entity_table:
            entities.append(code_match.group(1))
    else:
        date_match = _EVENT_DATE.match(event_part)
        event_date = date_match.group(1) if date_match else None

    return ParsedTicker(
        series=series,
        event_ticker=f"{series}-{event_part}",
        event_date=event_date,
        entities=entities,
        category=category,
        market_ticker=raw if len(parts) >= 3 else None,
    )


def extract_event_ticker(market_ticker: str) -> str:
    """Drop the outcome segment: "KXFED-25JAN-Y" -> "KXFED-25JAN"."""
    return parse_ticker(market_ticker).event_ticker


def format_event_title(event_ticker: str) -> str:
    """Human-readable title for an event ticker, falling back to the ticker."""
    series = event_ticker.split("-", 1)[0]
    for keyword, title in EVENT_TITLES:
        if keyword in series:
            return title
    return event_ticker
