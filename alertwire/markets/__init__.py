"""Kalshi ticker parsing and entity tables."""

from .entities import (
    CRYPTO_ASSETS,
    ECONOMIC_EVENTS,
    POPULARITY_FILTER,
    QUERY_EXCLUSIONS,
    SERIES_CATEGORIES,
    EntityInfo,
)
from .tickers import (
    MalformedTickerError,
    ParsedTicker,
    extract_event_ticker,
    format_event_title,
    parse_ticker,
)

__all__ = [
    "CRYPTO_ASSETS",
    "ECONOMIC_EVENTS",
    "POPULARITY_FILTER",
    "QUERY_EXCLUSIONS",
    "SERIES_CATEGORIES",
    "EntityInfo",
    "MalformedTickerError",
    "ParsedTicker",
    "extract_event_ticker",
    "format_event_title",
    "parse_ticker",
]
