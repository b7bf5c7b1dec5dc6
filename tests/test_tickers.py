"""Tests for Kalshi ticker parsing."""

import pytest

from alertwire.exceptions import AlertError
from alertwire.markets import (
    MalformedTickerError,
    extract_event_ticker,
    format_event_title,
    parse_ticker,
)


def test_crypto_event_ticker() -> None:
    parsed = parse_ticker("KXBTC-25DEC05")

    assert parsed.series == "KXBTC"
    assert parsed.event_ticker == "KXBTC-25DEC05"
    assert parsed.category == "crypto"
    assert parsed.entities == ["BTC"]
    assert parsed.event_date == "25DEC05"
    assert parsed.market_ticker is None


def test_market_ticker_drops_outcome_segment() -> None:
    parsed = parse_ticker("KXFED-25JAN-Y")

    assert parsed.event_ticker == "KXFED-25JAN"
    assert parsed.market_ticker == "KXFED-25JAN-Y"
    assert parsed.category == "economic"
    assert parsed.entities == ["FED"]
    assert extract_event_ticker("KXFED-25JAN-Y") == "KXFED-25JAN"


def test_deep_market_ticker_keeps_first_two_segments() -> None:
    assert extract_event_ticker("KXBTC-25DEC05-T100000-B") == "KXBTC-25DEC05"


def test_unknown_series_has_no_category_or_entities() -> None:
    parsed = parse_ticker("KXNFLGAME-25DEC07DALDET")

    assert parsed.category is None
    assert parsed.entities == []
    assert parsed.event_date == "25DEC07"


def test_unknown_series_without_date_prefix() -> None:
    parsed = parse_ticker("KXCABOUT-29")

    assert parsed.category is None
    assert parsed.event_date is None


def test_surrounding_whitespace_is_ignored() -> None:
    assert parse_ticker("  KXETH-25DEC05  ").event_ticker == "KXETH-25DEC05"


@pytest.mark.parametrize("ticker", ["KXBTC", "", "-25DEC05", "KXBTC-", "   "])
def test_malformed_tickers_raise(ticker: str) -> None:
    with pytest.raises(MalformedTickerError) as exc_info:
        parse_ticker(ticker)

    assert isinstance(exc_info.value, AlertError)
    assert exc_info.value.code == "malformed_ticker"
    assert exc_info.value.status_code == 400


def test_format_event_title() -> None:
    assert format_event_title("KXBTC-25DEC05") == "Bitcoin Price"
    assert format_event_title("KXFED-25JAN") == "Federal Reserve"
    assert format_event_title("KXCABOUT-29") == "KXCABOUT-29"
