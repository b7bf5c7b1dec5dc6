"""Static lookup tables mapping Kalshi series codes to news search entities.

Only crypto and economic series are tracked. Every table is immutable and
built at import time.
"""

from types import MappingProxyType
from typing import Mapping, NamedTuple


class EntityInfo(NamedTuple):
    """Display name plus search terms, most specific term first."""

    name: str
    search_terms: tuple[str, ...]


CRYPTO_ASSETS: Mapping[str, EntityInfo] = MappingProxyType(
    {
        "BTC": EntityInfo("Bitcoin", ("bitcoin", "btc")),
        "ETH": EntityInfo("Ethereum", ("ethereum", "eth", "ether")),
        "SOL": EntityInfo("Solana", ("solana", "sol")),
        "XRP": EntityInfo("Ripple", ("ripple", "xrp")),
        "DOGE": EntityInfo("Dogecoin", ("dogecoin", "doge")),
        "ADA": EntityInfo("Cardano", ("cardano", "ada")),
    }
)

ECONOMIC_EVENTS: Mapping[str, EntityInfo] = MappingProxyType(
    {
        "FED": EntityInfo(
            "Federal Reserve",
            ("federal reserve", "fed rate", "interest rate", "fomc"),
        ),
        "CPI": EntityInfo("Consumer Price Index", ("cpi", "inflation", "consumer price")),
        "GDP": EntityInfo(
            "Gross Domestic Product",
            ("gdp", "economic growth", "gross domestic product"),
        ),
    }
)

# Series prefix -> category; resolved by longest matching prefix
SERIES_CATEGORIES: Mapping[str, str] = MappingProxyType(
    {
        "KXBTC": "crypto",
        "KXETH": "crypto",
        "KXFED": "economic",
        "KXCPI": "economic",
        "KXGDP": "economic",
    }
)

CATEGORY_ENTITIES: Mapping[str, Mapping[str, EntityInfo]] = MappingProxyType(
    {
        "crypto": CRYPTO_ASSETS,
        "economic": ECONOMIC_EVENTS,
    }
)

# How many of an entity's search terms go into the query; more than one is ORed
CATEGORY_TERM_COUNT: Mapping[str, int] = MappingProxyType(
    {
        "crypto": 1,
        "economic": 2,
    }
)

QUERY_EXCLUSIONS: tuple[str, ...] = (
    "-fantasy",
    "-mock",
    "-draft",
    '-"all time"',
    "-history",
    "-reddit",
    "-rumor",
)

POPULARITY_FILTER = "popularity:medium"

# Ticker keyword -> hint appended to LLM prompts
TICKER_CONTEXT: Mapping[str, str] = MappingProxyType(
    {
        "BTC": "This is about Bitcoin price.",
        "ETH": "This is about Ethereum price.",
        "FED": "This is about Federal Reserve policy.",
        "CPI": "This is about inflation/CPI data.",
        "GDP": "This is about GDP economic data.",
    }
)

# Series keyword -> human-readable event title
EVENT_TITLES: tuple[tuple[str, str], ...] = (
    ("BTC", "Bitcoin Price"),
    ("ETH", "Ethereum Price"),
    ("SOL", "Solana Price"),
    ("FED", "Federal Reserve"),
    ("CPI", "CPI / Inflation"),
    ("GDP", "GDP Report"),
)
