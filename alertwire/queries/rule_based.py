"""Deterministic query generation from the static entity tables."""

from __future__ import annotations

import logging

from alertwire.markets.entities import (
    CATEGORY_ENTITIES,
    CATEGORY_TERM_COUNT,
    POPULARITY_FILTER,
    QUERY_EXCLUSIONS,
)
from alertwire.markets.tickers import parse_ticker

from .models import QueryResult

logger = logging.getLogger(__name__)

RULE_BASED_CONFIDENCE = 0.5


def quote(term: str) -> str:
    return f'"{term}"'


def or_group(terms: list[str]) -> str:
    """Quote terms, ORing them in parentheses when there is more than one."""
    quoted = [quote(t) for t in terms]
    if len(quoted) == 1:
        return quoted[0]
    return f"({' | '.join(quoted)})"


def finalize_query(search_part: str) -> str:
    """Append the noise exclusions and popularity qualifier."""
    exclusions = " ".join(QUERY_EXCLUSIONS)
    return f"{search_part} {exclusions} {POPULARITY_FILTER}".strip()


def build_query_from_terms(search_terms: list[str]) -> str:
    """Query for a flat list of free-form terms (the LLM path)."""
    return finalize_query(or_group(search_terms) if search_terms else "")


def generate_query(ticker: str) -> QueryResult:
    """Build the rule-based query for a market or event ticker."""
    parsed = parse_ticker(ticker)
    category = parsed.category or "other"
    entity_table = CATEGORY_ENTITIES.get(category, {})
    term_count = CATEGORY_TERM_COUNT.get(category, 1)

    groups: list[str] = []
    search_terms: list[str] = []
    for code in parsed.entities:
        entity = entity_table.get(code)
        if entity is None:
            continue
        terms = list(entity.search_terms[:term_count])
        groups.append(or_group(terms))
        search_terms.extend(terms)

    # Unknown series still get a distinct query of their own
    if not groups:
        groups.append(quote(parsed.event_ticker))
        search_terms.append(parsed.event_ticker)

    return QueryResult(
        query=finalize_query(" ".join(groups)),
        search_terms=search_terms,
        category=category,
        used_llm=False,
        confidence=RULE_BASED_CONFIDENCE,
    )


class RuleBasedQueryGenerator:
    """Entity-table driven generator; ignores the title hint."""

    async def generate(self, ticker: str, title_hint: str | None = None) -> QueryResult:
        return generate_query(ticker)
