"""Tests for rule-based and LLM-assisted query generation."""

import asyncio
from types import SimpleNamespace

from alertwire.markets import POPULARITY_FILTER, QUERY_EXCLUSIONS
from alertwire.queries import (
    LLMQueryGenerator,
    QueryPlan,
    RuleBasedQueryGenerator,
    build_query_from_terms,
    build_query_prompt,
    create_query_generator,
    generate_query,
)

EXCLUSIONS = " ".join(QUERY_EXCLUSIONS)


class FakeAgent:
    """Stands in for a pydantic-ai Agent: returns a canned plan or raises."""

    def __init__(self, output=None, error: Exception | None = None, delay: float = 0.0):
        self.output = output
        self.error = error
        self.delay = delay
        self.prompts: list[str] = []

    async def run(self, prompt: str, **kwargs):
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(output=self.output)


def _llm_settings(settings, **query_overrides):
    settings.openai_api_key = "sk-test"
    for key, value in query_overrides.items():
        setattr(settings.queries, key, value)
    return settings


def test_bitcoin_query_contains_quoted_term_and_filters() -> None:
    result = generate_query("KXBTC-25DEC05")

    assert result.query == f'"bitcoin" {EXCLUSIONS} {POPULARITY_FILTER}'
    assert result.search_terms == ["bitcoin"]
    assert result.category == "crypto"
    assert result.used_llm is False
    assert result.confidence == 0.5


def test_economic_query_ors_first_two_terms() -> None:
    result = generate_query("KXFED-25JAN")

    assert result.query.startswith('("federal reserve" | "fed rate") ')
    assert result.query.endswith(POPULARITY_FILTER)
    assert result.category == "economic"


def test_market_and_event_ticker_yield_same_query() -> None:
    assert generate_query("KXFED-25JAN-Y") == generate_query("KXFED-25JAN")


def test_unknown_event_falls_back_to_quoted_ticker() -> None:
    result = generate_query("KXCABOUT-29")

    assert result.query.startswith('"KXCABOUT-29" -fantasy')
    assert result.search_terms == ["KXCABOUT-29"]
    assert result.category == "other"


def test_rule_based_generation_is_deterministic() -> None:
    generator = RuleBasedQueryGenerator()

    first = asyncio.run(generator.generate("KXETH-25DEC05", "Ethereum above 4k?"))
    second = asyncio.run(generator.generate("KXETH-25DEC05", "Ethereum above 4k?"))

    assert first.query == second.query
    assert first.model_dump() == second.model_dump()


def test_build_query_from_terms() -> None:
    assert build_query_from_terms(["Bitcoin"]) == f'"Bitcoin" {EXCLUSIONS} {POPULARITY_FILTER}'
    assert build_query_from_terms(["Bitcoin", "BTC price"]).startswith('("Bitcoin" | "BTC price") ')


def test_prompt_includes_title_and_context_hint() -> None:
    prompt = build_query_prompt("KXBTC-25DEC05", "Bitcoin price on Dec 5")

    assert prompt == (
        "Event Ticker: KXBTC-25DEC05\n"
        "Event Title: Bitcoin price on Dec 5\n"
        "Context: This is about Bitcoin price."
    )
    assert build_query_prompt("KXCABOUT-29") == "Event Ticker: KXCABOUT-29"


def test_llm_terms_are_wrapped_in_the_query_template(settings) -> None:
    plan = QueryPlan(search_terms=["Federal Reserve", "FOMC"], category="economic", confidence=0.85)
    agent = FakeAgent(output=plan)
    generator = LLMQueryGenerator(_llm_settings(settings), agent=agent)

    result = asyncio.run(generator.generate("KXFED-25JAN-Y", "Fed decision in January"))

    assert result.used_llm is True
    assert result.search_terms == ["Federal Reserve", "FOMC"]
    assert result.category == "economic"
    assert result.confidence == 0.85
    assert result.query == build_query_from_terms(["Federal Reserve", "FOMC"])
    assert agent.prompts[0].startswith("Event Ticker: KXFED-25JAN\n")


def test_plan_accepts_camel_case_json() -> None:
    plan = QueryPlan.model_validate_json(
        '{"searchTerms": ["Bitcoin", "BTC price"], "category": "crypto"}'
    )

    assert plan.search_terms == ["Bitcoin", "BTC price"]
    assert plan.confidence == 0.7


def test_llm_error_falls_back_to_rule_based(settings) -> None:
    agent = FakeAgent(error=RuntimeError("connection reset"))
    generator = LLMQueryGenerator(_llm_settings(settings), agent=agent)

    result = asyncio.run(generator.generate("KXBTC-25DEC05"))

    assert result == generate_query("KXBTC-25DEC05")


def test_llm_malformed_output_falls_back(settings) -> None:
    agent = FakeAgent(output={"terms": "not a plan"})
    generator = LLMQueryGenerator(_llm_settings(settings), agent=agent)

    assert asyncio.run(generator.generate("KXFED-25JAN")) == generate_query("KXFED-25JAN")


def test_llm_empty_terms_fall_back(settings) -> None:
    agent = FakeAgent(output=QueryPlan(search_terms=["  ", ""], category="other"))
    generator = LLMQueryGenerator(_llm_settings(settings), agent=agent)

    assert asyncio.run(generator.generate("KXBTC-25DEC05")) == generate_query("KXBTC-25DEC05")


def test_llm_timeout_falls_back(settings) -> None:
    plan = QueryPlan(search_terms=["Bitcoin"], category="crypto")
    agent = FakeAgent(output=plan, delay=1.0)
    generator = LLMQueryGenerator(_llm_settings(settings, timeout_seconds=0.01), agent=agent)

    assert asyncio.run(generator.generate("KXBTC-25DEC05")) == generate_query("KXBTC-25DEC05")


def test_missing_api_key_uses_rule_based_without_calling_model(settings) -> None:
    generator = LLMQueryGenerator(settings)

    result = asyncio.run(generator.generate("KXBTC-25DEC05"))

    assert generator.get_agent() is None
    assert result == generate_query("KXBTC-25DEC05")


def test_factory_respects_use_llm(settings) -> None:
    settings.queries.use_llm = False
    assert isinstance(create_query_generator(settings), RuleBasedQueryGenerator)

    settings.queries.use_llm = True
    assert isinstance(create_query_generator(settings), LLMQueryGenerator)
