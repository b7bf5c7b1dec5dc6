"""LLM-assisted query generation with a silent rule-based fallback."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any

from pydantic_ai import Agent

from alertwire.config import Settings, get_settings
from alertwire.llm_providers import (
    LLMProvider,
    get_model_string,
    get_provider_for_model,
    resolve_model,
)
from alertwire.markets.tickers import extract_event_ticker

from .models import QueryPlan, QueryResult
from .prompts import QUERY_SYSTEM_PROMPT, build_query_prompt
from .rule_based import RuleBasedQueryGenerator, build_query_from_terms

logger = logging.getLogger(__name__)


def create_query_agent(settings: Settings) -> Agent[None, QueryPlan]:
    """Build the query-planning agent for the configured model."""
    return Agent(
        model=get_model_string(settings.queries.model),
        output_type=QueryPlan,
        system_prompt=QUERY_SYSTEM_PROMPT,
    )


class LLMQueryGenerator:
    """Asks an LLM for search terms and falls back to the rule-based query.

    Missing credentials, timeouts, provider errors, malformed output and empty
    term lists all return exactly what the rule-based generator would.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        agent: Any | None = None,
        fallback: RuleBasedQueryGenerator | None = None,
    ):
        self.settings = settings or get_settings()
        self.fallback = fallback or RuleBasedQueryGenerator()
        self._agent = agent

    def _api_key_available(self) -> bool:
        try:
            provider = get_provider_for_model(resolve_model(self.settings.queries.model))
        except ValueError:
            return False
        if provider == LLMProvider.OPENAI:
            return bool(self.settings.openai_api_key)
        return bool(self.settings.anthropic_api_key)

    def _setup_api_keys(self) -> None:
        if self.settings.openai_api_key:
            os.environ["OPENAI_API_KEY"] = self.settings.openai_api_key
        if self.settings.anthropic_api_key:
            os.environ["ANTHROPIC_API_KEY"] = self.settings.anthropic_api_key

    def get_agent(self) -> Any | None:
        """Get or create the agent; None when no credentials are configured."""
        if self._agent is None:
            if not self._api_key_available():
                return None
            self._setup_api_keys()
            self._agent = create_query_agent(self.settings)
        return self._agent

    async def generate(self, ticker: str, title_hint: str | None = None) -> QueryResult:
        fallback = await self.fallback.generate(ticker, title_hint)
        event_ticker = extract_event_ticker(ticker)

        agent = self.get_agent()
        if agent is None:
            logger.debug("No LLM credentials configured, using rule-based query")
            return fallback

        config = self.settings.queries
        try:
            result = await asyncio.wait_for(
                agent.run(
                    build_query_prompt(event_ticker, title_hint),
                    model_settings={
                        "temperature": config.temperature,
                        "max_tokens": config.max_tokens,
                    },
                ),
                timeout=config.timeout_seconds,
            )
            plan = result.output
            terms = [t.strip() for t in plan.search_terms if t and t.strip()]
            if not terms:
                raise ValueError("LLM returned no search terms")
        except Exception as e:
            logger.warning(f"LLM query generation failed for {event_ticker}, falling back: {e}")
            return fallback

        logger.info(
            f"LLM query for {event_ticker}: {terms} "
            f"(category={plan.category}, confidence={plan.confidence:.2f})"
        )
        return QueryResult(
            query=build_query_from_terms(terms),
            search_terms=terms,
            category=plan.category or fallback.category,
            used_llm=True,
            confidence=plan.confidence,
        )


def create_query_generator(
    settings: Settings | None = None,
) -> LLMQueryGenerator | RuleBasedQueryGenerator:
    """Pick the generator variant the settings ask for."""
    settings = settings or get_settings()
    if settings.queries.use_llm:
        return LLMQueryGenerator(settings)
    return RuleBasedQueryGenerator()
