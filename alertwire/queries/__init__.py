from .llm import LLMQueryGenerator, create_query_agent, create_query_generator
from .models import QueryPlan, QueryResult
from .prompts import QUERY_SYSTEM_PROMPT, build_query_prompt
from .rule_based import (
    RuleBasedQueryGenerator,
    build_query_from_terms,
    generate_query,
)

__all__ = [
    "LLMQueryGenerator",
    "RuleBasedQueryGenerator",
    "QueryPlan",
    "QueryResult",
    "QUERY_SYSTEM_PROMPT",
    "build_query_from_terms",
    "build_query_prompt",
    "create_query_agent",
    "create_query_generator",
    "generate_query",
]
