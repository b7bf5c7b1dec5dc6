"""Query generation models."""

from pydantic import BaseModel, ConfigDict, Field


class QueryResult(BaseModel):
    """Provider search query plus the terms and category it was built from."""

    query: str
    search_terms: list[str]
    category: str
    used_llm: bool = False
    confidence: float = 0.5


class QueryPlan(BaseModel):
    """Structured LLM output: what to search for."""

    model_config = ConfigDict(populate_by_name=True)

    search_terms: list[str] = Field(
        alias="searchTerms",
        description="2-4 exact-match search terms, full official names first",
    )
    category: str = Field(description="crypto | economic | politics | other")
    confidence: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="0.5 = unsure, 0.9 = very confident",
    )
