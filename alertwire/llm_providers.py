"""LLM provider and model enums for query generation.

Model names in config may be given as plain strings; known names resolve to
the enum so the provider prefix is chosen consistently.
"""

from enum import StrEnum


class LLMProvider(StrEnum):
    """Supported LLM providers."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"


class OpenAIModel(StrEnum):
    """OpenAI models available via API."""

    GPT_4O_MINI = "gpt-4o-mini"
    GPT_4_1_MINI = "gpt-4.1-mini"
    GPT_5_MINI = "gpt-5-mini"
    GPT_5_NANO = "gpt-5-nano"


class AnthropicModel(StrEnum):
    """Anthropic Claude models available via API."""

    CLAUDE_HAIKU_4_5 = "claude-haiku-4-5"
    CLAUDE_SONNET_4_5 = "claude-sonnet-4-5"


def resolve_model(name: str) -> OpenAIModel | AnthropicModel:
    """Map a configured model name onto a known model enum."""
    for enum_cls in (OpenAIModel, AnthropicModel):
        try:
            return enum_cls(name)
        except ValueError:
            continue
    raise ValueError(f"Unknown model: {name}")


def get_model_string(model: OpenAIModel | AnthropicModel | str) -> str:
    """Get the pydantic-ai model string for any supported model.

    Query generation is a single structured completion, so OpenAI models use
    the chat completions API.
    """
    if not isinstance(model, (OpenAIModel, AnthropicModel)):
        model = resolve_model(model)
    if isinstance(model, OpenAIModel):
        return f"openai:{model.value}"
    return f"anthropic:{model.value}"


def get_provider_for_model(model: OpenAIModel | AnthropicModel) -> LLMProvider:
    """Determine the provider for a given model."""
    if isinstance(model, OpenAIModel):
        return LLMProvider.OPENAI
    elif isinstance(model, AnthropicModel):
        return LLMProvider.ANTHROPIC
    else:
        raise ValueError(f"Unknown model type: {type(model)}")
