"""AI Provider implementations."""

from tasker.ai.exceptions import UnknownProviderError
from tasker.ai.providers.anthropic import AnthropicProvider
from tasker.ai.providers.base import AIProvider, AIResponse
from tasker.ai.providers.gemini import GeminiProvider
from tasker.ai.providers.openai import OpenAIProvider

# Closed set of provider variants, keyed by request/config identifier
PROVIDERS: dict[str, type[AIProvider]] = {
    GeminiProvider.name: GeminiProvider,
    OpenAIProvider.name: OpenAIProvider,
    AnthropicProvider.name: AnthropicProvider,
}


def get_provider_class(provider_name: str) -> type[AIProvider]:
    """Look up a provider variant by name.

    Raises:
        UnknownProviderError: If the name is not a supported provider
    """
    try:
        return PROVIDERS[provider_name]
    except KeyError:
        raise UnknownProviderError(provider_name) from None


__all__ = [
    "AIProvider",
    "AIResponse",
    "AnthropicProvider",
    "GeminiProvider",
    "OpenAIProvider",
    "PROVIDERS",
    "get_provider_class",
]
