"""AI module for Tasker.

Provider-agnostic access to Gemini, OpenAI-compatible and Anthropic models
for task breakdown, model discovery and grounded pricing extraction.
The orchestrating ``AIService`` lives in ``tasker.ai.service``.
"""

from tasker.ai.exceptions import (
    AIError,
    BadUpstreamResponseError,
    MissingCredentialError,
    UnknownProviderError,
    UpstreamError,
)
from tasker.ai.providers import PROVIDERS, AIProvider, AIResponse, get_provider_class

__all__ = [
    # Providers
    "AIProvider",
    "AIResponse",
    "PROVIDERS",
    "get_provider_class",
    # Errors
    "AIError",
    "BadUpstreamResponseError",
    "MissingCredentialError",
    "UnknownProviderError",
    "UpstreamError",
]
