"""AI module exceptions.

Custom exceptions for AI-related errors, providing structured error handling
across different failure modes.
"""

from typing import Optional

from tasker.exceptions import InvalidArgumentError, TaskerError

# Upstream error bodies are cut to this many characters
ERROR_BODY_LIMIT = 200


class AIError(TaskerError):
    """Base exception for AI-related errors."""

    def __init__(self, message: str, code: str = "AI_ERROR"):
        super().__init__(message=message, code=code)


class UpstreamError(AIError):
    """Non-success answer from an AI provider or pricing source.

    Keeps the upstream HTTP status and a truncated body so failures can be
    diagnosed without exposing credentials.
    """

    def __init__(
        self,
        provider: str,
        status_code: Optional[int],
        body: str = "",
    ):
        self.provider = provider
        self.status_code = status_code
        self.body = (body or "")[:ERROR_BODY_LIMIT]
        status = status_code if status_code is not None else "unavailable"
        super().__init__(
            message=f"{provider} API error {status}: {self.body}",
            code="AI_UPSTREAM_ERROR",
        )


class BadUpstreamResponseError(AIError):
    """Successful upstream response whose content is not the expected JSON."""

    def __init__(self, message: str = "Could not parse AI response"):
        super().__init__(message=message, code="AI_BAD_RESPONSE")


class UnknownProviderError(InvalidArgumentError):
    """Provider identifier outside the supported set."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(
            message=f"Unknown provider: {provider}",
            code="AI_UNKNOWN_PROVIDER",
        )


class MissingCredentialError(InvalidArgumentError):
    """No API key in the request and none configured for the provider."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(
            message="No API key configured. Add one in Settings.",
            code="AI_NO_CREDENTIAL",
        )
