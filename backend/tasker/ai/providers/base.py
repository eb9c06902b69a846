"""Abstract base class for AI providers.

This module defines the interface that all AI providers must implement,
enabling provider-agnostic AI interactions throughout the application.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import ClassVar, List, Optional

import httpx


@dataclass
class AIResponse:
    """Response from an AI provider.

    Attributes:
        content: The generated text content
        model: The model identifier used for generation
        latency_ms: Time taken for the request in milliseconds
    """
    content: str
    model: str
    latency_ms: Optional[int] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class AIProvider(ABC):
    """Abstract base class for AI providers.

    Each provider variant binds a credential plus optional base URL and model
    overrides at construction, then exposes one text-in/text-out call and a
    model listing. Variants differ in wire format, auth scheme, default
    endpoint and default model; callers never see those differences.

    Example:
        ```python
        provider = GeminiProvider(api_key="...", model="gemini-2.0-flash")
        response = await provider.generate("Break this task down...")
        print(response.content)
        ```
    """

    #: Identifier used in requests, config rows and logs
    name: ClassVar[str]
    default_base_url: ClassVar[str]
    default_model: ClassVar[str]
    #: Settings attribute holding the process-wide fallback key
    api_key_setting: ClassVar[str]
    #: Whether a call may proceed without any credential
    requires_api_key: ClassVar[bool] = True
    max_tokens: ClassVar[int] = 4096
    temperature: ClassVar[Optional[float]] = 0.7

    def __init__(
        self,
        api_key: Optional[str],
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: float = 120.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the provider.

        Args:
            api_key: Credential for the upstream API (may be None where allowed)
            base_url: Override for the upstream base URL
            model: Override for the model identifier
            timeout: Request timeout in seconds
            http_client: Optional pre-built HTTP client for the SDK
        """
        self.api_key = api_key
        self.base_url = base_url or self.default_base_url
        self.model = model or self.default_model
        self.timeout = timeout
        self.http_client = http_client

    @abstractmethod
    async def generate(self, prompt: str) -> AIResponse:
        """Generate free text for a single user prompt.

        Raises:
            UpstreamError: If the provider request does not succeed
        """
        pass

    @abstractmethod
    async def list_models(self) -> List[str]:
        """Return the raw model identifiers the upstream advertises.

        Raises:
            UpstreamError: If the provider request does not succeed
        """
        pass
