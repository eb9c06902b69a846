"""Anthropic Claude AI provider implementation."""

import time
from typing import List, Optional

import anthropic
import httpx
from anthropic import AsyncAnthropic

from tasker.ai.exceptions import UpstreamError
from tasker.ai.providers.base import AIProvider, AIResponse


class AnthropicProvider(AIProvider):
    """Anthropic Messages API implementation.

    Authenticates with the ``x-api-key`` header and reads the generated text
    from the first content block of the response.
    """

    name = "anthropic"
    default_base_url = "https://api.anthropic.com"
    default_model = "claude-sonnet-4-20250514"
    api_key_setting = "anthropic_api_key"
    max_tokens = 1024
    temperature = None

    def __init__(
        self,
        api_key: Optional[str],
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: float = 120.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(api_key, base_url, model, timeout, http_client)
        # Failures surface to the caller once; no SDK retries
        self.client = AsyncAnthropic(
            api_key=api_key,
            base_url=self.base_url,
            timeout=timeout,
            max_retries=0,
            http_client=http_client,
        )

    async def generate(self, prompt: str) -> AIResponse:
        """Generate a completion using Claude."""
        start_time = time.perf_counter()

        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIStatusError as e:
            raise UpstreamError(self.name, e.status_code, e.response.text)
        except anthropic.APIError as e:
            raise UpstreamError(self.name, None, str(e))

        latency_ms = int((time.perf_counter() - start_time) * 1000)
        content = getattr(response.content[0], "text", "") if response.content else ""

        return AIResponse(content=content or "", model=self.model, latency_ms=latency_ms)

    async def list_models(self) -> List[str]:
        """List model IDs from the Anthropic models endpoint."""
        try:
            return [model.id async for model in self.client.models.list()]
        except anthropic.APIStatusError as e:
            raise UpstreamError(self.name, e.status_code, e.response.text)
        except anthropic.APIError as e:
            raise UpstreamError(self.name, None, str(e))
