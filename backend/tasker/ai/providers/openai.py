"""OpenAI-compatible chat completions provider implementation."""

import time
from typing import List, Optional

import httpx
import openai
from openai import AsyncOpenAI

from tasker.ai.exceptions import UpstreamError
from tasker.ai.providers.base import AIProvider, AIResponse


class OpenAIProvider(AIProvider):
    """OpenAI chat completions implementation.

    Works against api.openai.com or any server speaking the same protocol
    through ``base_url``. This is the one variant allowed to run without a
    key: an empty key sends no ``Authorization`` header at all.
    """

    name = "openai"
    default_base_url = "https://api.openai.com/v1"
    default_model = "gpt-4o-mini"
    api_key_setting = "openai_api_key"
    # Keyless calls stay allowed for self-hosted compatible servers
    requires_api_key = False

    def __init__(
        self,
        api_key: Optional[str],
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: float = 120.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(api_key, base_url, model, timeout, http_client)
        self.client = AsyncOpenAI(
            api_key=api_key or "",
            base_url=self.base_url,
            timeout=timeout,
            max_retries=0,
            http_client=http_client,
        )

    async def generate(self, prompt: str) -> AIResponse:
        """Generate a completion using the chat completions endpoint."""
        start_time = time.perf_counter()

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except openai.APIStatusError as e:
            raise UpstreamError(self.name, e.status_code, e.response.text)
        except openai.APIError as e:
            raise UpstreamError(self.name, None, str(e))

        latency_ms = int((time.perf_counter() - start_time) * 1000)
        content = response.choices[0].message.content if response.choices else ""

        return AIResponse(content=content or "", model=self.model, latency_ms=latency_ms)

    async def list_models(self) -> List[str]:
        """List model IDs from the models endpoint."""
        try:
            return [model.id async for model in self.client.models.list()]
        except openai.APIStatusError as e:
            raise UpstreamError(self.name, e.status_code, e.response.text)
        except openai.APIError as e:
            raise UpstreamError(self.name, None, str(e))
