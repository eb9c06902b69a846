"""Google Gemini AI provider implementation."""

import re
import time
from typing import List, Optional, Tuple

import httpx
from google import genai
from google.genai import errors, types

from tasker.ai.exceptions import UpstreamError
from tasker.ai.providers.base import AIProvider, AIResponse

_API_VERSION_RE = re.compile(r"/(v\d+(?:alpha|beta)?\d*)/?$")


def split_api_version(base_url: str) -> Tuple[str, Optional[str]]:
    """Split a trailing API version off a base URL.

    ``https://proxy.example.com/v1beta`` becomes
    ``("https://proxy.example.com/", "v1beta")``. Without a version
    segment the URL is returned as-is and the SDK default applies.
    """
    match = _API_VERSION_RE.search(base_url)
    if match is None:
        return base_url, None
    return base_url[: match.start()] + "/", match.group(1)


class GeminiProvider(AIProvider):
    """Google Gemini ``generateContent`` implementation.

    The key travels as a query parameter; text comes back in the first
    candidate's parts. ``base_url`` may be the API host root or carry a
    version segment such as ``/v1beta``, which is passed to the SDK as
    ``api_version`` instead of being appended twice.
    """

    name = "gemini"
    default_base_url = "https://generativelanguage.googleapis.com/"
    default_model = "gemini-2.0-flash"
    api_key_setting = "gemini_api_key"

    def __init__(
        self,
        api_key: Optional[str],
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: float = 120.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(api_key, base_url, model, timeout, http_client)
        host_url, api_version = split_api_version(self.base_url)
        self.client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(
                base_url=host_url,
                api_version=api_version,
                timeout=int(timeout * 1000),  # milliseconds
            ),
        )

    async def generate(self, prompt: str) -> AIResponse:
        """Generate a completion using Gemini."""
        start_time = time.perf_counter()

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    temperature=self.temperature,
                    max_output_tokens=self.max_tokens,
                ),
            )
        except errors.APIError as e:
            raise UpstreamError(self.name, e.code, e.message or str(e))
        except httpx.HTTPError as e:
            raise UpstreamError(self.name, None, str(e))

        latency_ms = int((time.perf_counter() - start_time) * 1000)

        return AIResponse(content=response.text or "", model=self.model, latency_ms=latency_ms)

    async def list_models(self) -> List[str]:
        """List model names with the ``models/`` prefix removed."""
        try:
            pager = await self.client.aio.models.list()
            return [model.name.removeprefix("models/") async for model in pager]
        except errors.APIError as e:
            raise UpstreamError(self.name, e.code, e.message or str(e))
        except httpx.HTTPError as e:
            raise UpstreamError(self.name, None, str(e))
