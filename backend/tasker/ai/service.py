"""AI Service - orchestrates provider calls for breakdown and pricing discovery.

Resolves which provider to call, with which credential, base URL and model,
renders the prompt, runs the call through the call logger and parses the
JSON fragment out of the free-text reply.
"""

from typing import Any, Optional
from uuid import UUID

import httpx
import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tasker.ai.call_log import AICallLogger
from tasker.ai.exceptions import BadUpstreamResponseError, MissingCredentialError, UpstreamError
from tasker.ai.model_filters import filter_models, is_relevant_model
from tasker.ai.parsing import extract_json_array, extract_json_object, html_to_text
from tasker.ai.providers import AIProvider, get_provider_class
from tasker.ai.templates import PRICING_EXTRACTION, TASK_BREAKDOWN, render_template
from tasker.config import Settings, get_settings
from tasker.exceptions import InvalidArgumentError, NotFoundError
from tasker.models.project import Project
from tasker.services.provider_config import ProviderConfigService

logger = structlog.get_logger()

# Official pricing sources used for grounded extraction
PRICING_URLS = {
    "openai": "https://developers.openai.com/api/docs/pricing",
    "gemini": "https://ai.google.dev/gemini-api/docs/pricing?hl=en",
    "anthropic": "https://docs.anthropic.com/en/docs/about-claude/models",
}

PRICING_PAGE_HEADERS = {"Accept-Language": "en-US,en;q=0.9"}


class AIService:
    """Central orchestrator for AI interactions.

    Example:
        ```python
        service = AIService(db)
        subtasks = await service.breakdown("Ship v1", provider="gemini", api_key="...")
        ```
    """

    def __init__(
        self,
        db: AsyncSession,
        settings: Optional[Settings] = None,
        log_session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the AI service.

        Args:
            db: Request-scoped session for reading projects and provider config
            settings: Application settings; defaults to the cached instance
            log_session_factory: Session factory for AI call log writes
            http_client: Shared HTTP client for SDKs and pricing pages
        """
        self.db = db
        self.settings = settings or get_settings()
        self.http_client = http_client
        self.provider_configs = ProviderConfigService(db)
        self.call_logger = AICallLogger(log_session_factory) if log_session_factory else None

    # -------------------------------------------------------------------------
    # Provider resolution
    # -------------------------------------------------------------------------

    def resolve_api_key(self, provider_name: str, api_key: Optional[str] = None) -> Optional[str]:
        """Pick the credential for a call.

        The explicit key wins over the environment fallback. Without either,
        raises ``MissingCredentialError`` unless the provider runs keyless.
        """
        provider_cls = get_provider_class(provider_name)
        if api_key:
            return api_key

        fallback = getattr(self.settings, provider_cls.api_key_setting).get_secret_value()
        if fallback:
            return fallback

        if provider_cls.requires_api_key:
            raise MissingCredentialError(provider_name)
        return None

    def _build_provider(
        self,
        provider_name: str,
        api_key: Optional[str],
        base_url: Optional[str] = None,
        model: Optional[str] = None,
    ) -> AIProvider:
        provider_cls = get_provider_class(provider_name)
        return provider_cls(
            api_key=api_key,
            base_url=base_url,
            model=model,
            timeout=self.settings.ai_request_timeout,
            http_client=self.http_client,
        )

    async def _configured_provider(self, provider_name: str, api_key: Optional[str]) -> AIProvider:
        """Provider with stored base URL/model overrides applied."""
        config = await self.provider_configs.resolve(provider_name)
        return self._build_provider(provider_name, api_key, config.base_url, config.model)

    async def _generate(self, provider: AIProvider, endpoint: str, prompt: str, enable_logging: bool) -> str:
        if self.call_logger is None:
            result = await provider.generate(prompt)
            return result.content
        return await self.call_logger.generate(provider, endpoint, prompt, enabled=enable_logging)

    # -------------------------------------------------------------------------
    # Breakdown
    # -------------------------------------------------------------------------

    async def breakdown(
        self,
        task_label: str,
        context: Optional[str] = None,
        api_key: Optional[str] = None,
        provider: Optional[str] = None,
        project_id: Optional[UUID] = None,
        enable_logging: bool = False,
    ) -> list[str]:
        """Ask the model to split a task into 3-7 subtasks.

        Raises:
            InvalidArgumentError: Blank label, unknown provider or no credential
            NotFoundError: ``project_id`` given but unknown
            UpstreamError: Provider call failed
            BadUpstreamResponseError: No JSON array in the reply
        """
        if not task_label or not task_label.strip():
            raise InvalidArgumentError("task_label is required")

        provider_name = provider or self.settings.ai_default_provider
        key = self.resolve_api_key(provider_name, api_key)

        project_context = None
        if project_id is not None:
            project = await self.db.get(Project, project_id)
            if project is None:
                raise NotFoundError("Project", project_id)
            project_context = project.ai_context

        prompt = render_template(
            TASK_BREAKDOWN["user_prompt_template"],
            {
                "task_label": task_label,
                "context": context,
                "project_context": project_context,
            },
        )

        ai_provider = await self._configured_provider(provider_name, key)
        text = await self._generate(ai_provider, TASK_BREAKDOWN["endpoint"], prompt, enable_logging)

        items = extract_json_array(text)
        # Subtasks are labels; objects or nested arrays mean the model ignored the format
        if any(item is None or isinstance(item, (dict, list)) for item in items):
            logger.warning("task_breakdown_malformed", provider=provider_name)
            raise BadUpstreamResponseError()

        subtasks = [str(item) for item in items]
        logger.info("task_breakdown_completed", provider=provider_name, subtasks=len(subtasks))
        return subtasks

    # -------------------------------------------------------------------------
    # Model discovery
    # -------------------------------------------------------------------------

    async def list_models(
        self,
        provider: str,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> dict[str, Any]:
        """Upstream model ids after the curated filter, sorted."""
        key = self.resolve_api_key(provider, api_key)
        raw_models = await self._build_provider(provider, key, base_url).list_models()
        models = filter_models(raw_models, provider)

        logger.info(
            "models_listed",
            provider=provider,
            total_raw=len(raw_models),
            total_filtered=len(models),
        )
        return {
            "models": [{"id": model_id} for model_id in models],
            "total_raw": len(raw_models),
            "total_filtered": len(models),
        }

    async def fetch_pricing_page(self, provider: str) -> str:
        """Download the provider's pricing page and flatten it to text.

        The text is cut to the configured character budget.
        """
        url = PRICING_URLS[provider]

        if self.http_client is not None:
            response = await self._get_page(self.http_client, url, provider)
        else:
            async with httpx.AsyncClient(timeout=self.settings.ai_request_timeout) as client:
                response = await self._get_page(client, url, provider)

        return html_to_text(response.text)[: self.settings.pricing_page_max_chars]

    async def _get_page(self, client: httpx.AsyncClient, url: str, provider: str) -> httpx.Response:
        try:
            response = await client.get(url, headers=PRICING_PAGE_HEADERS, follow_redirects=True)
        except httpx.HTTPError as e:
            raise UpstreamError(f"{provider} pricing page", None, str(e))
        if response.status_code >= 400:
            raise UpstreamError(f"{provider} pricing page", response.status_code, response.text)
        return response

    async def refresh_pricing(
        self,
        provider: str,
        api_key: str,
        ai_provider: Optional[str] = None,
        ai_api_key: Optional[str] = None,
        enable_logging: bool = False,
    ) -> dict[str, Any]:
        """Discover models and extract their prices from the official page.

        Model discovery uses ``provider``'s default endpoint. Extraction runs
        on ``ai_provider`` (default: the same provider) with its stored
        overrides, grounded in the fetched page text.
        """
        if not provider or not api_key:
            raise InvalidArgumentError("provider and api_key required")
        get_provider_class(provider)

        extraction_provider = ai_provider or provider
        get_provider_class(extraction_provider)

        raw_models = await self._build_provider(provider, api_key).list_models()
        filtered = filter_models(raw_models, provider)
        if not filtered:
            logger.info("pricing_refresh_no_models", provider=provider, models_raw=len(raw_models))
            return {
                "pricing": {},
                "models_raw": len(raw_models),
                "models_filtered": 0,
                "models_priced": 0,
                "source": None,
            }

        page_text = await self.fetch_pricing_page(provider)

        prompt = render_template(
            PRICING_EXTRACTION["user_prompt_template"],
            {"provider": provider, "page_text": page_text, "model_ids": filtered},
        )
        extractor = await self._configured_provider(extraction_provider, ai_api_key or api_key)
        text = await self._generate(extractor, PRICING_EXTRACTION["endpoint"], prompt, enable_logging)

        extracted = extract_json_object(text, "Could not parse pricing from AI response")

        allowed = set(filtered)
        pricing: dict[str, dict[str, str]] = {}
        for model_id, prices in extracted.items():
            if not isinstance(prices, dict):
                continue
            if not prices.get("input") or not prices.get("output"):
                continue
            # Pages list models the /models endpoint does not return yet
            if model_id in allowed or is_relevant_model(model_id, provider):
                pricing[model_id] = {
                    "provider": provider,
                    "input": str(prices["input"]).removeprefix("$"),
                    "output": str(prices["output"]).removeprefix("$"),
                }

        logger.info(
            "pricing_refreshed",
            provider=provider,
            extraction_provider=extraction_provider,
            models_raw=len(raw_models),
            models_filtered=len(filtered),
            models_priced=len(pricing),
        )
        return {
            "pricing": pricing,
            "models_raw": len(raw_models),
            "models_filtered": len(filtered),
            "models_priced": len(pricing),
            "source": PRICING_URLS[provider],
        }
