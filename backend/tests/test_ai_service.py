"""Tests for the AI service: breakdown, discovery, pricing and call logs."""

import json
from uuid import uuid4

import pytest
from pydantic import SecretStr
from sqlalchemy import select

from tasker.ai.call_log import clear_logs, list_logs
from tasker.ai.exceptions import (
    BadUpstreamResponseError,
    MissingCredentialError,
    UnknownProviderError,
    UpstreamError,
)
from tasker.ai.service import AIService, PRICING_URLS
from tasker.exceptions import InvalidArgumentError, NotFoundError
from tasker.models.ai import AILog
from tasker.services.projects import ProjectService
from tasker.services.provider_config import ProviderConfigService
from tasker.services.task_tree import TaskTreeService
from tests.upstream import (
    anthropic_message,
    openai_completion,
    openai_model_list,
)

OPENAI_HOST = "api.openai.com"
COMPLETIONS = "/v1/chat/completions"

PRICING_PAGE = """
<html><head><script>track()</script></head><body>
<table>
<tr><th>Model</th><th>Input</th><th>Output</th></tr>
<tr><td>gpt-5</td><td>$1.25</td><td>$10.00</td></tr>
<tr><td>gpt-5-mini</td><td>$0.25</td><td>$2.00</td></tr>
</table>
</body></html>
"""


def _prompt(upstream, host=OPENAI_HOST, path=COMPLETIONS) -> str:
    return upstream.json_body(host, path)["messages"][0]["content"]


class TestCredentialResolution:
    """Explicit key, then environment fallback, then failure."""

    def test_explicit_key_wins(self, ai_service):
        ai_service.settings = ai_service.settings.model_copy(
            update={"gemini_api_key": SecretStr("env-key")}
        )
        assert ai_service.resolve_api_key("gemini", "request-key") == "request-key"

    def test_environment_fallback(self, ai_service):
        ai_service.settings = ai_service.settings.model_copy(
            update={"anthropic_api_key": SecretStr("env-key")}
        )
        assert ai_service.resolve_api_key("anthropic") == "env-key"

    def test_missing_credential(self, ai_service):
        with pytest.raises(MissingCredentialError) as exc_info:
            ai_service.resolve_api_key("gemini")
        assert exc_info.value.message == "No API key configured. Add one in Settings."

    def test_openai_may_run_keyless(self, ai_service):
        assert ai_service.resolve_api_key("openai") is None

    @pytest.mark.asyncio
    async def test_keyless_openai_provider_calls_without_authorization(self, ai_service, upstream):
        upstream.add(OPENAI_HOST, COMPLETIONS, json=openai_completion('["a"]'))

        provider = ai_service._build_provider("openai", ai_service.resolve_api_key("openai"))
        await provider.generate("hi")

        assert provider.api_key is None
        assert "authorization" not in upstream.last(OPENAI_HOST, COMPLETIONS).headers

    def test_unknown_provider(self, ai_service):
        with pytest.raises(UnknownProviderError):
            ai_service.resolve_api_key("mistral", "key")


class TestBreakdown:
    """Task breakdown through the adapter."""

    @pytest.mark.asyncio
    async def test_breakdown_then_create_children(self, ai_service, upstream, db):
        project = await ProjectService(db).create_project(name="Launch")
        tree = TaskTreeService(db)
        root = await tree.create_task("Ship v1", project_id=project.id)
        upstream.add(
            OPENAI_HOST,
            COMPLETIONS,
            json=openai_completion('["Write spec","Build feature","Test"]'),
        )

        subtasks = await ai_service.breakdown("Ship v1", provider="openai", api_key="sk-test")
        children = [await tree.create_task(label, parent_id=root.id) for label in subtasks]

        assert subtasks == ["Write spec", "Build feature", "Test"]
        assert root.position == 0
        assert [c.position for c in children] == [0, 1, 2]

        nodes = await tree.get_tree(project.id)
        assert [n["label"] for n in nodes] == ["Ship v1"]
        assert [(c["label"], c["depth"]) for c in nodes[0]["children"]] == [
            ("Write spec", 1),
            ("Build feature", 1),
            ("Test", 1),
        ]

    @pytest.mark.asyncio
    async def test_prompt_includes_contexts(self, ai_service, upstream, db):
        project = await ProjectService(db).create_project(name="Launch", ai_context="B2B SaaS")
        upstream.add(OPENAI_HOST, COMPLETIONS, json=openai_completion('["a"]'))

        await ai_service.breakdown(
            "Ship v1",
            context="Launch plan",
            provider="openai",
            api_key="sk-test",
            project_id=project.id,
        )

        prompt = _prompt(upstream)
        assert prompt.startswith('Given a task: "Ship v1"\nParent context: "Launch plan"\n')
        assert 'Project context: "B2B SaaS"' in prompt

    @pytest.mark.asyncio
    async def test_items_are_returned_as_strings(self, ai_service, upstream):
        upstream.add(OPENAI_HOST, COMPLETIONS, json=openai_completion('Here: [1, "two", 3.5]'))

        assert await ai_service.breakdown("Ship", provider="openai") == ["1", "two", "3.5"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reply", ['["Write spec", {"title": "Test"}]', '[["a", "b"]]', '["a", null]'])
    async def test_non_scalar_items_are_rejected(self, ai_service, upstream, reply):
        upstream.add(OPENAI_HOST, COMPLETIONS, json=openai_completion(reply))

        with pytest.raises(BadUpstreamResponseError):
            await ai_service.breakdown("Ship", provider="openai")

    @pytest.mark.asyncio
    async def test_stored_overrides_apply(self, ai_service, upstream, db):
        await ProviderConfigService(db).upsert(
            "openai", base_url="http://llm.internal/v1", model="llama-3"
        )
        upstream.add("llm.internal", COMPLETIONS, json=openai_completion('["a"]'))

        await ai_service.breakdown("Ship", provider="openai")

        assert upstream.json_body("llm.internal", COMPLETIONS)["model"] == "llama-3"

    @pytest.mark.asyncio
    async def test_environment_key_used(self, ai_service, upstream):
        ai_service.settings = ai_service.settings.model_copy(
            update={"openai_api_key": SecretStr("env-key")}
        )
        upstream.add(OPENAI_HOST, COMPLETIONS, json=openai_completion('["a"]'))

        await ai_service.breakdown("Ship", provider="openai")

        assert upstream.last(OPENAI_HOST, COMPLETIONS).headers["authorization"] == "Bearer env-key"

    @pytest.mark.asyncio
    async def test_default_provider_requires_key(self, ai_service):
        with pytest.raises(MissingCredentialError):
            await ai_service.breakdown("Ship")

    @pytest.mark.asyncio
    async def test_blank_label(self, ai_service):
        with pytest.raises(InvalidArgumentError) as exc_info:
            await ai_service.breakdown(" ", provider="openai")
        assert exc_info.value.message == "task_label is required"

    @pytest.mark.asyncio
    async def test_unknown_project(self, ai_service):
        with pytest.raises(NotFoundError):
            await ai_service.breakdown("Ship", provider="openai", project_id=uuid4())

    @pytest.mark.asyncio
    async def test_unparseable_reply(self, ai_service, upstream):
        upstream.add(OPENAI_HOST, COMPLETIONS, json=openai_completion("No idea."))

        with pytest.raises(BadUpstreamResponseError):
            await ai_service.breakdown("Ship", provider="openai")


class TestCallLogging:
    """AI call log rows."""

    @pytest.mark.asyncio
    async def test_success_is_logged_when_enabled(self, ai_service, upstream, session_factory):
        upstream.add(OPENAI_HOST, COMPLETIONS, json=openai_completion('["a"]'))

        await ai_service.breakdown("Ship", provider="openai", enable_logging=True)

        async with session_factory() as session:
            logs = await list_logs(session)
        assert len(logs) == 1
        assert logs[0].provider == "openai"
        assert logs[0].model == "gpt-4o-mini"
        assert logs[0].endpoint == "breakdown"
        assert logs[0].prompt.startswith('Given a task: "Ship"')
        assert logs[0].response is not None
        assert logs[0].error is None
        assert logs[0].duration_ms >= 0

    @pytest.mark.asyncio
    async def test_failure_is_logged(self, ai_service, upstream, session_factory):
        upstream.add(OPENAI_HOST, COMPLETIONS, status_code=500, text="upstream down")

        with pytest.raises(UpstreamError):
            await ai_service.breakdown("Ship", provider="openai", enable_logging=True)

        async with session_factory() as session:
            logs = await list_logs(session)
        assert len(logs) == 1
        assert logs[0].response is None
        assert logs[0].error == "openai API error 500: upstream down"

    @pytest.mark.asyncio
    async def test_nothing_logged_by_default(self, ai_service, upstream, session_factory):
        upstream.add(OPENAI_HOST, COMPLETIONS, json=openai_completion('["a"]'))

        await ai_service.breakdown("Ship", provider="openai")

        async with session_factory() as session:
            assert await list_logs(session) == []

    @pytest.mark.asyncio
    async def test_list_is_newest_first_and_capped(self, ai_service, session_factory):
        for i in range(5):
            await ai_service.call_logger.record(
                provider="openai",
                model=None,
                endpoint="breakdown",
                prompt=f"prompt {i}",
                response="[]",
                error=None,
                duration_ms=1,
            )

        async with session_factory() as session:
            logs = await list_logs(session, limit=10, max_limit=3)
            assert [log.prompt for log in logs] == ["prompt 4", "prompt 3", "prompt 2"]

            assert await clear_logs(session) == 5
            assert (await session.execute(select(AILog))).first() is None


class TestListModels:
    @pytest.mark.asyncio
    async def test_filtered_and_counted(self, ai_service, upstream):
        upstream.add(
            OPENAI_HOST,
            "/v1/models",
            json=openai_model_list("gpt-5-mini", "gpt-4o", "gpt-5", "whisper-1"),
        )

        result = await ai_service.list_models("openai", api_key="sk-test")

        assert result == {
            "models": [{"id": "gpt-5"}, {"id": "gpt-5-mini"}],
            "total_raw": 4,
            "total_filtered": 2,
        }

    @pytest.mark.asyncio
    async def test_base_url_argument(self, ai_service, upstream):
        upstream.add("llm.internal", "/v1/models", json=openai_model_list("gpt-5"))

        result = await ai_service.list_models("openai", base_url="http://llm.internal/v1")

        assert result["total_filtered"] == 1

    @pytest.mark.asyncio
    async def test_unknown_provider(self, ai_service):
        with pytest.raises(UnknownProviderError):
            await ai_service.list_models("mistral", api_key="key")


class TestRefreshPricing:
    """Grounded pricing extraction."""

    def _route_pricing_page(self, upstream, status_code=200):
        url = PRICING_URLS["openai"]
        host, path = "developers.openai.com", url.split("developers.openai.com", 1)[1]
        upstream.add(host, path, status_code=status_code, text=PRICING_PAGE)
        return host, path

    @pytest.mark.asyncio
    async def test_refresh(self, ai_service, upstream):
        upstream.add(
            OPENAI_HOST,
            "/v1/models",
            json=openai_model_list("gpt-5", "gpt-5-mini", "gpt-4o", "dall-e-3"),
        )
        page_host, page_path = self._route_pricing_page(upstream)
        extracted = {
            "gpt-5": {"input": "$1.25", "output": "$10.00"},
            "gpt-5-mini": {"input": "0.25", "output": ""},
            "gpt-5-pro": {"input": "15.00", "output": "120.00"},
            "gpt-4o": {"input": "2.50", "output": "10.00"},
            "notes": "ignored",
        }
        upstream.add(
            OPENAI_HOST,
            COMPLETIONS,
            json=openai_completion("```json\n" + json.dumps(extracted) + "\n```"),
        )

        result = await ai_service.refresh_pricing("openai", api_key="sk-test")

        assert result["pricing"] == {
            "gpt-5": {"provider": "openai", "input": "1.25", "output": "10.00"},
            "gpt-5-pro": {"provider": "openai", "input": "15.00", "output": "120.00"},
        }
        assert result["models_raw"] == 4
        assert result["models_filtered"] == 2
        assert result["models_priced"] == 2
        assert result["source"] == PRICING_URLS["openai"]

        page_request = upstream.last(page_host, page_path)
        assert page_request.headers["accept-language"].startswith("en-US")

        prompt = _prompt(upstream)
        assert "MODEL IDs TO PRICE:\ngpt-5, gpt-5-mini\n" in prompt
        assert "$1.25" in prompt
        assert "track()" not in prompt

    @pytest.mark.asyncio
    async def test_no_relevant_models_returns_early(self, ai_service, upstream):
        upstream.add(OPENAI_HOST, "/v1/models", json=openai_model_list("dall-e-3", "whisper-1"))

        result = await ai_service.refresh_pricing("openai", api_key="sk-test")

        assert result == {
            "pricing": {},
            "models_raw": 2,
            "models_filtered": 0,
            "models_priced": 0,
            "source": None,
        }
        assert [r.url.path for r in upstream.requests] == ["/v1/models"]

    @pytest.mark.asyncio
    async def test_extraction_on_another_provider(self, ai_service, upstream):
        upstream.add(OPENAI_HOST, "/v1/models", json=openai_model_list("gpt-5"))
        self._route_pricing_page(upstream)
        upstream.add(
            "api.anthropic.com",
            "/v1/messages",
            json=anthropic_message('{"gpt-5": {"input": "1.25", "output": "10.00"}}'),
        )

        result = await ai_service.refresh_pricing(
            "openai", api_key="sk-test", ai_provider="anthropic", ai_api_key="sk-ant"
        )

        assert result["models_priced"] == 1
        assert upstream.last("api.anthropic.com", "/v1/messages").headers["x-api-key"] == "sk-ant"

    @pytest.mark.asyncio
    async def test_pricing_page_failure(self, ai_service, upstream):
        upstream.add(OPENAI_HOST, "/v1/models", json=openai_model_list("gpt-5"))
        self._route_pricing_page(upstream, status_code=503)

        with pytest.raises(UpstreamError) as exc_info:
            await ai_service.refresh_pricing("openai", api_key="sk-test")

        assert exc_info.value.status_code == 503
        assert exc_info.value.message.startswith("openai pricing page API error 503")

    @pytest.mark.asyncio
    async def test_unparseable_extraction(self, ai_service, upstream):
        upstream.add(OPENAI_HOST, "/v1/models", json=openai_model_list("gpt-5"))
        self._route_pricing_page(upstream)
        upstream.add(OPENAI_HOST, COMPLETIONS, json=openai_completion("Sorry, no prices."))

        with pytest.raises(BadUpstreamResponseError) as exc_info:
            await ai_service.refresh_pricing("openai", api_key="sk-test")
        assert exc_info.value.message == "Could not parse pricing from AI response"

    @pytest.mark.asyncio
    async def test_requires_provider_and_key(self, ai_service):
        with pytest.raises(InvalidArgumentError) as exc_info:
            await ai_service.refresh_pricing("openai", api_key="")
        assert exc_info.value.message == "provider and api_key required"

    @pytest.mark.asyncio
    async def test_page_text_is_capped(self, ai_service, upstream):
        ai_service.settings = ai_service.settings.model_copy(update={"pricing_page_max_chars": 10})
        self._route_pricing_page(upstream)

        text = await ai_service.fetch_pricing_page("openai")

        assert len(text) == 10
