"""Mock upstream AI services and canned response payloads."""

import json
from typing import Any, Callable

import httpx


class UpstreamRecorder:
    """Routes mocked upstream requests by ``(host, path)`` and records them."""

    def __init__(self):
        self.routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, host: str, path: str, status_code: int = 200, **kwargs: Any) -> None:
        self.routes[(host, path)] = lambda request: httpx.Response(status_code, **kwargs)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.url.host, request.url.path))
        if handler is None:
            return httpx.Response(404, text=f"no route for {request.url}")
        return handler(request)

    def last(self, host: str, path: str) -> httpx.Request:
        matches = [r for r in self.requests if r.url.host == host and r.url.path == path]
        assert matches, f"no request to {host}{path}"
        return matches[-1]

    def json_body(self, host: str, path: str) -> dict:
        return json.loads(self.last(host, path).content)


def openai_completion(content: str, model: str = "gpt-4o-mini") -> dict:
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 1700000000,
        "model": model,
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }


def openai_model_list(*model_ids: str) -> dict:
    return {
        "object": "list",
        "data": [
            {"id": model_id, "object": "model", "created": 1700000000, "owned_by": "openai"}
            for model_id in model_ids
        ],
    }


def anthropic_message(text: str, model: str = "claude-sonnet-4-20250514") -> dict:
    return {
        "id": "msg_test",
        "type": "message",
        "role": "assistant",
        "model": model,
        "content": [{"type": "text", "text": text}],
        "stop_reason": "end_turn",
        "stop_sequence": None,
        "usage": {"input_tokens": 10, "output_tokens": 20},
    }


def anthropic_model_list(*model_ids: str) -> dict:
    return {
        "data": [
            {
                "id": model_id,
                "type": "model",
                "display_name": model_id,
                "created_at": "2025-05-14T00:00:00Z",
            }
            for model_id in model_ids
        ],
        "has_more": False,
        "first_id": model_ids[0] if model_ids else None,
        "last_id": model_ids[-1] if model_ids else None,
    }


class AsyncPager:
    """Async-iterable stand-in for SDK pagers."""

    def __init__(self, items):
        self.items = list(items)

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for item in self.items:
            yield item
