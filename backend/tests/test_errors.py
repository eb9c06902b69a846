"""Tests for service error to HTTP status translation."""

import pytest

from tasker.ai.exceptions import (
    BadUpstreamResponseError,
    MissingCredentialError,
    UnknownProviderError,
    UpstreamError,
)
from tasker.api.errors import handle_service_error
from tasker.exceptions import (
    ConflictError,
    InternalError,
    InvalidArgumentError,
    NotFoundError,
)


class TestHandleServiceError:
    @pytest.mark.parametrize(
        "error,status_code",
        [
            (InvalidArgumentError("bad"), 400),
            (UnknownProviderError("mistral"), 400),
            (MissingCredentialError("gemini"), 400),
            (NotFoundError("Task"), 404),
            (ConflictError("This blocker already exists"), 409),
            (UpstreamError("openai", 401, "bad key"), 502),
            (BadUpstreamResponseError(), 502),
            (InternalError("Import failed"), 500),
        ],
    )
    def test_status_codes(self, error, status_code):
        exc = handle_service_error(error, "Failed")

        assert exc.status_code == status_code
        assert exc.detail == error.message

    def test_unexpected_error_hides_detail(self):
        exc = handle_service_error(RuntimeError("connection refused to 10.0.0.3"), "Failed to fetch tasks")

        assert exc.status_code == 500
        assert exc.detail == "Failed to fetch tasks"

    def test_upstream_message_keeps_status_and_truncated_body(self):
        error = UpstreamError("anthropic", 529, "y" * 300)

        assert error.message == "anthropic API error 529: " + "y" * 200

    def test_upstream_without_status(self):
        error = UpstreamError("gemini", None, "timed out")

        assert error.message == "gemini API error unavailable: timed out"
