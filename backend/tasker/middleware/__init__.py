"""Middleware package."""

from tasker.middleware.logging import LoggingMiddleware
from tasker.middleware.request_id import RequestIDMiddleware

__all__ = ["LoggingMiddleware", "RequestIDMiddleware"]
