"""Service-layer exceptions.

Services raise these; the API layer maps them onto HTTP responses.
"""


class TaskerError(Exception):
    """Base exception for service errors."""

    def __init__(self, message: str, code: str = "TASKER_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class InvalidArgumentError(TaskerError):
    """Missing required field, self-reference or otherwise invalid input."""

    def __init__(self, message: str, code: str = "INVALID_ARGUMENT"):
        super().__init__(message=message, code=code)


class NotFoundError(TaskerError):
    """Referenced entity does not exist."""

    def __init__(self, entity: str, entity_id: object | None = None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(message=f"{entity} not found", code="NOT_FOUND")


class ConflictError(TaskerError):
    """Write would duplicate a unique relation."""

    def __init__(self, message: str):
        super().__init__(message=message, code="CONFLICT")


class InternalError(TaskerError):
    """Unexpected store or parsing failure.

    The message is safe to show; the underlying cause stays in the logs.
    """

    def __init__(self, message: str = "Internal error"):
        super().__init__(message=message, code="INTERNAL_ERROR")
