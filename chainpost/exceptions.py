"""Exception types raised by the request execution engine."""

from uuid import UUID


class ChainpostError(Exception):
    """Base exception for chainpost."""


class UnsupportedRequestTypeError(ChainpostError):
    """Raised when a request variant has no clone/resolve rule."""

    def __init__(self, request_type: str):
        self.request_type = request_type
        super().__init__(f"Request type {request_type} is not supported for cloning")


class NoExecutorFoundError(ChainpostError):
    """Raised when no registered executor accepts a request."""

    def __init__(self, request_type: str):
        self.request_type = request_type
        super().__init__(f"No executor found for request type: {request_type}")


class EntityNotFoundError(ChainpostError):
    """Raised when a referenced entity does not exist."""

    def __init__(self, kind: str, entity_id: UUID):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} with ID {entity_id} not found.")


class RequestFailedError(ChainpostError):
    """Raised inside a flow step when a response is not a success."""

    def __init__(self, status_code: int, status_message: str):
        self.status_code = status_code
        self.status_message = status_message
        if status_code == 0:
            message = f"Request failed: {status_message}"
        else:
            message = f"Request failed with status code {status_code}: {status_message}"
        super().__init__(message)
