"""
Exception types shared across services and the HTTP layer.
"""
from typing import Optional


class ServiceError(Exception):
    """A service failure that maps onto an HTTP status code."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    def __repr__(self) -> str:
        return f"ServiceError({self.status_code}, {self.message!r})"


class BackendError(Exception):
    """Non-2xx response (or transport failure) from the job/interview backend."""

    def __init__(self, endpoint: str, status_code: Optional[int] = None, detail: str = ""):
        self.endpoint = endpoint
        self.status_code = status_code
        self.detail = detail
        if status_code is None:
            message = f"{endpoint} unreachable: {detail}"
        else:
            message = f"{endpoint} returned HTTP {status_code}"
        super().__init__(message)


class InputLockedError(Exception):
    """Raised when the answer input is edited while a capture is in flight."""


class AssistantBusyError(Exception):
    """Raised when a follow-up question is sent while another is outstanding."""
