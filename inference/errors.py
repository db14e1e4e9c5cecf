"""
Failure taxonomy for backend calls.

Every failure of a single completion is a BackendError subclass carrying a
short machine-readable kind. BackendUnavailable is separate: it is raised by
the orchestration layer when the pre-flight probe fails and aborts a whole
batch.
"""

from typing import Optional

from .types import BackendStatus


class BackendError(Exception):
    """Base class for a failed backend exchange."""

    kind = "backend_error"

    def __init__(self, message: str = "", *, status_code: Optional[int] = None):
        super().__init__(message or self.kind)
        self.status_code = status_code


class BackendUnreachable(BackendError):
    kind = "unreachable"


class BackendTimeout(BackendError):
    kind = "timeout"


class MalformedResponse(BackendError):
    kind = "malformed_response"


class ModelUnavailable(BackendError):
    kind = "model_unavailable"


class RequestCancelled(BackendError):
    """The caller cancelled before or during the exchange. Not a failure."""

    kind = "cancelled"


class BackendUnavailable(Exception):
    """Pre-flight probe reported the backend or model as unusable."""

    def __init__(self, status: BackendStatus):
        super().__init__(status.diagnostic or "Backend not available")
        self.status = status
