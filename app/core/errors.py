"""Error taxonomy surfaced to callers of the Signal API.

Every handler either returns its typed result or raises one of these. The
FastAPI exception handler in ``app.main`` serializes them as
``{"kind": ..., "message": ...}``.
"""

from fastapi import status


class SignalError(Exception):
    """Base class for caller-visible errors."""

    kind: str = "internal"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class Unauthenticated(SignalError):
    """No caller identity was presented."""

    kind = "unauthenticated"
    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionDenied(SignalError):
    """Identity present but profile missing or role not authorized."""

    kind = "permission_denied"
    status_code = status.HTTP_403_FORBIDDEN


class InvalidArgument(SignalError):
    """Payload field missing or invalid."""

    kind = "invalid_argument"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, field: str, message: str | None = None):
        super().__init__(message or f"{field} is required")
        self.field = field


class Internal(SignalError):
    """External model failure, timeout, or any other server-side failure."""

    kind = "internal"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class FailedToParse(Internal):
    """The model reply could not be turned into the required structure.

    Surfaces to callers as ``internal``; the raw reply stays in server logs.
    """
