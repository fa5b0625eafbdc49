"""Error kinds surfaced by the account and profile services.

Every error carries a ``kind`` (the class name), a human readable message and
the HTTP status the API layer renders it with. Anything else raised inside a
service call is logged and replaced by :class:`UpstreamError`.
"""

from functools import wraps
import logging

from fastapi import status

LOGGER = logging.getLogger(__name__)


class ServiceError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_payload(self) -> dict:
        return {"success": False, "error": self.kind, "message": self.message}


class ValidationError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class ConflictError(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Already exists"


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class AuthError(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authorized"


class UpstreamError(ServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server error"


def classify_errors(action: str):
    """Let service errors through; log and wrap everything else."""

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except ServiceError:
                raise
            except Exception as exc:
                LOGGER.exception("Unhandled error while %s", action)
                raise UpstreamError(f"Server error while {action}") from exc

        return wrapper

    return decorator
