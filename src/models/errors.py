"""
Error taxonomy for calls against the brands API.

Every failure of a remote call ends up as one of these. The request
executor raises them, the fetch cache stores them on the cache entry and
the mutation coordinator hands them back inside a result value.
"""

from typing import Any, Dict, List, Optional

NETWORK_ERROR_MESSAGE = "network error"

FieldErrors = Dict[str, List[str]]

_NOT_FOUND_OR_CONFLICT = {404, 409, 410}


class ApiError(Exception):
    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        field_errors: Optional[FieldErrors] = None,
        raw: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.field_errors = field_errors or None
        self.raw = raw

    @classmethod
    def from_response(cls, status: int, body: Any) -> "ApiError":
        """Build the matching error for a non-2xx response and its decoded body."""
        payload = body if isinstance(body, dict) else {}
        message = payload.get("msg") or payload.get("message") or f"HTTP {status}"
        field_errors = _field_errors(payload.get("errors"))

        if field_errors:
            return ValidationError(message, status, field_errors, body)
        if status in _NOT_FOUND_OR_CONFLICT:
            return NotFoundOrConflictError(message, status, None, body)
        return UnknownServerError(message, status, None, body)

    def first_field_message(self, *preferred: str) -> Optional[str]:
        if not self.field_errors:
            return None
        for field in preferred:
            messages = self.field_errors.get(field)
            if messages:
                return messages[0]
        for messages in self.field_errors.values():
            if messages:
                return messages[0]
        return None

    def display_message(self, *preferred: str) -> str:
        return self.first_field_message(*preferred) or self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, status={self.status!r})"


class ValidationError(ApiError):
    """Server rejected the payload with per-field messages."""


class NotFoundOrConflictError(ApiError):
    """Operation on a missing or stale id."""


class NetworkError(ApiError):
    def __init__(self, raw: Any = None):
        super().__init__(NETWORK_ERROR_MESSAGE, status=None, field_errors=None, raw=raw)


class UnknownServerError(ApiError):
    """Non-2xx without a usable body, or a body that does not match the schema."""


def _field_errors(value: Any) -> Optional[FieldErrors]:
    if not isinstance(value, dict):
        return None
    result: FieldErrors = {}
    for field, messages in value.items():
        if isinstance(messages, str):
            result[str(field)] = [messages]
        elif isinstance(messages, list):
            result[str(field)] = [str(m) for m in messages]
    return result or None
