"""Error taxonomy shared by the service layer, the HTTP API and the client.

Only ``Transient`` is retryable. Everything else is terminal and surfaces
to the caller on the first occurrence.
"""

from __future__ import annotations


class ConcernDeskError(Exception):
    """Base class for all domain errors."""

    status_code = 500
    retryable = False
    default_message = "Unexpected error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"detail": self.message}


class ValidationError(ConcernDeskError):
    """Bad input shape. Carries the offending field name."""

    status_code = 400
    default_message = "Invalid input"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")

    def to_dict(self) -> dict:
        return {"detail": self.message, "field": self.field}


class Unauthenticated(ConcernDeskError):
    status_code = 401
    default_message = "Please log in again"


class Forbidden(ConcernDeskError):
    status_code = 403
    default_message = "Not authorized"


class NotFound(ConcernDeskError):
    status_code = 404
    default_message = "Not found"


class Transient(ConcernDeskError):
    """Network or server-side failure that may succeed on a later attempt."""

    status_code = 503
    retryable = True
    default_message = "Service temporarily unavailable"


def error_from_status(status_code: int, body: dict | None = None) -> ConcernDeskError:
    """Map a non-2xx HTTP response back into the taxonomy."""
    body = body or {}
    detail = body.get("detail")
    if isinstance(detail, list):
        # FastAPI request-validation payload
        first = detail[0] if detail else {}
        loc = first.get("loc", [])
        field = str(loc[-1]) if loc else "body"
        return ValidationError(field, first.get("msg", "invalid"))
    message = detail if isinstance(detail, str) else None

    if status_code in (400, 422):
        field = body.get("field") or "body"
        reason = message or "invalid"
        if message and message.startswith(f"{field}: "):
            reason = message[len(field) + 2:]
        return ValidationError(field, reason)
    if status_code == 401:
        return Unauthenticated(message)
    if status_code == 403:
        return Forbidden(message)
    if status_code == 404:
        return NotFound(message)
    return Transient(message or f"Server responded with status {status_code}")
