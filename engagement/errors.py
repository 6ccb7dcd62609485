"""
Error taxonomy shared by the engagement engine, the stores and the API.

Each error carries the HTTP status and a short machine-readable code; the app
renders them as {"message": ..., "error": code}.
"""


class EngagementError(Exception):
    """Base class for domain errors raised by the engine and handlers."""

    status_code = 500
    code = "internal"

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class Unauthenticated(EngagementError):
    """Missing, malformed or expired credential (401, or 403 for a rejected token)."""

    status_code = 401
    code = "unauthenticated"


class Unauthorized(EngagementError):
    """Valid identity acting on a resource it does not own."""

    status_code = 403
    code = "unauthorized"


class NotFound(EngagementError):
    status_code = 404
    code = "not_found"


class InvalidInput(EngagementError):
    status_code = 400
    code = "invalid_input"


class InvalidOperation(EngagementError):
    """Request is well-formed but not allowed (e.g. following yourself)."""

    status_code = 400
    code = "invalid_operation"


class Conflict(EngagementError):
    status_code = 400
    code = "conflict"


class Internal(EngagementError):
    status_code = 500
    code = "internal"
