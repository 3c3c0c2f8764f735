"""
Domain errors raised by the lifecycle core.

Every error is recoverable by the caller. The HTTP layer maps each one to a
status code (see ERROR_STATUS_CODES); other surfaces can switch on `code`.
"""


class DomainError(Exception):
    """Base class for all typed failures of the lifecycle core."""

    code = "domain_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """Malformed input or a violated data invariant."""

    code = "validation_error"


class PermissionDenied(DomainError):
    """Role or ownership mismatch."""

    code = "permission_denied"


class InvalidTransition(DomainError):
    """Target state is not reachable from the current state."""

    code = "invalid_transition"


class NotFound(DomainError):
    code = "not_found"


class Conflict(DomainError):
    """A concurrent write won the compare-and-swap."""

    code = "conflict"


class NotAuthenticated(DomainError):
    code = "not_authenticated"


ERROR_STATUS_CODES = {
    ValidationError: 400,
    PermissionDenied: 403,
    InvalidTransition: 409,
    NotFound: 404,
    Conflict: 409,
    NotAuthenticated: 401,
}


def status_code_for(error: DomainError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES.items():
        if isinstance(error, error_type):
            return status_code
    return 400
