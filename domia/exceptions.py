"""
Domain errors raised by the service layer.

Each error carries a stable ``code`` and the HTTP status the API renders it
with (see the exception handler in ``main.py``). All of them are recoverable:
the caller retries with different input or surfaces the message to the user.
"""


class DomainError(Exception):
    """Base class for business-rule violations"""

    code = "domain_error"
    status_code = 400

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code


class NotFoundError(DomainError):
    """Referenced entity does not exist (or is not visible to the caller)"""

    code = "not_found"
    status_code = 404


class ForbiddenError(DomainError):
    """Caller lacks authority over the entity"""

    code = "forbidden"
    status_code = 403


class InvalidStateError(DomainError):
    """Operation is not valid for the entity's current status"""

    code = "invalid_state"
    status_code = 409


class InvalidInputError(DomainError):
    """Malformed or missing required field"""

    code = "invalid_input"
    status_code = 400


class PositionsFilledError(DomainError):
    code = "positions_filled"
    status_code = 409


class ExpiredError(DomainError):
    code = "expired"
    status_code = 410


class ScheduleConflictError(DomainError):
    code = "schedule_conflict"
    status_code = 409


class AlreadySubmittedError(DomainError):
    code = "already_submitted"
    status_code = 409
