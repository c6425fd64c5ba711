class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidPeriodError(ValidationError):
    """Raised when a billing period ends before it starts."""


class AuthenticationError(DomainError):
    """Raised when there is no authenticated principal or credentials are invalid."""

    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""

    status_code = 404


class AlreadyProcessedError(DomainError):
    """Raised when a payment is processed a second time."""

    status_code = 409


class InvalidTransitionError(DomainError):
    """Raised when an invoice status change is not allowed."""

    status_code = 409

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Invalid transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)
