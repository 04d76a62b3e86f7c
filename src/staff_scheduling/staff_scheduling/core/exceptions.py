class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidRangeError(ValidationError):
    """Raised when a time interval is malformed (end <= start, out of day)."""


class InvalidTemplateError(ValidationError):
    """Raised when a shift template has an unusable recurrence window."""


class NotFoundError(DomainError):
    """Raised when a request, shift or template id does not exist."""


class AuthorizationError(DomainError):
    """Raised when the approval policy denies an action."""


class InvalidTransitionError(DomainError):
    """Raised on a state change the lifecycle does not allow.

    Not retryable without re-fetching the current state.
    """


class StaleConflictCheckError(DomainError):
    """Raised when the committed calendar changed between check and commit.

    Retryable: re-run the conflict check, then approve or reject again.
    """
