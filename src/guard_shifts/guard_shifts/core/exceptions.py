class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class GuardNotFoundError(NotFoundError):
    pass


class ServiceNotFoundError(NotFoundError):
    pass


class ShiftError(DomainError):
    """Base exception for shift lifecycle failures."""


class ShiftNotFoundError(ShiftError, NotFoundError):
    """No shift in the required source state for the guard/day."""


class OutOfWindowError(ShiftError):
    """Biometric entry outside the tolerance around the scheduled start."""


class WindowExpiredError(ShiftError):
    """App confirmation after the deadline; the shift is now missed."""


class ServiceMismatchError(ShiftError):
    """App confirmation for a service other than the shift's own."""


class InvalidStateError(ShiftError):
    """Operation not allowed from the shift's current state.

    Also raised when a concurrent request changed the shift first.
    """
