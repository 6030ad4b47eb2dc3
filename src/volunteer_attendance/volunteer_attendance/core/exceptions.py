class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is missing, empty or violates domain rules."""


class MalformedPayloadError(ValidationError):
    """Raised when a scanned QR payload cannot be decoded."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""


class AuthenticationError(DomainError):
    """Raised when credentials are invalid or no session is present."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class PersistenceError(DomainError):
    """Raised when a store read or write fails."""


class StoreTimeoutError(PersistenceError):
    """Raised when a store call exceeds its timeout.

    The write may or may not have landed; callers must re-read state before retrying.
    """


class ConflictError(PersistenceError):
    """Raised when a concurrent transition races on the same volunteer."""
