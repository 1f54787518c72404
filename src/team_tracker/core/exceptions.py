class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when there is no valid session or the credentials are wrong."""


class AuthorizationError(DomainError):
    """Raised when the caller lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced task, PC or notification does not exist."""


class UpstreamError(DomainError):
    """Raised when a third-party service (Hubstaff, email) fails."""
