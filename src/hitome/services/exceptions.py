"""
Custom exceptions for the hitome service layer.

Routes translate these into HTTP errors; see ``routes.deps.raise_http``.
"""


class HitomeError(Exception):
    """Base exception for service errors."""
    pass


class NotFoundError(HitomeError):
    """Raised when a thread, store or other record does not exist for the caller."""
    pass


class AccessDeniedError(HitomeError):
    """Raised when the user is not a member of the store they asked for."""
    pass


class ValidationFailedError(HitomeError):
    """Raised when a request is well-formed JSON but missing required values."""
    pass


class ConflictError(HitomeError):
    """Raised when creating a record that already exists."""
    pass


class NotConfiguredError(HitomeError):
    """Raised when channel credentials needed for an operation are missing."""
    pass


class SignatureError(HitomeError):
    """Raised when a webhook signature is missing or does not match."""
    pass


class UpstreamError(HitomeError):
    """Raised when LINE or Google rejected a call we needed to succeed."""
    pass
