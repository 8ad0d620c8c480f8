from abc import ABC


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.
    """


class NotFoundError(UserError):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str = "Document not found") -> None:
        super().__init__(message)


class AuthenticationError(UserError):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message)


class ValidationError(UserError):
    """Raised when user input fails validation."""


class ServiceUnavailableError(Exception):
    """Raised when a backing dependency (credential lookup, session storage) is unreachable.

    Not a UserError: the message is logged, never shown to the caller.
    """

    def __init__(self, message: str = "Service unavailable") -> None:
        super().__init__(message)
