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


class InvalidSignatureError(AuthenticationError):
    """Raised when an access token is malformed or its signature does not match."""

    def __init__(self, message: str = "Invalid access token signature") -> None:
        super().__init__(message)


class TokenExpiredError(AuthenticationError):
    """Raised when an access token is past its embedded expiry."""

    def __init__(self, message: str = "Access token has expired") -> None:
        super().__init__(message)


class InvalidCredentialsError(AuthenticationError):
    """Raised when the email is unknown or the password does not match."""

    def __init__(self, message: str = "Invalid email or password") -> None:
        super().__init__(message)


class SessionNotFoundError(AuthenticationError):
    """Raised when a refresh token does not resolve to a live session."""

    def __init__(self, message: str = "User not found. Make sure that the refresh token and user id are correct") -> None:
        super().__init__(message)


class AccessDeniedError(UserError):
    """Raised when a user tries to access a resource they do not have permission for."""


class ValidationError(UserError):
    """Raised when user input fails validation."""


class DuplicateEmailError(ValidationError):
    """Raised when registering or renaming to an email that is already taken."""

    def __init__(self, email: str) -> None:
        super().__init__(f"User with email '{email}' already exists")


class PersistenceError(Exception):
    """Raised when the document store fails. Not shown to the user verbatim."""
