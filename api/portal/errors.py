"""
Exception types shared by the providers, forms and routes.

Every error carries a ``message`` that is safe to show to the person using the
portal. ``error_message`` is the one place where arbitrary exceptions are
reduced to display text.
"""

from typing import Optional

DEFAULT_ERROR_MESSAGE = "An error occurred"


class PortalError(Exception):
    """Base exception for all portal errors"""

    def __init__(self, message: str = "", code: str = "portal_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(PortalError):
    """Local input validation failed; nothing was sent to a provider"""

    def __init__(self, message: str):
        super().__init__(message, code="validation_failed")


class AuthError(PortalError):
    def __init__(self, message: str, code: str = "auth_failed"):
        super().__init__(message, code=code)


class StorageError(PortalError):
    def __init__(self, message: str, code: str = "storage_failed"):
        super().__init__(message, code=code)


class DatabaseError(PortalError):
    def __init__(self, message: str, code: str = "database_failed"):
        super().__init__(message, code=code)


class MailError(PortalError):
    def __init__(self, message: str, code: str = "mail_failed"):
        super().__init__(message, code=code)


class SessionRequired(Exception):
    """Raised by the session gate; the app answers with a redirect to sign-in."""

    def __init__(self, redirect_to: str = "/sign-in"):
        self.redirect_to = redirect_to
        super().__init__(redirect_to)


def error_message(exc: Optional[BaseException], fallback: str = DEFAULT_ERROR_MESSAGE) -> str:
    if exc is None:
        return fallback
    msg = getattr(exc, "message", None)
    if isinstance(msg, str) and msg:
        return msg
    text = str(exc)
    return text or fallback
