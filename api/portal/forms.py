"""
Server-side state of the sign-in, sign-up, forgot-password and reset-password
forms.

Each form keeps its field values plus ``submitting``, ``error`` and (where the
screen shows one) ``message``; templates render fields disabled while
``disabled`` is true. ``submit`` returns the URL to redirect to on success, or
None when the form should be rendered again.
"""

from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlencode

from . import config
from .auth_provider import AuthProvider, AuthSession
from .errors import PortalError, ValidationError, error_message
from .logging_config import get_logger

log = get_logger("forms")

PASSWORD_MISMATCH = "Passwords do not match"
PASSWORD_TOO_SHORT = "Password must be at least 6 characters"
SIGNUP_CONFIRM_MESSAGE = "Check your email to confirm your account"
RESET_SENT_MESSAGE = "Check your email for a password reset link"
PASSWORD_UPDATED_MESSAGE = "Your password has been updated"


def sign_in_url(message: Optional[str] = None) -> str:
    if not message:
        return "/sign-in"
    return "/sign-in?" + urlencode({"message": message})


def _describe(exc: Exception) -> str:
    if not isinstance(exc, PortalError):
        log.exception("unexpected error while submitting form")
    return error_message(exc)


def _check_new_password(password: str, confirm_password: str) -> None:
    if password != confirm_password:
        raise ValidationError(PASSWORD_MISMATCH)
    if len(password) < 6:
        raise ValidationError(PASSWORD_TOO_SHORT)


@dataclass
class SignInForm:
    email: str = ""
    password: str = ""
    message: Optional[str] = None
    submitting: bool = False
    error: Optional[str] = None
    session: Optional[AuthSession] = field(default=None, repr=False)

    @property
    def disabled(self) -> bool:
        return self.submitting

    def submit(self, auth: AuthProvider) -> Optional[str]:
        self.error = None
        if not self.email or not self.password:
            self.error = "Email and password are required"
            return None
        self.submitting = True
        try:
            self.session = auth.sign_in_with_password(self.email, self.password)
            return "/dashboard"
        except Exception as e:
            self.error = _describe(e)
            return None
        finally:
            self.submitting = False


@dataclass
class SignUpForm:
    email: str = ""
    password: str = ""
    confirm_password: str = ""
    submitting: bool = False
    error: Optional[str] = None

    @property
    def disabled(self) -> bool:
        return self.submitting

    def submit(self, auth: AuthProvider) -> Optional[str]:
        self.error = None
        try:
            _check_new_password(self.password, self.confirm_password)
        except ValidationError as e:
            self.error = e.message
            return None
        self.submitting = True
        try:
            auth.sign_up(self.email, self.password, email_redirect_to=f"{config.SITE_URL}/auth/callback")
            return sign_in_url(SIGNUP_CONFIRM_MESSAGE)
        except Exception as e:
            self.error = _describe(e)
            return None
        finally:
            self.submitting = False


@dataclass
class ForgotPasswordForm:
    email: str = ""
    submitting: bool = False
    error: Optional[str] = None
    message: Optional[str] = None

    @property
    def disabled(self) -> bool:
        # locked for good once the link has been sent
        return self.submitting or self.message is not None

    def submit(self, auth: AuthProvider) -> Optional[str]:
        if self.disabled:
            return None
        self.error = None
        if not self.email:
            self.error = "Email is required"
            return None
        self.submitting = True
        try:
            auth.reset_password_for_email(self.email, redirect_to=f"{config.SITE_URL}/auth/reset-password")
            self.message = RESET_SENT_MESSAGE
        except Exception as e:
            self.error = _describe(e)
        finally:
            self.submitting = False
        return None


@dataclass
class ResetPasswordForm:
    token: str = ""
    password: str = ""
    confirm_password: str = ""
    submitting: bool = False
    error: Optional[str] = None

    @property
    def disabled(self) -> bool:
        return self.submitting

    def submit(self, auth: AuthProvider) -> Optional[str]:
        self.error = None
        try:
            _check_new_password(self.password, self.confirm_password)
        except ValidationError as e:
            self.error = e.message
            return None
        self.submitting = True
        try:
            auth.update_password(self.token, self.password)
            return sign_in_url(PASSWORD_UPDATED_MESSAGE)
        except Exception as e:
            self.error = _describe(e)
            return None
        finally:
            self.submitting = False
