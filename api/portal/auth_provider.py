"""
Account management: credential checks, sign-up with email confirmation,
password recovery and session lookup.

Errors are raised as ``AuthError`` with the message a sign-in screen should
show verbatim.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlencode

from email_validator import validate_email, EmailNotValidError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import config
from .auth_utils import (
    PURPOSE_RECOVERY,
    PURPOSE_SIGNUP,
    create_access_token,
    create_action_token,
    decode_action_token,
    decode_token,
    hash_password,
    password_fingerprint,
    verify_password,
)
from .errors import AuthError, MailError
from .logging_config import get_logger
from .mailer import Mailer
from .models import User
from .templating import render_email

log = get_logger("auth")

MIN_PASSWORD_LENGTH = 6


@dataclass
class AuthSession:
    access_token: str
    user: User
    token_type: str = "bearer"


def normalize_email(email: str) -> str:
    try:
        return validate_email(email.strip(), check_deliverability=False).normalized.lower()
    except EmailNotValidError:
        raise AuthError("Unable to validate email address: invalid format", code="email_address_invalid")


def _with_token(url: str, token: str) -> str:
    sep = "&" if "?" in url else "?"
    return f"{url}{sep}{urlencode({'token': token})}"


class AuthProvider:
    def __init__(self, db: Session, mailer: Mailer):
        self.db = db
        self.mailer = mailer

    def _find(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        if not email or not password:
            raise AuthError("Missing email or password", code="validation_failed")
        user = self._find(normalize_email(email))
        if not user or not verify_password(password, user.password_hash):
            raise AuthError("Invalid login credentials", code="invalid_credentials")
        if not user.is_active:
            raise AuthError("User is banned", code="user_banned")
        if config.REQUIRE_EMAIL_CONFIRMATION and user.email_confirmed_at is None:
            raise AuthError("Email not confirmed", code="email_not_confirmed")
        log.info("sign-in user_id=%s", user.id)
        return AuthSession(access_token=create_access_token(sub=user.email), user=user)

    def sign_up(self, email: str, password: str, email_redirect_to: Optional[str] = None) -> User:
        """Create an account and send the confirmation email.

        An existing unconfirmed account gets a fresh password hash and a new
        confirmation link; a confirmed one is refused.
        """
        addr = normalize_email(email)
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise AuthError(f"Password should be at least {MIN_PASSWORD_LENGTH} characters", code="weak_password")
        user = self._find(addr)
        if user and user.email_confirmed_at is not None:
            raise AuthError("User already registered", code="user_already_exists")
        try:
            if user is None:
                user = User(email=addr, password_hash=hash_password(password))
                self.db.add(user)
            else:
                user.password_hash = hash_password(password)
            if not config.REQUIRE_EMAIL_CONFIRMATION:
                user.email_confirmed_at = datetime.now(timezone.utc)
            self.db.commit()
            self.db.refresh(user)
        except SQLAlchemyError as e:
            self.db.rollback()
            log.error("sign-up failed for %s: %s", addr, e)
            raise AuthError("Database error saving new user", code="unexpected_failure") from e

        if config.REQUIRE_EMAIL_CONFIRMATION:
            link = _with_token(
                email_redirect_to or f"{config.SITE_URL}/auth/callback",
                create_action_token(user.email, PURPOSE_SIGNUP),
            )
            html = render_email("confirm_signup.html", confirm_url=link, email=user.email)
            try:
                self.mailer.send(user.email, "Confirm your signup", html)
            except MailError as e:
                log.error("confirmation email to %s failed: %s", user.email, e.message)
                raise AuthError("Error sending confirmation email", code="email_send_failed") from e
        log.info("sign-up user_id=%s", user.id)
        return user

    def confirm_email(self, token: str) -> User:
        payload = decode_action_token(token or "", PURPOSE_SIGNUP)
        user = self._find(payload["sub"]) if payload else None
        if not user:
            raise AuthError("Email link is invalid or has expired", code="otp_expired")
        if user.email_confirmed_at is None:
            user.email_confirmed_at = datetime.now(timezone.utc)
            self.db.commit()
        return user

    def generate_recovery_link(self, email: str, redirect_to: str) -> Optional[str]:
        """Recovery link for ``email``, or None when no such account exists."""
        user = self._find(normalize_email(email))
        if not user or not user.is_active:
            return None
        token = create_action_token(user.email, PURPOSE_RECOVERY, fingerprint=password_fingerprint(user.password_hash))
        return _with_token(redirect_to, token)

    def reset_password_for_email(self, email: str, redirect_to: Optional[str] = None) -> None:
        """Send the recovery email. Unknown addresses succeed silently."""
        link = self.generate_recovery_link(email, redirect_to or f"{config.SITE_URL}/auth/reset-password")
        if link is None:
            log.info("recovery requested for unknown address")
            return
        html = render_email("reset_password.html", reset_url=link)
        try:
            self.mailer.send(normalize_email(email), "Reset Your Password", html)
        except MailError as e:
            log.error("recovery email failed: %s", e.message)
            raise AuthError("Error sending recovery email", code="email_send_failed") from e

    def update_password(self, token: str, new_password: str) -> User:
        payload = decode_action_token(token or "", PURPOSE_RECOVERY)
        user = self._find(payload["sub"]) if payload else None
        if not user or payload.get("fp") != password_fingerprint(user.password_hash):
            raise AuthError("Email link is invalid or has expired", code="otp_expired")
        if len(new_password or "") < MIN_PASSWORD_LENGTH:
            raise AuthError(f"Password should be at least {MIN_PASSWORD_LENGTH} characters", code="weak_password")
        user.password_hash = hash_password(new_password)
        # following the recovery link proves ownership of the address
        if user.email_confirmed_at is None:
            user.email_confirmed_at = datetime.now(timezone.utc)
        self.db.commit()
        log.info("password updated user_id=%s", user.id)
        return user

    def get_user(self, access_token: Optional[str]) -> Optional[User]:
        if not access_token:
            return None
        sub = decode_token(access_token)
        if not sub:
            return None
        user = self._find(sub)
        if not user or not user.is_active:
            return None
        return user
