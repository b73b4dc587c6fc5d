from typing import Optional

from . import config
from .auth_provider import AuthProvider
from .errors import MailError
from .logging_config import get_logger
from .mailer import Mailer
from .templating import render_email

log = get_logger("notifier")

RESET_SUBJECT = "Reset Your Password"


def reset_redirect_target() -> str:
    return f"{config.SITE_URL}/auth/reset-password"


def notify_password_reset(auth: AuthProvider, mailer: Mailer, email: str) -> Optional[str]:
    """Issue a recovery link for ``email`` and mail it.

    Provider errors (``AuthError``) propagate. Delivery failures are logged and
    swallowed so callers never learn about the mail infrastructure. Returns the
    provider message id, or None when nothing was delivered.
    """
    link = auth.generate_recovery_link(email, reset_redirect_target())
    if link is None:
        log.info("password reset requested for unknown address")
        return None
    html = render_email("reset_password.html", reset_url=link)
    try:
        return mailer.send(email.strip(), RESET_SUBJECT, html)
    except MailError as e:
        log.error("password reset email failed: %s", e.message)
        return None
