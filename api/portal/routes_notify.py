from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from .auth_provider import AuthProvider
from .deps import get_auth
from .errors import AuthError
from .logging_config import get_logger
from .mailer import Mailer, get_mailer
from .notifier import notify_password_reset

log = get_logger("routes.notify")

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/reset-password")
async def request_password_reset(
    request: Request,
    auth: AuthProvider = Depends(get_auth),
    mailer: Mailer = Depends(get_mailer),
):
    try:
        body = await request.json()
        email = body.get("email") if isinstance(body, dict) else None
        if not email:
            return JSONResponse({"error": "Email is required"}, status_code=400)
        try:
            notify_password_reset(auth, mailer, email)
        except AuthError as e:
            return JSONResponse({"error": e.message}, status_code=400)
        return JSONResponse({"message": "Password reset email sent"}, status_code=200)
    except Exception:
        log.exception("password reset request failed")
        return JSONResponse({"error": "An error occurred"}, status_code=500)
