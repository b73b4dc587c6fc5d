from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from fastapi.responses import RedirectResponse
from fastapi.security import OAuth2PasswordRequestForm
from typing import Optional

from . import config
from .auth_provider import AuthProvider
from .deps import get_auth
from .errors import AuthError
from .forms import ForgotPasswordForm, ResetPasswordForm, SignInForm, SignUpForm, sign_in_url
from .logging_config import get_logger
from .schemas import Token
from .templating import templates

log = get_logger("routes.auth")

router = APIRouter(tags=["auth"])

EMAIL_CONFIRMED_MESSAGE = "Email confirmed. You can now sign in"


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)


def set_session_cookie(response, token: str) -> None:
    response.set_cookie(
        config.SESSION_COOKIE_NAME,
        token,
        max_age=config.ACCESS_EXPIRE_MIN * 60,
        httponly=True,
        samesite="lax",
        secure=config.SESSION_COOKIE_SECURE,
        path="/",
    )


def _render(request: Request, name: str, form, status_code: int = 200):
    return templates.TemplateResponse(request, name, {"form": form}, status_code=status_code)


@router.get("/sign-in")
def sign_in_page(request: Request, message: Optional[str] = None):
    return _render(request, "sign_in.html", SignInForm(message=message))


@router.post("/sign-in")
def sign_in(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    auth: AuthProvider = Depends(get_auth),
):
    form = SignInForm(email=email.strip(), password=password)
    target = form.submit(auth)
    if target is None:
        return _render(request, "sign_in.html", form, status_code=400)
    resp = _redirect(target)
    set_session_cookie(resp, form.session.access_token)
    return resp


@router.get("/sign-up")
def sign_up_page(request: Request):
    return _render(request, "sign_up.html", SignUpForm())


@router.post("/sign-up")
def sign_up(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    confirm_password: str = Form(""),
    auth: AuthProvider = Depends(get_auth),
):
    form = SignUpForm(email=email.strip(), password=password, confirm_password=confirm_password)
    target = form.submit(auth)
    if target is None:
        return _render(request, "sign_up.html", form, status_code=400)
    return _redirect(target)


@router.get("/forgot-password")
def forgot_password_page(request: Request):
    return _render(request, "forgot_password.html", ForgotPasswordForm())


@router.post("/forgot-password")
def forgot_password(request: Request, email: str = Form(""), auth: AuthProvider = Depends(get_auth)):
    form = ForgotPasswordForm(email=email.strip())
    form.submit(auth)
    return _render(request, "forgot_password.html", form, status_code=400 if form.error else 200)


@router.get("/auth/reset-password")
def reset_password_page(request: Request, token: str = ""):
    return _render(request, "reset_password.html", ResetPasswordForm(token=token))


@router.post("/auth/reset-password")
def reset_password(
    request: Request,
    token: str = Form(""),
    password: str = Form(""),
    confirm_password: str = Form(""),
    auth: AuthProvider = Depends(get_auth),
):
    form = ResetPasswordForm(token=token, password=password, confirm_password=confirm_password)
    target = form.submit(auth)
    if target is None:
        return _render(request, "reset_password.html", form, status_code=400)
    return _redirect(target)


@router.get("/auth/callback")
def confirm_email(token: str = "", auth: AuthProvider = Depends(get_auth)):
    try:
        auth.confirm_email(token)
    except AuthError as e:
        return _redirect(sign_in_url(e.message))
    return _redirect(sign_in_url(EMAIL_CONFIRMED_MESSAGE))


@router.post("/api/auth/signout")
def sign_out():
    resp = _redirect("/sign-in")
    resp.delete_cookie(config.SESSION_COOKIE_NAME, path="/")
    return resp


@router.post("/auth/token", response_model=Token)
def issue_token(form_data: OAuth2PasswordRequestForm = Depends(), auth: AuthProvider = Depends(get_auth)):
    try:
        session = auth.sign_in_with_password(form_data.username, form_data.password)
    except AuthError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message)
    return Token(access_token=session.access_token)
