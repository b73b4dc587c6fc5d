from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from typing import Optional

from . import config
from .auth_provider import AuthProvider
from .db import get_db
from .errors import SessionRequired
from .mailer import Mailer, get_mailer
from .models import User
from .storage import ObjectStorage, get_storage

# Bearer header for API clients; browser pages carry the token in a cookie
oauth2_optional = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)

def get_auth(db: Session = Depends(get_db), mailer: Mailer = Depends(get_mailer)) -> AuthProvider:
    return AuthProvider(db, mailer)

def get_object_storage() -> ObjectStorage:
    return get_storage()

def session_token(request: Request, bearer: Optional[str] = Depends(oauth2_optional)) -> Optional[str]:
    return bearer or request.cookies.get(config.SESSION_COOKIE_NAME)

def get_optional_user(token: Optional[str] = Depends(session_token), auth: AuthProvider = Depends(get_auth)) -> Optional[User]:
    return auth.get_user(token)

def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return user

def require_session(user: Optional[User] = Depends(get_optional_user)) -> User:
    """Session gate for HTML pages.

    Runs before the page handler; without a valid session the request is
    answered with a redirect to sign-in and the handler never runs.
    """
    if user is None:
        raise SessionRequired("/sign-in")
    return user
