from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import jwt, JWTError
from passlib.hash import argon2

from . import config

PURPOSE_SESSION = "session"
PURPOSE_SIGNUP = "signup"
PURPOSE_RECOVERY = "recovery"

def hash_password(password: str) -> str:
    return argon2.hash(password)

def verify_password(password: str, password_hash: str) -> bool:
    try:
        return argon2.verify(password, password_hash)
    except (ValueError, TypeError):
        return False

def password_fingerprint(password_hash: str) -> str:
    # last chars of the argon2 digest; changes with every new hash
    return password_hash[-12:]

def create_access_token(sub: str, expires_minutes: Optional[int] = None) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes or config.ACCESS_EXPIRE_MIN)
    to_encode = {"sub": sub, "exp": expire, "purpose": PURPOSE_SESSION}
    return jwt.encode(to_encode, config.JWT_SECRET, algorithm=config.JWT_ALG)

def decode_token(token: str) -> Optional[str]:
    try:
        payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALG])
    except JWTError:
        return None
    if payload.get("purpose", PURPOSE_SESSION) != PURPOSE_SESSION:
        return None
    return payload.get("sub")

def create_action_token(sub: str, purpose: str, fingerprint: Optional[str] = None, expires_minutes: Optional[int] = None) -> str:
    """Signed one-purpose token embedded in confirmation and recovery links.

    Recovery tokens carry a fingerprint of the password hash at issue time, so
    they are rejected once the password has been changed.
    """
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes or config.ACTION_EXPIRE_MIN)
    to_encode = {"sub": sub, "exp": expire, "purpose": purpose}
    if fingerprint:
        to_encode["fp"] = fingerprint
    return jwt.encode(to_encode, config.JWT_SECRET, algorithm=config.JWT_ALG)

def decode_action_token(token: str, purpose: str) -> Optional[dict]:
    try:
        payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALG])
    except JWTError:
        return None
    if payload.get("purpose") != purpose or not payload.get("sub"):
        return None
    return payload
