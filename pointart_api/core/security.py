"""
Password hashing and the signed tokens handed out at sign-in.

Both tokens name the user (`sub`) and the sign-in session (`sid`); the
session row is what makes them revocable.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Literal, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from pointart_api.core.settings import get_app_settings

TokenKind = Literal["access", "refresh"]

_passwords = CryptContext(schemes=["bcrypt"], deprecated="auto")


# PUBLIC_INTERFACE
def hash_password(password: str) -> str:
    return _passwords.hash(password)


# PUBLIC_INTERFACE
def verify_password(password: str, hashed: str) -> bool:
    return _passwords.verify(password, hashed)


def _lifetime(kind: TokenKind) -> timedelta:
    settings = get_app_settings()
    minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES if kind == "access" else settings.REFRESH_TOKEN_EXPIRE_MINUTES
    return timedelta(minutes=minutes)


# PUBLIC_INTERFACE
def issue_token(kind: TokenKind, user_id: str, session_id: str, **claims: Any) -> str:
    """Sign a token of the given kind; extra claims are copied in as-is."""
    settings = get_app_settings()
    issued = datetime.now(tz=timezone.utc)
    payload: Dict[str, Any] = {
        **claims,
        "sub": user_id,
        "sid": session_id,
        "type": kind,
        "iat": issued,
        "exp": issued + _lifetime(kind),
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


# PUBLIC_INTERFACE
def decode_token(token: str, expected: Optional[TokenKind] = None) -> Dict[str, Any]:
    """
    Verify signature and expiry and return the claims.

    Raises:
        JWTError: bad signature, expired, missing sub/sid, or not of the expected kind.
    """
    settings = get_app_settings()
    claims = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    if expected is not None and claims.get("type") != expected:
        raise JWTError(f"Expected a {expected} token")
    if not claims.get("sub") or not claims.get("sid"):
        raise JWTError("Token lacks subject or session")
    return claims
