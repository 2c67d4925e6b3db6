"""
Password hashing and token helpers.

Passwords are hashed with bcrypt through passlib. Tokens are HS256 JWTs
signed with python-jose. Access tokens carry ``type="access"``; single
purpose tokens (email verification, password reset) carry a ``purpose``
claim and cannot be used to authenticate requests.
"""

import re
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from edustack.core.errors import AuthenticationError, BadRequestError
from edustack.server.core.config import settings

PASSWORD_POLICY = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{8,}$")
PASSWORD_POLICY_MESSAGE = (
    "Password must be at least 8 characters and contain at least one uppercase letter, "
    "one lowercase letter, one number, and one special character"
)

EMAIL_VERIFICATION = "email_verification"
PASSWORD_RESET = "password_reset"

_PURPOSE_TTL = {
    EMAIL_VERIFICATION: timedelta(days=2),
    PASSWORD_RESET: timedelta(hours=1),
}


@lru_cache(maxsize=1)
def _pwd_context() -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.bcrypt_rounds)


def check_password_policy(password: str) -> str:
    """Return ``password`` unchanged or raise ``ValueError`` if it is too weak."""
    if not PASSWORD_POLICY.match(password):
        raise ValueError(PASSWORD_POLICY_MESSAGE)
    return password


def hash_password(password: str) -> str:
    return _pwd_context().hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return _pwd_context().verify(password, password_hash)


def _encode(claims: Dict[str, Any], ttl: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = {**claims, "iat": now, "exp": now + ttl}
    return jwt.encode(payload, settings.jwt.secret, algorithm=settings.jwt.algorithm)


def _decode(token: str) -> Dict[str, Any]:
    return jwt.decode(token, settings.jwt.secret, algorithms=[settings.jwt.algorithm])


def create_access_token(user_id: str, expires_minutes: Optional[int] = None) -> str:
    """Issue an access token for ``user_id``."""
    ttl = timedelta(minutes=expires_minutes or settings.jwt.expires_minutes)
    return _encode({"sub": user_id, "type": "access"}, ttl)


def decode_access_token(token: str) -> str:
    """Return the user id carried by a valid access token.

    Raises:
        AuthenticationError: The token is malformed, expired or not an access token.
    """
    try:
        payload = _decode(token)
    except JWTError as e:
        raise AuthenticationError("Token is not valid") from e
    if payload.get("type") != "access" or not payload.get("sub"):
        raise AuthenticationError("Token is not valid")
    return payload["sub"]


def create_purpose_token(user_id: str, purpose: str) -> str:
    """Issue a single-purpose token such as an email verification link token."""
    return _encode({"sub": user_id, "type": "purpose", "purpose": purpose}, _PURPOSE_TTL[purpose])


def decode_purpose_token(token: str, purpose: str) -> str:
    """Return the user id of a valid ``purpose`` token or raise ``BadRequestError``."""
    try:
        payload = _decode(token)
    except JWTError as e:
        raise BadRequestError("Invalid or expired token") from e
    if payload.get("purpose") != purpose or not payload.get("sub"):
        raise BadRequestError("Invalid or expired token")
    return payload["sub"]
