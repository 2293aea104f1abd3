"""Password hashing (bcrypt) and JWT issue/verify.

The rest of the service only ever sees the user id carried in `sub`;
identity is never re-derived another way.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from invoice_server.core.config import settings
from invoice_server.core.exceptions import BusinessError


def get_password_hash(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def create_access_token(
    subject: str,
    claims: Optional[Dict[str, Any]] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Sign a token for `subject` (the user id) with optional extra claims."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = dict(claims or {})
    to_encode.update({"sub": str(subject), "exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify signature and expiry and return the claims.

    Raises InvalidToken (403). Expired and malformed tokens get different
    wording, nothing more.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        raise BusinessError.forbidden("expired token", error="Token expired")
    except JWTError as exc:
        raise BusinessError.forbidden(f"undecodable token ({type(exc).__name__})")

    if not payload.get("sub"):
        raise BusinessError.forbidden("token without subject")
    return payload
