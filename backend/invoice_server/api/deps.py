"""FastAPI dependencies: DB session and current user from JWT.

SECURITY: Token comes from the `Authorization: Bearer <token>` header only.
Missing token -> 401, present but invalid/expired -> 403.

With API_SECURE=false every request is served as user 1 and a warning is
logged each time. Development only.
"""
import logging
from datetime import datetime
from typing import Callable, Generator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from invoice_server.core.audit import AuditLog
from invoice_server.core.config import settings
from invoice_server.core.exceptions import BusinessError
from invoice_server.core.security import decode_access_token
from invoice_server.db.base import record_id_in_range
from invoice_server.db.session import SessionLocal
from invoice_server.models.user import User

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

DEV_USER_ID = 1


def get_db() -> Generator[Session, None, None]:
    """One session per request, released on every exit path."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_clock() -> Callable[[], datetime]:
    """Source of "now" for invoice numbering; overridden in tests."""
    return datetime.now


def get_current_user_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> int:
    """
    Extract user ID from JWT token.
    The returned id is the ownership scope for every per-user query.
    """
    if not settings.API_SECURE:
        logger.warning(
            f"Authentication bypassed - API_SECURE is disabled ({request.method} {request.url.path})"
        )
        AuditLog.log_security_bypass(request.method, request.url.path)
        return DEV_USER_ID

    if not credentials or not credentials.credentials:
        raise BusinessError.unauthorized(
            "missing bearer token", message="Access denied. No token provided."
        )

    claims = decode_access_token(credentials.credentials)
    try:
        user_id = int(claims["sub"])
    except (TypeError, ValueError):
        raise BusinessError.forbidden("non-numeric token subject")
    if not record_id_in_range(user_id):
        raise BusinessError.forbidden(f"token subject {user_id} out of range")
    return user_id


def get_current_user(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> User:
    """Load current user from DB."""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise BusinessError.not_found("User", reason=f"token subject {user_id} has no row")
    return user
