"""Users: register, login, profile.

SECURITY FEATURES:
- Password hashing with bcrypt
- One generic 401 for unknown email and wrong password
- Token returned in the body; clients send it back as a Bearer header
"""
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from invoice_server.api.deps import get_db, get_current_user
from invoice_server.core.audit import AuditLog
from invoice_server.core.exceptions import BusinessError
from invoice_server.core.security import verify_password, get_password_hash, create_access_token
from invoice_server.db.unit_of_work import unit_of_work
from invoice_server.models.user import User
from invoice_server.schemas.user import UserCreate, UserLogin, UserProfile, UserResponse

router = APIRouter()


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _issue_token(user: User) -> str:
    return create_access_token(
        subject=str(user.id),
        claims={"userId": user.id, "username": user.username, "email": user.email},
    )


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(data: UserCreate, request: Request, db: Session = Depends(get_db)):
    """Register a new user and hand back a token straight away."""
    existing = (
        db.query(User)
        .filter(or_(User.email == data.email, User.username == data.username))
        .first()
    )
    if existing:
        AuditLog.log_authentication(
            "failed_register", data.email, _client_ip(request), False, reason="duplicate email or username"
        )
        raise BusinessError.conflict(
            "User already exists",
            message="A user with this email or username already exists",
        )

    with unit_of_work(db):
        user = User(
            username=data.username,
            email=data.email,
            password_hash=get_password_hash(data.password),
        )
        db.add(user)
    db.refresh(user)

    AuditLog.log_authentication("register", user.email, _client_ip(request), True, user_id=user.id)
    return {
        "message": "User registered successfully",
        "user": UserResponse.model_validate(user),
        "token": _issue_token(user),
    }


@router.post("/login")
def login(data: UserLogin, request: Request, db: Session = Depends(get_db)):
    """Exchange email + password for a token."""
    user = db.query(User).filter(User.email == data.email).first()
    if not user or not verify_password(data.password, user.password_hash):
        AuditLog.log_authentication(
            "failed_login", data.email, _client_ip(request), False, reason="invalid credentials"
        )
        # Generic error: don't specify which field is wrong
        raise BusinessError.unauthorized("invalid credentials", message="Invalid email or password")

    AuditLog.log_authentication("login", user.email, _client_ip(request), True, user_id=user.id)
    return {
        "message": "Login successful",
        "user": UserResponse.model_validate(user),
        "token": _issue_token(user),
    }


@router.get("/profile")
def profile(current_user: User = Depends(get_current_user)):
    """Get current authenticated user."""
    return {"user": UserProfile.model_validate(current_user)}
