from datetime import datetime
from typing import Annotated, Optional

from pydantic import EmailStr, StringConstraints, field_validator

from invoice_server.core.config import settings
from invoice_server.schemas.common import CamelModel, NonEmptyStr

# bcrypt only reads the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72

Username = Annotated[str, StringConstraints(min_length=3, max_length=30, pattern=r"^[A-Za-z0-9]+$")]


class UserCreate(CamelModel):
    username: Username
    email: EmailStr
    password: str

    @field_validator('password')
    @classmethod
    def password_length(cls, v: str) -> str:
        if len(v) < settings.MIN_PASSWORD_LENGTH:
            raise ValueError(f'Password must be at least {settings.MIN_PASSWORD_LENGTH} characters')
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return v


class UserLogin(CamelModel):
    email: EmailStr
    password: NonEmptyStr


class UserResponse(CamelModel):
    id: int
    username: str
    email: str


class UserProfile(UserResponse):
    created_at: Optional[datetime] = None
