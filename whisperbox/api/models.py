"""
Pydantic schemas for request/response validation.
"""

import uuid
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_serializer, field_validator

from whisperbox.database.core.security import BCRYPT_MAX_BYTES, password_fits_bcrypt
from whisperbox.database.entities import as_utc

USERNAME_PATTERN = r"^[a-zA-Z0-9_]+$"
EMAIL_PATTERN = r"^.+@.+\..+$"

Username = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=2, max_length=20, pattern=USERNAME_PATTERN),
]
Email = Annotated[str, StringConstraints(strip_whitespace=True, max_length=255, pattern=EMAIL_PATTERN)]


class UserData(BaseModel):
    """Registration payload."""

    username: Username
    email: Email
    password: str = Field(..., min_length=6, max_length=128)

    @field_validator("password")
    @classmethod
    def password_within_bcrypt_limit(cls, value: str) -> str:
        if not password_fits_bcrypt(value):
            raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes long")
        return value


class VerifCode(BaseModel):
    username: Username
    code: str = Field(..., pattern=r"^[0-9]{6}$")


class UserCredentials(BaseModel):
    """Sign-in payload; `identifier` is a username or an email."""

    identifier: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class AcceptMessages(BaseModel):
    accept_messages: bool


class NewMessage(BaseModel):
    content: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=300)]


class MessageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    content: str
    created_at: datetime

    @field_serializer("created_at")
    def serialize_created_at(self, value: datetime) -> str:
        return as_utc(value).isoformat()


class UserDetails(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    is_verified: bool
    is_accepting_messages: bool


class ApiResponse(BaseModel):
    """Standard response envelope."""

    success: bool
    message: str


class AcceptanceStatus(BaseModel):
    success: bool = True
    is_accepting_messages: bool


class AcceptanceUpdated(ApiResponse):
    user: UserDetails


class SessionResponse(ApiResponse):
    user_details: UserDetails


class MessageList(BaseModel):
    success: bool = True
    messages: list[MessageOut]
