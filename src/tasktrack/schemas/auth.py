"""Pydantic schemas for registration, login and the current user.

Learn: UserPublic is the ONLY shape a user ever leaves the API in —
id, username, email. The password hash has no field to land in.
"""

import uuid
from typing import Annotated

from pydantic import BaseModel, EmailStr, Field, StringConstraints, field_validator

Username = Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=20)]


class RegisterRequest(BaseModel):
    username: Username
    email: EmailStr
    password: str = Field(min_length=6)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class UserPublic(BaseModel):
    id: uuid.UUID
    username: str
    email: str

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserPublic


class MeResponse(BaseModel):
    user: UserPublic
