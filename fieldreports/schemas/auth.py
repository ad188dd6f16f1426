from __future__ import annotations

from pydantic import BaseModel, Field

from fieldreports.models.user import Role


class SignupIn(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    username: str = Field(min_length=1, max_length=120)

    # bcrypt hard limit is 72 bytes; enforce it at validation time
    password: str = Field(min_length=8, max_length=72)
    password_confirm: str = Field(min_length=1, max_length=72)

    # Region code, e.g. "RYD"
    region: str | None = None
    # Self-registration is always ENG; anything else is granted by an admin
    role: Role | None = None


class LoginIn(BaseModel):
    username: str | None = None
    password: str | None = Field(default=None, max_length=72)


class UpdateMeIn(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    username: str | None = Field(default=None, min_length=1, max_length=120)
    password: str | None = None
    password_confirm: str | None = None


class PasswordUpdateIn(BaseModel):
    password_current: str = Field(min_length=1, max_length=72)
    password: str = Field(min_length=8, max_length=72)
    password_confirm: str = Field(min_length=1, max_length=72)
