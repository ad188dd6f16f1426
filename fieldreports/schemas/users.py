from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field

from fieldreports.models.user import Role
from fieldreports.schemas.customers import RegionOut


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    name: str
    role: str
    region: RegionOut | None = None
    is_active: bool
    created_at: dt.datetime


class UserCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    username: str = Field(min_length=1, max_length=120)
    password: str = Field(min_length=8, max_length=72)
    role: Role = Role.ENG
    # Region name or code
    region: str | None = None


class UserUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    username: str | None = Field(default=None, min_length=1, max_length=120)
    role: Role | None = None
    # Region name or code
    region: str | None = None
    is_active: bool | None = None
