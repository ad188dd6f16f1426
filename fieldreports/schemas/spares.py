from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field


class SpareCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    # Generated as SPR-<YYYYMMDD>-<NNNN> when omitted
    code: str | None = Field(default=None, max_length=60)


class SpareUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    code: str | None = Field(default=None, min_length=1, max_length=60)
    is_active: bool | None = None


class SpareOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    code: str
    is_active: bool
    created_at: dt.datetime
