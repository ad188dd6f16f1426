from __future__ import annotations

import datetime as dt

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

# Bulk sheets use the camelCase column name; accept it on the JSON routes too
REGION_CODE_ALIASES = AliasChoices("region_code", "regionCode")


class RegionCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    code: str = Field(min_length=1, max_length=20)
    country: str | None = None
    is_active: bool = True


class RegionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    code: str
    country: str
    is_active: bool


class CustomerCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    region_code: str = Field(min_length=1, max_length=20, validation_alias=REGION_CODE_ALIASES)


class CustomerUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    region_code: str | None = Field(
        default=None, min_length=1, max_length=20, validation_alias=REGION_CODE_ALIASES
    )
    is_active: bool | None = None


class CustomerOut(BaseModel):
    """Public projection: region shown by name and code, never by id."""

    id: int
    customer_uid: str
    name: str
    region: str
    region_code: str
    is_active: bool = True
    created_at: dt.datetime | None = None

    @classmethod
    def from_model(cls, customer) -> "CustomerOut":
        region = customer.region
        return cls(
            id=customer.id,
            customer_uid=customer.customer_uid,
            name=customer.name,
            region=region.name if region else "N/A",
            region_code=region.code if region else "N/A",
            is_active=customer.is_active,
            created_at=customer.created_at,
        )
