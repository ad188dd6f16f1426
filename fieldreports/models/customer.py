from __future__ import annotations

import datetime as dt
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fieldreports.db.base import Base

if TYPE_CHECKING:
    from fieldreports.models.region import Region


class Customer(Base):
    __tablename__ = "customers"
    __table_args__ = (UniqueConstraint("name", "region_id", name="uq_customers_name_region"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    # CUS-<REGIONCODE>-<YYYYMMDD>-<NNNN>
    customer_uid: Mapped[str] = mapped_column(String(40), nullable=False, unique=True, index=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    region_id: Mapped[int] = mapped_column(ForeignKey("regions.id"), nullable=False, index=True)

    # Soft delete
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False, default=lambda: dt.datetime.utcnow())
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=lambda: dt.datetime.utcnow(),
        onupdate=lambda: dt.datetime.utcnow(),
    )

    region: Mapped["Region"] = relationship("Region", lazy="joined")
