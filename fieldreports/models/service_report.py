from __future__ import annotations

import datetime as dt
import enum
from typing import TYPE_CHECKING

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fieldreports.db.base import Base

if TYPE_CHECKING:
    from fieldreports.models.customer import Customer
    from fieldreports.models.region import Region
    from fieldreports.models.spare_part import SparePart
    from fieldreports.models.user import User


class MachineType(str, enum.Enum):
    CIJ = "CIJ"
    LASER = "LASER"
    TTO = "TTO"
    PALLET = "PALLET"
    TAPPING = "TAPPING"
    SCALE = "SCALE"
    OTHER = "OTHER"


class ServiceType(str, enum.Enum):
    NEW_INSTALLATION = "NEW_INSTALLATION"
    DEMO = "DEMO"
    SERVICE_CALL = "SERVICE_CALL"
    AMC = "AMC"
    WARRANTY = "WARRANTY"
    FILTERS_REPLACEMENT = "FILTERS_REPLACEMENT"
    OTHER = "OTHER"


class JobCompleted(str, enum.Enum):
    YES = "yes"
    NO = "no"


service_report_spares = Table(
    "service_report_spares",
    Base.metadata,
    Column("report_id", ForeignKey("service_reports.id", ondelete="CASCADE"), primary_key=True),
    Column("spare_part_id", ForeignKey("spare_parts.id"), primary_key=True),
)


class ServiceReport(Base):
    __tablename__ = "service_reports"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    serial_report_number: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)

    # Free-form, as typed on the paper report
    date: Mapped[str] = mapped_column(String(40), nullable=False)
    time_in: Mapped[str] = mapped_column(String(40), nullable=False)
    time_out: Mapped[str] = mapped_column(String(40), nullable=False)
    quotation: Mapped[str] = mapped_column(String(120), nullable=False)
    purchase_order: Mapped[str] = mapped_column(String(120), nullable=False)
    inventory: Mapped[str] = mapped_column(String(120), nullable=False)

    machine_type: Mapped[str] = mapped_column(String(20), nullable=False)
    other_machine_type: Mapped[str | None] = mapped_column(String(120), nullable=True)
    head_life: Mapped[str | None] = mapped_column(String(60), nullable=True)
    power_on_time: Mapped[str | None] = mapped_column(String(60), nullable=True)
    jet_running_time: Mapped[str | None] = mapped_column(String(60), nullable=True)
    ink_type: Mapped[str | None] = mapped_column(String(120), nullable=True)
    solvent_type: Mapped[str | None] = mapped_column(String(120), nullable=True)
    service_due_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)

    model: Mapped[str] = mapped_column(String(120), nullable=False)
    serial_number: Mapped[str] = mapped_column(String(120), nullable=False)

    service_type: Mapped[str] = mapped_column(String(30), nullable=False)
    other_service_type: Mapped[str | None] = mapped_column(String(120), nullable=True)
    unicode: Mapped[str | None] = mapped_column(String(120), nullable=True)
    configuration_code: Mapped[str | None] = mapped_column(String(120), nullable=True)

    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    job_completed: Mapped[str] = mapped_column(String(3), nullable=False)
    job_incomplete_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    customer_id: Mapped[int] = mapped_column(ForeignKey("customers.id"), nullable=False, index=True)
    region_id: Mapped[int] = mapped_column(ForeignKey("regions.id"), nullable=False, index=True)
    engineer_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)

    customer_phone_number: Mapped[str] = mapped_column(String(40), nullable=False)
    customer_designation: Mapped[str] = mapped_column(String(120), nullable=False)
    concern_name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Attachment references (URL or storage key)
    service_report_picture: Mapped[str] = mapped_column(String(500), nullable=False)
    delivery_note_picture: Mapped[str] = mapped_column(String(500), nullable=False)

    # "YYYY-MM-DD HH:MM" in the configured regional offset
    date_entered: Mapped[str] = mapped_column(String(16), nullable=False)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False, default=lambda: dt.datetime.utcnow())
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=lambda: dt.datetime.utcnow(),
        onupdate=lambda: dt.datetime.utcnow(),
    )

    customer: Mapped["Customer | None"] = relationship("Customer", lazy="joined")
    region: Mapped["Region | None"] = relationship("Region", lazy="joined")
    engineer: Mapped["User | None"] = relationship("User", lazy="joined")
    spare_parts: Mapped[list["SparePart"]] = relationship(
        "SparePart",
        secondary=service_report_spares,
        lazy="selectin",
    )
