from __future__ import annotations

import datetime as dt

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from fieldreports.db.base import Base


class SequenceCounter(Base):
    """Last number handed out per (scope, day); advanced only by services.sequence."""

    __tablename__ = "sequence_counters"

    scope: Mapped[str] = mapped_column(String(60), primary_key=True)
    day: Mapped[str] = mapped_column(String(8), primary_key=True)  # YYYYMMDD
    value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    updated_at: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False, default=lambda: dt.datetime.utcnow())
