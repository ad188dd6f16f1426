from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, Field


class ReportCreate(BaseModel):
    """
    Incoming service report.

    Everything is optional at this layer: required and conditionally required
    fields are checked together by services.report_validation so the caller
    gets every problem in one response.
    """

    serial_report_number: str | None = None
    date: str | None = None
    time_in: str | None = None
    time_out: str | None = None
    quotation: str | None = None
    purchase_order: str | None = None
    inventory: str | None = None

    machine_type: str | None = None
    other_machine_type: str | None = None
    head_life: str | None = None
    power_on_time: str | None = None
    jet_running_time: str | None = None
    ink_type: str | None = None
    solvent_type: str | None = None
    service_due_date: dt.date | None = None

    model: str | None = None
    serial_number: str | None = None

    service_type: str | None = None
    other_service_type: str | None = None
    unicode: str | None = None
    configuration_code: str | None = None

    description: str | None = None

    job_completed: str | None = None
    job_incomplete_reason: str | None = None

    customer_id: int | None = None
    region_id: int | None = None
    engineer_id: int | None = None
    spare_ids: list[int] = Field(default_factory=list)

    customer_phone_number: str | None = None
    customer_designation: str | None = None
    concern_name: str | None = None

    service_report_picture: str | None = None
    delivery_note_picture: str | None = None
