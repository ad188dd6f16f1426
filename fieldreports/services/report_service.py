from __future__ import annotations

import datetime as dt
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from fieldreports.core.errors import NotFoundError, ValidationError
from fieldreports.core.permissions import ReportScope
from fieldreports.models.customer import Customer
from fieldreports.models.region import Region
from fieldreports.models.service_report import ServiceReport
from fieldreports.models.spare_part import SparePart
from fieldreports.models.user import User
from fieldreports.services.report_validation import validate_report

PLACEHOLDER = "-"

# Columns copied straight from the payload onto the model
_PLAIN_FIELDS = (
    "serial_report_number",
    "date",
    "time_in",
    "time_out",
    "quotation",
    "purchase_order",
    "inventory",
    "machine_type",
    "other_machine_type",
    "head_life",
    "power_on_time",
    "jet_running_time",
    "ink_type",
    "solvent_type",
    "service_due_date",
    "model",
    "serial_number",
    "service_type",
    "other_service_type",
    "unicode",
    "configuration_code",
    "description",
    "job_completed",
    "job_incomplete_reason",
    "customer_phone_number",
    "customer_designation",
    "concern_name",
    "service_report_picture",
    "delivery_note_picture",
)


def entered_at(offset_hours: int, now: dt.datetime | None = None) -> str:
    """'YYYY-MM-DD HH:MM' in a fixed UTC offset (KSA is +3)."""
    tz = dt.timezone(dt.timedelta(hours=offset_hours))
    moment = (now or dt.datetime.now(dt.timezone.utc)).astimezone(tz)
    return moment.strftime("%Y-%m-%d %H:%M")


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def create_report(db: Session, data: dict[str, Any], offset_hours: int) -> ServiceReport:
    if not data.get("region_id") or not data.get("engineer_id"):
        raise ValidationError("Missing region or engineer")

    data = {k: _strip(v) for k, v in data.items()}
    violations = validate_report(data)
    if violations:
        raise ValidationError("Invalid input data. " + ". ".join(violations))

    customer = db.get(Customer, data["customer_id"])
    if customer is None:
        raise ValidationError(f"No customer found with id {data['customer_id']}")
    region = db.get(Region, data["region_id"])
    if region is None:
        raise ValidationError(f"No region found with id {data['region_id']}")
    engineer = db.get(User, data["engineer_id"])
    if engineer is None:
        raise ValidationError(f"No engineer found with id {data['engineer_id']}")

    spare_ids = list(dict.fromkeys(data.get("spare_ids") or []))
    spares: list[SparePart] = []
    if spare_ids:
        spares = list(db.scalars(select(SparePart).where(SparePart.id.in_(spare_ids))))
        missing = sorted(set(spare_ids) - {s.id for s in spares})
        if missing:
            raise ValidationError(f"No spare part found with id {', '.join(map(str, missing))}")

    report = ServiceReport(**{f: data.get(f) for f in _PLAIN_FIELDS})
    report.customer = customer
    report.region = region
    report.engineer = engineer
    report.spare_parts = spares
    report.date_entered = entered_at(offset_hours)

    db.add(report)
    db.commit()
    db.refresh(report)
    return report


def list_reports(db: Session, scope: ReportScope) -> list[ServiceReport]:
    query = scope.apply(select(ServiceReport)).order_by(ServiceReport.id.desc())
    return list(db.scalars(query).unique())


def get_report_or_404(db: Session, report_id: int) -> ServiceReport:
    report = db.get(ServiceReport, report_id)
    if report is None:
        raise NotFoundError("Report not found")
    return report


# ----------------------------
# Wire projections (labels only, never foreign keys)
# ----------------------------

def _labels(report: ServiceReport) -> dict[str, Any]:
    return {
        "customer": report.customer.name if report.customer else PLACEHOLDER,
        "region": report.region.name if report.region else PLACEHOLDER,
        "engineer": report.engineer.username if report.engineer else PLACEHOLDER,
        "spare_parts": [s.name for s in report.spare_parts] or [PLACEHOLDER],
    }


def report_to_list_item(report: ServiceReport) -> dict[str, Any]:
    item: dict[str, Any] = {"id": report.id}
    item.update({f: getattr(report, f) for f in _PLAIN_FIELDS})
    item.update(_labels(report))
    item["date_entered"] = report.date_entered
    item["created_at"] = report.created_at
    return item


def report_to_detail(report: ServiceReport) -> dict[str, Any]:
    labels = _labels(report)
    return {
        "id": report.id,
        "serial_report_number": report.serial_report_number,
        "date": report.date,
        "customer": labels["customer"],
        "region": labels["region"],
        "engineer": labels["engineer"],
        "spare_parts": labels["spare_parts"],
        "quotation": report.quotation,
        "purchase_order": report.purchase_order,
        "inventory": report.inventory,
        "machine_type": report.machine_type,
        "model": report.model,
        "serial_number": report.serial_number,
        "service_type": report.service_type,
        "job_completed": report.job_completed,
        "job_incomplete_reason": report.job_incomplete_reason,
        "description": report.description,
        "date_entered": report.date_entered,
    }
