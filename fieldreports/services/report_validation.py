"""
Field rules for service reports.

validate_report() looks at a whole candidate record and returns every
violated rule, so one response can list all missing fields. Conditional
fields depend only on the current value of their sibling field.
"""
from __future__ import annotations

from typing import Any, Mapping

from fieldreports.models.service_report import JobCompleted, MachineType, ServiceType

REQUIRED_FIELDS: tuple[str, ...] = (
    "serial_report_number",
    "date",
    "customer_id",
    "time_in",
    "time_out",
    "quotation",
    "purchase_order",
    "inventory",
    "machine_type",
    "model",
    "serial_number",
    "service_type",
    "job_completed",
    "region_id",
    "engineer_id",
    "customer_phone_number",
    "customer_designation",
    "concern_name",
    "service_report_picture",
    "delivery_note_picture",
)

ENUM_FIELDS: dict[str, tuple[str, ...]] = {
    "machine_type": tuple(m.value for m in MachineType),
    "service_type": tuple(s.value for s in ServiceType),
    "job_completed": tuple(j.value for j in JobCompleted),
}

# (sibling field, sibling value) -> fields that become required
CONDITIONAL_FIELDS: dict[tuple[str, str], tuple[str, ...]] = {
    ("machine_type", MachineType.OTHER.value): ("other_machine_type",),
    ("machine_type", MachineType.TTO.value): ("head_life",),
    ("machine_type", MachineType.CIJ.value): ("power_on_time", "jet_running_time", "ink_type", "solvent_type"),
    ("service_type", ServiceType.OTHER.value): ("other_service_type",),
    ("service_type", ServiceType.NEW_INSTALLATION.value): ("unicode", "configuration_code"),
    ("job_completed", JobCompleted.NO.value): ("job_incomplete_reason",),
}


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def validate_report(candidate: Mapping[str, Any]) -> list[str]:
    violations: list[str] = []

    for field in REQUIRED_FIELDS:
        if _is_blank(candidate.get(field)):
            violations.append(f"{field} is required")

    for field, allowed in ENUM_FIELDS.items():
        value = candidate.get(field)
        if not _is_blank(value) and value not in allowed:
            violations.append(f"{field} must be one of: {', '.join(allowed)}")

    for (sibling, trigger), fields in CONDITIONAL_FIELDS.items():
        if candidate.get(sibling) != trigger:
            continue
        for field in fields:
            if _is_blank(candidate.get(field)):
                violations.append(f"{field} is required when {sibling} is {trigger}")

    return violations
