import pytest

from fieldreports.services.report_validation import REQUIRED_FIELDS, validate_report


def _valid(**overrides):
    base = {
        "serial_report_number": "SR-1",
        "date": "2025-10-09",
        "customer_id": 1,
        "time_in": "09:00",
        "time_out": "10:00",
        "quotation": "Q",
        "purchase_order": "PO",
        "inventory": "INV",
        "machine_type": "LASER",
        "model": "M",
        "serial_number": "SN",
        "service_type": "SERVICE_CALL",
        "job_completed": "yes",
        "region_id": 1,
        "engineer_id": 1,
        "customer_phone_number": "123",
        "customer_designation": "Manager",
        "concern_name": "Omar",
        "service_report_picture": "a.jpg",
        "delivery_note_picture": "b.jpg",
    }
    base.update(overrides)
    return base


def test_valid_report_has_no_violations():
    assert validate_report(_valid()) == []


def test_every_missing_field_is_reported_at_once():
    violations = validate_report({})
    assert violations == [f"{f} is required" for f in REQUIRED_FIELDS]


def test_blank_strings_count_as_missing():
    violations = validate_report(_valid(model="   ", concern_name=""))
    assert "model is required" in violations
    assert "concern_name is required" in violations


def test_enum_values_are_checked():
    violations = validate_report(_valid(machine_type="PRINTER", job_completed="maybe"))
    assert any(v.startswith("machine_type must be one of:") for v in violations)
    assert any(v.startswith("job_completed must be one of:") for v in violations)


@pytest.mark.parametrize(
    "overrides, expected",
    [
        ({"machine_type": "OTHER"}, ["other_machine_type is required when machine_type is OTHER"]),
        ({"machine_type": "TTO"}, ["head_life is required when machine_type is TTO"]),
        (
            {"machine_type": "CIJ"},
            [
                "power_on_time is required when machine_type is CIJ",
                "jet_running_time is required when machine_type is CIJ",
                "ink_type is required when machine_type is CIJ",
                "solvent_type is required when machine_type is CIJ",
            ],
        ),
        ({"service_type": "OTHER"}, ["other_service_type is required when service_type is OTHER"]),
        (
            {"service_type": "NEW_INSTALLATION"},
            [
                "unicode is required when service_type is NEW_INSTALLATION",
                "configuration_code is required when service_type is NEW_INSTALLATION",
            ],
        ),
        ({"job_completed": "no"}, ["job_incomplete_reason is required when job_completed is no"]),
    ],
)
def test_conditional_fields(overrides, expected):
    assert validate_report(_valid(**overrides)) == expected


def test_conditional_field_satisfied():
    report = _valid(machine_type="CIJ", power_on_time="1", jet_running_time="2", ink_type="I", solvent_type="S")
    assert validate_report(report) == []


def test_conditional_fields_follow_current_sibling_value():
    # head_life only matters while machine_type is TTO
    assert validate_report(_valid(machine_type="LASER", head_life=None)) == []
