import re

import pytest

from fieldreports.models.user import Role, User


@pytest.fixture
def world(seed, riyadh, jeddah):
    """Two regions, an engineer in each, one customer each, one report each."""
    eng_ryd = seed.user(Role.ENG, region=riyadh, username="eng-ryd")
    eng_jed = seed.user(Role.ENG, region=jeddah, username="eng-jed")
    acme = seed.customer("Acme", riyadh)
    beta = seed.customer("Beta", jeddah)
    r1 = seed.report(acme, eng_ryd, riyadh, serial="R1")
    r2 = seed.report(beta, eng_jed, jeddah, serial="R2")
    return {
        "riyadh": riyadh,
        "jeddah": jeddah,
        "eng_ryd": eng_ryd,
        "eng_jed": eng_jed,
        "acme": acme,
        "r1": r1,
        "r2": r2,
    }


# ----------------------------
# Create
# ----------------------------

def test_submit_report_resolves_labels(client, seed, riyadh):
    engineer = seed.user(Role.ENG, region=riyadh)
    customer = seed.customer("Acme", riyadh)
    spare = seed.spare("Valve", "V-1")
    payload = seed.report_payload(customer, engineer, riyadh, spare_ids=[spare.id])

    resp = client.post("/api/v1/reports", json=payload, headers=seed.headers(engineer))
    assert resp.status_code == 201
    report = resp.json()["data"]["report"]
    assert report["customer"] == "Acme"
    assert report["region"] == "Riyadh"
    assert report["engineer"] == engineer.username
    assert report["spare_parts"] == ["Valve"]
    assert re.match(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}$", report["date_entered"])
    assert "customer_id" not in report


def test_submit_report_lists_every_violation(client, seed, riyadh):
    engineer = seed.user(Role.ENG, region=riyadh)
    customer = seed.customer("Acme", riyadh)
    payload = seed.report_payload(customer, engineer, riyadh, machine_type="CIJ", job_completed="no", model="")

    resp = client.post("/api/v1/reports", json=payload, headers=seed.headers(engineer))
    assert resp.status_code == 400
    message = resp.json()["message"]
    assert message.startswith("Invalid input data.")
    assert "model is required" in message
    assert "ink_type is required when machine_type is CIJ" in message
    assert "job_incomplete_reason is required when job_completed is no" in message


def test_submit_report_needs_region_and_engineer(client, seed, riyadh):
    engineer = seed.user(Role.ENG, region=riyadh)
    customer = seed.customer("Acme", riyadh)
    payload = seed.report_payload(customer, engineer, riyadh, region_id=None)

    resp = client.post("/api/v1/reports", json=payload, headers=seed.headers(engineer))
    assert resp.status_code == 400
    assert resp.json()["message"] == "Missing region or engineer"


def test_submit_report_rejects_unknown_references(client, seed, riyadh):
    engineer = seed.user(Role.ENG, region=riyadh)
    customer = seed.customer("Acme", riyadh)
    headers = seed.headers(engineer)

    bad_customer = seed.report_payload(customer, engineer, riyadh, customer_id=9999)
    assert client.post("/api/v1/reports", json=bad_customer, headers=headers).status_code == 400

    bad_spare = seed.report_payload(customer, engineer, riyadh, spare_ids=[9999])
    assert client.post("/api/v1/reports", json=bad_spare, headers=headers).status_code == 400


def test_duplicate_serial_report_number_is_rejected(client, seed, riyadh):
    engineer = seed.user(Role.ENG, region=riyadh)
    customer = seed.customer("Acme", riyadh)
    headers = seed.headers(engineer)
    payload = seed.report_payload(customer, engineer, riyadh)

    assert client.post("/api/v1/reports", json=payload, headers=headers).status_code == 201
    dup = client.post("/api/v1/reports", json=payload, headers=headers)
    assert dup.status_code == 400
    assert dup.json()["status"] == "fail"


def test_submit_report_requires_login(client):
    assert client.post("/api/v1/reports", json={}).status_code == 401


# ----------------------------
# Listing
# ----------------------------

def _serials(resp):
    return [r["serial_report_number"] for r in resp.json()["data"]]


def test_engineer_lists_only_own_reports(client, seed, world):
    resp = client.get("/api/v1/reports", headers=seed.headers(world["eng_ryd"]))
    assert resp.status_code == 200
    assert resp.json()["count"] == 1
    assert _serials(resp) == ["R1"]


def test_branch_manager_lists_region_reports(client, seed, world):
    manager = seed.user(Role.BM, region=world["jeddah"], username="bm-jed")
    resp = client.get("/api/v1/reports", headers=seed.headers(manager))
    assert _serials(resp) == ["R2"]


def test_branch_manager_without_region_is_forbidden(client, seed, world):
    manager = seed.user(Role.BM, username="bm-none")
    assert client.get("/api/v1/reports", headers=seed.headers(manager)).status_code == 403


@pytest.mark.parametrize("role", [Role.CM, Role.VXR])
def test_unrestricted_roles_list_everything_newest_first(client, seed, world, role):
    user = seed.user(role, username=f"all-{role.value}")
    resp = client.get("/api/v1/reports", headers=seed.headers(user))
    assert _serials(resp) == ["R2", "R1"]


def test_list_items_carry_labels_not_keys(client, seed, world):
    resp = client.get("/api/v1/reports", headers=seed.headers(world["eng_ryd"]))
    item = resp.json()["data"][0]
    assert item["customer"] == "Acme"
    assert item["region"] == "Riyadh"
    assert item["engineer"] == "eng-ryd"
    assert item["spare_parts"] == ["-"]
    assert "engineer_id" not in item


def test_unknown_role_cannot_list(client, seed, world):
    user = seed.user(Role.ENG, username="legacy")
    with seed.database.session() as s:
        s.get(User, user.id).role = "GUEST"
        s.commit()
    assert client.get("/api/v1/reports", headers=seed.headers(user)).status_code == 403


# ----------------------------
# Single report
# ----------------------------

def test_author_reads_report_other_engineer_forbidden(client, seed, world):
    r1 = world["r1"]

    own = client.get(f"/api/v1/reports/{r1.id}", headers=seed.headers(world["eng_ryd"]))
    assert own.status_code == 200
    assert own.json()["data"]["serial_report_number"] == "R1"

    other = client.get(f"/api/v1/reports/{r1.id}", headers=seed.headers(world["eng_jed"]))
    assert other.status_code == 403
    assert other.json()["status"] == "fail"


def test_branch_manager_cannot_read_other_region(client, seed, world):
    manager = seed.user(Role.BM, region=world["riyadh"], username="bm-ryd")
    assert client.get(f"/api/v1/reports/{world['r1'].id}", headers=seed.headers(manager)).status_code == 200
    assert client.get(f"/api/v1/reports/{world['r2'].id}", headers=seed.headers(manager)).status_code == 403


def test_missing_report_is_404_for_everyone(client, seed, world):
    resp = client.get("/api/v1/reports/9999", headers=seed.headers(world["eng_ryd"]))
    assert resp.status_code == 404
