import datetime as dt
import io
import os
import zipfile

from openpyxl import Workbook

from fieldreports.models.user import Role


def _today():
    return dt.datetime.utcnow().strftime("%Y%m%d")


def _csv(content: str, filename: str = "customers.csv"):
    return {"file": (filename, content.encode("utf-8"), "text/csv")}


# ----------------------------
# Regions
# ----------------------------

def test_create_and_list_regions(client, seed, admin_headers):
    resp = client.post(
        "/api/v1/customers/createRegion",
        json={"name": "Riyadh", "code": " ryd "},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    region = resp.json()["data"]["region"]
    assert region["code"] == "RYD"
    assert region["country"] == "Saudi Arabia"

    dup = client.post("/api/v1/customers/createRegion", json={"name": "Other", "code": "RYD"}, headers=admin_headers)
    assert dup.status_code == 400

    engineer = seed.user(Role.ENG)
    listed = client.get("/api/v1/customers/region", headers=seed.headers(engineer))
    assert listed.status_code == 200
    assert [r["code"] for r in listed.json()["data"]["regions"]] == ["RYD"]


def test_create_region_is_vxr_only(client, seed):
    manager = seed.user(Role.CM)
    resp = client.post("/api/v1/customers/createRegion", json={"name": "X", "code": "X"}, headers=seed.headers(manager))
    assert resp.status_code == 403


# ----------------------------
# Single customer
# ----------------------------

def test_customer_uid_uses_uppercased_region_code(client, riyadh, admin_headers):
    resp = client.post("/api/v1/customers", json={"name": "Acme", "regionCode": "ryd"}, headers=admin_headers)
    assert resp.status_code == 201
    customer = resp.json()["data"]["customer"]
    assert customer["customer_uid"] == f"CUS-RYD-{_today()}-0001"
    assert customer["region"] == "Riyadh"
    assert customer["region_code"] == "RYD"
    assert "region_id" not in customer


def test_create_customer_errors(client, riyadh, admin_headers):
    missing_region = client.post("/api/v1/customers", json={"name": "Acme", "region_code": "XXX"}, headers=admin_headers)
    assert missing_region.status_code == 404
    assert missing_region.json()["status"] == "fail"

    assert client.post("/api/v1/customers", json={"name": "Acme", "region_code": "RYD"}, headers=admin_headers).status_code == 201
    dup = client.post("/api/v1/customers", json={"name": "Acme", "region_code": "RYD"}, headers=admin_headers)
    assert dup.status_code == 400
    assert dup.json()["message"] == "Customer already exists in this region"


def test_create_customer_accepts_snake_case_region_code(client, riyadh, admin_headers):
    resp = client.post("/api/v1/customers", json={"name": "Acme", "region_code": "RYD"}, headers=admin_headers)
    assert resp.status_code == 201
    assert resp.json()["data"]["customer"]["region_code"] == "RYD"


def test_same_name_allowed_in_another_region(client, riyadh, jeddah, admin_headers):
    for code in ("RYD", "JED"):
        resp = client.post("/api/v1/customers", json={"name": "Acme", "region_code": code}, headers=admin_headers)
        assert resp.status_code == 201


def test_customer_mutations_are_vxr_only(client, seed, riyadh):
    engineer = seed.user(Role.ENG, region=riyadh)
    resp = client.post("/api/v1/customers", json={"name": "Acme", "region_code": "RYD"}, headers=seed.headers(engineer))
    assert resp.status_code == 403


def test_get_update_delete_by_id_or_uid(client, seed, riyadh, jeddah, admin_headers):
    customer = seed.customer("Acme", riyadh)

    by_uid = client.get(f"/api/v1/customers/{customer.customer_uid}", headers=admin_headers)
    assert by_uid.status_code == 200
    assert by_uid.json()["data"]["customer"]["id"] == customer.id

    moved = client.put(f"/api/v1/customers/{customer.id}", json={"regionCode": "JED"}, headers=admin_headers)
    assert moved.status_code == 200
    body = moved.json()["data"]["customer"]
    assert body["region_code"] == "JED"
    assert body["customer_uid"] == customer.customer_uid

    deleted = client.delete(f"/api/v1/customers/{customer.id}", headers=admin_headers)
    assert deleted.status_code == 204

    active = client.get("/api/v1/customers", headers=admin_headers).json()
    assert active["results"] == 0
    everything = client.get("/api/v1/customers", params={"include_inactive": True}, headers=admin_headers).json()
    assert everything["customers"][0]["is_active"] is False

    assert client.get("/api/v1/customers/9999", headers=admin_headers).status_code == 404


def test_list_customers_open_to_every_role(client, seed, riyadh):
    seed.customer("Acme", riyadh)
    for role in Role:
        user = seed.user(role, username=f"list-{role.value}")
        resp = client.get("/api/v1/customers", headers=seed.headers(user))
        assert resp.status_code == 200
        assert resp.json()["results"] == 1


# ----------------------------
# Bulk upload
# ----------------------------

def test_upload_csv_reports_created_and_skipped(client, seed, riyadh, admin_headers, settings):
    seed.customer("Existing", riyadh)
    content = "name,regionCode\nAcme,ryd\nAcme,RYD\nExisting,RYD\nGhost,XXX\n,RYD\n"

    resp = client.post("/api/v1/customers/upload-csv", files=_csv(content), headers=admin_headers)
    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "success"
    assert body["results"] == 1
    assert body["skipped"] == 4
    assert body["customers"][0]["customer_uid"] == f"CUS-RYD-{_today()}-0002"
    assert [s["reason"] for s in body["skipped_rows"]] == [
        "Duplicate in uploaded file",
        "Duplicate customer in region RYD",
        "Region not found: XXX",
        "Missing name or regionCode",
    ]
    assert body["skipped_rows"][2]["row"] == {"name": "Ghost", "regionCode": "XXX"}
    assert os.listdir(settings.upload_dir) == []


def test_upload_requires_file(client, admin_headers):
    resp = client.post("/api/v1/customers/upload-csv", headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json() == {"status": "fail", "message": "No file uploaded"}


def test_upload_rejects_unreadable_and_empty_files(client, admin_headers, settings):
    bad = client.post(
        "/api/v1/customers/upload-csv",
        files={"file": ("customers.xlsx", b"not a workbook", "application/octet-stream")},
        headers=admin_headers,
    )
    assert bad.status_code == 400
    assert bad.json()["message"] == "Invalid file format. Please upload a valid CSV or Excel file."

    empty = client.post("/api/v1/customers/upload-csv", files=_csv("name,regionCode\n"), headers=admin_headers)
    assert empty.status_code == 400
    assert empty.json()["message"] == "Empty file. Please include at least one row."

    assert os.listdir(settings.upload_dir) == []


def _xlsx_with_truncated_sheet() -> bytes:
    wb = Workbook()
    wb.active.append(["name", "regionCode"])
    for i in range(20):
        wb.active.append([f"Customer {i}", "RYD"])
    good = io.BytesIO()
    wb.save(good)

    broken = io.BytesIO()
    with zipfile.ZipFile(io.BytesIO(good.getvalue())) as zin, zipfile.ZipFile(broken, "w") as zout:
        for item in zin.infolist():
            data = zin.read(item.filename)
            if item.filename == "xl/worksheets/sheet1.xml":
                data = data[: len(data) // 2]
            zout.writestr(item, data)
    return broken.getvalue()


def test_upload_rejects_corrupt_sheet_and_legacy_xls(client, admin_headers, settings):
    uploads = [
        ("customers.xlsx", _xlsx_with_truncated_sheet()),
        ("customers.xls", b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 64),
    ]
    for filename, content in uploads:
        resp = client.post(
            "/api/v1/customers/upload-csv",
            files={"file": (filename, content, "application/octet-stream")},
            headers=admin_headers,
        )
        assert resp.status_code == 400, filename
        assert resp.json() == {
            "status": "fail",
            "message": "Invalid file format. Please upload a valid CSV or Excel file.",
        }

    assert os.listdir(settings.upload_dir) == []


def test_upload_is_vxr_only(client, seed):
    manager = seed.user(Role.BM)
    resp = client.post("/api/v1/customers/upload-csv", files=_csv("name,regionCode\nA,RYD\n"), headers=seed.headers(manager))
    assert resp.status_code == 403
