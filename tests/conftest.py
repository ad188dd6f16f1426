"""
Pytest configuration and fixtures.

Provides:
- settings: Settings pointed at a throwaway SQLite file under tmp_path
- client: TestClient with the application lifespan running
- database / db: a standalone Database + Session for service-level tests
- seed: helpers that insert regions, users, customers, spares and reports
  and mint bearer headers for them

Every seed helper opens and closes its own session. SQLite holds a shared
lock for the life of a read transaction, so a session left open by a test
would block the writes issued by the application under test.
"""
from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from fieldreports.core.config import Settings
from fieldreports.core.security import create_access_token
from fieldreports.db.session import Database
from fieldreports.main import create_app
from fieldreports.models.customer import Customer
from fieldreports.models.region import Region
from fieldreports.models.service_report import ServiceReport
from fieldreports.models.spare_part import SparePart
from fieldreports.models.user import Role, User
from fieldreports.services.auth_service import create_user
from fieldreports.services.report_service import entered_at
from fieldreports.services.sequence import next_customer_uid, next_spare_code

DEFAULT_PASSWORD = "pass12345"


# ============================================================================
# Application fixtures
# ============================================================================

@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        env="dev",
        secret_key="test-secret",
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        upload_dir=str(tmp_path / "uploads"),
        cookie_secure=False,
        log_level="WARNING",
        cors_origins="http://testserver",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


# ============================================================================
# Database fixtures (no HTTP)
# ============================================================================

@pytest.fixture
def database(settings):
    database = Database(settings.database_url)
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture
def db(database):
    session = database.session()
    try:
        yield session
    finally:
        session.close()


# ============================================================================
# Seed helpers
# ============================================================================

class Seeder:
    """Inserts fixture rows through short-lived sessions."""

    def __init__(self, database: Database, settings: Settings):
        self.database = database
        self.settings = settings

    def region(self, name: str = "Riyadh", code: str = "RYD") -> Region:
        with self.database.session() as s:
            region = Region(name=name, code=code)
            s.add(region)
            s.commit()
            s.refresh(region)
            return region

    def user(
        self,
        role: Role = Role.ENG,
        region: Region | None = None,
        username: str | None = None,
        password: str = DEFAULT_PASSWORD,
    ) -> User:
        with self.database.session() as s:
            user = create_user(
                s,
                username=username or f"{role.value.lower()}-{region.code.lower() if region else 'none'}",
                password=password,
                name=f"{role.value} user",
                role=role,
                region=region,
            )
            s.commit()
            return user

    def customer(self, name: str, region: Region) -> Customer:
        with self.database.session() as s:
            customer = Customer(name=name, region_id=region.id, customer_uid=next_customer_uid(s, region.code))
            s.add(customer)
            s.commit()
            s.refresh(customer)
            return customer

    def spare(self, name: str, code: str | None = None) -> SparePart:
        with self.database.session() as s:
            spare = SparePart(name=name, code=code or next_spare_code(s))
            s.add(spare)
            s.commit()
            s.refresh(spare)
            return spare

    def report(self, customer: Customer, engineer: User, region: Region, serial: str = "SR-1") -> ServiceReport:
        data = self.report_payload(customer, engineer, region, serial_report_number=serial)
        data.pop("spare_ids")
        for key in ("customer_id", "region_id", "engineer_id"):
            data.pop(key)
        with self.database.session() as s:
            report = ServiceReport(
                **data,
                customer_id=customer.id,
                region_id=region.id,
                engineer_id=engineer.id,
                date_entered=entered_at(self.settings.report_utc_offset_hours),
            )
            s.add(report)
            s.commit()
            s.refresh(report)
            return report

    def report_payload(self, customer: Customer, engineer: User, region: Region, **overrides: Any) -> dict[str, Any]:
        """A complete, valid LASER / SERVICE_CALL report body."""
        payload: dict[str, Any] = {
            "serial_report_number": "SR-1",
            "date": "2025-10-09",
            "time_in": "09:00",
            "time_out": "11:30",
            "quotation": "Q-100",
            "purchase_order": "PO-200",
            "inventory": "INV-300",
            "machine_type": "LASER",
            "model": "L-500",
            "serial_number": "SN-123",
            "service_type": "SERVICE_CALL",
            "job_completed": "yes",
            "customer_id": customer.id,
            "region_id": region.id,
            "engineer_id": engineer.id,
            "spare_ids": [],
            "customer_phone_number": "+966500000000",
            "customer_designation": "Plant Manager",
            "concern_name": "Omar",
            "service_report_picture": "reports/sr-1.jpg",
            "delivery_note_picture": "reports/dn-1.jpg",
        }
        payload.update(overrides)
        return payload

    def token(self, user: User) -> str:
        return create_access_token(subject=user.id, settings=self.settings, role=user.role)

    def headers(self, user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token(user)}"}


@pytest.fixture
def seed(client, settings) -> Seeder:
    return Seeder(client.app.state.database, settings)


@pytest.fixture
def riyadh(seed) -> Region:
    return seed.region("Riyadh", "RYD")


@pytest.fixture
def jeddah(seed) -> Region:
    return seed.region("Jeddah", "JED")


@pytest.fixture
def admin(seed) -> User:
    return seed.user(Role.VXR, username="admin")


@pytest.fixture
def admin_headers(seed, admin) -> dict[str, str]:
    return seed.headers(admin)
