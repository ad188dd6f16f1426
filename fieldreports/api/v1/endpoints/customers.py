from __future__ import annotations

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from fieldreports.core.config import Settings
from fieldreports.core.dependencies import get_current_user, get_settings, require_roles
from fieldreports.core.errors import ConflictError, NotFoundError
from fieldreports.core.permissions import ADMIN_ROLES
from fieldreports.db.session import get_db
from fieldreports.models.customer import Customer
from fieldreports.models.region import Region
from fieldreports.schemas.customers import CustomerCreate, CustomerOut, CustomerUpdate, RegionCreate, RegionOut
from fieldreports.services.bulk_import import import_upload, reconcile_customers
from fieldreports.services.sequence import next_customer_uid

router = APIRouter()

admin_only = [Depends(require_roles(*ADMIN_ROLES))]


# ----------------------------
# Helpers
# ----------------------------

def _get_region_by_code_or_404(db: Session, code: str) -> Region:
    region = db.scalar(select(Region).where(Region.code == code.strip().upper()))
    if not region:
        raise NotFoundError(f"No region found with code: {code}")
    return region


def _get_customer_or_404(db: Session, ident: str) -> Customer:
    """Numeric primary key or the CUS-... customer_uid."""
    if ident.isdigit():
        customer = db.get(Customer, int(ident))
    else:
        customer = db.scalar(select(Customer).where(Customer.customer_uid == ident.strip().upper()))
    if not customer:
        raise NotFoundError(f"No customer found with ID or customerId: {ident}")
    return customer


def _ensure_unique_in_region(db: Session, name: str, region_id: int, exclude_id: int | None = None) -> None:
    q = select(Customer.id).where(Customer.name == name, Customer.region_id == region_id)
    if exclude_id is not None:
        q = q.where(Customer.id != exclude_id)
    if db.scalar(q) is not None:
        raise ConflictError("Customer already exists in this region")


# ----------------------------
# Regions
# ----------------------------

@router.get("/region")
def list_regions(
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    regions = db.scalars(select(Region).order_by(Region.name.asc())).all()
    return {
        "status": "success",
        "results": len(regions),
        "data": {"regions": [RegionOut.model_validate(r) for r in regions]},
    }


@router.post("/createRegion", status_code=status.HTTP_201_CREATED, dependencies=admin_only)
def create_region(payload: RegionCreate, db: Session = Depends(get_db)):
    name = payload.name.strip()
    code = payload.code.strip().upper()

    clash = db.scalar(select(Region).where(or_(Region.name == name, Region.code == code)))
    if clash:
        raise ConflictError("A region with this name or code already exists")

    region = Region(name=name, code=code, is_active=payload.is_active)
    if payload.country:
        region.country = payload.country.strip()

    db.add(region)
    db.commit()
    db.refresh(region)
    return {"status": "success", "data": {"region": RegionOut.model_validate(region)}}


# ----------------------------
# Customers
# ----------------------------

@router.post("", status_code=status.HTTP_201_CREATED, dependencies=admin_only)
def create_customer(payload: CustomerCreate, db: Session = Depends(get_db)):
    name = payload.name.strip()
    region = _get_region_by_code_or_404(db, payload.region_code)
    _ensure_unique_in_region(db, name, region.id)

    customer = Customer(
        name=name,
        region_id=region.id,
        customer_uid=next_customer_uid(db, region.code),
        is_active=True,
    )
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return {"status": "success", "data": {"customer": CustomerOut.from_model(customer)}}


@router.post("/upload-csv", status_code=status.HTTP_201_CREATED, dependencies=admin_only)
def upload_customers(
    file: UploadFile | None = File(None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    result = import_upload(file, settings.upload_dir, lambda rows: reconcile_customers(db, rows))
    return {
        "status": "success",
        "results": len(result.created),
        "skipped": len(result.skipped),
        "customers": [CustomerOut.from_model(c) for c in result.created],
        "skipped_rows": [s.as_dict() for s in result.skipped],
    }


@router.get("")
def list_customers(
    include_inactive: bool = Query(False),
    region_code: str | None = Query(None),
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    q = select(Customer)
    if not include_inactive:
        q = q.where(Customer.is_active.is_(True))
    if region_code:
        region = _get_region_by_code_or_404(db, region_code)
        q = q.where(Customer.region_id == region.id)

    customers = db.scalars(q.order_by(Customer.name.asc())).all()
    return {
        "status": "success",
        "results": len(customers),
        "customers": [CustomerOut.from_model(c) for c in customers],
    }


@router.get("/{ident}", dependencies=admin_only)
def get_customer(ident: str, db: Session = Depends(get_db)):
    customer = _get_customer_or_404(db, ident)
    return {"status": "success", "data": {"customer": CustomerOut.from_model(customer)}}


@router.put("/{ident}", dependencies=admin_only)
def update_customer(ident: str, payload: CustomerUpdate, db: Session = Depends(get_db)):
    customer = _get_customer_or_404(db, ident)
    data = payload.model_dump(exclude_unset=True)

    name = data["name"].strip() if data.get("name") else customer.name
    region_id = customer.region_id
    if data.get("region_code"):
        region_id = _get_region_by_code_or_404(db, data["region_code"]).id

    if name != customer.name or region_id != customer.region_id:
        _ensure_unique_in_region(db, name, region_id, exclude_id=customer.id)

    # customer_uid is kept when a customer moves region
    customer.name = name
    customer.region_id = region_id
    if data.get("is_active") is not None:
        customer.is_active = data["is_active"]

    db.add(customer)
    db.commit()
    db.refresh(customer)
    return {"status": "success", "data": {"customer": CustomerOut.from_model(customer)}}


@router.delete("/{ident}", status_code=status.HTTP_204_NO_CONTENT, dependencies=admin_only)
def delete_customer(ident: str, db: Session = Depends(get_db)):
    """Soft delete: reports keep pointing at the customer."""
    customer = _get_customer_or_404(db, ident)
    customer.is_active = False
    db.add(customer)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
