from __future__ import annotations

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from fieldreports.core.config import Settings
from fieldreports.core.dependencies import get_current_user, get_settings, require_roles
from fieldreports.core.errors import ConflictError, NotFoundError
from fieldreports.core.permissions import ADMIN_ROLES
from fieldreports.db.session import get_db
from fieldreports.models.spare_part import SparePart
from fieldreports.schemas.spares import SpareCreate, SpareOut, SpareUpdate
from fieldreports.services.bulk_import import import_upload, reconcile_spares
from fieldreports.services.sequence import next_spare_code

router = APIRouter()

admin_only = [Depends(require_roles(*ADMIN_ROLES))]


def _get_spare_or_404(db: Session, ident: str) -> SparePart:
    if ident.isdigit():
        spare = db.get(SparePart, int(ident))
    else:
        spare = db.scalar(select(SparePart).where(func.upper(SparePart.code) == ident.strip().upper()))
    if not spare:
        raise NotFoundError(f"No spare part found with ID or code: {ident}")
    return spare


def _ensure_unique(db: Session, name: str | None, code: str | None, exclude_id: int | None = None) -> None:
    if name:
        q = select(SparePart.id).where(SparePart.name == name)
        if exclude_id is not None:
            q = q.where(SparePart.id != exclude_id)
        if db.scalar(q) is not None:
            raise ConflictError(f"Spare part name already exists: {name}")
    if code:
        q = select(SparePart.id).where(SparePart.code == code)
        if exclude_id is not None:
            q = q.where(SparePart.id != exclude_id)
        if db.scalar(q) is not None:
            raise ConflictError(f"Spare part code already exists: {code}")


@router.get("")
def list_spares(
    include_inactive: bool = Query(False),
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    q = select(SparePart)
    if not include_inactive:
        q = q.where(SparePart.is_active.is_(True))
    spares = db.scalars(q.order_by(SparePart.name.asc())).all()
    return {
        "status": "success",
        "results": len(spares),
        "data": {"spares": [SpareOut.model_validate(s) for s in spares]},
    }


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=admin_only)
def create_spare(payload: SpareCreate, db: Session = Depends(get_db)):
    name = payload.name.strip()
    code = payload.code.strip().upper() if payload.code and payload.code.strip() else None
    _ensure_unique(db, name, code)

    spare = SparePart(name=name, code=code or next_spare_code(db), is_active=True)
    db.add(spare)
    db.commit()
    db.refresh(spare)
    return {"status": "success", "data": {"spare": SpareOut.model_validate(spare)}}


@router.post("/upload-csv", status_code=status.HTTP_201_CREATED, dependencies=admin_only)
def upload_spares(
    file: UploadFile | None = File(None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    result = import_upload(file, settings.upload_dir, lambda rows: reconcile_spares(db, rows))
    return {
        "status": "success",
        "results": len(result.created),
        "skipped": len(result.skipped),
        "spares": [SpareOut.model_validate(s) for s in result.created],
        "skipped_rows": [s.as_dict() for s in result.skipped],
    }


@router.get("/{ident}")
def get_spare(
    ident: str,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    spare = _get_spare_or_404(db, ident)
    return {"status": "success", "data": {"spare": SpareOut.model_validate(spare)}}


@router.put("/{ident}", dependencies=admin_only)
def update_spare(ident: str, payload: SpareUpdate, db: Session = Depends(get_db)):
    spare = _get_spare_or_404(db, ident)
    data = payload.model_dump(exclude_unset=True)

    name = data["name"].strip() if data.get("name") else None
    code = data["code"].strip().upper() if data.get("code") else None
    _ensure_unique(
        db,
        name if name != spare.name else None,
        code if code != spare.code else None,
        exclude_id=spare.id,
    )

    if name:
        spare.name = name
    if code:
        spare.code = code
    if data.get("is_active") is not None:
        spare.is_active = data["is_active"]

    db.add(spare)
    db.commit()
    db.refresh(spare)
    return {"status": "success", "data": {"spare": SpareOut.model_validate(spare)}}


@router.delete("/{ident}", status_code=status.HTTP_204_NO_CONTENT, dependencies=admin_only)
def delete_spare(ident: str, db: Session = Depends(get_db)):
    spare = _get_spare_or_404(db, ident)
    spare.is_active = False
    db.add(spare)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
