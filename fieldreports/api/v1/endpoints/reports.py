from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from fieldreports.core.config import Settings
from fieldreports.core.dependencies import get_current_user, get_settings
from fieldreports.core.permissions import ensure_report_visible, report_scope
from fieldreports.db.session import get_db
from fieldreports.models.user import User
from fieldreports.schemas.reports import ReportCreate
from fieldreports.services.report_service import (
    create_report,
    get_report_or_404,
    list_reports,
    report_to_detail,
    report_to_list_item,
)

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
def submit_report(
    payload: ReportCreate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    user: User = Depends(get_current_user),
):
    report = create_report(db, payload.model_dump(), settings.report_utc_offset_hours)
    return {"status": "success", "data": {"report": report_to_detail(report)}}


@router.get("")
def get_reports(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    reports = list_reports(db, report_scope(user))
    return {
        "status": "success",
        "count": len(reports),
        "data": [report_to_list_item(r) for r in reports],
    }


@router.get("/{report_id}")
def get_report(
    report_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    # Fetch first, then decide: someone else's report is a 403, not a 404
    report = get_report_or_404(db, report_id)
    ensure_report_visible(user, report)
    return {"status": "success", "data": report_to_detail(report)}
