"""
Bulk spreadsheet ingestion for customers and spare parts.

Every upload goes through the same pipeline:

  normalize -> one batch lookup per key set -> ordered per-row decision
  -> identifiers reserved for staged rows -> unordered insert -> cleanup

A row is skipped for the first reason that applies; it never aborts the
batch. Only request-level problems (no file, unreadable file, no rows) are
raised as errors.
"""
from __future__ import annotations

import logging
import os
import shutil
import tempfile
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, TypeVar

from fastapi import UploadFile
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fieldreports.core.errors import ValidationError
from fieldreports.models.customer import Customer
from fieldreports.models.region import Region
from fieldreports.models.spare_part import SparePart
from fieldreports.services.sequence import (
    SPARE_SCOPE,
    customer_scope,
    day_stamp,
    format_customer_uid,
    format_spare_code,
    reserve_sequence,
)
from fieldreports.services.tabular import TabularFormatError, parse_upload

logger = logging.getLogger(__name__)

T = TypeVar("T")

REASON_MISSING_CUSTOMER_FIELDS = "Missing name or regionCode"
REASON_MISSING_SPARE_NAME = "Missing name"
REASON_IN_FILE_DUPLICATE = "Duplicate in uploaded file"
REASON_SAVE_CONFLICT = "Conflict while saving"

MSG_NO_FILE = "No file uploaded"
MSG_BAD_FORMAT = "Invalid file format. Please upload a valid CSV or Excel file."
MSG_EMPTY_FILE = "Empty file. Please include at least one row."


@dataclass
class SkippedRow:
    row: dict[str, Any]
    reason: str

    def as_dict(self) -> dict[str, Any]:
        return {"row": self.row, "reason": self.reason}


@dataclass
class ImportResult:
    created: list[Any] = field(default_factory=list)
    skipped: list[SkippedRow] = field(default_factory=list)

    def skip(self, row: dict[str, Any], reason: str) -> None:
        self.skipped.append(SkippedRow(row=row, reason=reason))


def clean(value: Any) -> str:
    """Trimmed string form of a raw cell; None and blanks become ''."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        # Excel hands back 123.0 for a cell typed as 123
        value = int(value)
    return str(value).strip()


# ----------------------------
# Persistence
# ----------------------------

def insert_unordered(db: Session, records: Iterable[T]) -> tuple[list[T], list[tuple[T, IntegrityError]]]:
    """
    Inserts each record in its own SAVEPOINT.

    A uniqueness violation rolls back only that record; the rest of the
    batch still goes in. Caller commits.
    """
    inserted: list[T] = []
    failed: list[tuple[T, IntegrityError]] = []
    for record in records:
        try:
            with db.begin_nested():
                db.add(record)
                db.flush()
        except IntegrityError as e:
            failed.append((record, e))
            continue
        inserted.append(record)
    return inserted, failed


# ----------------------------
# Customers
# ----------------------------

def reconcile_customers(db: Session, rows: list[dict[str, Any]]) -> ImportResult:
    """Rows need `name` and `regionCode`; names are unique per region."""
    result = ImportResult()

    normalized = [(row, clean(row.get("name")), clean(row.get("regionCode")).upper()) for row in rows]

    names = {name for _, name, code in normalized if name and code}
    codes = {code for _, name, code in normalized if name and code}

    regions_by_code: dict[str, Region] = {}
    if codes:
        regions_by_code = {r.code: r for r in db.scalars(select(Region).where(Region.code.in_(codes)))}

    existing: set[tuple[str, int]] = set()
    if names and regions_by_code:
        region_ids = [r.id for r in regions_by_code.values()]
        existing = {
            (name, region_id)
            for name, region_id in db.execute(
                select(Customer.name, Customer.region_id).where(
                    Customer.name.in_(names),
                    Customer.region_id.in_(region_ids),
                )
            )
        }

    staged: list[tuple[dict[str, Any], Customer]] = []
    staged_keys: set[tuple[str, int]] = set()

    for row, name, code in normalized:
        if not name or not code:
            result.skip(row, REASON_MISSING_CUSTOMER_FIELDS)
            continue

        region = regions_by_code.get(code)
        if region is None:
            result.skip(row, f"Region not found: {code}")
            continue

        key = (name, region.id)
        if key in existing:
            result.skip(row, f"Duplicate customer in region {code}")
            continue

        if key in staged_keys:
            result.skip(row, REASON_IN_FILE_DUPLICATE)
            continue

        staged_keys.add(key)
        customer = Customer(name=name, region_id=region.id, is_active=True)
        customer.region = region
        staged.append((row, customer))

    _assign_customer_uids(db, [c for _, c in staged])
    _persist(db, staged, result)

    logger.info("Customer import: %d created, %d skipped", len(result.created), len(result.skipped))
    return result


def _assign_customer_uids(db: Session, customers: list[Customer]) -> None:
    if not customers:
        return
    day = day_stamp()
    per_region = Counter(c.region.code for c in customers)
    next_number = {code: reserve_sequence(db, customer_scope(code), day, n) for code, n in per_region.items()}
    for customer in customers:
        code = customer.region.code
        customer.customer_uid = format_customer_uid(code, day, next_number[code])
        next_number[code] += 1


# ----------------------------
# Spare parts
# ----------------------------

def reconcile_spares(db: Session, rows: list[dict[str, Any]]) -> ImportResult:
    """Rows need `name`; an optional `code` is kept (uppercased), otherwise one is generated."""
    result = ImportResult()

    normalized = [(row, clean(row.get("name")), clean(row.get("code")).upper()) for row in rows]

    names = {name for _, name, _ in normalized if name}
    codes = {code for _, name, code in normalized if name and code}

    existing_names: set[str] = set()
    existing_codes: set[str] = set()
    if names:
        conditions = [SparePart.name.in_(names)]
        if codes:
            conditions.append(SparePart.code.in_(codes))
        for name, code in db.execute(select(SparePart.name, SparePart.code).where(or_(*conditions))):
            existing_names.add(name)
            existing_codes.add(code)

    staged: list[tuple[dict[str, Any], SparePart]] = []
    staged_names: set[str] = set()
    staged_codes: set[str] = set()

    for row, name, code in normalized:
        if not name:
            result.skip(row, REASON_MISSING_SPARE_NAME)
            continue

        if name in existing_names:
            result.skip(row, f"Duplicate name in DB: {name}")
            continue

        if code and code in existing_codes:
            result.skip(row, f"Duplicate code in DB: {code}")
            continue

        if name in staged_names or (code and code in staged_codes):
            result.skip(row, REASON_IN_FILE_DUPLICATE)
            continue

        staged_names.add(name)
        if code:
            staged_codes.add(code)
        staged.append((row, SparePart(name=name, code=code or None, is_active=True)))

    _assign_spare_codes(db, [s for _, s in staged if not s.code])
    _persist(db, staged, result)

    logger.info("Spare import: %d created, %d skipped", len(result.created), len(result.skipped))
    return result


def _assign_spare_codes(db: Session, spares: list[SparePart]) -> None:
    if not spares:
        return
    day = day_stamp()
    number = reserve_sequence(db, SPARE_SCOPE, day, len(spares))
    for spare in spares:
        spare.code = format_spare_code(day, number)
        number += 1


def _persist(db: Session, staged: list[tuple[dict[str, Any], Any]], result: ImportResult) -> None:
    if not staged:
        return

    row_of = {id(record): row for row, record in staged}
    inserted, failed = insert_unordered(db, [record for _, record in staged])
    db.commit()

    result.created.extend(inserted)
    for record, err in failed:
        logger.warning("Bulk insert conflict, row skipped: %s", err.orig)
        result.skip(row_of[id(record)], REASON_SAVE_CONFLICT)


# ----------------------------
# Upload handling
# ----------------------------

def spool_upload(upload: UploadFile, upload_dir: str) -> str:
    """Copies the multipart body into a temp file owned by this request."""
    os.makedirs(upload_dir, exist_ok=True)
    suffix = os.path.splitext(upload.filename or "")[1]
    fd, path = tempfile.mkstemp(prefix="upload-", suffix=suffix, dir=upload_dir)
    try:
        with os.fdopen(fd, "wb") as out:
            upload.file.seek(0)
            shutil.copyfileobj(upload.file, out)
    except Exception:
        remove_quietly(path)
        raise
    return path


def remove_quietly(path: str) -> None:
    try:
        os.remove(path)
    except OSError as e:
        logger.warning("Could not delete temp file %s: %s", path, e)


def import_upload(
    upload: UploadFile | None,
    upload_dir: str,
    reconcile: Callable[[list[dict[str, Any]]], ImportResult],
) -> ImportResult:
    """
    Runs one upload through parse + reconcile.

    The temp file is removed whatever happens after it was written.
    """
    if upload is None or not upload.filename:
        raise ValidationError(MSG_NO_FILE)

    path = spool_upload(upload, upload_dir)
    try:
        try:
            rows = parse_upload(path, upload.filename)
        except TabularFormatError as e:
            logger.info("Rejected upload %s: %s", upload.filename, e)
            raise ValidationError(MSG_BAD_FORMAT)

        if not rows:
            raise ValidationError(MSG_EMPTY_FILE)

        return reconcile(rows)
    finally:
        remove_quietly(path)
