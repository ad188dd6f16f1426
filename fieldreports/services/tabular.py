"""
CSV / Excel parsing for bulk uploads.

Both formats come back as a list of dicts keyed by the header row, with the
raw cell values untouched (normalization belongs to the importer).
"""
from __future__ import annotations

import csv
import io
import logging
import os
import zipfile
from pathlib import Path
from typing import Any

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

logger = logging.getLogger(__name__)

# Legacy .xls (BIFF) is not read; it gets the same format error as any other unsupported file
EXCEL_SUFFIXES = {".xlsx", ".xlsm"}

# SyntaxError covers both xml.etree ParseError and lxml's XMLSyntaxError
WORKBOOK_ERRORS = (
    InvalidFileException,
    zipfile.BadZipFile,
    KeyError,
    OSError,
    SyntaxError,
    ValueError,
)


class TabularFormatError(Exception):
    """The uploaded file is neither readable CSV nor a readable workbook."""


def _is_blank_row(row: dict[str, Any]) -> bool:
    return all(v is None or (isinstance(v, str) and not v.strip()) for v in row.values())


def parse_csv(content: bytes) -> list[dict[str, Any]]:
    try:
        text = content.decode("utf-8-sig")  # Handle BOM
    except UnicodeDecodeError as e:
        raise TabularFormatError("CSV is not valid UTF-8") from e

    if "\x00" in text:
        raise TabularFormatError("Binary content in CSV")

    reader = csv.DictReader(io.StringIO(text))
    if not reader.fieldnames:
        return []

    rows = []
    try:
        for raw in reader:
            row = {}
            for k, v in raw.items():
                # Extra cells beyond the header land under a None key
                if k is None:
                    continue
                row[k.strip()] = "" if v is None else v
            if not _is_blank_row(row):
                rows.append(row)
    except csv.Error as e:
        raise TabularFormatError(str(e)) from e
    return rows


def parse_workbook(path: str | os.PathLike) -> list[dict[str, Any]]:
    # openpyxl refuses paths without an Excel suffix; hand it a buffer instead
    with open(path, "rb") as fh:
        buffer = io.BytesIO(fh.read())

    try:
        wb = load_workbook(filename=buffer, read_only=True, data_only=True)
    except WORKBOOK_ERRORS as e:
        raise TabularFormatError(str(e)) from e

    # read-only sheets parse their XML lazily, so iteration can fail too
    try:
        return _read_first_sheet(wb)
    except WORKBOOK_ERRORS as e:
        raise TabularFormatError(str(e)) from e
    finally:
        wb.close()


def _read_first_sheet(wb) -> list[dict[str, Any]]:
    if not wb.worksheets:
        return []
    values = wb.worksheets[0].iter_rows(values_only=True)
    header = next(values, None)
    if not header:
        return []
    keys = ["" if h is None else str(h).strip() for h in header]

    rows = []
    for cells in values:
        row = {}
        for key, value in zip(keys, cells):
            if not key:
                continue
            row[key] = "" if value is None else value
        if row and not _is_blank_row(row):
            rows.append(row)
    return rows


def parse_upload(path: str | os.PathLike, filename: str | None = None) -> list[dict[str, Any]]:
    """
    Reads the spooled upload at `path`. The original filename decides the
    format; without one, a zip signature means workbook, anything else CSV.
    """
    suffix = Path(filename or "").suffix.lower()
    with open(path, "rb") as fh:
        content = fh.read()

    if suffix in EXCEL_SUFFIXES or (not suffix and content[:2] == b"PK"):
        rows = parse_workbook(path)
    elif suffix and suffix != ".csv":
        raise TabularFormatError(f"Unsupported file type: {suffix}")
    else:
        rows = parse_csv(content)

    logger.debug("Parsed %d rows from %s", len(rows), filename or path)
    return rows
