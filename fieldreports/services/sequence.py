from __future__ import annotations

import datetime as dt

from sqlalchemy import text
from sqlalchemy.orm import Session

SPARE_SCOPE = "spare"


def day_stamp(now: dt.datetime | None = None) -> str:
    """YYYYMMDD of the (UTC) day the identifier is issued."""
    return (now or dt.datetime.utcnow()).strftime("%Y%m%d")


def customer_scope(region_code: str) -> str:
    return f"customer:{region_code.upper()}"


def reserve_sequence(db: Session, scope: str, day: str, count: int = 1) -> int:
    """
    Reserves `count` consecutive numbers for (scope, day) and returns the first.

    The counter row is seeded with ON CONFLICT DO NOTHING and advanced with a
    single UPDATE ... RETURNING, so two concurrent callers never get the
    same number.
    """
    if count < 1:
        raise ValueError("count must be >= 1")

    db.execute(
        text("""
            INSERT INTO sequence_counters (scope, day, value, updated_at)
            VALUES (:scope, :day, 0, CURRENT_TIMESTAMP)
            ON CONFLICT (scope, day) DO NOTHING
        """),
        {"scope": scope, "day": day},
    )

    row = db.execute(
        text("""
            UPDATE sequence_counters
            SET value = value + :n, updated_at = CURRENT_TIMESTAMP
            WHERE scope = :scope AND day = :day
            RETURNING value
        """),
        {"n": count, "scope": scope, "day": day},
    ).one()

    last = int(row[0])
    return last - count + 1


def format_customer_uid(region_code: str, day: str, number: int) -> str:
    return f"CUS-{region_code.upper()}-{day}-{number:04d}"


def format_spare_code(day: str, number: int) -> str:
    return f"SPR-{day}-{number:04d}"


def next_customer_uid(db: Session, region_code: str, now: dt.datetime | None = None) -> str:
    """
    Generates a new customer_uid like CUS-RYD-20251009-0001.
    The sequence restarts every day for every region.
    """
    day = day_stamp(now)
    number = reserve_sequence(db, customer_scope(region_code), day)
    return format_customer_uid(region_code, day, number)


def next_spare_code(db: Session, now: dt.datetime | None = None) -> str:
    """Generates SPR-20251009-0001 style codes; one global sequence per day."""
    day = day_stamp(now)
    number = reserve_sequence(db, SPARE_SCOPE, day)
    return format_spare_code(day, number)
