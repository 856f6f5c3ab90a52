"""Business timezone helpers.

All stored instants are UTC. Calendar rules (attendance date, leave dates,
lateness) use a fixed UTC+05:30 offset with no DST and no historical changes.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone

from ..core.constants import BUSINESS_UTC_OFFSET

BUSINESS_TZ = timezone(BUSINESS_UTC_OFFSET, name="IST")


def _as_utc(instant: datetime) -> datetime:
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def to_local(utc_instant: datetime) -> datetime:
    """UTC instant -> same instant expressed in business-local time."""
    return _as_utc(utc_instant).astimezone(BUSINESS_TZ)


def to_utc(local_instant: datetime) -> datetime:
    """Business-local instant -> UTC. Naive values are read as business-local."""
    if local_instant.tzinfo is None:
        local_instant = local_instant.replace(tzinfo=BUSINESS_TZ)
    return local_instant.astimezone(timezone.utc)


def local_date(utc_instant: datetime) -> date:
    return to_local(utc_instant).date()


def local_date_key(utc_instant: datetime) -> str:
    """``YYYY-MM-DD`` of the business-local calendar day."""
    return local_date(utc_instant).isoformat()


def local_midnight(day: date) -> datetime:
    """UTC instant of 00:00 business-local on ``day``."""
    return to_utc(datetime.combine(day, time.min))


def is_weekend(utc_instant: datetime) -> bool:
    return to_local(utc_instant).weekday() >= 5
