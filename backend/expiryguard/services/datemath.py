import math
from datetime import date, datetime, time, timedelta, timezone
from typing import Union

SECONDS_PER_DAY = 24 * 60 * 60

Reference = Union[datetime, date]


def utcnow() -> datetime:
    """Service clock. Capture once per classification pass, not per product."""
    return datetime.now(timezone.utc)


def _as_datetime(reference: Reference) -> datetime:
    if isinstance(reference, datetime):
        return reference
    return datetime.combine(reference, time.min)


def days_until(expiry_date: date, reference: Reference) -> int:
    """
    Whole days from ``reference`` until ``expiry_date``, rounded up.

    The expiry date counts from midnight at its start, in the reference's
    timezone. A partial day still counts as a full day remaining, so a product
    expiring tomorrow checked at 15:00 today gives 1, and a product expiring
    today gives 0. Negative means already expired.
    """
    ref = _as_datetime(reference)
    expiry = datetime.combine(expiry_date, time.min, tzinfo=ref.tzinfo)
    return int(math.ceil((expiry - ref).total_seconds() / SECONDS_PER_DAY))


def risk_window_end(reference: Reference, horizon_days: int) -> date:
    """Last calendar date inside the risk window starting at ``reference``."""
    return _as_datetime(reference).date() + timedelta(days=horizon_days)


def today(reference: Reference) -> date:
    return _as_datetime(reference).date()
