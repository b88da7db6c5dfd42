"""
Recency filter and date sort for visit rows.

The same policy is applied once per run, before any channel renders, so the
email, spreadsheet and WhatsApp message always describe the same rows.
"""
import functools
import logging
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Iterable, List, Optional

from visitreport.services.visits.models import VisitRecord

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = timedelta(hours=24)


class FilterPolicy(str, Enum):
    """Which rows a run reports on."""
    NONE = "none"       # every row, store order
    RECENT = "recent"   # recency window, latest first


def filter_recent(
    rows: Iterable[VisitRecord],
    now: datetime,
    window: timedelta = DEFAULT_WINDOW
) -> List[VisitRecord]:
    """Keep rows whose visit instant lies in [now - window, now]."""
    start = now - window
    return [
        row for row in rows
        if row.visit_timestamp is not None and start <= row.visit_timestamp <= now
    ]


def _parse_display_date(value: str) -> Optional[date]:
    """Parse a D/M/YYYY display date; None when it does not parse."""
    parts = value.split("/")
    if len(parts) != 3:
        return None
    try:
        day, month, year = (int(part) for part in parts)
        return date(year, month, day)
    except ValueError:
        return None


def _compare_visits(a: VisitRecord, b: VisitRecord) -> int:
    if a.visit_timestamp and b.visit_timestamp:
        if a.visit_timestamp == b.visit_timestamp:
            return 0
        return -1 if a.visit_timestamp > b.visit_timestamp else 1

    # Rows without an instant go last
    if b.visit_timestamp:
        return 1
    if a.visit_timestamp:
        return -1

    date_a = _parse_display_date(a.visit_date)
    date_b = _parse_display_date(b.visit_date)
    if date_a and date_b and date_a != date_b:
        return -1 if date_a > date_b else 1

    return 0


def sort_by_visit_date(rows: Iterable[VisitRecord]) -> List[VisitRecord]:
    """Latest visit first; stable for rows that cannot be ordered."""
    return sorted(rows, key=functools.cmp_to_key(_compare_visits))


def apply_policy(
    rows: Iterable[VisitRecord],
    policy: FilterPolicy,
    now: datetime,
    window: timedelta = DEFAULT_WINDOW
) -> List[VisitRecord]:
    """Run the filter/sort stage selected by `policy`."""
    rows = list(rows)
    if policy == FilterPolicy.NONE:
        return rows

    recent = filter_recent(rows, now, window)
    logger.info(f"📊 Recent visits: {len(rows)} total → {len(recent)} in window")
    return sort_by_visit_date(recent)
