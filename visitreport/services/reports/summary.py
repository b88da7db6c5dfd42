"""
Report summary counts and policy-dependent labels.

Both are shared by the HTML, spreadsheet and WhatsApp renderers so every
channel reports the same numbers under the same titles.
"""
from dataclasses import dataclass
from typing import Iterable, Optional

from visitreport.services.visits.filters import FilterPolicy
from visitreport.services.visits.models import BOOKED, INTERESTED, NOT_BOOKED, VisitRecord


@dataclass(frozen=True)
class StatusSummary:
    """Totals shown at the bottom of every report."""
    total: int
    booked: int
    not_booked: int
    interested: int

    @classmethod
    def from_rows(cls, rows: Iterable[VisitRecord]) -> "StatusSummary":
        rows = list(rows)
        statuses = [row.status for row in rows]
        return cls(
            total=len(rows),
            booked=statuses.count(BOOKED),
            not_booked=statuses.count(NOT_BOOKED),
            interested=statuses.count(INTERESTED),
        )


@dataclass(frozen=True)
class ReportLabels:
    """Titles and notes for one run, derived from its filter policy."""
    period: Optional[str] = None      # e.g. "Last 24 Hours"
    period_short: Optional[str] = None  # e.g. "Last 24h"
    date_sorted: bool = False

    @classmethod
    def for_policy(cls, policy: FilterPolicy, window_hours: int = 24) -> "ReportLabels":
        if policy == FilterPolicy.RECENT:
            return cls(
                period=f"Last {window_hours} Hours",
                period_short=f"Last {window_hours}h",
                date_sorted=True,
            )
        return cls()

    def title(self, base: str = "Visit Report") -> str:
        return f"{base} ({self.period})" if self.period else base

    def part_title(self, part: int, base: str = "Visit Report") -> str:
        if self.period:
            return f"{base} ({self.period} - Part {part})"
        return f"{base} (Part {part})"

    def summary_title(self) -> str:
        return f"Summary ({self.period})" if self.period else "Summary"

    def total_label(self) -> str:
        return f"Total Visits ({self.period})" if self.period else "Total Visits"

    def subject(self, date_text: str) -> str:
        if self.period_short:
            sort_part = " - Date Sorted" if self.date_sorted else ""
            return f"Site Visit Report ({self.period_short}{sort_part}) - {date_text}"
        return f"Site Visit Report - {date_text}"

    def attachment_name(self, date_text: str) -> str:
        stamp = date_text.replace("/", "-")
        if self.period_short:
            compact = self.period_short.replace(" ", "")
            return f"Site_Visit_DateSorted_{compact}_{stamp}.xlsx"
        return f"Site_Visit_Report_{stamp}.xlsx"

    def sheet_title(self) -> str:
        return f"{self.period} Visits"[:31] if self.period else "Site Visits"

    def data_type(self) -> str:
        if self.period:
            slug = self.period.lower().replace(" ", "_")
            return f"{slug}_date_sorted" if self.date_sorted else slug
        return "all_visits"

    def sort_note(self) -> Optional[str]:
        return "Sorted by Date (Latest First)" if self.date_sorted else None

    def filter_description(self) -> str:
        if self.period:
            text = f"{self.period.lower()} only"
            if self.date_sorted:
                text += ", sorted by date (latest first)"
            return text[0].upper() + text[1:]
        return "All visits, store order"
