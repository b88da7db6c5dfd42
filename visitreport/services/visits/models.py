"""
Site Visits - Data Models

A VisitRecord is one normalized row, ready for rendering. Every field has a
fallback so renderers never see a missing value.
"""
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel

# Values above this are epoch milliseconds rather than seconds
_MILLISECONDS_THRESHOLD = 2e10

NOT_BOOKED = "Not Booked"
BOOKED = "Booked"
INTERESTED = "Interested"


def parse_instant(value: Any) -> Optional[datetime]:
    """
    Convert the timestamp shapes we receive into an aware datetime.

    Accepts Firestore-style ``{"_seconds": n, "_nanoseconds": m}``,
    ``{"seconds": n}``, epoch seconds (or milliseconds), ISO-8601 strings and
    datetimes. Naive values are treated as UTC. Returns None for anything else.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    if isinstance(value, dict):
        seconds = value.get("_seconds", value.get("seconds"))
        if seconds is None:
            return None
        nanos = value.get("_nanoseconds", value.get("nanoseconds")) or 0
        try:
            return datetime.fromtimestamp(float(seconds) + float(nanos) / 1e9, tz=timezone.utc)
        except (TypeError, ValueError, OverflowError, OSError):
            return None

    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        seconds = value / 1000 if abs(value) > _MILLISECONDS_THRESHOLD else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)

    return None


def _display_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, dict):
        return None
    if isinstance(value, (list, tuple)):
        items = [_display_text(item) for item in value]
        return ", ".join(item.strip() for item in items if item and item.strip()) or None
    if isinstance(value, datetime):
        return value.isoformat()
    return value if isinstance(value, str) else str(value)


class VisitRecord(BaseModel):
    """One site visit, flattened for reports."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    visitor_name: str = "-"
    contact_number: str = "-"
    visit_date: str = "-"
    visit_time: str = "-"
    channel_partner: str = "-"
    property_types: str = "-"
    remark: str = "-"
    status: str = NOT_BOOKED
    # Raw instant used for filtering and sorting only, never rendered
    visit_timestamp: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def apply_fallbacks(cls, data: Any) -> Any:
        """
        Coerce every text field to a display string.

        Blank values and values with no text form (objects) are dropped so
        the field default applies; lists are joined with ", ".
        """
        if not isinstance(data, dict):
            return data

        cleaned = {}
        for key, value in data.items():
            if key not in ("visitTimestamp", "visit_timestamp"):
                value = _display_text(value)
            if value is None or (isinstance(value, str) and not value.strip()):
                continue
            cleaned[key] = value
        return cleaned

    @field_validator("visit_timestamp", mode="before")
    @classmethod
    def coerce_timestamp(cls, value: Any) -> Optional[datetime]:
        return parse_instant(value)
