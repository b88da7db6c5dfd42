"""
WhatsApp report text and chunking.

Messages are built from per-visit blocks. When the whole report is longer
than the provider budget it is split at block boundaries: a visit is never
cut in half, every part opens with a "Part N" header and the summary rides
on the last part.
"""
import logging
from datetime import datetime
from typing import List, Optional, Sequence
from zoneinfo import ZoneInfo

from visitreport.services.reports.formatting import format_locale_datetime
from visitreport.services.reports.summary import ReportLabels, StatusSummary
from visitreport.services.visits.models import VisitRecord

logger = logging.getLogger(__name__)

DEFAULT_MAX_LENGTH = 1500
TRUNCATION_MARK = "…\n\n"


def format_visit_block(index: int, row: VisitRecord) -> str:
    return (
        f"*#{index + 1}*\n"
        f"Visitor Name: {row.visitor_name}\n"
        f"Contact Number: {row.contact_number}\n"
        f"Visit Date: {row.visit_date}\n"
        f"Visit Time: {row.visit_time}\n"
        f"Channel Partner: {row.channel_partner}\n"
        f"Property Type: {row.property_types}\n"
        f"Remark: {row.remark}\n"
        f"Status: {row.status}\n"
        "\n"
    )


def format_summary(summary: StatusSummary, labels: ReportLabels) -> str:
    return (
        f"📈 *{labels.summary_title()}*\n"
        f"Total Visits: {summary.total}\n"
        f"Booked: {summary.booked}\n"
        f"Not Booked: {summary.not_booked}\n"
        f"Interested: {summary.interested}\n"
    )


def format_header(
    labels: ReportLabels,
    generated_at: datetime,
    tz: Optional[ZoneInfo] = None,
    part: Optional[int] = None
) -> str:
    """Header for the single message (part=None) or for chunk `part`."""
    sort_note = labels.sort_note()
    if part is None:
        return f"📊 *{labels.title()}*\nGenerated: {format_locale_datetime(generated_at, tz)}\n"

    if part == 1:
        header = (
            f"📊 *{labels.part_title(1)}*\n"
            f"Generated: {format_locale_datetime(generated_at, tz)}\n"
        )
    else:
        header = f"{labels.part_title(part)}\n"
    if sort_note:
        header += f"📅 *{sort_note}*\n"
    return header + "\n"


def build_chat_message(
    rows: Sequence[VisitRecord],
    labels: ReportLabels,
    generated_at: datetime,
    tz: Optional[ZoneInfo] = None
) -> str:
    """The complete report as one message body."""
    blocks = "".join(format_visit_block(index, row) for index, row in enumerate(rows))
    summary = format_summary(StatusSummary.from_rows(rows), labels)
    return format_header(labels, generated_at, tz) + blocks + summary


def build_no_data_message(
    labels: ReportLabels,
    generated_at: datetime,
    tz: Optional[ZoneInfo] = None
) -> str:
    period = f" in the {labels.period.lower()}" if labels.period else ""
    return (
        f"📊 *{labels.title()}*\n"
        f"Generated: {format_locale_datetime(generated_at, tz)}\n\n"
        f"ℹ️ No visits recorded{period}.\n\n"
        f"📈 *Summary*\n"
        f"Total Visits: 0\n"
    )


def _fit_block(block: str, room: int) -> str:
    if len(block) <= room:
        return block
    logger.warning(f"⚠️  Visit block of {len(block)} chars exceeds chunk room ({room}), truncating")
    return block[:room - len(TRUNCATION_MARK)] + TRUNCATION_MARK


def split_into_chunks(
    rows: Sequence[VisitRecord],
    labels: ReportLabels,
    generated_at: datetime,
    tz: Optional[ZoneInfo] = None,
    max_length: int = DEFAULT_MAX_LENGTH
) -> List[str]:
    """
    Split the report into message bodies of at most `max_length` characters.

    Returns a single body when everything fits. Otherwise blocks are packed in
    order; when the next block would overflow, the current part is sealed and
    a new one opened with its part header. The summary is appended to the
    last part, or placed in one more part if it does not fit there.

    Raises:
        ValueError: if `max_length` cannot hold a part header plus the summary
    """
    message = build_chat_message(rows, labels, generated_at, tz)
    if len(message) <= max_length:
        return [message]

    summary = format_summary(StatusSummary.from_rows(rows), labels)
    first_header = format_header(labels, generated_at, tz, part=1)
    if len(first_header) + len(summary) > max_length or len(first_header) + len(TRUNCATION_MARK) >= max_length:
        raise ValueError(f"max_length {max_length} is too small for a report part")

    chunks: List[str] = []
    part = 1
    current = first_header
    has_rows = False

    for index, row in enumerate(rows):
        block = format_visit_block(index, row)
        if has_rows and len(current) + len(block) > max_length:
            chunks.append(current)
            part += 1
            current = format_header(labels, generated_at, tz, part=part)
            has_rows = False
        if not has_rows:
            block = _fit_block(block, max_length - len(current))
        current += block
        has_rows = True

    if len(current) + len(summary) > max_length:
        chunks.append(current)
        part += 1
        current = format_header(labels, generated_at, tz, part=part)
    chunks.append(current + summary)

    return chunks
