"""
HTML email bodies for visit reports.

Inline styles only; mail clients drop <style> blocks.
"""
from datetime import datetime
from html import escape
from typing import List, Optional, Sequence
from zoneinfo import ZoneInfo

from visitreport.services.reports.formatting import format_locale_datetime, format_long_datetime
from visitreport.services.reports.summary import ReportLabels, StatusSummary
from visitreport.services.visits.models import VisitRecord

HEADER_BACKGROUND = "#2c3e50"
EVEN_ROW_BACKGROUND = "#f8f9fa"
ODD_ROW_BACKGROUND = "#ffffff"

TABLE_HEADERS = [
    "S.No", "Visitor Name", "Contact Number", "Visit Date", "Visit Time",
    "Channel Partner", "Property Types", "Remark", "Status",
]


def row_background(index: int) -> str:
    return EVEN_ROW_BACKGROUND if index % 2 == 0 else ODD_ROW_BACKGROUND


def _render_row(index: int, row: VisitRecord) -> str:
    return (
        f'<tr style="background:{row_background(index)};">'
        f'<td style="text-align:center;">{index + 1}</td>'
        f"<td>{escape(row.visitor_name)}</td>"
        f"<td>{escape(row.contact_number)}</td>"
        f'<td style="text-align:center;font-weight:bold;color:#2980b9;">{escape(row.visit_date)}</td>'
        f'<td style="text-align:center;">{escape(row.visit_time)}</td>'
        f"<td>{escape(row.channel_partner)}</td>"
        f"<td>{escape(row.property_types)}</td>"
        f"<td>{escape(row.remark)}</td>"
        f'<td style="text-align:center;font-weight:bold;">{escape(row.status)}</td>'
        "</tr>"
    )


def _render_summary(summary: StatusSummary, labels: ReportLabels) -> List[str]:
    lines = [
        '<div style="text-align:center;margin-top:20px;padding:15px;background:#f8f9fa;border-radius:5px;">',
        f"<p><strong>{escape(labels.total_label())}:</strong> {summary.total}</p>",
        f"<p><strong>Booked:</strong> {summary.booked}</p>",
        f"<p><strong>Not Booked:</strong> {summary.not_booked}</p>",
        f"<p><strong>Interested:</strong> {summary.interested}</p>",
    ]
    if labels.date_sorted:
        lines.append(
            '<p style="font-size:12px;color:#7f8c8d;margin-top:10px;">'
            "📅 Data sorted by visit date (most recent first)</p>"
        )
    lines.append("</div>")
    return lines


def render_report_html(
    rows: Sequence[VisitRecord],
    labels: ReportLabels,
    generated_at: datetime,
    tz: Optional[ZoneInfo] = None
) -> str:
    """Full report: heading, table (one row per visit) and status summary."""
    header_cells = "".join(f"<th>{name}</th>" for name in TABLE_HEADERS)
    parts = [
        '<div style="font-family:Arial,sans-serif;max-width:1000px;margin:0 auto;padding:20px;">',
        f'<h2 style="color:#2c3e50;text-align:center;">📊 {escape(labels.title("Site Visit Report"))}</h2>',
        f'<p style="text-align:center;color:#7f8c8d;">Generated on {format_long_datetime(generated_at, tz)}</p>',
    ]
    if labels.period:
        note = f"📅 Showing visits from {labels.period.lower()} only"
        if labels.date_sorted:
            note += " (Sorted by Date - Latest First)"
        parts += [
            '<div style="text-align:center;margin:20px 0;padding:10px;background:#e8f4fd;border-radius:5px;">',
            f'<p style="margin:0;color:#2980b9;font-weight:bold;">{escape(note)}</p>',
            "</div>",
        ]
    parts += [
        '<table border="1" cellspacing="0" cellpadding="8" '
        'style="border-collapse:collapse; width:100%; font-family:Arial, sans-serif; margin:20px 0;">',
        f'<tr style="background:{HEADER_BACKGROUND}; color:#fff;">{header_cells}</tr>',
    ]
    parts += [_render_row(index, row) for index, row in enumerate(rows)]
    parts.append("</table>")
    parts += _render_summary(StatusSummary.from_rows(rows), labels)
    parts.append("</div>")
    return "\n".join(parts)


def render_summary_html(
    visit_count: int,
    labels: ReportLabels,
    generated_at: datetime,
    tz: Optional[ZoneInfo] = None
) -> str:
    """Short body used when a caller asks for an email without supplying HTML."""
    parts = [
        '<div style="font-family:Arial,sans-serif;padding:20px;">',
        f'<h2 style="color:#2c3e50;">📊 {escape(labels.title("Site Visit Report"))}</h2>',
        f'<p style="color:#7f8c8d;">Generated on {format_locale_datetime(generated_at, tz)}</p>',
    ]
    if labels.period:
        parts += [
            '<div style="padding:10px;background:#e8f4fd;border-radius:5px;margin:10px 0;">',
            f'<p style="margin:0;color:#2980b9;font-weight:bold;">'
            f"📅 This report contains only visits from the {escape(labels.period.lower())}</p>",
        ]
        if labels.date_sorted:
            parts.append(
                '<p style="margin:5px 0 0 0;color:#2980b9;font-weight:bold;">'
                "🔄 Data sorted by visit date (most recent first)</p>"
            )
        parts.append("</div>")
    parts += [
        f"<p><strong>{escape(labels.total_label())}:</strong> {visit_count}</p>",
        "</div>",
    ]
    return "\n".join(parts)
