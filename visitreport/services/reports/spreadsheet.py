"""
Excel attachment for visit reports (openpyxl).
"""
from io import BytesIO
from typing import Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from visitreport.services.visits.models import VisitRecord

# (header, width) in sheet order
COLUMNS = [
    ("S.No", 6),
    ("Visitor Name", 20),
    ("Contact Number", 15),
    ("Visit Date", 15),
    ("Visit Time", 15),
    ("Channel Partner", 20),
    ("Property Types", 25),
    ("Remark", 30),
    ("Status", 15),
]

HEADER_FONT = Font(bold=True, color="FF000000")
HEADER_FILL = PatternFill(fill_type="solid", fgColor="FFFFFF00")
HEADER_ALIGNMENT = Alignment(vertical="center", horizontal="center")


def visit_to_cells(index: int, row: VisitRecord) -> list:
    return [
        index + 1,
        row.visitor_name,
        row.contact_number,
        row.visit_date,
        row.visit_time,
        row.channel_partner,
        row.property_types,
        row.remark,
        row.status,
    ]


def build_visit_workbook(rows: Sequence[VisitRecord], sheet_title: str = "Site Visits") -> bytes:
    """Return .xlsx bytes: one header row, then one static row per visit."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = sheet_title

    sheet.append([header for header, _ in COLUMNS])
    for column_index, (_, width) in enumerate(COLUMNS, start=1):
        sheet.column_dimensions[get_column_letter(column_index)].width = width
    for cell in sheet[1]:
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = HEADER_ALIGNMENT

    for index, row in enumerate(rows):
        sheet.append(visit_to_cells(index, row))
        # Free text starting with "=" must stay text, not become a formula
        for cell in sheet[sheet.max_row]:
            if cell.data_type == "f":
                cell.data_type = "s"

    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
