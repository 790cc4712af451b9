"""
Request Export
Groups pass requests by route for the admin data view and renders CSV,
Excel workbooks and PDF reports.
"""
import csv
import io
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, Tuple

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from app.config import settings
from app.models.pass_request import PassRequest, ProfileType

EXPORT_COLUMNS = [
    "Student Name",
    "USN",
    "Profile Type",
    "Route",
    "Pickup Point",
    "Status",
    "Request Date",
]

NOT_AVAILABLE = "N/A"


def route_key(request: PassRequest) -> str:
    return request.route_name or request.source_collection or settings.GENERAL_PASS_COLLECTION


def route_label(key: str) -> str:
    """GENERAL for the general pool, ROUTE <n> for route pools"""
    if key == settings.GENERAL_PASS_COLLECTION:
        return "GENERAL"
    prefix = settings.ROUTE_COLLECTION_PREFIX
    if key.startswith(prefix):
        return f"ROUTE {key[len(prefix):]}"
    return key.upper()


def _route_sort_key(key: str) -> Tuple[int, int, str]:
    if key == settings.GENERAL_PASS_COLLECTION:
        return (0, 0, key)
    suffix = key[len(settings.ROUTE_COLLECTION_PREFIX):] if key.startswith(settings.ROUTE_COLLECTION_PREFIX) else ""
    number = int(suffix) if suffix.isdigit() else 0
    return (1, number, key)


def filter_by_profile_type(
    requests: Iterable[PassRequest],
    profile_type: Optional[ProfileType] = None,
) -> List[PassRequest]:
    if profile_type is None:
        return list(requests)
    return [request for request in requests if request.profile_type == profile_type]


def group_by_route(requests: Iterable[PassRequest]) -> "OrderedDict[str, List[PassRequest]]":
    """Requests keyed by route; general pool first, then routes in numeric order"""
    groups: Dict[str, List[PassRequest]] = {}
    for request in requests:
        groups.setdefault(route_key(request), []).append(request)
    return OrderedDict(sorted(groups.items(), key=lambda item: _route_sort_key(item[0])))


def _format_date(request: PassRequest) -> str:
    if request.request_date is None:
        return NOT_AVAILABLE
    return request.request_date.strftime("%Y-%m-%d %H:%M:%S")


def export_row(request: PassRequest) -> Dict[str, str]:
    return {
        "Student Name": request.student_name or NOT_AVAILABLE,
        "USN": request.usn or NOT_AVAILABLE,
        "Profile Type": request.profile_type.value.capitalize(),
        "Route": route_label(route_key(request)),
        "Pickup Point": request.pickup_point or NOT_AVAILABLE,
        "Status": request.status.value,
        "Request Date": _format_date(request),
    }


def requests_to_csv(groups: "OrderedDict[str, List[PassRequest]]") -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=EXPORT_COLUMNS)
    writer.writeheader()
    for requests in groups.values():
        for request in requests:
            writer.writerow(export_row(request))
    return buffer.getvalue()


def _sheet_title(label: str) -> str:
    # Excel caps sheet titles at 31 characters and forbids a few symbols
    for char in "[]:*?/\\":
        label = label.replace(char, "-")
    return label[:31]


def requests_to_xlsx(groups: "OrderedDict[str, List[PassRequest]]") -> bytes:
    """Workbook with one sheet per route, in group order"""
    workbook = Workbook()
    workbook.remove(workbook.active)

    header_fill = PatternFill(start_color="1E293B", end_color="1E293B", fill_type="solid")
    header_font = Font(bold=True, color="FFFFFF")

    for key, requests in groups.items():
        sheet = workbook.create_sheet(_sheet_title(route_label(key)))
        for col, header in enumerate(EXPORT_COLUMNS, 1):
            cell = sheet.cell(row=1, column=col, value=header)
            cell.fill = header_fill
            cell.font = header_font
        for row, request in enumerate(requests, 2):
            values = export_row(request)
            for col, header in enumerate(EXPORT_COLUMNS, 1):
                sheet.cell(row=row, column=col, value=values[header])

    if not workbook.sheetnames:
        workbook.create_sheet("No Requests")

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


PDF_COLUMNS = ["Student Name", "USN", "Profile Type", "Pickup Point", "Status", "Request Date"]


def requests_to_pdf(groups: "OrderedDict[str, List[PassRequest]]", title: str) -> bytes:
    """Report with a heading and a striped table per route"""
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=36,
        leftMargin=36,
        topMargin=36,
        bottomMargin=36
    )
    styles = getSampleStyleSheet()

    story = [Paragraph(title, styles["Title"]), Spacer(1, 0.2 * inch)]
    for key, requests in groups.items():
        story.append(Paragraph(f"{route_label(key)} ({len(requests)})", styles["Heading2"]))

        rows = [PDF_COLUMNS]
        for request in requests:
            values = export_row(request)
            rows.append([values[column] for column in PDF_COLUMNS])

        table = Table(rows, repeatRows=1)
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#1E293B")),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 8),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#F1F5F9")]),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
        ]))
        story.append(table)
        story.append(Spacer(1, 0.3 * inch))

    if not groups:
        story.append(Paragraph("No requests.", styles["BodyText"]))

    doc.build(story)
    return buffer.getvalue()
