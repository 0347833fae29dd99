"""
PDF serializer for timesheet exports using ReportLab.

Layout: title block (title, date range, scope, generation stamp), then a
table that repeats its header row on every page. Every page carries the
footer "Page {i} of {n} | Total Hours: {total}".

Notes longer than 40 characters are cut in the PDF table only; the CSV export
keeps them whole.
"""

import io
import logging
from typing import List, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape, letter, portrait
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from timesheet.domain.errors import SerializationError
from timesheet.domain.models import Activity, ExportDetailedRow, ExportMetadata, ExportSummaryRow
from timesheet.services.duration import format_minutes_to_hours
from timesheet.services.export.transformer import total_detailed_minutes, total_summary_minutes

logger = logging.getLogger(__name__)

MEDIA_TYPE = "application/pdf"

DETAILED_TITLE = "Timesheet Report - Detailed"
SUMMARY_TITLE = "Timesheet Report - Summary"
DETAILED_HEADERS = ["Date", "User", "Activity", "Start", "End", "Duration", "Notes"]
SUMMARY_HEADERS = ["User", "Date", "Total", "Entries"]

NOTES_MAX_LENGTH = 40
EMPTY_CELL = "-"

PAGE_SIZES = {"a4": A4, "letter": letter}

HEADER_FILL = colors.Color(37 / 255, 99 / 255, 235 / 255)
ALTERNATE_FILL = colors.Color(248 / 255, 250 / 255, 252 / 255)
MARGIN = 14 * mm

# Detailed table column widths; the notes column takes the rest
DETAILED_COL_WIDTHS = [22 * mm, 28 * mm, 25 * mm, 18 * mm, 18 * mm, 18 * mm]


def truncate_notes(notes: str, limit: int = NOTES_MAX_LENGTH) -> str:
    if len(notes) > limit:
        return notes[:limit] + "..."
    return notes


def footer_text(page: int, page_count: int, total_hours: str) -> str:
    return f"Page {page} of {page_count} | Total Hours: {total_hours}"


class _FooterCanvas(canvas.Canvas):
    """
    Canvas that defers page output until the page count is known,
    then stamps the footer on every page.
    """

    def __init__(self, *args, total_hours: str = "", **kwargs):
        super().__init__(*args, **kwargs)
        self._total_hours = total_hours
        self._page_states = []

    def showPage(self):
        self._page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        page_count = len(self._page_states)
        for state in self._page_states:
            self.__dict__.update(state)
            self.setFont("Helvetica", 9)
            self.drawString(MARGIN, 10 * mm, footer_text(self._pageNumber, page_count, self._total_hours))
            super().showPage()
        super().save()


def _resolve_page_size(page_size: str):
    try:
        return PAGE_SIZES[page_size.lower()]
    except KeyError as e:
        raise SerializationError(f"Unsupported page size: {page_size}") from e


def _header_block(title: str, metadata: ExportMetadata) -> list:
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle("ReportTitle", parent=styles["Heading1"], fontName="Helvetica-Bold",
                                 fontSize=18, leading=22, spaceAfter=4)
    meta_style = ParagraphStyle("ReportMeta", parent=styles["Normal"], fontSize=10, leading=14)
    return [
        Paragraph(escape(title), title_style),
        Paragraph(escape(f"Date Range: {metadata.date_range}"), meta_style),
        Paragraph(escape(f"Scope: {metadata.scope}"), meta_style),
        Paragraph(escape(f"Generated: {metadata.generated_at} ({metadata.timezone})"), meta_style),
        Spacer(1, 6 * mm),
    ]


def _table(data: List[List[str]], col_widths=None) -> Table:
    table = Table(data, colWidths=col_widths, repeatRows=1)
    table.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (-1, -1), "Helvetica"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("TOPPADDING", (0, 0), (-1, -1), 3),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_FILL),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, ALTERNATE_FILL]),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ]))
    return table


def _render(story: list, pagesize, title: str, total_minutes: int, compress: bool) -> bytes:
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=pagesize,
        leftMargin=MARGIN,
        rightMargin=MARGIN,
        topMargin=MARGIN,
        bottomMargin=20 * mm,
        title=title,
        pageCompression=1 if compress else 0,
    )
    total_hours = format_minutes_to_hours(total_minutes)

    def make_canvas(*args, **kwargs):
        return _FooterCanvas(*args, total_hours=total_hours, **kwargs)

    try:
        doc.build(story, canvasmaker=make_canvas)
    except Exception as e:
        logger.error(f"PDF rendering failed: {e}")
        raise SerializationError(str(e)) from e
    return buffer.getvalue()


def build_detailed_table(rows: Sequence[ExportDetailedRow]) -> List[List[str]]:
    """Table data (header first) for the detailed PDF"""
    data = [list(DETAILED_HEADERS)]
    for row in rows:
        data.append([
            row.date,
            row.user_name,
            row.activity,
            row.start_time,
            row.end_time,
            row.duration,
            truncate_notes(row.notes),
        ])
    return data


def build_summary_table(rows: Sequence[ExportSummaryRow], activities: Sequence[Activity]) -> List[List[str]]:
    """Table data (header first) for the summary PDF, one column per activity"""
    labels = [activity.label for activity in activities]
    data = [SUMMARY_HEADERS + labels]
    for row in rows:
        activity_values = [
            format_minutes_to_hours(row.activity_breakdown[label])
            if row.activity_breakdown.get(label) else EMPTY_CELL
            for label in labels
        ]
        data.append([row.user_name, row.date, row.total_hours, str(row.entry_count)] + activity_values)
    return data


def generate_detailed_pdf(rows: Sequence[ExportDetailedRow], metadata: ExportMetadata,
                          page_size: str = "a4", compress: bool = True) -> bytes:
    """
    Render the detailed report in portrait orientation.

    Raises:
        SerializationError: if ReportLab fails to build the document
    """
    pagesize = portrait(_resolve_page_size(page_size))
    notes_width = pagesize[0] - 2 * MARGIN - sum(DETAILED_COL_WIDTHS)
    story = _header_block(DETAILED_TITLE, metadata)
    story.append(_table(build_detailed_table(rows), DETAILED_COL_WIDTHS + [notes_width]))
    return _render(story, pagesize, DETAILED_TITLE, total_detailed_minutes(rows), compress)


def generate_summary_pdf(rows: Sequence[ExportSummaryRow], activities: Sequence[Activity],
                         metadata: ExportMetadata, page_size: str = "a4",
                         compress: bool = True) -> bytes:
    """Render the summary report in landscape to fit one column per activity"""
    pagesize = landscape(_resolve_page_size(page_size))
    story = _header_block(SUMMARY_TITLE, metadata)
    story.append(_table(build_summary_table(rows, activities)))
    return _render(story, pagesize, SUMMARY_TITLE, total_summary_minutes(rows), compress)
