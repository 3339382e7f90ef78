"""CSV and PDF export of a :class:`fintrack.reports.Report`.

CSV output goes through pandas; the PDF is laid out with reportlab's
platypus engine on A4 paper.  Both return in-memory content so the
Streamlit download buttons and :func:`write_export` can share them.
"""

from __future__ import annotations

import io
import logging
from datetime import date
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .config import APP_NAME, EXPORTS_DIR
from .formatting import format_currency
from .reports import EXPORT_HEADERS, ExportRow, Report, rows_frame
from .settings import get_config_value

logger = logging.getLogger(__name__)

EXPORT_KINDS = ('csv', 'pdf')

PAGE_MARGIN = 20 * mm
HEADER_HEIGHT = 40 * mm
TABLE_COLUMN_WIDTHS = [30 * mm, 40 * mm, 80 * mm, 30 * mm]


def export_filename(kind: str, today: date) -> str:
    """``expenses-2024-01-31.csv`` or ``fin-track-report-2024-01-31.pdf``."""
    stamp = today.strftime('%Y-%m-%d')
    if kind == 'csv':
        return f"expenses-{stamp}.csv"
    if kind == 'pdf':
        return f"fin-track-report-{stamp}.pdf"
    raise ValueError(f"Unknown export kind '{kind}'. Expected one of: {', '.join(EXPORT_KINDS)}")


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------


def to_csv(rows: Sequence[ExportRow]) -> str:
    """Render export rows as CSV text with a ``Date,Category,Title,Amount`` header.

    Fields containing commas, quotes or newlines are quoted.
    """
    if not rows:
        return ','.join(EXPORT_HEADERS) + '\n'
    return rows_frame(rows).to_csv(index=False, lineterminator='\n')


def csv_bytes(rows: Sequence[ExportRow]) -> bytes:
    return to_csv(rows).encode('utf-8')


# ---------------------------------------------------------------------------
# PDF
# ---------------------------------------------------------------------------


def truncate_title(title: str, limit: Optional[int] = None) -> str:
    """Shorten long titles so they fit the table column."""
    limit = limit or int(get_config_value('reports', 'pdf', 'title_truncate', default=25))
    if len(title) <= limit:
        return title
    return title[:limit - 3] + '...'


class _NumberedCanvas(canvas.Canvas):
    """Canvas that defers page output until the page count is known."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states: List[dict] = []

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        page_count = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._draw_footer(page_count)
            super().showPage()
        super().save()

    def _draw_footer(self, page_count: int) -> None:
        width, _ = self._pagesize
        self.saveState()
        self.setFont('Helvetica', 8)
        self.setFillColor(colors.grey)
        self.drawString(PAGE_MARGIN, 10 * mm, f"Generated by {APP_NAME}")
        self.drawRightString(width - PAGE_MARGIN, 10 * mm, f"Page {self._pageNumber} of {page_count}")
        self.restoreState()


def _header_color() -> colors.Color:
    red, green, blue = get_config_value('reports', 'pdf', 'header_rgb', default=[79, 209, 197])
    return colors.Color(red / 255, green / 255, blue / 255)


def _draw_header(report: Report):
    title = get_config_value('reports', 'pdf', 'title', default=f"{APP_NAME} Expense Report")
    generated = f"Generated on: {report.generated_on.strftime('%B %d, %Y')}"

    def draw(pdf: canvas.Canvas, doc: SimpleDocTemplate) -> None:
        width, height = doc.pagesize
        pdf.saveState()
        pdf.setFillColor(_header_color())
        pdf.rect(0, height - HEADER_HEIGHT, width, HEADER_HEIGHT, stroke=0, fill=1)
        pdf.setFillColor(colors.white)
        pdf.setFont('Helvetica-Bold', 24)
        pdf.drawString(PAGE_MARGIN, height - 25 * mm, title)
        pdf.setFont('Helvetica', 10)
        pdf.drawString(PAGE_MARGIN, height - 35 * mm, generated)
        pdf.restoreState()

    return draw


def _summary_lines(report: Report) -> List[str]:
    return [
        f"Date Range: {report.range_label}",
        f"Total Transactions: {report.count}",
        f"Total Amount: {format_currency(report.total)}",
        f"Average Transaction: {format_currency(report.average)}",
    ]


def _statistics_lines(report: Report) -> List[str]:
    lines = [f"Categories Used: {sum(1 for share in report.breakdown if share.amount > 0)}"]
    if report.top_category is not None:
        lines.append(
            f"Top Category: {report.top_category.name} ({format_currency(report.top_category.amount)})"
        )
    if report.monthly_trend:
        busiest = max(report.monthly_trend, key=lambda point: point.amount)
        lines.append(f"Highest Month: {busiest.month} ({format_currency(busiest.amount)})")
    lines.extend(report.insights)
    return lines


def _expense_table(rows: Sequence[ExportRow]) -> Table:
    data = [list(EXPORT_HEADERS)]
    for row in rows:
        data.append([row.date, row.category, truncate_title(row.title), format_currency(float(row.amount))])
    table = Table(data, colWidths=TABLE_COLUMN_WIDTHS, repeatRows=1)
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), _header_color()),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('ALIGN', (-1, 1), (-1, -1), 'RIGHT'),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.whitesmoke]),
        ('LINEBELOW', (0, 0), (-1, -1), 0.25, colors.lightgrey),
    ]))
    return table


def to_pdf(report: Report) -> bytes:
    """Render ``report`` as a paginated A4 PDF document."""
    styles = getSampleStyleSheet()
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=PAGE_MARGIN,
        rightMargin=PAGE_MARGIN,
        topMargin=PAGE_MARGIN,
        bottomMargin=PAGE_MARGIN,
        title=get_config_value('reports', 'pdf', 'title', default=f"{APP_NAME} Expense Report"),
        author=APP_NAME,
    )

    story = [Spacer(1, HEADER_HEIGHT - PAGE_MARGIN + 5 * mm)]

    story.append(Paragraph('Report Summary', styles['Heading2']))
    story.extend(Paragraph(escape(line), styles['Normal']) for line in _summary_lines(report))
    story.append(Spacer(1, 6 * mm))

    story.append(Paragraph('Key Statistics', styles['Heading2']))
    story.extend(Paragraph(escape(line), styles['Normal']) for line in _statistics_lines(report))
    story.append(Spacer(1, 6 * mm))

    story.append(Paragraph('Spending by Category', styles['Heading2']))
    shares = [share for share in report.breakdown if share.amount > 0]
    if shares:
        story.extend(
            Paragraph(
                escape(f"{share.category}: {format_currency(share.amount)} ({share.percentage:.1f}%)"),
                styles['Normal'],
            )
            for share in shares
        )
    else:
        story.append(Paragraph('No spending recorded for this period.', styles['Normal']))
    story.append(Spacer(1, 6 * mm))

    story.append(Paragraph('Detailed Expenses', styles['Heading2']))
    if report.rows:
        story.append(_expense_table(report.rows))
    else:
        story.append(Paragraph('No expenses in this period.', styles['Normal']))

    doc.build(story, onFirstPage=_draw_header(report), canvasmaker=_NumberedCanvas)
    logger.debug("Rendered PDF report with %d rows", len(report.rows))
    return buffer.getvalue()


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


def write_export(content: Union[str, bytes], filename: str, directory: Optional[Path] = None) -> Path:
    """Write export content to ``directory`` (``EXPORTS_DIR`` by default)."""
    target_dir = Path(directory) if directory is not None else EXPORTS_DIR
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / filename
    if isinstance(content, str):
        path.write_text(content, encoding='utf-8')
    else:
        path.write_bytes(content)
    logger.info("Wrote export %s", path)
    return path


def export_report(report: Report, kinds: Iterable[str] = EXPORT_KINDS, directory: Optional[Path] = None) -> List[Path]:
    """Write the requested export formats for ``report``; returns the written paths."""
    paths: List[Path] = []
    for kind in kinds:
        filename = export_filename(kind, report.generated_on)
        content: Union[str, bytes] = to_csv(report.rows) if kind == 'csv' else to_pdf(report)
        paths.append(write_export(content, filename, directory))
    return paths
