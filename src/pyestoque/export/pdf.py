"""Paginated PDF export backed by reportlab."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from datetime import date, datetime
from pathlib import Path
from typing import Any
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from pyestoque.export.base import (
    ExportColumn,
    ExportKind,
    ExportResult,
    build_export_rows,
    export_filename,
    validate_export_args,
)
from pyestoque.formatting import format_datetime

_logger = logging.getLogger(__name__)

HEADER_FILL = colors.Color(59 / 255, 130 / 255, 246 / 255)
ALTERNATE_ROW_FILL = colors.Color(245 / 255, 247 / 255, 250 / 255)
TITLE_FONT_SIZE = 18
SUBTITLE_FONT_SIZE = 11


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return format_datetime(value)
    return str(value)


def table_style(row_count: int) -> TableStyle:
    """Grid with a blue bold header row and striped body rows."""
    commands: list[tuple[Any, ...]] = [
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_FILL),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ]
    if row_count:
        commands.append(("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, ALTERNATE_ROW_FILL]))
    return TableStyle(commands)


class PdfExporter:
    """Write rows to a landscape A4 ``<slug>-<YYYY-MM-DD>.pdf`` under *output_dir*.

    The document holds the title, a ``Gerado em: <timestamp>`` line and
    the table; the header row repeats on every page.
    """

    extension = ExportKind.PDF.value

    def __init__(
        self,
        output_dir: str | Path | None = None,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.output_dir = Path(output_dir) if output_dir is not None else Path.cwd()
        self._clock = clock

    def export(
        self,
        rows: Iterable[Any],
        title: str,
        headers: Sequence[str],
        columns: Sequence[ExportColumn],
        *,
        today: date | None = None,
    ) -> ExportResult:
        validate_export_args(title, headers, columns)
        path = self.output_dir / export_filename(title, self.extension, today)

        body = [[_cell_text(value) for value in values] for values in build_export_rows(rows, columns)]
        styles = getSampleStyleSheet()
        title_style = ParagraphStyle("ExportTitle", parent=styles["Heading1"], fontSize=TITLE_FONT_SIZE)
        subtitle_style = ParagraphStyle("ExportSubtitle", parent=styles["Normal"], fontSize=SUBTITLE_FONT_SIZE)

        table = Table([list(headers), *body], repeatRows=1)
        table.setStyle(table_style(len(body)))

        self.output_dir.mkdir(parents=True, exist_ok=True)
        doc = SimpleDocTemplate(
            str(path),
            pagesize=landscape(A4),
            leftMargin=14 * mm,
            rightMargin=14 * mm,
            topMargin=14 * mm,
            bottomMargin=14 * mm,
            title=title,
        )
        doc.build(
            [
                Paragraph(escape(title), title_style),
                Paragraph(f"Gerado em: {format_datetime(self._clock())}", subtitle_style),
                Spacer(1, 6 * mm),
                table,
            ]
        )
        _logger.info("Exported %d row(s) to %s", len(body), path)
        return ExportResult.written(path)
