"""Spreadsheet export backed by openpyxl."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from pyestoque.export.base import (
    ExportColumn,
    ExportKind,
    ExportResult,
    build_export_rows,
    export_filename,
    validate_export_args,
)

_logger = logging.getLogger(__name__)

COLUMN_WIDTH = 20
SHEET_TITLE_MAX = 31
_INVALID_SHEET_CHARS = re.compile(r"[\[\]:*?/\\]")


def sheet_title(title: str) -> str:
    """Excel sheet names: at most 31 chars, none of ``[]:*?/\\``."""
    cleaned = _INVALID_SHEET_CHARS.sub(" ", title).strip()
    return cleaned[:SHEET_TITLE_MAX] or "Sheet1"


def _cell_value(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, Decimal, str)):
        return value.value if isinstance(value, Enum) else value
    if isinstance(value, datetime):
        # Worksheets have no notion of time zones.
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return value
    return str(value)


class ExcelExporter:
    """Write rows to ``<slug>-<YYYY-MM-DD>.xlsx`` under *output_dir*.

    The first row holds the headers in bold; every column is 20 wide.
    """

    extension = ExportKind.XLSX.value

    def __init__(self, output_dir: str | Path | None = None) -> None:
        self.output_dir = Path(output_dir) if output_dir is not None else Path.cwd()

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

        wb = Workbook()
        ws = wb.active
        ws.title = sheet_title(title)

        ws.append(list(headers))
        header_font = Font(bold=True)
        for col_num in range(1, len(headers) + 1):
            ws.cell(row=1, column=col_num).font = header_font

        count = 0
        for values in build_export_rows(rows, columns):
            ws.append([_cell_value(value) for value in values])
            count += 1

        for col_num in range(1, len(headers) + 1):
            ws.column_dimensions[get_column_letter(col_num)].width = COLUMN_WIDTH

        self.output_dir.mkdir(parents=True, exist_ok=True)
        wb.save(path)
        _logger.info("Exported %d row(s) to %s", count, path)
        return ExportResult.written(path)
