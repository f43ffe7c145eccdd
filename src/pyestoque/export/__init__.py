"""Spreadsheet and PDF export.

Use :func:`get_exporter` to obtain a backend; it never raises for a missing
library and returns an :class:`UnavailableExporter` instead.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pyestoque.exceptions import EstoqueMissingDependencyError, EstoqueValidationError
from pyestoque.export.base import (
    DocumentExporter,
    ExportColumn,
    ExportKind,
    ExportResult,
    UnavailableExporter,
    build_export_rows,
    export_filename,
)

_logger = logging.getLogger(__name__)

_BACKEND_LIBRARY = {ExportKind.XLSX: "openpyxl", ExportKind.PDF: "reportlab"}


def get_exporter(kind: ExportKind | str, output_dir: str | Path | None = None) -> DocumentExporter:
    """Return the exporter for *kind* (``"xlsx"`` or ``"pdf"``).

    Raises
    ------
    EstoqueValidationError
        For an unknown kind.
    """
    try:
        export_kind = ExportKind(kind)
    except ValueError as exc:
        raise EstoqueValidationError(f"Unknown export kind {kind!r}", field="kind") from exc

    try:
        if export_kind is ExportKind.XLSX:
            from pyestoque.export.excel import ExcelExporter

            return ExcelExporter(output_dir)
        from pyestoque.export.pdf import PdfExporter

        return PdfExporter(output_dir)
    except ImportError as exc:
        library = _BACKEND_LIBRARY[export_kind]
        error = EstoqueMissingDependencyError(
            f"{export_kind.value} export requires the {library} package",
            dependency=library,
        )
        _logger.warning("%s (%s)", error, exc)
        return UnavailableExporter(str(error), extension=export_kind.value)


__all__ = [
    "DocumentExporter",
    "ExportColumn",
    "ExportKind",
    "ExportResult",
    "UnavailableExporter",
    "build_export_rows",
    "export_filename",
    "get_exporter",
]
