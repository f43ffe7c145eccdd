"""Exporter interface and helpers shared by the spreadsheet and PDF backends."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from pathlib import Path
from typing import Any, Protocol

from pyestoque.exceptions import EstoqueValidationError
from pyestoque.formatting import slugify

_logger = logging.getLogger(__name__)

ExportColumn = str | Callable[[Any], Any]
"""A field name looked up on each row, or a function deriving the cell."""


class ExportKind(StrEnum):
    XLSX = "xlsx"
    PDF = "pdf"


@dataclass(frozen=True, slots=True)
class ExportResult:
    """Outcome of an export.

    ``ok`` is ``False`` only when the backend is unavailable; ``reason``
    then says why so the caller can show a notice.
    """

    ok: bool
    filename: str = ""
    path: Path | None = None
    reason: str = ""

    @classmethod
    def written(cls, path: Path) -> ExportResult:
        return cls(ok=True, filename=path.name, path=path)

    @classmethod
    def unavailable(cls, reason: str, *, filename: str = "") -> ExportResult:
        return cls(ok=False, filename=filename, reason=reason)


class DocumentExporter(Protocol):
    """Turns a row collection into a downloadable document."""

    extension: str

    def export(
        self,
        rows: Iterable[Any],
        title: str,
        headers: Sequence[str],
        columns: Sequence[ExportColumn],
        *,
        today: date | None = None,
    ) -> ExportResult:
        ...


def export_filename(title: str, extension: str, today: date | None = None) -> str:
    """``"Relatório de Estoque"`` -> ``"relatório-de-estoque-2024-05-01.xlsx"``."""
    day = today or date.today()
    return f"{slugify(title)}-{day.isoformat()}.{extension}"


def _extract(row: Any, column: ExportColumn) -> Any:
    if callable(column):
        return column(row)
    if isinstance(row, Mapping):
        return row.get(column, "")
    return getattr(row, column, "")


def build_export_rows(rows: Iterable[Any], columns: Sequence[ExportColumn]) -> list[list[Any]]:
    """Extract one list of cell values per row.

    Rows may be mappings or objects (models). A missing field yields ``""``.
    """
    return [[_extract(row, column) for column in columns] for row in rows]


def validate_export_args(title: str, headers: Sequence[str], columns: Sequence[ExportColumn]) -> None:
    if not title or not title.strip():
        raise EstoqueValidationError("Export title must not be empty", field="title")
    if len(headers) != len(columns):
        raise EstoqueValidationError(
            f"Got {len(headers)} header(s) for {len(columns)} column(s)",
            field="columns",
        )


class UnavailableExporter:
    """Null exporter used when a backend library cannot be loaded.

    Every call returns an unavailable :class:`ExportResult` instead of
    silently doing nothing.
    """

    def __init__(self, reason: str, *, extension: str = "") -> None:
        self.reason = reason
        self.extension = extension

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
        filename = export_filename(title, self.extension, today) if self.extension else ""
        _logger.warning("Export of %r skipped: %s", title, self.reason)
        return ExportResult.unavailable(self.reason, filename=filename)
