"""Display helpers for currency, dates and stock levels.

All functions are pure and locale-fixed to Brazilian Portuguese, which is
how the inventory screens render values regardless of the UI language.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import StrEnum

_CENTS = Decimal("0.01")
_WHITESPACE_OR_SEPARATOR = re.compile(r"[\s/\\]+")
_NON_DIGITS = re.compile(r"[^0-9]")


class StockStatus(StrEnum):
    OUT_OF_STOCK = "out_of_stock"
    LOW = "low"
    NORMAL = "normal"


_STOCK_STATUS_LABELS: dict[StockStatus, str] = {
    StockStatus.OUT_OF_STOCK: "Sem estoque",
    StockStatus.LOW: "Estoque baixo",
    StockStatus.NORMAL: "Normal",
}

BRAZILIAN_STATES: dict[str, str] = {
    "AC": "Acre",
    "AL": "Alagoas",
    "AP": "Amapá",
    "AM": "Amazonas",
    "BA": "Bahia",
    "CE": "Ceará",
    "DF": "Distrito Federal",
    "ES": "Espírito Santo",
    "GO": "Goiás",
    "MA": "Maranhão",
    "MT": "Mato Grosso",
    "MS": "Mato Grosso do Sul",
    "MG": "Minas Gerais",
    "PA": "Pará",
    "PB": "Paraíba",
    "PR": "Paraná",
    "PE": "Pernambuco",
    "PI": "Piauí",
    "RJ": "Rio de Janeiro",
    "RN": "Rio Grande do Norte",
    "RS": "Rio Grande do Sul",
    "RO": "Rondônia",
    "RR": "Roraima",
    "SC": "Santa Catarina",
    "SP": "São Paulo",
    "SE": "Sergipe",
    "TO": "Tocantins",
}


def format_currency(value: float | int | Decimal | None) -> str:
    """Format *value* as Brazilian reais, e.g. ``R$ 1.234,56``.

    ``None`` renders as ``R$ 0,00``.
    """
    if value is None:
        value = 0
    amount = Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    integer, _, cents = f"{abs(amount):,.2f}".partition(".")
    return f"{sign}R$ {integer.replace(',', '.')},{cents}"


def _coerce_datetime(value: date | datetime | str) -> date | datetime:
    if isinstance(value, str):
        return datetime.fromisoformat(value.strip())
    return value


def format_date(value: date | datetime | str) -> str:
    """Format a date as ``dd/mm/yyyy``. Strings must be ISO 8601."""
    return _coerce_datetime(value).strftime("%d/%m/%Y")


def format_datetime(value: datetime | str) -> str:
    """Format a timestamp as ``dd/mm/yyyy HH:MM:SS``."""
    return _coerce_datetime(value).strftime("%d/%m/%Y %H:%M:%S")


def get_initials(name: str) -> str:
    if not name:
        return ""
    return "".join(part[0] for part in name.split() if part).upper()[:2]


def calculate_total_price(quantity: int | float, price: int | float) -> float:
    return quantity * price


def is_low_stock(quantity: int | float, min_quantity: int | float) -> bool:
    return quantity <= min_quantity


def stock_status(quantity: int | float, min_quantity: int | float) -> StockStatus:
    """Classify a stock level. Zero or negative stock is always out of stock."""
    if quantity <= 0:
        return StockStatus.OUT_OF_STOCK
    if quantity <= min_quantity:
        return StockStatus.LOW
    return StockStatus.NORMAL


def stock_status_label(quantity: int | float, min_quantity: int | float) -> str:
    return _STOCK_STATUS_LABELS[stock_status(quantity, min_quantity)]


def slugify(title: str) -> str:
    """Lowercase *title* and replace whitespace runs with ``-``.

    Path separators are folded the same way so the result is safe as a
    file name.
    """
    return _WHITESPACE_OR_SEPARATOR.sub("-", title.strip().lower())


def only_digits(text: str) -> str:
    """Keep ASCII 0-9 only; other Unicode digits are dropped."""
    return _NON_DIGITS.sub("", text)
