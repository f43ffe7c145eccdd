"""Sale models."""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from pyestoque.models._base import ApiTimestamp, EstoqueBaseModel
from pyestoque.models.catalog import Product


class PaymentMethod(StrEnum):
    CASH = "cash"
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    PIX = "pix"


class SaleItem(EstoqueBaseModel):
    id: int | None = None
    sale_id: int | None = None
    product_id: int
    quantity: int
    price: float
    total: float
    product: Product | None = None


class Sale(EstoqueBaseModel):
    """A recorded sale with its line items."""

    id: int | None = None
    company_id: int | None = None
    user_id: int | None = None
    date: ApiTimestamp = None
    payment_method: str
    total: float
    created_at: ApiTimestamp = None
    items: list[SaleItem] = Field(default_factory=list)
    item_count: int = 0
    user_name: str | None = None
