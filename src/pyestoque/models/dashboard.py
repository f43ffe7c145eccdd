"""Dashboard aggregate models."""

from __future__ import annotations

from pydantic import Field

from pyestoque.models._base import EstoqueBaseModel
from pyestoque.models.sales import Sale


class CategorySummary(EstoqueBaseModel):
    name: str
    item_count: int = 0
    total_value: float = 0.0
    potential_value: float = 0.0


class DashboardSummary(EstoqueBaseModel):
    """Aggregate inventory metrics shown on the dashboard.

    ``purchase_value`` is stock valued at buy price, ``potential_sales`` at
    sell price.
    """

    total_stock: int = 0
    purchase_value: float = 0.0
    potential_sales: float = 0.0
    low_stock_items: int = 0
    categories: list[CategorySummary] = Field(default_factory=list)
    recent_sales: list[Sale] = Field(default_factory=list)
