"""Product, category and supplier models."""

from __future__ import annotations

from pyestoque.formatting import StockStatus, is_low_stock, stock_status
from pyestoque.models._base import ApiTimestamp, EstoqueBaseModel


class Category(EstoqueBaseModel):
    """Product category.

    ``has_size`` categories (clothing, shoes) require a size on products.
    """

    id: int | None = None
    company_id: int | None = None
    name: str
    has_size: bool = False


class Supplier(EstoqueBaseModel):
    id: int | None = None
    company_id: int | None = None
    name: str
    contact: str | None = None
    phone: str | None = None
    email: str | None = None
    address: str | None = None


class Product(EstoqueBaseModel):
    """Inventory item.

    Parameters
    ----------
    code : str
        Company-unique product code used at the point of sale.
    quantity : int
        Units currently in stock.
    min_quantity : int
        Threshold at or under which the product is flagged low stock.
    category, supplier : str or None
        Display names joined in by list endpoints.
    """

    id: int | None = None
    company_id: int | None = None
    code: str
    name: str
    category_id: int
    supplier_id: int | None = None
    subcategory: str | None = None
    size: str | None = None
    description: str = ""
    photo: str | None = None
    quantity: int = 0
    min_quantity: int = 1
    buy_price: float
    sell_price: float
    created_at: ApiTimestamp = None
    updated_at: ApiTimestamp = None
    category: str | None = None
    supplier: str | None = None

    @property
    def is_low_stock(self) -> bool:
        return is_low_stock(self.quantity, self.min_quantity)

    @property
    def stock_status(self) -> StockStatus:
        return stock_status(self.quantity, self.min_quantity)

    @property
    def purchase_value(self) -> float:
        return self.quantity * self.buy_price

    @property
    def potential_value(self) -> float:
        return self.quantity * self.sell_price
