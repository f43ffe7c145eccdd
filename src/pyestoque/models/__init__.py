"""Typed models for Estoque API payloads."""

from pyestoque.models._base import EstoqueBaseModel
from pyestoque.models.address import Address
from pyestoque.models.catalog import Category, Product, Supplier
from pyestoque.models.company import AuthUser, Company, CompanyPhone
from pyestoque.models.dashboard import CategorySummary, DashboardSummary
from pyestoque.models.requests import CreateSaleRequest, LoginRequest, SaleInput, SaleItemInput
from pyestoque.models.sales import PaymentMethod, Sale, SaleItem

__all__ = [
    "Address",
    "AuthUser",
    "Category",
    "CategorySummary",
    "Company",
    "CompanyPhone",
    "CreateSaleRequest",
    "DashboardSummary",
    "EstoqueBaseModel",
    "LoginRequest",
    "PaymentMethod",
    "Product",
    "Sale",
    "SaleInput",
    "SaleItem",
    "SaleItemInput",
    "Supplier",
]
