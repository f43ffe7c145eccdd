"""pyestoque - Async Python client for the Estoque Inteligente inventory API."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyestoque")
except PackageNotFoundError:
    __version__ = "0+local"
from pyestoque.app import AppContext
from pyestoque.auth import AuthProvider, InactivityState
from pyestoque.cep import CepLookup, normalize_cep
from pyestoque.client import EstoqueClient
from pyestoque.config import EstoqueConfig
from pyestoque.exceptions import (
    EstoqueApiError,
    EstoqueAuthenticationError,
    EstoqueAuthorizationError,
    EstoqueConfigError,
    EstoqueError,
    EstoqueMissingDependencyError,
    EstoqueNotFoundError,
    EstoqueTransportError,
    EstoqueValidationError,
)
from pyestoque.export import DocumentExporter, ExportResult, UnavailableExporter, get_exporter
from pyestoque.language import LanguageProvider
from pyestoque.models import (
    Address,
    AuthUser,
    Category,
    CategorySummary,
    Company,
    DashboardSummary,
    PaymentMethod,
    Product,
    Sale,
    SaleItem,
    Supplier,
)
from pyestoque.preferences import SidebarState, Theme, ThemeProvider
from pyestoque.query_cache import CachedQuery, QueryCache, QueryStatus, query_key
from pyestoque.reports import filter_products, summarize_inventory
from pyestoque.routing import ROUTES, Route, RouteDecision, RouteGuard, RouteOutcome, guard_route, require_role
from pyestoque.session import Session
from pyestoque.storage import JsonFileStorage, MemoryStorage, StoragePort

__all__ = [
    "ROUTES",
    "Address",
    "AppContext",
    "AuthProvider",
    "AuthUser",
    "CachedQuery",
    "Category",
    "CategorySummary",
    "CepLookup",
    "Company",
    "DashboardSummary",
    "DocumentExporter",
    "EstoqueApiError",
    "EstoqueAuthenticationError",
    "EstoqueAuthorizationError",
    "EstoqueClient",
    "EstoqueConfig",
    "EstoqueConfigError",
    "EstoqueError",
    "EstoqueMissingDependencyError",
    "EstoqueNotFoundError",
    "EstoqueTransportError",
    "EstoqueValidationError",
    "ExportResult",
    "InactivityState",
    "JsonFileStorage",
    "LanguageProvider",
    "MemoryStorage",
    "PaymentMethod",
    "Product",
    "QueryCache",
    "QueryStatus",
    "Route",
    "RouteDecision",
    "RouteGuard",
    "RouteOutcome",
    "Sale",
    "SaleItem",
    "Session",
    "SidebarState",
    "StoragePort",
    "Supplier",
    "Theme",
    "ThemeProvider",
    "UnavailableExporter",
    "filter_products",
    "get_exporter",
    "guard_route",
    "normalize_cep",
    "query_key",
    "require_role",
    "summarize_inventory",
]
