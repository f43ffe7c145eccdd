"""Dashboard summary endpoint: /api/dashboard."""

from __future__ import annotations

from pyestoque._api._common import fetch_one
from pyestoque._transport import Transport
from pyestoque.models.dashboard import DashboardSummary

DASHBOARD_ENDPOINT = "/api/dashboard"


async def fetch_dashboard(transport: Transport) -> DashboardSummary:
    return await fetch_one(transport, DASHBOARD_ENDPOINT, DashboardSummary)
