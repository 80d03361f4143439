"""Service rows, the dashboard that holds them, and their collaborators."""

from __future__ import annotations

from statusboard.dashboard.dashboard import Dashboard, DashboardError, UnknownServiceError
from statusboard.dashboard.models import (
    DISTANT_PAST,
    ErrorKind,
    Failure,
    RowDisplayState,
    ServiceModel,
    StatusResult,
    Success,
    TransportError,
)
from statusboard.dashboard.network import NetworkService
from statusboard.dashboard.row import Glyph, RowView, ServiceStatusRow
from statusboard.dashboard.store import InMemoryServiceStore, ServiceStore, create_store

__all__ = [
    "DISTANT_PAST",
    "Dashboard",
    "DashboardError",
    "ErrorKind",
    "Failure",
    "Glyph",
    "InMemoryServiceStore",
    "NetworkService",
    "RowDisplayState",
    "RowView",
    "ServiceModel",
    "ServiceStatusRow",
    "ServiceStore",
    "StatusResult",
    "Success",
    "TransportError",
    "UnknownServiceError",
    "create_store",
]
