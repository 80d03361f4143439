"""The dashboard: ordered rows, edit mode and persisted service state."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Callable, Dict, List, Optional

from statusboard.config.models import DisplaySettings, StatusboardConfig
from statusboard.dashboard.models import DISTANT_PAST, ServiceModel
from statusboard.dashboard.network import NetworkService
from statusboard.dashboard.row import RowView, ServiceStatusRow, StatusFetcher
from statusboard.dashboard.store import InMemoryServiceStore, ServiceStore

logger = logging.getLogger(__name__)


class DashboardError(Exception):
    """Raised for dashboard operations that are not allowed right now."""


class UnknownServiceError(DashboardError):
    def __init__(self, key: str) -> None:
        super().__init__(f"Unknown service: {key}")
        self.key = key


class Dashboard:
    """Holds one row per monitored service.

    Rows share the display settings and read edit mode from the dashboard.
    Check outcomes are written to the store by the dashboard, never by the
    rows themselves.
    """

    def __init__(
        self,
        services: List[ServiceModel],
        settings: Optional[DisplaySettings] = None,
        network: Optional[StatusFetcher] = None,
        store: Optional[ServiceStore] = None,
        on_change: Optional[Callable[[ServiceStatusRow], None]] = None,
    ) -> None:
        self.settings = settings or DisplaySettings()
        self._network = network or NetworkService(timeout=self.settings.request_timeout)
        self._store: ServiceStore = store or InMemoryServiceStore()
        self.on_change = on_change
        self._edit_mode = False
        self._rows: List[ServiceStatusRow] = [self._make_row(s) for s in services]
        self._removed: Dict[str, ServiceModel] = {}

    @classmethod
    def from_config(
        cls,
        config: StatusboardConfig,
        network: Optional[StatusFetcher] = None,
        store: Optional[ServiceStore] = None,
        on_change: Optional[Callable[[ServiceStatusRow], None]] = None,
    ) -> Dashboard:
        services = [ServiceModel.from_entry(key, entry) for key, entry in config.services.items()]
        return cls(services, settings=config.display, network=network, store=store, on_change=on_change)

    def _make_row(self, service: ServiceModel) -> ServiceStatusRow:
        return ServiceStatusRow(
            service,
            self._network,
            self.settings,
            is_editing=lambda: self._edit_mode,
            on_change=self._row_changed,
            on_result=self._record_result,
        )

    def _row_changed(self, row: ServiceStatusRow) -> None:
        if self.on_change is not None:
            self.on_change(row)

    async def _record_result(self, service: ServiceModel) -> None:
        await self._store.record_last_online(service.key, service.last_online_date)

    async def load(self) -> None:
        """Restore deletions, row order and last-online dates from the store."""
        deleted = await self._store.get_deleted()
        for row in [r for r in self._rows if r.key in deleted]:
            self._drop(row)

        last_online = await self._store.get_last_online()
        for row in self._rows:
            if row.key in last_online:
                row.service.last_online_date = last_online[row.key]

        order = await self._store.get_order()
        if order:
            position = {key: i for i, key in enumerate(order)}
            # Services missing from the saved order keep their config order, after the rest.
            self._rows.sort(key=lambda r: position.get(r.key, len(position)))

    def _drop(self, row: ServiceStatusRow) -> None:
        row.close()
        self._rows.remove(row)
        self._removed[row.key] = row.service

    @property
    def rows(self) -> List[ServiceStatusRow]:
        return list(self._rows)

    @property
    def keys(self) -> List[str]:
        return [r.key for r in self._rows]

    def get_row(self, key: str) -> ServiceStatusRow:
        for row in self._rows:
            if row.key == key:
                return row
        raise UnknownServiceError(key)

    def views(self) -> List[RowView]:
        return [r.render() for r in self._rows]

    def appear_all(self) -> List[asyncio.Task[None]]:
        """Display every row; rows already shown once start nothing."""
        tasks = []
        for row in self._rows:
            task = row.on_appear()
            if task is not None:
                tasks.append(task)
        return tasks

    def activate(self, key: str) -> asyncio.Task[None] | None:
        return self.get_row(key).on_activate()

    async def wait_idle(self) -> None:
        await asyncio.gather(*(r.wait_idle() for r in self._rows))

    @property
    def edit_mode(self) -> bool:
        return self._edit_mode

    def set_edit_mode(self, enabled: bool) -> None:
        self._edit_mode = enabled
        for row in self._rows:
            row.notify_change()

    def _require_edit_mode(self, action: str) -> None:
        if not self._edit_mode:
            raise DashboardError(f"Cannot {action} services outside edit mode")

    async def move(self, key: str, index: int) -> None:
        """Move a row to *index* (clamped to the list bounds)."""
        self._require_edit_mode("reorder")
        row = self.get_row(key)
        self._rows.remove(row)
        index = max(0, min(index, len(self._rows)))
        self._rows.insert(index, row)
        await self._store.save_order(self.keys)

    async def delete(self, key: str) -> None:
        self._require_edit_mode("delete")
        self._drop(self.get_row(key))
        await self._store.delete(key)
        await self._store.save_order(self.keys)
        logger.info("Deleted service %s", key)

    @property
    def deleted_keys(self) -> List[str]:
        """Configured services that were deleted from the dashboard."""
        return list(self._removed)

    async def restore(self, key: str) -> ServiceStatusRow:
        """Bring a deleted service back as the last row, with no check history."""
        self._require_edit_mode("restore")
        service = self._removed.pop(key, None)
        if service is None:
            raise UnknownServiceError(key)
        row = self._make_row(replace(service, last_online_date=DISTANT_PAST))
        self._rows.append(row)
        await self._store.restore(key)
        await self._store.save_order(self.keys)
        logger.info("Restored service %s", key)
        return row

    def close(self) -> None:
        for row in self._rows:
            row.close()
