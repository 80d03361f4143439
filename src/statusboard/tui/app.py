"""Interactive textual dashboard."""

from __future__ import annotations

from typing import Optional

from textual.app import App, ComposeResult
from textual.containers import Horizontal
from textual.widgets import Footer, Header, ListItem, ListView, Static

from statusboard.config.models import StatusboardConfig
from statusboard.dashboard import Dashboard, DashboardError, ServiceStatusRow, create_store
from statusboard.render import accessory, identity


class ServiceRowItem(ListItem):
    """List entry drawing one ServiceStatusRow."""

    DEFAULT_CSS = """
    ServiceRowItem {
        height: 3;
        padding: 0 1;
    }

    ServiceRowItem Horizontal {
        height: 3;
        align-vertical: middle;
    }

    ServiceRowItem .row-identity {
        width: 1fr;
        content-align: center middle;
    }

    ServiceRowItem .row-accessory {
        width: 24;
        content-align: center middle;
    }
    """

    def __init__(self, row: ServiceStatusRow) -> None:
        super().__init__()
        self.row = row

    def compose(self) -> ComposeResult:
        with Horizontal():
            yield Static(classes="row-identity")
            yield Static(classes="row-accessory")

    def on_mount(self) -> None:
        self.refresh_view()
        # Keeps the spinner animating.
        self.set_interval(1 / 12, self._tick)
        self.row.on_appear()

    def on_unmount(self) -> None:
        self.row.close()

    def _tick(self) -> None:
        if self.row.is_loading:
            self.refresh_view()

    def refresh_view(self) -> None:
        view = self.row.render()
        self.query_one(".row-identity", Static).update(identity(view))
        self.query_one(".row-accessory", Static).update(accessory(view))


class StatusboardApp(App[None]):
    """One row per service. Enter or click checks a service."""

    TITLE = "Statusboard"

    BINDINGS = [
        ("e", "toggle_edit", "Edit"),
        ("s", "toggle_codes", "Codes"),
        ("r", "check_all", "Check all"),
        ("d", "delete", "Delete"),
        ("u", "restore", "Undelete"),
        ("shift+up", "move(-1)", "Move up"),
        ("shift+down", "move(1)", "Move down"),
        ("q", "quit", "Quit"),
    ]

    def __init__(self, config: StatusboardConfig, dashboard: Optional[Dashboard] = None) -> None:
        super().__init__()
        self.dashboard = dashboard or Dashboard.from_config(config, store=create_store(config))
        self.dashboard.on_change = self._row_changed
        self._config = config
        self._items: dict[str, ServiceRowItem] = {}

    def compose(self) -> ComposeResult:
        yield Header()
        yield ListView()
        yield Footer()

    async def on_mount(self) -> None:
        self.title = self._config.statusboard.name
        await self.dashboard.load()
        for row in self.dashboard.rows:
            self._items[row.key] = ServiceRowItem(row)
        list_view = self.query_one(ListView)
        await list_view.extend(self._items.values())
        list_view.focus()

    def on_unmount(self) -> None:
        self.dashboard.close()

    def _row_changed(self, row: ServiceStatusRow) -> None:
        item = self._items.get(row.key)
        if item is not None and item.is_mounted:
            item.refresh_view()

    def _highlighted(self) -> Optional[ServiceRowItem]:
        child = self.query_one(ListView).highlighted_child
        return child if isinstance(child, ServiceRowItem) else None

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        if isinstance(event.item, ServiceRowItem):
            event.item.row.on_activate()

    def action_toggle_edit(self) -> None:
        self.dashboard.set_edit_mode(not self.dashboard.edit_mode)
        self.sub_title = "Editing" if self.dashboard.edit_mode else ""

    def action_toggle_codes(self) -> None:
        settings = self.dashboard.settings
        settings.show_error_codes = not settings.show_error_codes
        for item in self._items.values():
            item.refresh_view()

    def action_check_all(self) -> None:
        for row in self.dashboard.rows:
            row.on_activate()

    async def action_delete(self) -> None:
        item = self._highlighted()
        if item is None:
            return
        try:
            await self.dashboard.delete(item.row.key)
        except DashboardError as exc:
            self.notify(str(exc), severity="warning")
            return
        del self._items[item.row.key]
        await item.remove()

    async def action_restore(self) -> None:
        """Bring back the most recently deleted service."""
        deleted = self.dashboard.deleted_keys
        if not deleted:
            return
        try:
            row = await self.dashboard.restore(deleted[-1])
        except DashboardError as exc:
            self.notify(str(exc), severity="warning")
            return
        item = ServiceRowItem(row)
        self._items[row.key] = item
        await self.query_one(ListView).append(item)

    async def action_move(self, offset: int) -> None:
        item = self._highlighted()
        if item is None:
            return
        key = item.row.key
        old_index = self.dashboard.keys.index(key)
        try:
            await self.dashboard.move(key, old_index + offset)
        except DashboardError as exc:
            self.notify(str(exc), severity="warning")
            return
        new_index = self.dashboard.keys.index(key)
        if new_index == old_index:
            return
        list_view = self.query_one(ListView)
        if new_index < old_index:
            list_view.move_child(item, before=new_index)
        else:
            list_view.move_child(item, after=new_index)
        list_view.index = new_index
