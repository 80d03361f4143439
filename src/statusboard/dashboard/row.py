"""A single dashboard row: one service, its live status and its in-flight check."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Protocol

from statusboard.config.models import DisplaySettings
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

logger = logging.getLogger(__name__)


class StatusFetcher(Protocol):
    """Anything that can check a URL. Implemented by NetworkService."""

    async def fetch_status_code(self, url: str) -> StatusResult: ...


class Glyph(str, Enum):
    SPINNER = "spinner"
    CHECKMARK = "checkmark"
    WARNING = "warning"


@dataclass(frozen=True)
class RowView:
    """Everything needed to draw a row, independent of the UI toolkit.

    ``glyph`` is None while the dashboard is in edit mode (the accessory is
    hidden). ``message`` is None unless error codes are shown.
    """

    key: str
    name: str
    image: str
    glyph: Optional[Glyph]
    message: Optional[str]
    is_loading: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "image": self.image,
            "glyph": self.glyph.value if self.glyph else None,
            "message": self.message,
            "is_loading": self.is_loading,
        }


class ServiceStatusRow:
    """Owns the status of one service and the lifecycle of its status check."""

    def __init__(
        self,
        service: ServiceModel,
        network: StatusFetcher,
        settings: DisplaySettings,
        is_editing: Callable[[], bool] | None = None,
        on_change: Callable[[ServiceStatusRow], None] | None = None,
        on_result: Callable[[ServiceModel], Awaitable[None]] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.service = service
        self.state = RowDisplayState()
        self.status: StatusResult = Failure(TransportError(kind=ErrorKind.UNKNOWN))
        self._network = network
        self._settings = settings
        self._is_editing = is_editing or (lambda: False)
        self._on_change = on_change
        self._on_result = on_result
        self._clock = clock
        self._pending: set[asyncio.Task[None]] = set()
        self._clear_handle: asyncio.TimerHandle | None = None
        self._generation = 0
        self._idle = asyncio.Event()
        self._idle.set()
        self._closed = False

    @property
    def key(self) -> str:
        return self.service.key

    @property
    def is_loading(self) -> bool:
        return self.state.is_loading

    @property
    def closed(self) -> bool:
        return self._closed

    def on_appear(self) -> asyncio.Task[None] | None:
        """First display of the row. Only the first call starts a check."""
        if self.state.has_performed_initial_fetch or self._closed:
            return None
        self.state.has_performed_initial_fetch = True
        return self.fetch_status()

    def on_activate(self) -> asyncio.Task[None] | None:
        """User tapped the row. Ignored while the dashboard is being edited."""
        if self._closed or self._is_editing():
            return None
        return self.fetch_status()

    def fetch_status(self) -> asyncio.Task[None]:
        """Start a status check. Must be called from within the running loop.

        A check started while another is in flight supersedes it: the older
        result is dropped when it arrives.
        """
        self._generation += 1
        self._cancel_clear()
        self._idle.clear()
        self.state.is_loading = True
        start = self._clock()
        self.notify_change()

        task = asyncio.get_running_loop().create_task(
            self._run_fetch(self._generation, start),
            name=f"status-check-{self.key}",
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _run_fetch(self, generation: int, start: float) -> None:
        try:
            result = await self._network.fetch_status_code(self.service.url)
        except Exception as exc:
            logger.exception("Status check for %s raised", self.service.url)
            result = Failure(TransportError(kind=ErrorKind.UNKNOWN, description=str(exc)))

        if generation != self._generation or self._closed:
            logger.debug("Dropping superseded status check for %s", self.key)
            return

        if isinstance(result, Success):
            self.service.last_online_date = datetime.now(UTC)
        else:
            self.service.last_online_date = DISTANT_PAST
        self.status = result
        self.finish_loading(start)

        if self._on_result is not None:
            try:
                await self._on_result(self.service)
            except Exception:
                logger.exception("Result hook failed for %s", self.key)

    def finish_loading(self, start: float) -> None:
        """Record the response time and clear loading once the minimum display time is up."""
        elapsed = self._clock() - start
        self.state.last_response_time = elapsed
        remaining = max(0.0, self._settings.minimum_loading_time - elapsed)
        logger.debug("%s: loaded in %.3fs, spinner kept for %.3fs", self.key, elapsed, remaining)

        self._cancel_clear()
        loop = asyncio.get_running_loop()
        self._clear_handle = loop.call_later(remaining, self._clear_loading)
        self.notify_change()

    def _clear_loading(self) -> None:
        self._clear_handle = None
        self.state.is_loading = False
        self._idle.set()
        self.notify_change()

    def _cancel_clear(self) -> None:
        if self._clear_handle is not None:
            self._clear_handle.cancel()
            self._clear_handle = None

    async def wait_idle(self) -> None:
        """Wait until the current check has finished and the spinner is gone."""
        await self._idle.wait()

    def close(self) -> None:
        """Tear the row down: abandon in-flight checks and the pending timer."""
        self._closed = True
        for task in list(self._pending):
            task.cancel()
        self._cancel_clear()
        self.state.is_loading = False
        self._idle.set()

    def notify_change(self) -> None:
        if self._on_change is None:
            return
        try:
            self._on_change(self)
        except Exception:
            logger.exception("Change hook failed for %s", self.key)

    @property
    def response_label_text(self) -> str:
        if self.state.last_response_time is None:
            return ""
        return f"{int(self.state.last_response_time * 1000)} ms"

    def render(self) -> RowView:
        glyph: Optional[Glyph]
        message: Optional[str] = None
        if self._is_editing():
            glyph = None
        elif self.state.is_loading:
            glyph = Glyph.SPINNER
        else:
            glyph, message = self._status_accessory()
            if not self._settings.show_error_codes:
                message = None
        return RowView(
            key=self.key,
            name=self.service.name,
            image=self.service.image,
            glyph=glyph,
            message=message,
            is_loading=self.state.is_loading,
        )

    def _status_accessory(self) -> tuple[Glyph, str]:
        status = self.status
        if isinstance(status, Success):
            if status.status_code != 200:
                return Glyph.WARNING, str(status.status_code)
            return Glyph.CHECKMARK, self.response_label_text
        return Glyph.WARNING, status.error.short_description
