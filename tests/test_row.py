"""Tests for ServiceStatusRow: check lifecycle, loading floor and rendering."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import List, Tuple

import pytest

from conftest import FakeNetwork
from statusboard.config.models import DisplaySettings
from statusboard.dashboard.models import (
    DISTANT_PAST,
    ErrorKind,
    Failure,
    ServiceModel,
    StatusResult,
    Success,
    TransportError,
)
from statusboard.dashboard.row import Glyph, ServiceStatusRow


class ScriptedNetwork:
    """Returns (result, delay) pairs in order, one per call."""

    def __init__(self, script: List[Tuple[StatusResult, float]]) -> None:
        self._script = list(script)
        self.calls = 0

    async def fetch_status_code(self, url: str) -> StatusResult:
        result, delay = self._script[self.calls]
        self.calls += 1
        await asyncio.sleep(delay)
        return result


class ExplodingNetwork:
    async def fetch_status_code(self, url: str) -> StatusResult:
        raise RuntimeError("boom")


def _fixed_clock(*values: float):
    return iter(values).__next__


# ─── Appearance and activation ───


class TestAppearance:
    @pytest.mark.asyncio
    async def test_first_appearance_fetches_once(self, service, network, settings):
        row = ServiceStatusRow(service, network, settings)
        task = row.on_appear()
        assert task is not None
        await task
        await row.wait_idle()

        assert row.on_appear() is None
        assert network.calls == ["https://github.example"]
        assert row.state.has_performed_initial_fetch

    @pytest.mark.asyncio
    async def test_activate_fetches_each_time(self, service, network, settings):
        row = ServiceStatusRow(service, network, settings)
        await row.on_activate()
        await row.on_activate()
        await row.wait_idle()
        assert len(network.calls) == 2

    @pytest.mark.asyncio
    async def test_activate_ignored_in_edit_mode(self, service, network, settings):
        row = ServiceStatusRow(service, network, settings, is_editing=lambda: True)
        assert row.on_activate() is None
        assert network.calls == []
        assert not row.is_loading
        assert row.state.last_response_time is None
        assert service.last_online_date == DISTANT_PAST

    @pytest.mark.asyncio
    async def test_appear_still_fetches_in_edit_mode(self, service, network, settings):
        row = ServiceStatusRow(service, network, settings, is_editing=lambda: True)
        await row.on_appear()
        await row.wait_idle()
        assert len(network.calls) == 1


# ─── Outcomes ───


class TestOutcome:
    @pytest.mark.asyncio
    async def test_success_updates_last_online(self, service, network, settings):
        row = ServiceStatusRow(service, network, settings)
        started = datetime.now(UTC)
        await row.fetch_status()
        assert row.status == Success(200)
        assert service.last_online_date >= started
        assert service.has_been_online

    @pytest.mark.asyncio
    async def test_non_ok_code_still_counts_as_online(self, service, settings):
        row = ServiceStatusRow(service, FakeNetwork(Success(503)), settings)
        started = datetime.now(UTC)
        await row.fetch_status()
        assert row.status == Success(503)
        assert service.last_online_date >= started

    @pytest.mark.asyncio
    async def test_failure_sets_distant_past(self, service, settings):
        service.last_online_date = datetime.now(UTC)
        error = TransportError(kind=ErrorKind.CANNOT_CONNECT, description="refused")
        row = ServiceStatusRow(service, FakeNetwork(Failure(error)), settings)
        await row.fetch_status()
        assert row.status == Failure(error)
        assert service.last_online_date == DISTANT_PAST

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_failure(self, service, settings):
        row = ServiceStatusRow(service, ExplodingNetwork(), settings)
        await row.fetch_status()
        assert isinstance(row.status, Failure)
        assert row.status.error.kind == ErrorKind.UNKNOWN
        assert row.status.error.description == "boom"

    @pytest.mark.asyncio
    async def test_result_hook_receives_service(self, service, network, settings):
        seen: list[ServiceModel] = []

        async def on_result(s: ServiceModel) -> None:
            seen.append(s)

        row = ServiceStatusRow(service, network, settings, on_result=on_result)
        await row.fetch_status()
        assert seen == [service]

    @pytest.mark.asyncio
    async def test_failing_hooks_are_contained(self, service, network, settings):
        async def on_result(s: ServiceModel) -> None:
            raise RuntimeError("store down")

        def on_change(r: ServiceStatusRow) -> None:
            raise RuntimeError("redraw failed")

        row = ServiceStatusRow(service, network, settings, on_change=on_change, on_result=on_result)
        await row.fetch_status()
        await row.wait_idle()
        assert row.status == Success(200)
        assert not row.is_loading

    @pytest.mark.asyncio
    async def test_change_hook_sees_loading_transitions(self, service, network, settings):
        states: list[bool] = []
        row = ServiceStatusRow(service, network, settings, on_change=lambda r: states.append(r.is_loading))
        await row.fetch_status()
        await row.wait_idle()
        assert states[0] is True
        assert states[-1] is False


# ─── Loading floor ───


class TestLoadingFloor:
    @pytest.mark.asyncio
    async def test_loading_true_right_after_start(self, service, network, settings):
        row = ServiceStatusRow(service, network, settings)
        task = row.fetch_status()
        assert row.is_loading
        assert row.render().glyph == Glyph.SPINNER
        await task
        await row.wait_idle()

    @pytest.mark.asyncio
    async def test_fast_response_keeps_spinner_for_minimum(self, service):
        settings = DisplaySettings(minimum_loading_time=0.15)
        row = ServiceStatusRow(service, FakeNetwork(delay=0.02), settings)
        loop = asyncio.get_running_loop()
        started = loop.time()

        await row.fetch_status()
        assert row.is_loading

        await row.wait_idle()
        assert not row.is_loading
        assert loop.time() - started >= 0.14

    @pytest.mark.asyncio
    async def test_slow_response_clears_without_extra_wait(self, service):
        settings = DisplaySettings(minimum_loading_time=0.05)
        row = ServiceStatusRow(service, FakeNetwork(delay=0.1), settings)
        await row.fetch_status()
        await asyncio.wait_for(row.wait_idle(), timeout=0.05)
        assert not row.is_loading

    @pytest.mark.asyncio
    async def test_response_time_recorded(self, service, network, settings):
        row = ServiceStatusRow(service, network, settings, clock=_fixed_clock(10.0, 10.25))
        await row.fetch_status()
        assert row.state.last_response_time == 0.25


# ─── Supersession and teardown ───


class TestSupersession:
    @pytest.mark.asyncio
    async def test_latest_check_wins(self, service, settings):
        network = ScriptedNetwork([(Success(200), 0.05), (Success(503), 0.0)])
        row = ServiceStatusRow(service, network, settings)
        first = row.fetch_status()
        second = row.fetch_status()
        await asyncio.gather(first, second)
        await row.wait_idle()
        assert network.calls == 2
        assert row.status == Success(503)

    @pytest.mark.asyncio
    async def test_new_check_keeps_spinner_until_its_own_floor(self, service):
        settings = DisplaySettings(minimum_loading_time=0.1)
        row = ServiceStatusRow(service, FakeNetwork(), settings)
        await row.fetch_status()
        assert row.is_loading
        second = row.fetch_status()
        await second
        await asyncio.sleep(0.05)
        assert row.is_loading
        await row.wait_idle()
        assert not row.is_loading

    @pytest.mark.asyncio
    async def test_close_cancels_in_flight_check(self, service, settings):
        row = ServiceStatusRow(service, FakeNetwork(delay=10), settings)
        task = row.fetch_status()
        await asyncio.sleep(0)
        row.close()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert not row.is_loading
        assert service.last_online_date == DISTANT_PAST

    @pytest.mark.asyncio
    async def test_superseded_check_stays_referenced_until_done(self, service, settings):
        network = ScriptedNetwork([(Success(200), 0.05), (Success(503), 0.0)])
        row = ServiceStatusRow(service, network, settings)
        first = row.fetch_status()
        second = row.fetch_status()
        assert row._pending == {first, second}
        await asyncio.gather(first, second)
        assert row._pending == set()

    @pytest.mark.asyncio
    async def test_close_cancels_superseded_checks_too(self, service, settings):
        row = ServiceStatusRow(service, FakeNetwork(delay=10), settings)
        first = row.fetch_status()
        second = row.fetch_status()
        await asyncio.sleep(0)
        row.close()
        results = await asyncio.gather(first, second, return_exceptions=True)
        assert all(isinstance(r, asyncio.CancelledError) for r in results)
        assert row._pending == set()

    @pytest.mark.asyncio
    async def test_closed_row_ignores_events(self, service, network, settings):
        row = ServiceStatusRow(service, network, settings)
        row.close()
        assert row.on_appear() is None
        assert row.on_activate() is None
        assert network.calls == []


# ─── Rendering ───


class TestRender:
    def test_initial_state_is_unknown_failure(self, service, network, settings):
        row = ServiceStatusRow(service, network, settings)
        view = row.render()
        assert view.glyph == Glyph.WARNING
        assert view.message == "Unknown error"

    @pytest.mark.asyncio
    async def test_ok_shows_checkmark_and_response_time(self, service, network, settings):
        row = ServiceStatusRow(service, network, settings, clock=_fixed_clock(0.0, 0.125))
        await row.fetch_status()
        await row.wait_idle()
        view = row.render()
        assert view.glyph == Glyph.CHECKMARK
        assert view.message == "125 ms"
        assert view.name == "GitHub"
        assert view.image == "🐙"

    @pytest.mark.asyncio
    async def test_non_ok_shows_warning_and_code(self, service, settings):
        row = ServiceStatusRow(service, FakeNetwork(Success(503)), settings)
        await row.fetch_status()
        await row.wait_idle()
        view = row.render()
        assert view.glyph == Glyph.WARNING
        assert view.message == "503"

    @pytest.mark.asyncio
    async def test_failure_shows_short_description(self, service, settings):
        error = TransportError(kind=ErrorKind.TIMED_OUT, description="ReadTimeout after 5s")
        row = ServiceStatusRow(service, FakeNetwork(Failure(error)), settings)
        await row.fetch_status()
        await row.wait_idle()
        view = row.render()
        assert view.glyph == Glyph.WARNING
        assert view.message == "Timed out"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "result",
        [
            Success(200),
            Success(404),
            Failure(TransportError(kind=ErrorKind.BAD_URL)),
        ],
    )
    async def test_messages_hidden_when_codes_off(self, service, result):
        settings = DisplaySettings(show_error_codes=False, minimum_loading_time=0.0)
        row = ServiceStatusRow(service, FakeNetwork(result), settings)
        await row.fetch_status()
        await row.wait_idle()
        view = row.render()
        assert view.glyph is not None
        assert view.message is None

    @pytest.mark.asyncio
    async def test_settings_toggle_applies_on_next_render(self, service, network, settings):
        row = ServiceStatusRow(service, network, settings)
        await row.fetch_status()
        await row.wait_idle()
        assert row.render().message is not None
        settings.show_error_codes = False
        assert row.render().message is None

    def test_edit_mode_hides_accessory(self, service, network, settings):
        row = ServiceStatusRow(service, network, settings, is_editing=lambda: True)
        view = row.render()
        assert view.glyph is None
        assert view.message is None

    def test_view_to_dict(self, service, network, settings):
        d = ServiceStatusRow(service, network, settings).render().to_dict()
        assert d["key"] == "github"
        assert d["glyph"] == "warning"
        assert d["is_loading"] is False
