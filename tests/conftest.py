"""Shared fixtures for Statusboard tests."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Dict, List

import pytest
import yaml

from statusboard.config.models import DisplaySettings, StatusboardConfig
from statusboard.dashboard.models import ServiceModel, StatusResult, Success

SAMPLE_CONFIG: Dict[str, Any] = {
    "statusboard": {"name": "Statusboard", "version": "0.1.0"},
    "display": {
        "show_error_codes": True,
        "minimum_loading_time": 0.0,
        "request_timeout": 5.0,
    },
    "services": {
        "github": {
            "name": "GitHub",
            "url": "https://github.example",
            "image": "🐙",
        },
        "billing": {
            "name": "Billing",
            "url": "http://localhost:8090/health",
            "image": "",
        },
    },
    "store_db_path": "",
}


class FakeNetwork:
    """Scripted NetworkService stand-in that records every URL it is asked about."""

    def __init__(self, result: StatusResult | None = None, delay: float = 0.0) -> None:
        self.result: StatusResult = result or Success(200)
        self.delay = delay
        self.calls: List[str] = []

    async def fetch_status_code(self, url: str) -> StatusResult:
        self.calls.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.result


@pytest.fixture()
def sample_config() -> StatusboardConfig:
    """Return a parsed StatusboardConfig from sample data."""
    return StatusboardConfig(**SAMPLE_CONFIG)


@pytest.fixture()
def sample_config_dict() -> Dict[str, Any]:
    return dict(SAMPLE_CONFIG)


@pytest.fixture()
def config_file(tmp_path: Path) -> Path:
    """Write sample config to a temp .statusboard.yaml and return the path."""
    path = tmp_path / ".statusboard.yaml"
    with path.open("w", encoding="utf-8") as fh:
        yaml.dump(SAMPLE_CONFIG, fh, allow_unicode=True)
    return path


@pytest.fixture()
def service() -> ServiceModel:
    return ServiceModel(key="github", name="GitHub", url="https://github.example", image="🐙")


@pytest.fixture()
def settings() -> DisplaySettings:
    return DisplaySettings(show_error_codes=True, minimum_loading_time=0.0)


@pytest.fixture()
def network() -> FakeNetwork:
    return FakeNetwork()

