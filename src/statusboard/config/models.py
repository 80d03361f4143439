"""Pydantic models for Statusboard configuration."""

from __future__ import annotations

from pydantic import BaseModel, Field


class DisplaySettings(BaseModel):
    """Process-wide display settings shared by every row.

    Mutable at runtime: toggling ``show_error_codes`` affects the next render
    of every row holding this instance.
    """

    show_error_codes: bool = True
    minimum_loading_time: float = Field(default=0.5, ge=0.0)
    request_timeout: float = Field(default=10.0, gt=0.0)


class ServiceEntry(BaseModel):
    """Configuration for a monitored service."""

    name: str
    url: str
    image: str = ""


class StatusboardIdentity(BaseModel):
    """Top-level Statusboard identity metadata."""

    name: str = "Statusboard"
    version: str = "0.1.0"


class AuthConfig(BaseModel):
    """Authentication configuration."""

    api_key: str = ""  # empty = auth disabled


class StatusboardConfig(BaseModel):
    """Root configuration model for .statusboard.yaml."""

    statusboard: StatusboardIdentity = Field(default_factory=StatusboardIdentity)
    display: DisplaySettings = Field(default_factory=DisplaySettings)
    services: dict[str, ServiceEntry] = Field(default_factory=dict)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    store_db_path: str = "statusboard.db"  # empty = in-memory store
