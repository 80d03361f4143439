"""Data models for services and their check results."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Optional, Union

from statusboard.config.models import ServiceEntry

# Stands in for "never seen online".
DISTANT_PAST = datetime(1, 1, 1, tzinfo=UTC)


class ErrorKind(str, Enum):
    UNKNOWN = "unknown"
    TIMED_OUT = "timed_out"
    CANNOT_CONNECT = "cannot_connect"
    BAD_URL = "bad_url"
    TOO_MANY_REDIRECTS = "too_many_redirects"
    NETWORK = "network"


_SHORT_DESCRIPTIONS = {
    ErrorKind.UNKNOWN: "Unknown error",
    ErrorKind.TIMED_OUT: "Timed out",
    ErrorKind.CANNOT_CONNECT: "Cannot connect",
    ErrorKind.BAD_URL: "Bad URL",
    ErrorKind.TOO_MANY_REDIRECTS: "Too many redirects",
    ErrorKind.NETWORK: "Network error",
}


@dataclass(frozen=True)
class TransportError:
    """A transport-level failure of a status check."""

    kind: ErrorKind
    description: str = ""

    @property
    def short_description(self) -> str:
        return _SHORT_DESCRIPTIONS[self.kind]


@dataclass(frozen=True)
class Success:
    status_code: int


@dataclass(frozen=True)
class Failure:
    error: TransportError


StatusResult = Union[Success, Failure]


@dataclass
class ServiceModel:
    """A monitored service. Rows mutate ``last_online_date`` after each check."""

    key: str
    name: str
    url: str
    image: str = ""
    last_online_date: datetime = DISTANT_PAST

    @classmethod
    def from_entry(cls, key: str, entry: ServiceEntry) -> ServiceModel:
        return cls(key=key, name=entry.name, url=entry.url, image=entry.image)

    @property
    def has_been_online(self) -> bool:
        return self.last_online_date != DISTANT_PAST


@dataclass
class RowDisplayState:
    """View-local state of a single row."""

    is_loading: bool = False
    last_response_time: Optional[float] = None  # seconds
    has_performed_initial_fetch: bool = False
