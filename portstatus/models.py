from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field, computed_field


MIN_PORT = 0
MAX_PORT = 65535


class PortRange(BaseModel):
    """Inclusive port search range. Values are kept exactly as given."""

    model_config = ConfigDict(frozen=True)

    start: int = MIN_PORT
    end: int = MAX_PORT


class PortListing(BaseModel):
    name: str  # e.g., open-tcp/used/udp-listeners
    header: str
    ports: List[int] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def count(self) -> int:
        return len(self.ports)


class ReportModel(BaseModel):
    generated_at: datetime
    port_range: PortRange
    sections: List[PortListing] = Field(default_factory=list)


class PortSnapshot(BaseModel):
    """Saved port lists, one per connection table."""

    active_tcp: List[int] = Field(default_factory=list)
    tcp_listeners: List[int] = Field(default_factory=list)
    udp_listeners: List[int] = Field(default_factory=list)
