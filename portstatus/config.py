from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field
import yaml


class Settings(BaseModel):
    """Settings controlling the port range and which reports are printed."""

    # None means the analyzer default (0 for start, 65535 for end)
    start_port: Optional[int] = None
    end_port: Optional[int] = None
    # Read tcp6/udp6 sockets alongside IPv4
    include_ipv6: bool = True
    # Sections printed by `portstatus report`, in order
    sections: list[str] = Field(default_factory=lambda: ["open", "used"])


def load_config(path: Optional[Path]) -> Settings:
    """Load settings from YAML path if provided, else return default Settings."""
    if not path:
        return Settings()
    p = Path(path)
    if not p.exists():
        return Settings()
    with p.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return Settings(**data)
