from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Protocol, Sequence

import psutil
import yaml

from .models import PortSnapshot


logger = logging.getLogger(__name__)


class PortSource(Protocol):
    """Supplier of raw local port numbers, one call per connection table."""

    def active_tcp_connection_ports(self) -> Iterable[int]: ...

    def tcp_listener_ports(self) -> Iterable[int]: ...

    def udp_listener_ports(self) -> Iterable[int]: ...


def _local_ports(connections) -> List[int]:
    ports: List[int] = []
    for c in connections:
        # laddr is an empty tuple for some sockets (e.g., unbound UDP)
        if not c.laddr:
            continue
        ports.append(c.laddr.port)
    return ports


class PsutilPortSource:
    """Read the live connection tables of this host through psutil.

    Every call queries the OS again. psutil.AccessDenied and other OS errors
    are left to the caller.
    """

    def __init__(self, include_ipv6: bool = True):
        self.include_ipv6 = include_ipv6

    def _connections(self, proto: str):
        kind = proto if self.include_ipv6 else f"{proto}4"
        return psutil.net_connections(kind=kind)

    def active_tcp_connection_ports(self) -> List[int]:
        conns = [c for c in self._connections("tcp") if c.status != psutil.CONN_LISTEN]
        ports = _local_ports(conns)
        logger.debug(f"Read {len(ports)} active TCP connection ports")
        return ports

    def tcp_listener_ports(self) -> List[int]:
        conns = [c for c in self._connections("tcp") if c.status == psutil.CONN_LISTEN]
        ports = _local_ports(conns)
        logger.debug(f"Read {len(ports)} TCP listener ports")
        return ports

    def udp_listener_ports(self) -> List[int]:
        ports = _local_ports(self._connections("udp"))
        logger.debug(f"Read {len(ports)} UDP listener ports")
        return ports


class StaticPortSource:
    """Fixed port lists, e.g. a saved snapshot or test data."""

    def __init__(
        self,
        active_tcp: Sequence[int] = (),
        tcp_listeners: Sequence[int] = (),
        udp_listeners: Sequence[int] = (),
    ):
        self.active_tcp = list(active_tcp)
        self.tcp_listeners = list(tcp_listeners)
        self.udp_listeners = list(udp_listeners)

    def active_tcp_connection_ports(self) -> List[int]:
        return list(self.active_tcp)

    def tcp_listener_ports(self) -> List[int]:
        return list(self.tcp_listeners)

    def udp_listener_ports(self) -> List[int]:
        return list(self.udp_listeners)


def load_snapshot(path: Path) -> StaticPortSource:
    """Build a StaticPortSource from a YAML file.

    Expected keys (all optional): active_tcp, tcp_listeners, udp_listeners,
    each a list of port numbers. Anything else raises pydantic.ValidationError.
    """
    with Path(path).open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    snapshot = PortSnapshot.model_validate(data)
    return StaticPortSource(
        active_tcp=snapshot.active_tcp,
        tcp_listeners=snapshot.tcp_listeners,
        udp_listeners=snapshot.udp_listeners,
    )
