from __future__ import annotations

import logging
import operator
from io import StringIO
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ..models import MAX_PORT, MIN_PORT, PortListing, PortRange
from ..sources import PortSource, PsutilPortSource


logger = logging.getLogger(__name__)


OPEN_TCP_HEADER = "Open TCP Ports:\n"
USED_TCP_HEADER = "Used TCP Ports:\n"
TCP_LISTENERS_HEADER = "TCP Listener Ports:\n"
UDP_LISTENERS_HEADER = "UDP Listener Ports:\n"
OPEN_HEADER = "Open Ports:\n"
USED_HEADER = "Used Ports:\n"


class PortConnections:
    """Used/open status of local ports within [start, end].

    PortConnections()            -> [0, 65535]
    PortConnections(start)       -> [start, 65535]
    PortConnections(start, end)  -> [start, end]

    Bounds are stored as given: an inverted range is accepted and simply
    has no open ports. Only a missing bound falls back to MIN_PORT/MAX_PORT.
    Non-integral bounds (floats, strings) raise TypeError.
    """

    def __init__(
        self,
        start: Optional[int] = None,
        end: Optional[int] = None,
        source: Optional[PortSource] = None,
    ):
        self._range = PortRange(
            start=MIN_PORT if start is None else operator.index(start),
            end=MAX_PORT if end is None else operator.index(end),
        )
        self.source: PortSource = source if source is not None else PsutilPortSource()

    @property
    def port_range(self) -> PortRange:
        return self._range

    @property
    def start_port(self) -> int:
        return self._range.start

    @property
    def end_port(self) -> int:
        return self._range.end

    # -----------------
    # Set computations
    # -----------------

    @staticmethod
    def compute_used(ports: Iterable[int]) -> List[int]:
        """Deduplicate a raw port collection and sort it ascending."""
        return sorted(set(ports))

    def compute_open(self, used: Iterable[int]) -> List[int]:
        """Ports in [start, end] that are not in `used`."""
        members = set(used)
        logger.debug(f"Scanning {self.start_port}-{self.end_port} against {len(members)} used ports")
        return [p for p in range(self.start_port, self.end_port + 1) if p not in members]

    def used_tcp(self) -> List[int]:
        return self.compute_used(self.source.active_tcp_connection_ports())

    def tcp_listeners(self) -> List[int]:
        return self.compute_used(self.source.tcp_listener_ports())

    def udp_listeners(self) -> List[int]:
        return self.compute_used(self.source.udp_listener_ports())

    def open_tcp(self) -> List[int]:
        return self.compute_open(self.used_tcp())

    def all_used(self) -> List[int]:
        """Union of active TCP connections, TCP listeners and UDP listeners.

        Not limited to the configured range.
        """
        used = set(self.source.active_tcp_connection_ports())
        used.update(self.source.tcp_listener_ports())
        used.update(self.source.udp_listener_ports())
        return sorted(used)

    def all_open(self) -> List[int]:
        return self.compute_open(self.all_used())

    # ----------
    # Rendering
    # ----------

    @classmethod
    def render(cls, ports: Iterable[int], header: str) -> str:
        """Header followed by "<rank>: Port <port>" lines, rank starting at 1."""
        buf = StringIO()
        buf.write(header)
        for rank, port in enumerate(cls.compute_used(ports), start=1):
            buf.write(f"{rank}: Port {port}\n")
        return buf.getvalue()

    def open_tcp_string(self) -> str:
        return self.render(self.open_tcp(), OPEN_TCP_HEADER)

    def used_tcp_string(self) -> str:
        return self.render(self.used_tcp(), USED_TCP_HEADER)

    def tcp_listeners_string(self) -> str:
        return self.render(self.tcp_listeners(), TCP_LISTENERS_HEADER)

    def udp_listeners_string(self) -> str:
        return self.render(self.udp_listeners(), UDP_LISTENERS_HEADER)

    def open_ports_string(self) -> str:
        return self.render(self.all_open(), OPEN_HEADER)

    def used_ports_string(self) -> str:
        return self.render(self.all_used(), USED_HEADER)

    # ------------------
    # Named projections
    # ------------------

    def _sections(self) -> Dict[str, Tuple[Callable[[], List[int]], str]]:
        return {
            "open-tcp": (self.open_tcp, OPEN_TCP_HEADER),
            "used-tcp": (self.used_tcp, USED_TCP_HEADER),
            "tcp-listeners": (self.tcp_listeners, TCP_LISTENERS_HEADER),
            "udp-listeners": (self.udp_listeners, UDP_LISTENERS_HEADER),
            "open": (self.all_open, OPEN_HEADER),
            "used": (self.all_used, USED_HEADER),
        }

    def listing(self, name: str) -> PortListing:
        """Compute one named projection (see SECTIONS)."""
        sections = self._sections()
        if name not in sections:
            raise KeyError(f"Unknown section '{name}'. Expected one of: {', '.join(SECTIONS)}")
        compute, header = sections[name]
        return PortListing(name=name, header=header, ports=compute())


SECTIONS = ("open-tcp", "used-tcp", "tcp-listeners", "udp-listeners", "open", "used")
