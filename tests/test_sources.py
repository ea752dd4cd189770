from collections import namedtuple
from pathlib import Path

import psutil
import pydantic
import pytest

from portstatus.sources import PsutilPortSource, load_snapshot


Addr = namedtuple("Addr", ["ip", "port"])
Conn = namedtuple("Conn", ["fd", "family", "type", "laddr", "raddr", "status", "pid"])


def _conn(port, status, raddr=()):
    laddr = Addr("127.0.0.1", port) if port is not None else ()
    return Conn(-1, 2, 1, laddr, raddr, status, None)


TCP = [
    _conn(22, psutil.CONN_LISTEN),
    _conn(8080, psutil.CONN_LISTEN),
    _conn(51000, psutil.CONN_ESTABLISHED, Addr("10.0.0.1", 443)),
    _conn(51000, psutil.CONN_TIME_WAIT, Addr("10.0.0.1", 443)),
    _conn(51001, psutil.CONN_CLOSE_WAIT, Addr("10.0.0.2", 80)),
]
UDP = [
    _conn(53, psutil.CONN_NONE),
    _conn(None, psutil.CONN_NONE),
]


@pytest.fixture
def fake_tables(monkeypatch):
    kinds: list[str] = []

    def fake_net_connections(kind="inet"):
        kinds.append(kind)
        return list(TCP) if kind.startswith("tcp") else list(UDP)

    monkeypatch.setattr(psutil, "net_connections", fake_net_connections)
    return kinds


def test_active_tcp_excludes_listeners(fake_tables):
    ports = PsutilPortSource().active_tcp_connection_ports()
    assert sorted(ports) == [51000, 51000, 51001]


def test_tcp_listeners(fake_tables):
    assert sorted(PsutilPortSource().tcp_listener_ports()) == [22, 8080]


def test_udp_skips_unbound_sockets(fake_tables):
    assert PsutilPortSource().udp_listener_ports() == [53]


def test_ipv4_only_kinds(fake_tables):
    source = PsutilPortSource(include_ipv6=False)
    source.tcp_listener_ports()
    source.udp_listener_ports()
    assert fake_tables == ["tcp4", "udp4"]


def test_each_call_rereads_os_tables(fake_tables):
    source = PsutilPortSource()
    source.tcp_listener_ports()
    source.tcp_listener_ports()
    assert fake_tables == ["tcp", "tcp"]


def test_access_denied_propagates(monkeypatch):
    def denied(kind="inet"):
        raise psutil.AccessDenied()

    monkeypatch.setattr(psutil, "net_connections", denied)
    with pytest.raises(psutil.AccessDenied):
        PsutilPortSource().udp_listener_ports()


def test_load_snapshot(tmp_path: Path):
    path = tmp_path / "snap.yaml"
    path.write_text("active_tcp: [80, 443]\ntcp_listeners: [22]\n", encoding="utf-8")
    source = load_snapshot(path)
    assert source.active_tcp_connection_ports() == [80, 443]
    assert source.tcp_listener_ports() == [22]
    assert source.udp_listener_ports() == []


def test_load_snapshot_rejects_non_mapping(tmp_path: Path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(pydantic.ValidationError):
        load_snapshot(path)
