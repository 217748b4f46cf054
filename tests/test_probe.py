import asyncio
import socket
import time

from contentgate.workflows.probe import ConnectivityProbe


def _closed_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def test_probe_reports_listening_endpoint() -> None:
    async def scenario() -> bool:
        async def handle(reader, writer):
            writer.close()

        server = await asyncio.start_server(handle, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        try:
            return await ConnectivityProbe("127.0.0.1", port).has_connectivity(1.0)
        finally:
            server.close()
            await server.wait_closed()

    assert asyncio.run(scenario()) is True


def test_probe_fails_closed_on_refused_connection() -> None:
    probe = ConnectivityProbe("127.0.0.1", _closed_port())
    assert asyncio.run(probe.has_connectivity(1.0)) is False


def test_probe_fails_closed_on_timeout(monkeypatch) -> None:
    released = {"value": False}

    async def stalled_open(self) -> bool:
        try:
            await asyncio.sleep(5)
            return True
        finally:
            released["value"] = True

    monkeypatch.setattr(ConnectivityProbe, "_open", stalled_open)
    started = time.monotonic()
    assert asyncio.run(ConnectivityProbe().has_connectivity(0.05)) is False
    assert time.monotonic() - started < 2
    assert released["value"] is True


def test_probe_check_blocks_until_result(monkeypatch) -> None:
    async def instant_open(self) -> bool:
        return True

    monkeypatch.setattr(ConnectivityProbe, "_open", instant_open)
    assert ConnectivityProbe().check(0.5) is True
