"""Pytest configuration and fixtures."""

from __future__ import annotations

import asyncio
import socket
from types import TracebackType
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from monkey_link.config import MonkeyConfig

CLOSE = object()


class FakeMonkeyServer:
    """In-process stand-in for the monkey service.

    Replies to each received line from ``replies`` (falling back to
    ``default``). A reply of None means never answer; CLOSE drops the
    connection. The first ``drop_first`` connections are closed on accept,
    like an adb forward with nothing listening behind it.
    """

    def __init__(
        self,
        replies: dict[str, Any] | None = None,
        default: Any = "OK",
        delays: dict[str, float] | None = None,
        drop_first: int = 0,
    ) -> None:
        self.replies = replies or {}
        self.default = default
        self.delays = delays or {}
        self.drop_first = drop_first
        self.received: list[str] = []
        self.events: list[tuple[str, str]] = []
        self.connections = 0
        self.port = 0
        self._server: asyncio.Server | None = None
        self._writers: list[asyncio.StreamWriter] = []

    async def __aenter__(self) -> FakeMonkeyServer:
        self._server = await asyncio.start_server(self._handle, "127.0.0.1", 0)
        self.port = self._server.sockets[0].getsockname()[1]
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        assert self._server is not None
        self._server.close()
        for writer in self._writers:
            writer.close()
        await self._server.wait_closed()

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self.connections += 1
        self._writers.append(writer)
        if self.connections <= self.drop_first:
            writer.close()
            return
        try:
            while True:
                raw = await reader.readline()
                if not raw:
                    break
                line = raw.decode().rstrip("\r\n")
                self.received.append(line)
                self.events.append(("recv", line))
                delay = self.delays.get(line)
                if delay:
                    await asyncio.sleep(delay)
                reply = self.replies.get(line, self.default)
                if reply is None:
                    continue
                if reply is CLOSE:
                    break
                self.events.append(("reply", line))
                writer.write(f"{reply}\n".encode())
                await writer.drain()
        except ConnectionError:
            pass
        finally:
            writer.close()


@pytest.fixture
def monkey_server() -> type[FakeMonkeyServer]:
    """Factory for fake monkey servers (use as an async context manager)."""
    return FakeMonkeyServer


@pytest.fixture
def close_reply() -> object:
    """Reply marker that makes the fake server drop the connection."""
    return CLOSE


@pytest.fixture
def free_port() -> int:
    """A local port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return int(sock.getsockname()[1])


@pytest.fixture
def mock_handle() -> MagicMock:
    """Mock DeviceHandle whose monkey shell exits immediately."""
    handle = MagicMock()
    stream = MagicMock()
    stream.read_chunk.return_value = b""
    handle.start_shell.return_value = stream
    handle.shell.return_value = ""
    handle.install.return_value = None
    handle.uninstall.return_value = None
    return handle


@pytest.fixture
def mock_session() -> MagicMock:
    """Mock MonkeySession that accepts every command."""
    session = MagicMock()
    session.execute = AsyncMock(return_value="")
    session.wake = AsyncMock()
    session.quit = AsyncMock()
    session.close = AsyncMock()
    session.is_closed = False
    return session


@pytest.fixture
def fast_config() -> MonkeyConfig:
    """Config with short timings for connection tests."""
    return MonkeyConfig(
        connect_timeout_ms=2_000,
        poll_interval_ms=10,
        warmup_ms=0,
        probe_timeout_ms=500,
    )


def sent_commands(session: MagicMock) -> list[str]:
    """Wire lines passed to a mock session's execute()."""
    return [str(call.args[0]) for call in session.execute.await_args_list]


@pytest.fixture
def sent() -> Any:
    """Helper returning the commands a mock session executed."""
    return sent_commands
