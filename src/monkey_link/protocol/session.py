"""Monkey session - one live connection, one command in flight."""

from __future__ import annotations

import asyncio
import contextlib
from types import TracebackType
from typing import TYPE_CHECKING, Any

import structlog

from monkey_link.errors import remote_rejected_error, session_closed_error, transport_error
from monkey_link.protocol.codec import Command, Failure, Response, decode_response, encode_command

if TYPE_CHECKING:
    from monkey_link.protocol.service import MonkeyService


class MonkeySession:
    """Owns the socket to the monkey service and serializes access to it.

    The protocol has no request ids, so a command's write and its reply
    read happen under one lock; later callers queue behind it in arrival
    order. ``close()`` does not take the lock, which lets it abort a
    pending command.
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        *,
        service: MonkeyService | None = None,
        logger: Any = None,
    ) -> None:
        self._reader = reader
        self._writer = writer
        self._service = service
        self._logger = logger or structlog.get_logger()
        self._lock = asyncio.Lock()
        self._closed = False

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def send(self, command: Command) -> Response:
        """Send one command and read its reply line.

        Raises:
            MonkeyError: ERR_SESSION_CLOSED after close(), ERR_INVALID_ARGUMENT
                for a token with a line break (nothing is sent), ERR_TRANSPORT on
                socket failure or an oversized reply (the session is closed as
                a side effect).
        """
        async with self._lock:
            if self._closed:
                raise session_closed_error(str(command))
            line = encode_command(command)
            try:
                self._writer.write(line)
                await self._writer.drain()
                raw = await self._reader.readline()
            except OSError as e:
                await self.close()
                raise transport_error(command.verb, str(e)) from e
            except ValueError as e:
                # Reply overran the reader limit; the rest of it is still unread.
                await self.close()
                raise transport_error(command.verb, f"reply too long: {e}") from e

            if not raw:
                if self._closed:
                    raise session_closed_error(str(command))
                await self.close()
                raise transport_error(command.verb, "connection closed by monkey service")

        response = decode_response(raw)
        self._logger.debug("monkey_command", command=str(command), ok=response.ok)
        return response

    async def execute(self, command: Command) -> str:
        """Send a command and return its payload, raising on an ERROR reply."""
        response = await self.send(command)
        if isinstance(response, Failure):
            raise remote_rejected_error(str(command), response.message)
        return response.payload

    async def wake(self) -> None:
        await self.execute(Command.of("wake"))

    async def quit(self) -> None:
        """Ask the monkey service to exit."""
        await self.execute(Command.of("quit"))
        self._logger.info("monkey_quit_sent")

    async def close(self) -> None:
        """Close the socket and stop the background service task. Idempotent."""
        if self._closed:
            return
        self._closed = True
        self._writer.close()
        with contextlib.suppress(OSError):
            await self._writer.wait_closed()
        if self._service is not None:
            await self._service.stop()
        self._logger.info("session_closed")

    async def __aenter__(self) -> MonkeySession:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
