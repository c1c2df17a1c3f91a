"""Connection establishment - forward, launch, then poll until monkey answers."""

from __future__ import annotations

import asyncio
import contextlib
import time
from typing import TYPE_CHECKING, Any

import structlog

from monkey_link.config import MonkeyConfig
from monkey_link.errors import connection_timeout_error
from monkey_link.protocol.codec import Command, decode_response, encode_command
from monkey_link.protocol.service import MonkeyService
from monkey_link.protocol.session import MonkeySession

if TYPE_CHECKING:
    from monkey_link.device.handle import DeviceHandle

PROBE = Command.of("wake")

# View id lists from listviews can run well past asyncio's 64 KiB default.
READ_LIMIT = 1024 * 1024


class MonkeyConnector:
    """Produces a live MonkeySession for one device.

    The monkey service prints nothing when it is ready to accept commands,
    so readiness is detected by repeatedly opening a fresh socket and
    sending ``wake`` until one attempt succeeds or the ceiling is reached.
    """

    def __init__(
        self,
        device: DeviceHandle,
        config: MonkeyConfig | None = None,
        logger: Any = None,
    ) -> None:
        self._device = device
        self._config = config or MonkeyConfig()
        self._logger = logger or structlog.get_logger()

    async def connect(self) -> MonkeySession:
        """Forward the port, start monkey, and wait for it to answer.

        Raises:
            MonkeyError: ERR_CONNECTION_TIMEOUT if no probe succeeds in time.
        """
        cfg = self._config
        await asyncio.to_thread(self._device.forward, cfg.port, cfg.port)

        service = MonkeyService(self._device, cfg.port, logger=self._logger)
        service.start()

        await asyncio.sleep(cfg.warmup_ms / 1000)

        try:
            session = await self._poll(service)
        except BaseException:
            await service.stop()
            raise
        self._logger.info("monkey_connected", host=cfg.host, port=cfg.port)
        return session

    async def _poll(self, service: MonkeyService) -> MonkeySession:
        cfg = self._config
        ceiling = cfg.connect_timeout_ms / 1000
        start = time.monotonic()
        attempts = 0

        while True:
            if time.monotonic() - start > ceiling:
                self._logger.error(
                    "monkey_connect_timeout", port=cfg.port, attempts=attempts
                )
                raise connection_timeout_error(cfg.host, cfg.port, cfg.connect_timeout_ms)

            await asyncio.sleep(cfg.poll_interval_ms / 1000)

            remaining = ceiling - (time.monotonic() - start)
            if remaining <= 0:
                continue
            attempts += 1
            probe_timeout = min(cfg.probe_timeout_ms / 1000, remaining)
            session = await self._probe(service, probe_timeout)
            if session is not None:
                return session

    async def _probe(self, service: MonkeyService, timeout: float) -> MonkeySession | None:
        """Open a fresh socket and send one wake; None if either step fails.

        Connecting and the wake round trip share a single ``timeout``.
        """
        cfg = self._config
        writer: asyncio.StreamWriter | None = None
        try:
            async with asyncio.timeout(timeout):
                reader, writer = await asyncio.open_connection(
                    cfg.host, cfg.port, limit=READ_LIMIT
                )
                writer.write(encode_command(PROBE))
                await writer.drain()
                raw = await reader.readline()
            ready = decode_response(raw).ok
            error = None if ready else f"probe answered {raw!r}"
        except (OSError, TimeoutError, ValueError) as e:
            ready, error = False, str(e) or type(e).__name__

        if ready and writer is not None:
            return MonkeySession(reader, writer, service=service, logger=self._logger)

        self._logger.debug("monkey_probe_failed", port=cfg.port, error=error)
        if writer is not None:
            writer.close()
            with contextlib.suppress(OSError):
                await writer.wait_closed()
        return None
