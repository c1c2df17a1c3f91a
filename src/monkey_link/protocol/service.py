"""Background monkey service - launched once, observed only through the log."""

from __future__ import annotations

import asyncio
import contextlib
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from monkey_link.device.handle import DeviceHandle, ShellStream


class MonkeyService:
    """Runs ``monkey --port N`` on the device without waiting for it.

    Nothing synchronizes with this task. The connector's probe loop decides
    readiness; this class only forwards the service's output and launch
    failures to the logger.
    """

    def __init__(self, device: DeviceHandle, port: int, logger: Any = None) -> None:
        self._device = device
        self._port = port
        self._logger = logger or structlog.get_logger()
        self._stream: ShellStream | None = None
        self._task: asyncio.Task[None] | None = None
        self.exit_reason: str | None = None

    @property
    def command(self) -> str:
        return f"monkey --port {self._port}"

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Spawn the launch task and return immediately."""
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Close the shell stream and cancel the output pump."""
        if self._stream is not None:
            with contextlib.suppress(OSError):
                self._stream.close()
            self._stream = None
        if self._task and not self._task.done():
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task

    async def _run(self) -> None:
        launch = asyncio.ensure_future(asyncio.to_thread(self._device.start_shell, self.command))
        try:
            self._stream = await asyncio.shield(launch)
        except asyncio.CancelledError:
            # The worker thread keeps going; close whatever stream it returns.
            self.exit_reason = "stopped"
            launch.add_done_callback(self._discard_launch)
            raise
        except TimeoutError:
            # Unresponsive shell on launch is common; monkey usually still starts.
            self.exit_reason = "launch_timeout"
            self._logger.info("monkey_service_launch_timeout", command=self.command)
            return
        except Exception as e:
            self.exit_reason = "launch_failed"
            self._logger.error("monkey_service_launch_failed", command=self.command, error=str(e))
            return

        self._logger.debug("monkey_service_launched", command=self.command)
        await self._pump_output(self._stream)

    def _discard_launch(self, launch: asyncio.Future[ShellStream]) -> None:
        if launch.cancelled() or launch.exception() is not None:
            return
        with contextlib.suppress(OSError):
            launch.result().close()
        self._logger.debug("monkey_service_stream_discarded", command=self.command)

    async def _pump_output(self, stream: ShellStream) -> None:
        try:
            while True:
                chunk = await asyncio.to_thread(stream.read_chunk)
                if not chunk:
                    break
                for line in chunk.decode("utf-8", errors="replace").splitlines():
                    if line.strip():
                        self._logger.debug("monkey_service_output", line=line)
            self.exit_reason = "eof"
        except asyncio.CancelledError:
            self.exit_reason = "stopped"
            raise
        except OSError as e:
            self.exit_reason = "stream_error"
            self._logger.debug("monkey_service_stream_closed", error=str(e))
        finally:
            self._logger.debug("monkey_service_exited", reason=self.exit_reason)
