"""Device handle - the adb capabilities the monkey client relies on."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog
from adbutils.errors import AdbError, AdbTimeout

if TYPE_CHECKING:
    from adbutils import AdbConnection, AdbDevice

logger = structlog.get_logger()


class ShellStream(Protocol):
    """A running shell command whose output can be read incrementally."""

    def read_chunk(self) -> bytes:
        """Return the next output bytes, or b"" once the command exits."""
        ...

    def close(self) -> None: ...


class DeviceHandle(Protocol):
    """Capabilities of one device, owned outside the monkey client.

    ``shell`` and ``start_shell`` raise TimeoutError when the device does
    not answer in time and OSError for other transport failures.
    """

    def forward(self, local_port: int, remote_port: int) -> None: ...

    def shell(self, command: str, timeout_ms: int) -> str: ...

    def start_shell(self, command: str) -> ShellStream: ...

    def install(self, path: str) -> str | None: ...

    def uninstall(self, package: str) -> str | None: ...

    def screenshot(self) -> Any: ...

    def get_property(self, key: str) -> str: ...

    def reboot(self, into: str | None = None) -> None: ...


class _AdbShellStream:
    """Streaming shell backed by an adbutils connection."""

    def __init__(self, connection: AdbConnection) -> None:
        self._connection = connection

    def read_chunk(self) -> bytes:
        return bytes(self._connection.conn.recv(4096))

    def close(self) -> None:
        self._connection.close()


class AdbDeviceHandle:
    """DeviceHandle implemented over an adbutils AdbDevice."""

    def __init__(self, device: AdbDevice) -> None:
        self._device = device

    @classmethod
    def from_serial(cls, serial: str | None = None) -> AdbDeviceHandle:
        """Attach to a device by serial, or the only connected device."""
        from adbutils import adb

        return cls(adb.device(serial=serial))

    @property
    def serial(self) -> str:
        return str(self._device.serial)

    def forward(self, local_port: int, remote_port: int) -> None:
        self._device.forward(f"tcp:{local_port}", f"tcp:{remote_port}")
        logger.debug("port_forwarded", serial=self.serial, local=local_port, remote=remote_port)

    def shell(self, command: str, timeout_ms: int) -> str:
        try:
            return str(self._device.shell(command, timeout=timeout_ms / 1000, rstrip=False))
        except AdbTimeout as e:
            raise TimeoutError(str(e)) from e
        except AdbError as e:
            raise OSError(str(e)) from e

    def start_shell(self, command: str) -> ShellStream:
        try:
            connection = self._device.shell(command, stream=True)
        except AdbTimeout as e:
            raise TimeoutError(str(e)) from e
        except AdbError as e:
            raise OSError(str(e)) from e
        return _AdbShellStream(connection)

    def install(self, path: str) -> str | None:
        """Install an apk, replacing any existing version. Returns an error string or None."""
        try:
            self._device.install(path, nolaunch=True)
        except AdbError as e:
            return str(e) or type(e).__name__
        return None

    def uninstall(self, package: str) -> str | None:
        """Remove a package. Returns pm's failure text or None."""
        try:
            output = str(self._device.shell(["pm", "uninstall", package])).strip()
        except AdbError as e:
            return str(e) or type(e).__name__
        if output.startswith("Success"):
            return None
        return output or "pm uninstall produced no output"

    def screenshot(self) -> Any:
        return self._device.screenshot()

    def get_property(self, key: str) -> str:
        return str(self._device.getprop(key))

    def reboot(self, into: str | None = None) -> None:
        if into:
            self._device.shell(["reboot", into])
        else:
            self._device.reboot()
