"""Monkey device - typed automation commands over a session and device handle."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import structlog

from monkey_link.actions.gesture import DragPhase, Point, drag_events
from monkey_link.actions.input import PhysicalButton, TouchPressType
from monkey_link.actions.instrumentation import parse_instrumentation_result
from monkey_link.actions.intents import IntentSpec, build_instrument_args, build_intent_args
from monkey_link.actions.selector import (
    AccessibilityId,
    MonkeyView,
    MultiViewSelector,
    ViewSelector,
    parse_accessibility_ids,
)
from monkey_link.config import MonkeyConfig
from monkey_link.errors import (
    MonkeyError,
    command_timeout_error,
    invalid_argument_error,
    remote_rejected_error,
    transport_error,
)
from monkey_link.protocol.codec import Command, split_payload
from monkey_link.protocol.connector import MonkeyConnector

if TYPE_CHECKING:
    from monkey_link.device.handle import DeviceHandle
    from monkey_link.protocol.session import MonkeySession

_TOUCH_COMMANDS: dict[TouchPressType, tuple[str, ...]] = {
    TouchPressType.DOWN: ("touch", "down"),
    TouchPressType.UP: ("touch", "up"),
    TouchPressType.DOWN_AND_UP: ("tap",),
    TouchPressType.MOVE: ("touch", "move"),
}

_KEY_COMMANDS: dict[TouchPressType, tuple[str, ...]] = {
    TouchPressType.DOWN: ("key", "down"),
    TouchPressType.UP: ("key", "up"),
    TouchPressType.DOWN_AND_UP: ("press",),
}

_DRAG_PRESS_TYPES = {
    DragPhase.DOWN: TouchPressType.DOWN,
    DragPhase.MOVE: TouchPressType.MOVE,
    DragPhase.UP: TouchPressType.UP,
}


def touch_command(x: int, y: int, press_type: TouchPressType) -> Command:
    """Map a touch to its wire command (touchDown, touchUp, tap, touchMove)."""
    verb, *head = _TOUCH_COMMANDS[press_type]
    return Command.of(verb, *head, int(x), int(y))


def key_command(key: str | PhysicalButton, press_type: TouchPressType) -> Command:
    """Map a key event to its wire command (keyDown, keyUp, press)."""
    if press_type not in _KEY_COMMANDS:
        raise invalid_argument_error("press_type", press_type.value, "keys cannot move")
    key_name = key.key_name if isinstance(key, PhysicalButton) else key
    verb, *head = _KEY_COMMANDS[press_type]
    return Command.of(verb, *head, key_name)


class MonkeyDevice:
    """Automation surface for one device.

    Touch, key, text, variable and view commands travel over the monkey
    session. Shell, package, intent and instrumentation commands use the
    device handle, a separate channel that never blocks the session.
    """

    def __init__(
        self,
        device: DeviceHandle,
        session: MonkeySession,
        config: MonkeyConfig | None = None,
        logger: Any = None,
    ) -> None:
        self._device = device
        self._session = session
        self._config = config or MonkeyConfig()
        self._logger = logger or structlog.get_logger()

    @classmethod
    async def connect(
        cls,
        device: DeviceHandle,
        config: MonkeyConfig | None = None,
        logger: Any = None,
    ) -> MonkeyDevice:
        """Start monkey on the device and wrap the resulting session."""
        session = await MonkeyConnector(device, config, logger).connect()
        return cls(device, session, config, logger)

    @property
    def session(self) -> MonkeySession:
        return self._session

    async def dispose(self) -> None:
        """Ask monkey to quit, then close the session."""
        if self._session.is_closed:
            return
        try:
            await self._session.quit()
        except MonkeyError as e:
            self._logger.warning("monkey_quit_failed", error=str(e))
        finally:
            await self._session.close()

    async def __aenter__(self) -> MonkeyDevice:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.dispose()

    # Monkey protocol commands

    async def wake(self) -> None:
        await self._session.wake()

    async def touch(self, x: int, y: int, press_type: TouchPressType) -> None:
        await self._session.execute(touch_command(x, y, press_type))

    async def press(
        self,
        key: str | PhysicalButton,
        press_type: TouchPressType = TouchPressType.DOWN_AND_UP,
    ) -> None:
        await self._session.execute(key_command(key, press_type))

    async def type(self, text: str) -> None:
        """Type text. Line breaks are rejected; press KEYCODE_ENTER instead."""
        await self._session.execute(Command.of("type", text))

    async def get_variable(self, key: str) -> str:
        return await self._session.execute(Command.of("getvar", key))

    async def list_variables(self) -> list[str]:
        return split_payload(await self._session.execute(Command.of("listvar")))

    async def list_view_ids(self) -> list[str]:
        return split_payload(await self._session.execute(Command.of("listviews")))

    async def get_root_view(self) -> MonkeyView:
        command = Command.of("getrootview")
        ids = parse_accessibility_ids(command, await self._session.execute(command))
        if len(ids) != 1:
            raise remote_rejected_error(str(command), "expected one root view id pair")
        return MonkeyView(self._session, ids[0])

    async def get_view(self, selector: ViewSelector) -> MonkeyView:
        return await selector.get_view(self._session)

    async def get_views(self, selector: MultiViewSelector) -> list[MonkeyView]:
        return await selector.get_views(self._session)

    def view_by_accessibility_id(self, window_id: int, view_id: int) -> MonkeyView:
        return MonkeyView(self._session, AccessibilityId(window_id, view_id))

    async def drag(
        self,
        start: tuple[int, int],
        end: tuple[int, int],
        steps: int = 10,
        duration_ms: int = 1000,
    ) -> None:
        """Drag from start to end in ``steps`` timed moves.

        A failed step is logged and the drag continues with the next one.

        Raises:
            MonkeyError: If steps < 1 (ERR_INVALID_ARGUMENT); nothing is sent.
        """
        if steps < 1:
            raise invalid_argument_error("steps", steps, "a drag needs at least one step")
        pause = duration_ms / steps / 1000

        for event in drag_events(Point(*start), Point(*end), steps):
            press_type = _DRAG_PRESS_TYPES[event.phase]
            try:
                await self.touch(event.point.x, event.point.y, press_type)
            except MonkeyError as e:
                self._logger.error(
                    "drag_step_failed",
                    phase=event.phase.value,
                    x=event.point.x,
                    y=event.point.y,
                    error=str(e),
                )
            if event.pause_after:
                await asyncio.sleep(pause)

    # Device handle commands

    async def shell(self, *args: str, timeout_ms: int | None = None) -> str:
        """Run a shell command and return its combined output.

        Arguments are joined with single spaces, unquoted.

        Raises:
            MonkeyError: ERR_COMMAND_TIMEOUT when no output arrives in time,
                ERR_TRANSPORT for other shell failures.
        """
        command = " ".join(args)
        timeout = timeout_ms if timeout_ms is not None else self._config.shell_timeout_ms
        try:
            return await asyncio.to_thread(self._device.shell, command, timeout)
        except TimeoutError as e:
            raise command_timeout_error(command, timeout) from e
        except OSError as e:
            raise transport_error(command, str(e)) from e

    async def install_package(self, path: str) -> bool:
        """Install an apk. Failure is logged and reported as False."""
        error = await asyncio.to_thread(self._device.install, path)
        if error is not None:
            self._logger.error("package_install_failed", path=path, error=error)
            return False
        self._logger.info("package_installed", path=path)
        return True

    async def remove_package(self, package: str) -> bool:
        """Uninstall a package. Failure is logged and reported as False."""
        error = await asyncio.to_thread(self._device.uninstall, package)
        if error is not None:
            self._logger.error("package_uninstall_failed", package=package, error=error)
            return False
        self._logger.info("package_removed", package=package)
        return True

    async def start_activity(self, intent: IntentSpec) -> str:
        return await self.shell("am", "start", *build_intent_args(intent))

    async def broadcast_intent(self, intent: IntentSpec) -> str:
        return await self.shell("am", "broadcast", *build_intent_args(intent))

    async def instrument(
        self,
        package: str,
        args: Mapping[str, object] | None = None,
        timeout_ms: int | None = None,
    ) -> dict[str, str]:
        """Run an instrumentation and return its RESULT key/value pairs."""
        output = await self.shell(*build_instrument_args(package, args), timeout_ms=timeout_ms)
        return parse_instrumentation_result(output)

    async def get_system_property(self, key: str) -> str:
        return await asyncio.to_thread(self._device.get_property, key)

    async def take_snapshot(self) -> Any:
        """Capture the screen; returns whatever image object the handle produces."""
        return await asyncio.to_thread(self._device.screenshot)

    async def reboot(self, into: str | None = None) -> None:
        await asyncio.to_thread(self._device.reboot, into)
        self._logger.info("device_reboot_requested", into=into)
