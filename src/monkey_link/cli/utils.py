"""Shared CLI helpers."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import NoReturn, TypeVar

import typer
from adbutils.errors import AdbError

from monkey_link.config import MonkeyConfig
from monkey_link.device.handle import AdbDeviceHandle
from monkey_link.device.monkey_device import MonkeyDevice
from monkey_link.errors import MonkeyError

T = TypeVar("T")


def render_error(error: MonkeyError) -> NoReturn:
    typer.echo(f"{error.code}: {error.message}", err=True)
    if error.remediation:
        typer.echo(f"Hint: {error.remediation}", err=True)
    raise typer.Exit(code=1)


def parse_pairs(values: list[str] | None, option: str) -> dict[str, str]:
    """Parse repeated KEY=VALUE options."""
    pairs: dict[str, str] = {}
    for item in values or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"expected KEY=VALUE, got {item!r}", param_hint=option)
        pairs[key] = value
    return pairs


def coerce_extra(value: str) -> int | bool | str:
    """Interpret an extra's text as bool, int or string, in that order."""
    lowered = value.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    try:
        return int(value)
    except ValueError:
        return value


def with_device(serial: str | None, operation: Callable[[MonkeyDevice], Awaitable[T]]) -> T:
    """Connect to monkey on the device, run one operation, then dispose."""

    async def _run() -> T:
        handle = await asyncio.to_thread(AdbDeviceHandle.from_serial, serial)
        device = await MonkeyDevice.connect(handle, MonkeyConfig.from_env())
        async with device:
            return await operation(device)

    try:
        return asyncio.run(_run())
    except MonkeyError as e:
        render_error(e)
    except AdbError as e:
        typer.echo(f"adb: {e}", err=True)
        raise typer.Exit(code=1) from e
