"""CLI entry point using Typer."""

from __future__ import annotations

import json

import typer

from monkey_link.actions.input import PhysicalButton, TouchPressType
from monkey_link.actions.intents import IntentSpec
from monkey_link.actions.selector import TextMultiSelector, parse_selector
from monkey_link.cli.utils import coerce_extra, parse_pairs, with_device
from monkey_link.device.monkey_device import MonkeyDevice

app = typer.Typer(
    name="monkey-link",
    help="Drive an Android device through the monkey automation service",
    no_args_is_help=True,
)

SerialOption = typer.Option(None, "--serial", "-s", help="Device serial (default: only device)")


def _intent_from_options(
    action: str | None,
    data: str | None,
    mime_type: str | None,
    category: list[str] | None,
    extra: list[str] | None,
    component: str | None,
    flags: int,
    uri: str | None,
) -> IntentSpec:
    extras = {k: coerce_extra(v) for k, v in parse_pairs(extra, "--extra").items()}
    return IntentSpec(
        action=action,
        data=data,
        mime_type=mime_type,
        categories=tuple(category or ()),
        extras=extras,
        component=component,
        flags=flags,
        uri=uri,
    )


@app.command()
def version() -> None:
    """Show version information."""
    from monkey_link import __version__

    typer.echo(f"monkey-link v{__version__}")


@app.command("tap")
def tap(
    x: int = typer.Argument(..., help="X coordinate"),
    y: int = typer.Argument(..., help="Y coordinate"),
    serial: str | None = SerialOption,
) -> None:
    """Tap a screen coordinate."""

    async def _op(device: MonkeyDevice) -> None:
        await device.touch(x, y, TouchPressType.DOWN_AND_UP)

    with_device(serial, _op)
    typer.echo("✓ Done")


@app.command("press")
def press(
    key: str = typer.Argument(..., help="Key name (KEYCODE_...) or button (home, back, ...)"),
    serial: str | None = SerialOption,
) -> None:
    """Press and release a key."""
    button = PhysicalButton.__members__.get(key.upper())
    target: str | PhysicalButton = button if button is not None else key

    async def _op(device: MonkeyDevice) -> None:
        await device.press(target, TouchPressType.DOWN_AND_UP)

    with_device(serial, _op)
    typer.echo("✓ Done")


@app.command("type")
def type_text(
    text: str = typer.Argument(..., help="Text to type"),
    serial: str | None = SerialOption,
) -> None:
    """Type text into the focused view."""

    async def _op(device: MonkeyDevice) -> None:
        await device.type(text)

    with_device(serial, _op)
    typer.echo("✓ Done")


@app.command("drag")
def drag(
    start_x: int = typer.Argument(...),
    start_y: int = typer.Argument(...),
    end_x: int = typer.Argument(...),
    end_y: int = typer.Argument(...),
    steps: int = typer.Option(10, "--steps", min=1, help="Number of moves"),
    duration_ms: int = typer.Option(1000, "--duration-ms", help="Total drag time"),
    serial: str | None = SerialOption,
) -> None:
    """Drag between two coordinates."""

    async def _op(device: MonkeyDevice) -> None:
        await device.drag((start_x, start_y), (end_x, end_y), steps, duration_ms)

    with_device(serial, _op)
    typer.echo("✓ Done")


@app.command("vars")
def variables(
    key: str | None = typer.Argument(None, help="Variable to read (default: list names)"),
    serial: str | None = SerialOption,
) -> None:
    """List monkey variables, or print one value."""

    async def _op(device: MonkeyDevice) -> list[str]:
        if key is not None:
            return [await device.get_variable(key)]
        return await device.list_variables()

    for line in with_device(serial, _op):
        typer.echo(line)


@app.command("views")
def views(
    target: str | None = typer.Argument(None, help='Selector: id:<resource id> or text:"..."'),
    serial: str | None = SerialOption,
) -> None:
    """List view ids, or print the text of views matching a selector."""

    async def _op(device: MonkeyDevice) -> list[str]:
        if target is None:
            return await device.list_view_ids()
        selector = parse_selector(target)
        if isinstance(selector, TextMultiSelector):
            found = await device.get_views(selector)
        else:
            found = [await device.get_view(selector)]
        return [await view.text() for view in found]

    for line in with_device(serial, _op):
        typer.echo(line)


@app.command("shell")
def shell(
    command: list[str] = typer.Argument(..., help="Shell command and arguments"),
    timeout_ms: int | None = typer.Option(None, "--timeout-ms", help="Default: 5000"),
    serial: str | None = SerialOption,
) -> None:
    """Run a shell command on the device."""

    async def _op(device: MonkeyDevice) -> str:
        return await device.shell(*command, timeout_ms=timeout_ms)

    typer.echo(with_device(serial, _op), nl=False)


def _intent_command(name: str, help_text: str, broadcast: bool) -> None:
    @app.command(name, help=help_text)
    def _command(
        action: str | None = typer.Option(None, "--action", "-a"),
        data: str | None = typer.Option(None, "--data", "-d"),
        mime_type: str | None = typer.Option(None, "--type", "-t"),
        category: list[str] | None = typer.Option(None, "--category", "-c"),
        extra: list[str] | None = typer.Option(None, "--extra", "-e", help="KEY=VALUE"),
        component: str | None = typer.Option(None, "--component", "-n"),
        flags: int = typer.Option(0, "--flags", "-f"),
        uri: str | None = typer.Argument(None),
        serial: str | None = SerialOption,
    ) -> None:
        intent = _intent_from_options(
            action, data, mime_type, category, extra, component, flags, uri
        )

        async def _op(device: MonkeyDevice) -> str:
            if broadcast:
                return await device.broadcast_intent(intent)
            return await device.start_activity(intent)

        typer.echo(with_device(serial, _op), nl=False)


_intent_command("start-activity", "Start an activity with am start.", broadcast=False)
_intent_command("broadcast", "Send a broadcast with am broadcast.", broadcast=True)


@app.command("instrument")
def instrument(
    package: str = typer.Argument(..., help="Instrumentation component (pkg/runner)"),
    arg: list[str] | None = typer.Option(None, "--arg", "-e", help="KEY=VALUE"),
    timeout_ms: int | None = typer.Option(None, "--timeout-ms"),
    serial: str | None = SerialOption,
) -> None:
    """Run an instrumentation and print its results as JSON."""
    args = parse_pairs(arg, "--arg")

    async def _op(device: MonkeyDevice) -> dict[str, str]:
        return await device.instrument(package, args, timeout_ms=timeout_ms)

    typer.echo(json.dumps(with_device(serial, _op), indent=2, sort_keys=True))


if __name__ == "__main__":
    app()
