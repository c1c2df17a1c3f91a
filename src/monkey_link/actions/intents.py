"""Intent arguments for ``am start`` and ``am broadcast``."""

from __future__ import annotations

from collections.abc import Collection, Mapping
from dataclasses import dataclass, field

ExtraValue = int | bool | str


@dataclass(frozen=True)
class IntentSpec:
    """Description of an Android intent, used only to build shell arguments."""

    action: str | None = None
    data: str | None = None
    mime_type: str | None = None
    categories: Collection[str] = ()
    extras: Mapping[str, ExtraValue] = field(default_factory=dict)
    component: str | None = None
    flags: int = 0
    uri: str | None = None


def _extra_flag(value: ExtraValue) -> tuple[str, str]:
    # bool is an int subclass, so it must be checked first
    if isinstance(value, bool):
        return "--ez", "true" if value else "false"
    if isinstance(value, int):
        return "--ei", str(value)
    return "--es", str(value)


def build_intent_args(intent: IntentSpec) -> list[str]:
    """Build the argument list for an intent.

    Order follows am's usage text:
    ``[-a ACTION] [-d DATA] [-t MIME] [-c CAT]... [--ez|--ei|--es KEY VALUE]...
    [-n COMPONENT] [-f FLAGS] [URI]``. Empty fields and zero flags are omitted.
    """
    parts: list[str] = []

    if intent.action:
        parts += ["-a", intent.action]
    if intent.data:
        parts += ["-d", intent.data]
    if intent.mime_type:
        parts += ["-t", intent.mime_type]

    for category in intent.categories:
        parts += ["-c", category]

    for key, value in intent.extras.items():
        flag, rendered = _extra_flag(value)
        parts += [flag, key, rendered]

    if intent.component:
        parts += ["-n", intent.component]
    if intent.flags != 0:
        parts += ["-f", str(intent.flags)]
    if intent.uri:
        parts.append(intent.uri)

    return parts


def build_instrument_args(package: str, args: Mapping[str, object] | None = None) -> list[str]:
    """Build ``am instrument -w -r [-e KEY VALUE]... PACKAGE``, skipping None values."""
    parts = ["am", "instrument", "-w", "-r"]
    for key, value in (args or {}).items():
        if key is None or value is None:
            continue
        parts += ["-e", key, str(value)]
    parts.append(package)
    return parts
