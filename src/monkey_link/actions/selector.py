"""View selectors and the views they resolve to."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from monkey_link.errors import invalid_argument_error, remote_rejected_error
from monkey_link.protocol.codec import Command, split_payload

if TYPE_CHECKING:
    from monkey_link.protocol.session import MonkeySession


@dataclass(frozen=True)
class ViewId:
    """View addressed by its resource id, e.g. ``id/button1``."""

    view_id: str

    def query_args(self) -> tuple[str, ...]:
        return ("viewid", self.view_id)


@dataclass(frozen=True)
class AccessibilityId:
    """View addressed by accessibility window id and view id."""

    window_id: int
    view_id: int

    def query_args(self) -> tuple[str, ...]:
        return ("accessibilityid", str(self.window_id), str(self.view_id))


ViewAddress = ViewId | AccessibilityId


@dataclass(frozen=True)
class ViewLocation:
    """View bounds in screen pixels."""

    x: int
    y: int
    width: int
    height: int

    @property
    def center(self) -> tuple[int, int]:
        return self.x + self.width // 2, self.y + self.height // 2


def parse_accessibility_ids(command: Command, payload: str) -> list[AccessibilityId]:
    """Parse a flat ``window view window view ...`` id list."""
    tokens = split_payload(payload)
    if len(tokens) % 2:
        raise remote_rejected_error(str(command), f"unpaired accessibility ids: {payload}")
    try:
        return [
            AccessibilityId(window_id=int(tokens[i]), view_id=int(tokens[i + 1]))
            for i in range(0, len(tokens), 2)
        ]
    except ValueError as err:
        raise remote_rejected_error(str(command), f"non-numeric ids: {payload}") from err


class MonkeyView:
    """A single view on screen, queried through ``queryview``."""

    def __init__(self, session: MonkeySession, address: ViewAddress) -> None:
        self._session = session
        self.address = address

    def __repr__(self) -> str:
        return f"MonkeyView({self.address!r})"

    async def _query(self, name: str, *args: object) -> str:
        command = Command.of("queryview", *self.address.query_args(), name, *args)
        return await self._session.execute(command)

    async def _query_bool(self, name: str) -> bool:
        return (await self._query(name)).strip().lower() == "true"

    async def text(self) -> str:
        return await self._query("gettext")

    async def class_name(self) -> str:
        return await self._query("getclass")

    async def location(self) -> ViewLocation:
        payload = await self._query("getlocation")
        try:
            x, y, width, height = (int(v) for v in split_payload(payload))
        except ValueError as err:
            raise remote_rejected_error("queryview getlocation", payload) from err
        return ViewLocation(x=x, y=y, width=width, height=height)

    async def is_checked(self) -> bool:
        return await self._query_bool("getchecked")

    async def is_enabled(self) -> bool:
        return await self._query_bool("getenabled")

    async def is_selected(self) -> bool:
        return await self._query_bool("getselected")

    async def set_selected(self, selected: bool) -> None:
        await self._query("setselected", "true" if selected else "false")

    async def is_focused(self) -> bool:
        return await self._query_bool("getfocused")

    async def set_focused(self, focused: bool) -> None:
        await self._query("setfocused", "true" if focused else "false")

    async def parent(self) -> MonkeyView:
        command = Command.of("queryview", *self.address.query_args(), "getparent")
        ids = parse_accessibility_ids(command, await self._session.execute(command))
        if len(ids) != 1:
            raise remote_rejected_error(str(command), "expected exactly one parent id")
        return MonkeyView(self._session, ids[0])

    async def children(self) -> list[MonkeyView]:
        command = Command.of("queryview", *self.address.query_args(), "getchildren")
        ids = parse_accessibility_ids(command, await self._session.execute(command))
        return [MonkeyView(self._session, address) for address in ids]

    async def accessibility_ids(self) -> AccessibilityId:
        command = Command.of("queryview", *self.address.query_args(), "getaccessibilityids")
        ids = parse_accessibility_ids(command, await self._session.execute(command))
        if len(ids) != 1:
            raise remote_rejected_error(str(command), "expected one accessibility id pair")
        return ids[0]


class ViewSelector(Protocol):
    """Resolves to exactly one view."""

    async def get_view(self, session: MonkeySession) -> MonkeyView: ...


class MultiViewSelector(Protocol):
    """Resolves to any number of views."""

    async def get_views(self, session: MonkeySession) -> list[MonkeyView]: ...


@dataclass(frozen=True)
class ViewIdSelector:
    """Selects the view with a given resource id."""

    view_id: str

    async def get_view(self, session: MonkeySession) -> MonkeyView:
        return MonkeyView(session, ViewId(self.view_id))


@dataclass(frozen=True)
class TextMultiSelector:
    """Selects every view whose text matches."""

    text: str

    async def get_views(self, session: MonkeySession) -> list[MonkeyView]:
        command = Command.of("getviewswithtext", self.text)
        ids = parse_accessibility_ids(command, await session.execute(command))
        return [MonkeyView(session, address) for address in ids]


def parse_selector(target: str) -> ViewIdSelector | TextMultiSelector:
    """
    Parse a selector string.

    Supported formats:
    - id:resource_id - ViewIdSelector
    - text:"..." or text:'...' or text:value - TextMultiSelector

    Raises:
        MonkeyError: If the format is not recognized (ERR_INVALID_ARGUMENT).
    """
    if target.startswith("id:") and len(target) > 3:
        return ViewIdSelector(view_id=target[3:])

    if target.startswith("text:") and len(target) > 5:
        text = target[5:].strip('"').strip("'")
        return TextMultiSelector(text=text)

    raise invalid_argument_error("selector", target, "use id:<resource id> or text:<text>")
