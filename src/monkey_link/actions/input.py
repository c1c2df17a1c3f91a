"""Input types - press kinds and physical buttons."""

from __future__ import annotations

from enum import Enum


class TouchPressType(Enum):
    """How a touch or key event is delivered."""

    DOWN = "down"
    UP = "up"
    DOWN_AND_UP = "downAndUp"
    MOVE = "move"


class PhysicalButton(Enum):
    """Hardware buttons, valued by their canonical key name."""

    HOME = "KEYCODE_HOME"
    SEARCH = "KEYCODE_SEARCH"
    MENU = "KEYCODE_MENU"
    BACK = "KEYCODE_BACK"
    DPAD_UP = "KEYCODE_DPAD_UP"
    DPAD_DOWN = "KEYCODE_DPAD_DOWN"
    DPAD_LEFT = "KEYCODE_DPAD_LEFT"
    DPAD_RIGHT = "KEYCODE_DPAD_RIGHT"
    DPAD_CENTER = "KEYCODE_DPAD_CENTER"
    ENTER = "KEYCODE_ENTER"
    VOLUME_UP = "KEYCODE_VOLUME_UP"
    VOLUME_DOWN = "KEYCODE_VOLUME_DOWN"
    POWER = "KEYCODE_POWER"

    @property
    def key_name(self) -> str:
        return self.value
