"""Gesture interpolation - drag paths as an ordered touch event sequence."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

from monkey_link.errors import invalid_argument_error


@dataclass(frozen=True)
class Point:
    """Screen coordinate in pixels."""

    x: int
    y: int


class DragPhase(Enum):
    """Touch event kinds emitted during a drag."""

    DOWN = "down"
    MOVE = "move"
    UP = "up"


@dataclass(frozen=True)
class DragEvent:
    """One touch event, optionally followed by the per-step pause."""

    phase: DragPhase
    point: Point
    pause_after: bool = False


def interpolate(start: Point, end: Point, steps: int) -> list[Point]:
    """Return ``steps + 1`` evenly spaced points from start to end inclusive.

    Raises:
        MonkeyError: If steps < 1 (ERR_INVALID_ARGUMENT).
    """
    if steps < 1:
        raise invalid_argument_error("steps", steps, "a drag needs at least one step")

    points = [start]
    for i in range(1, steps):
        fraction = i / steps
        points.append(
            Point(
                x=round(start.x + (end.x - start.x) * fraction),
                y=round(start.y + (end.y - start.y) * fraction),
            )
        )
    points.append(end)
    return points


def drag_events(start: Point, end: Point, steps: int) -> Iterator[DragEvent]:
    """Yield the touch sequence for a drag.

    Down at start and a move to start, one move per intermediate point,
    then a move to end and the final up. Every move except the last is
    followed by a pause.

    Raises:
        MonkeyError: If steps < 1 (ERR_INVALID_ARGUMENT), before anything is yielded.
    """
    points = interpolate(start, end, steps)
    return _emit(points)


def _emit(points: list[Point]) -> Iterator[DragEvent]:
    first, last = points[0], points[-1]
    yield DragEvent(DragPhase.DOWN, first)
    yield DragEvent(DragPhase.MOVE, first, pause_after=True)
    for point in points[1:-1]:
        yield DragEvent(DragPhase.MOVE, point, pause_after=True)
    yield DragEvent(DragPhase.MOVE, last)
    yield DragEvent(DragPhase.UP, last)
