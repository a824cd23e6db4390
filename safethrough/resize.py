"""Edge and corner hit-testing and resizing for frameless windows."""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace

__all__ = ["Direction", "Rect", "DEFAULT_PADDING", "hit_test", "resize_rect"]

DEFAULT_PADDING = 5
"""Width in pixels of the band along each edge that starts a resize."""


class Direction(enum.IntEnum):
    """Which edge or corner of a window the cursor is over."""

    UP = 0
    DOWN = 1
    LEFT = 2
    RIGHT = 3
    LEFT_TOP = 4
    LEFT_DOWN = 5
    RIGHT_TOP = 6
    RIGHT_DOWN = 7
    UNKNOWN = 8


@dataclass(frozen=True)
class Rect:
    """An integer rectangle in screen coordinates.

    ``right`` and ``bottom`` are the last pixel inside the rectangle.
    """

    left: int
    top: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.left + self.width - 1

    @property
    def bottom(self) -> int:
        return self.top + self.height - 1

    def _move_left_edge(self, x: int) -> "Rect":
        return replace(self, left=x, width=self.right - x + 1)

    def _move_top_edge(self, y: int) -> "Rect":
        return replace(self, top=y, height=self.bottom - y + 1)


def hit_test(
    point: tuple[int, int],
    rect: Rect,
    padding: int = DEFAULT_PADDING,
    strict: bool = False,
) -> Direction:
    """Return the edge or corner of ``rect`` that ``point`` lies on.

    With ``strict`` the side edges are only reported between the top and
    bottom edges, and the band extends ``padding`` pixels outside the
    rectangle as well as inside it.
    """
    x, y = point
    left, top, right, bottom = rect.left, rect.top, rect.right, rect.bottom

    if x - padding <= left and x >= left and y - padding <= top and y >= top:
        return Direction.LEFT_TOP
    if x - padding <= left and x > left and y - padding <= bottom and y >= bottom:
        return Direction.LEFT_DOWN
    if strict:
        on_left = left - padding <= x <= left + padding and top < y < bottom
    else:
        on_left = left <= x <= left + padding
    if on_left:
        return Direction.LEFT
    if x <= right and x + padding >= right and y >= top and y - padding <= top:
        return Direction.RIGHT_TOP
    if x <= right and x + padding >= right and y <= bottom and y + padding >= bottom:
        return Direction.RIGHT_DOWN
    if strict:
        on_right = x <= right + padding and x + padding >= right and top < y < bottom
    else:
        on_right = x <= right and x + padding >= right
    if on_right:
        return Direction.RIGHT
    if top < y < top + padding:
        return Direction.UP
    if y <= bottom and y + padding >= bottom:
        return Direction.DOWN
    return Direction.UNKNOWN


def resize_rect(rect: Rect, direction: Direction, pos: tuple[int, int]) -> Rect:
    """Return ``rect`` resized by dragging ``direction`` to ``pos``."""
    x, y = pos
    result = rect
    if direction in (Direction.LEFT, Direction.LEFT_TOP, Direction.LEFT_DOWN):
        result = result._move_left_edge(x)
    if direction in (Direction.RIGHT, Direction.RIGHT_TOP, Direction.RIGHT_DOWN):
        result = replace(result, width=x - rect.left)
    if direction in (Direction.UP, Direction.LEFT_TOP, Direction.RIGHT_TOP):
        result = result._move_top_edge(y)
    if direction in (Direction.DOWN, Direction.LEFT_DOWN, Direction.RIGHT_DOWN):
        result = replace(result, height=y - rect.top)
    return result