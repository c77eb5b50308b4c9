# dungeon/world/geometry.py
from typing import Iterator, NamedTuple

from dungeon.constants import Direction


class Position(NamedTuple):
    """A cell coordinate on the map."""

    x: int
    y: int

    def offset(self, dx: int, dy: int) -> "Position":
        return Position(self.x + dx, self.y + dy)

    def step(self, direction: Direction, distance: int = 1) -> "Position":
        """Position ``distance`` cells away in ``direction``."""
        return Position(
            self.x + direction.dx * distance, self.y + direction.dy * distance
        )

    def neighbors(self) -> Iterator["Position"]:
        """The four orthogonal neighbours (N, S, E, W)."""
        for direction in Direction:
            yield self.step(direction)


class Bounds(NamedTuple):
    """An axis-aligned rectangle of cells; right and bottom are exclusive."""

    left: int
    top: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def contains(self, pos: Position) -> bool:
        """Returns True if ``pos`` lies inside this rectangle."""
        return self.left <= pos.x < self.right and self.top <= pos.y < self.bottom

    def overlaps(self, other: "Bounds") -> bool:
        """Returns True if this rectangle shares at least one cell with ``other``."""
        if self.is_empty or other.is_empty:
            return False
        return (
            self.left < other.right
            and other.left < self.right
            and self.top < other.bottom
            and other.top < self.bottom
        )

    def expanded(self, margin: int) -> "Bounds":
        """This rectangle grown by ``margin`` cells on every side."""
        return Bounds(
            self.left - margin,
            self.top - margin,
            self.width + 2 * margin,
            self.height + 2 * margin,
        )

    def positions(self) -> Iterator[Position]:
        """Every cell in row-major order."""
        for y in range(self.top, self.bottom):
            for x in range(self.left, self.right):
                yield Position(x, y)


__all__ = ["Position", "Bounds"]
