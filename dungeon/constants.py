"""Tile and direction identifiers shared by the map generator and its consumers."""

from enum import Enum, IntEnum
from typing import Final


class TileType(IntEnum):
    """What a grid cell is."""

    INVALID = 0  # returned for out-of-bounds lookups
    WALL = 1
    ROOM = 2
    HALLWAY = 3
    DOOR = 4
    CONNECTOR = 5  # generation-time only, never left in a finished map
    # Reserved for consumers; the generator never produces these.
    SECRET_DOOR = 6
    TRAPPED_DOOR = 7
    STAIRS_UP = 8
    STAIRS_DOWN = 9
    TRAP = 10
    EGRESS = 11


class Direction(Enum):
    """Cardinal directions in screen coordinates (y grows downwards)."""

    NORTH = (0, -1)
    SOUTH = (0, 1)
    EAST = (1, 0)
    WEST = (-1, 0)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]

    def opposite(self) -> "Direction":
        return Direction((-self.dx, -self.dy))


# Region id owned by every wall cell. Always exists, never removed.
WALL_REGION_ID: Final[int] = 0
WALL_REGION_NAME: Final[str] = "wall"
# Region id reported for out-of-bounds lookups.
INVALID_REGION_ID: Final[int] = -1

# Tiles a dead-end test treats as solid.
SOLID_TILE_TYPES: Final[frozenset[TileType]] = frozenset(
    {TileType.WALL, TileType.INVALID}
)

__all__ = [
    "TileType",
    "Direction",
    "WALL_REGION_ID",
    "WALL_REGION_NAME",
    "INVALID_REGION_ID",
    "SOLID_TILE_TYPES",
]
