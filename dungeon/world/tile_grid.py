# dungeon/world/tile_grid.py
from typing import List, Mapping, NamedTuple

import numpy as np
import structlog

from dungeon.constants import (
    INVALID_REGION_ID,
    SOLID_TILE_TYPES,
    WALL_REGION_ID,
    TileType,
)
from dungeon.world.geometry import Bounds, Position

log = structlog.get_logger()


class Tile(NamedTuple):
    type: TileType
    region_id: int


INVALID_TILE = Tile(TileType.INVALID, INVALID_REGION_ID)


class TileGrid:
    def __init__(self, width: int, height: int):
        """
        Allocates a width x height grid where every cell is a wall owned by
        the background region.
        """
        self.create(width, height)

    def create(self, width: int, height: int) -> None:
        """(Re)allocates the grid, discarding any previous contents."""
        if width <= 0 or height <= 0:
            log.error("Invalid grid dimensions", width=width, height=height)
            raise ValueError("Grid width and height must be positive integers.")
        self._width = width
        self._height = height
        # Arrays are indexed [y, x], C order like the rest of the map layers.
        self.types: np.ndarray = np.full(
            (height, width), fill_value=TileType.WALL, dtype=np.uint8, order="C"
        )
        self.regions: np.ndarray = np.full(
            (height, width), fill_value=WALL_REGION_ID, dtype=np.int32, order="C"
        )
        log.debug("TileGrid arrays initialized", shape=(height, width))

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def bounds(self) -> Bounds:
        return Bounds(0, 0, self._width, self._height)

    def in_bounds(self, pos: Position) -> bool:
        """Checks if the given position is within the grid."""
        return 0 <= pos.x < self._width and 0 <= pos.y < self._height

    def get(self, pos: Position) -> Tile:
        """The tile at ``pos``, or ``INVALID_TILE`` when out of range."""
        if not self.in_bounds(pos):
            return INVALID_TILE
        return Tile(
            TileType(int(self.types[pos.y, pos.x])), int(self.regions[pos.y, pos.x])
        )

    def set(self, pos: Position, tile_type: TileType, region_id: int) -> None:
        if not self.in_bounds(pos):
            log.warning(
                "Ignoring tile write outside grid",
                pos=tuple(pos),
                tile_type=TileType(tile_type).name,
            )
            return
        self.types[pos.y, pos.x] = tile_type
        self.regions[pos.y, pos.x] = region_id

    def set_region(self, pos: Position, region_id: int) -> None:
        """Writes only the region field of the cell at ``pos``."""
        if not self.in_bounds(pos):
            log.warning("Ignoring region write outside grid", pos=tuple(pos))
            return
        self.regions[pos.y, pos.x] = region_id

    def rewrite_region(self, old_id: int, new_id: int) -> int:
        """Replaces every occurrence of ``old_id`` with ``new_id``.

        Returns the number of cells rewritten.
        """
        mask = self.regions == old_id
        count = int(np.count_nonzero(mask))
        self.regions[mask] = new_id
        log.debug("Rewrote region ids", old_id=old_id, new_id=new_id, cells=count)
        return count

    def is_type(self, pos: Position, tile_type: TileType) -> bool:
        return self.get(pos).type == tile_type

    def is_empty(self, pos: Position) -> bool:
        """True for walls and for anything off the grid."""
        return self.get(pos).type in SOLID_TILE_TYPES

    def contains(self, bounds: Bounds, tile_type: TileType) -> bool:
        """Returns True if any cell of ``bounds`` inside the grid is ``tile_type``."""
        if bounds.is_empty:
            log.warning("Area test on zero-size bounds", bounds=tuple(bounds))
            return False
        x_start = max(0, bounds.left)
        y_start = max(0, bounds.top)
        x_end = min(self._width, bounds.right)
        y_end = min(self._height, bounds.bottom)
        if x_start >= x_end or y_start >= y_end:
            return False
        return bool(np.any(self.types[y_start:y_end, x_start:x_end] == tile_type))

    def count(self, tile_type: TileType) -> int:
        return int(np.count_nonzero(self.types == tile_type))

    def positions_of(self, tile_type: TileType) -> List[Position]:
        """All positions holding ``tile_type``, in row-major order."""
        return [
            Position(int(x), int(y))
            for y, x in np.argwhere(self.types == tile_type)
        ]

    def render(self, mapping: Mapping[TileType, str]) -> List[str]:
        """Maps every cell to a display character, one string per row.

        Types missing from ``mapping`` fall back to the INVALID entry, or
        ``"?"`` when that is missing too.
        """
        fallback = mapping.get(TileType.INVALID, "?")
        lookup = [mapping.get(tile_type, fallback) for tile_type in TileType]
        return ["".join(lookup[tile_id] for tile_id in row) for row in self.types]


__all__ = ["Tile", "INVALID_TILE", "TileGrid"]
