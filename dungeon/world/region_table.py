"""Region bookkeeping for map generation.

A region is a named, numbered set of grid positions. Rooms and maze runs each
start out as their own region; connecting the map merges them one by one into
a single root region. Region 0 is the background that owns every wall cell.
Its positions are never enumerated, they are read back from the grid instead.

Referencing a region that does not exist means the region graph is corrupt,
so every such lookup raises instead of being ignored.
"""

from __future__ import annotations

from typing import Dict, List, Set

import structlog

from dungeon.constants import WALL_REGION_ID, WALL_REGION_NAME
from dungeon.world.geometry import Position
from dungeon.world.tile_grid import TileGrid

log = structlog.get_logger()


class RegionNotFoundError(KeyError):
    """Raised when a region id is not (or no longer) registered."""


class RegionMergeError(ValueError):
    """Raised for merges that would corrupt the region graph."""


class RegionTable:
    def __init__(self, grid: TileGrid):
        self._grid = grid
        self.create(grid.width, grid.height)

    def create(self, width: int, height: int) -> None:
        """Resets to the background region alone."""
        if (width, height) != (self._grid.width, self._grid.height):
            log.error(
                "Region table size does not match grid",
                width=width,
                height=height,
                grid_width=self._grid.width,
                grid_height=self._grid.height,
            )
            raise ValueError("Region table must match the grid it tracks.")
        self._names: Dict[int, str] = {WALL_REGION_ID: WALL_REGION_NAME}
        self._positions: Dict[int, Set[Position]] = {WALL_REGION_ID: set()}
        self._next_region_id = WALL_REGION_ID + 1

    def __contains__(self, region_id: object) -> bool:
        return region_id in self._names

    def _require(self, region_id: int) -> None:
        if region_id not in self._names:
            log.error("Region not found", region_id=region_id)
            raise RegionNotFoundError(region_id)

    def add(self, name: str) -> int:
        """Registers a new, empty region and returns its id."""
        region_id = self._next_region_id
        self._next_region_id += 1
        self._names[region_id] = name
        self._positions[region_id] = set()
        log.debug("Region added", region_id=region_id, name=name)
        return region_id

    def remove(self, old_id: int, new_id: int) -> None:
        """Merges ``old_id`` into ``new_id`` and forgets ``old_id``."""
        self._require(old_id)
        self._require(new_id)
        if old_id == new_id:
            log.error("Attempt to merge region into itself", region_id=old_id)
            raise RegionMergeError(f"cannot merge region {old_id} into itself")
        if WALL_REGION_ID in (old_id, new_id):
            log.error(
                "Attempt to merge the background region", old_id=old_id, new_id=new_id
            )
            raise RegionMergeError("the background region cannot be merged")

        moved = self._positions.pop(old_id)
        self._positions[new_id] |= moved
        rewritten = self._grid.rewrite_region(old_id, new_id)
        name = self._names.pop(old_id)
        log.debug(
            "Region merged",
            old_id=old_id,
            old_name=name,
            new_id=new_id,
            positions=len(moved),
            cells_rewritten=rewritten,
        )

    def set(self, pos: Position, region_id: int) -> None:
        """Moves ``pos`` from its current owner to ``region_id``."""
        self._require(region_id)
        if not self._grid.in_bounds(pos):
            log.warning(
                "Ignoring region assignment outside grid",
                pos=tuple(pos),
                region_id=region_id,
            )
            return
        old_id = self._grid.get(pos).region_id
        self._require(old_id)
        self._positions[old_id].discard(pos)
        if region_id != WALL_REGION_ID:
            self._positions[region_id].add(pos)
        self._grid.set_region(pos, region_id)

    def get(self, pos: Position) -> int:
        """Region id at ``pos`` (-1 when off the grid)."""
        return self._grid.get(pos).region_id

    def positions(self, region_id: int) -> Set[Position]:
        """A copy of the positions owned by ``region_id``."""
        self._require(region_id)
        if region_id == WALL_REGION_ID:
            return set(self._grid_positions(region_id))
        return set(self._positions[region_id])

    def _grid_positions(self, region_id: int) -> List[Position]:
        return [
            Position(int(x), int(y))
            for y, x in zip(*(self._grid.regions == region_id).nonzero())
        ]

    def size(self, region_id: int) -> int:
        """Number of positions owned by ``region_id``."""
        self._require(region_id)
        if region_id == WALL_REGION_ID:
            return int((self._grid.regions == region_id).sum())
        return len(self._positions[region_id])

    def get_name(self, region_id: int) -> str:
        self._require(region_id)
        return self._names[region_id]

    def regions(self) -> List[int]:
        """Every live region id, background included, in creation order."""
        return list(self._names)

    def count(self) -> int:
        """Number of live regions, not counting the background."""
        return len(self._names) - 1


__all__ = ["RegionTable", "RegionNotFoundError", "RegionMergeError"]
