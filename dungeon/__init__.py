"""Procedural dungeon generation: rooms, mazes and the doors that join them.

``MapGenerator.generate`` turns a ``GenerationConfig`` into a ``TileGrid`` of
typed tiles plus the ``RegionTable`` describing which tiles belong together.
"""

from .constants import Direction, TileType
from .world.generation_config import GenerationConfig
from .world.geometry import Bounds, Position
from .world.mapgen import MapConnector, MapGenerator
from .world.region_table import RegionMergeError, RegionNotFoundError, RegionTable
from .world.tile_grid import INVALID_TILE, Tile, TileGrid

__all__ = [
    "Bounds",
    "Direction",
    "GenerationConfig",
    "INVALID_TILE",
    "MapConnector",
    "MapGenerator",
    "Position",
    "RegionMergeError",
    "RegionNotFoundError",
    "RegionTable",
    "Tile",
    "TileGrid",
    "TileType",
]
