import numpy as np
import pytest
from structlog.testing import capture_logs

from dungeon.constants import TileType
from dungeon.world.geometry import Bounds, Position
from dungeon.world.tile_grid import INVALID_TILE, Tile, TileGrid


def test_new_grid_is_all_wall():
    grid = TileGrid(7, 5)
    assert grid.types.shape == (5, 7)
    assert grid.count(TileType.WALL) == 35
    assert grid.get(Position(6, 4)) == Tile(TileType.WALL, 0)


def test_invalid_dimensions_raise():
    with pytest.raises(ValueError):
        TileGrid(0, 5)
    with pytest.raises(ValueError):
        TileGrid(5, -1)


def test_out_of_range_get_returns_invalid_tile():
    grid = TileGrid(3, 3)
    assert grid.get(Position(-1, 0)) == INVALID_TILE
    assert grid.get(Position(0, 3)) == INVALID_TILE
    assert grid.is_empty(Position(3, 0))


def test_out_of_range_set_is_logged_noop():
    grid = TileGrid(3, 3)
    with capture_logs() as logs:
        grid.set(Position(5, 5), TileType.ROOM, 1)
    assert grid.count(TileType.ROOM) == 0
    assert any(log["event"] == "Ignoring tile write outside grid" for log in logs)


def test_set_and_get_round_trip():
    grid = TileGrid(4, 4)
    grid.set(Position(1, 2), TileType.HALLWAY, 3)
    assert grid.get(Position(1, 2)) == Tile(TileType.HALLWAY, 3)
    assert grid.types[2, 1] == TileType.HALLWAY
    assert grid.is_type(Position(1, 2), TileType.HALLWAY)
    assert not grid.is_empty(Position(1, 2))


def test_contains_tests_area_and_clips():
    grid = TileGrid(10, 10)
    grid.set(Position(2, 2), TileType.DOOR, 1)
    assert grid.contains(Bounds(0, 0, 5, 5), TileType.DOOR)
    assert not grid.contains(Bounds(3, 3, 2, 2), TileType.DOOR)
    assert grid.contains(Bounds(-3, -3, 6, 6), TileType.DOOR)
    assert not grid.contains(Bounds(20, 20, 3, 3), TileType.DOOR)


def test_contains_zero_size_bounds_warns():
    grid = TileGrid(4, 4)
    with capture_logs() as logs:
        assert not grid.contains(Bounds(0, 0, 0, 4), TileType.WALL)
    assert any(log["log_level"] == "warning" for log in logs)


def test_rewrite_region_returns_count():
    grid = TileGrid(4, 4)
    grid.set(Position(0, 0), TileType.ROOM, 2)
    grid.set(Position(1, 0), TileType.ROOM, 2)
    assert grid.rewrite_region(2, 5) == 2
    assert np.count_nonzero(grid.regions == 5) == 2
    assert np.count_nonzero(grid.regions == 2) == 0


def test_positions_of_row_major():
    grid = TileGrid(4, 4)
    grid.set(Position(3, 0), TileType.ROOM, 1)
    grid.set(Position(0, 1), TileType.ROOM, 1)
    assert grid.positions_of(TileType.ROOM) == [Position(3, 0), Position(0, 1)]


def test_render_uses_mapping_and_fallback():
    grid = TileGrid(3, 2)
    grid.set(Position(1, 0), TileType.ROOM, 1)
    grid.set(Position(2, 1), TileType.DOOR, 1)
    rows = grid.render({TileType.WALL: "#", TileType.ROOM: ".", TileType.INVALID: "?"})
    assert rows == ["#.#", "##?"]
