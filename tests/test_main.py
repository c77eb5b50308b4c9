from pathlib import Path

import pytest

import main
from dungeon.constants import TileType
from dungeon.world.geometry import Position
from dungeon.world.tile_grid import TileGrid


@pytest.fixture
def no_logging_setup(monkeypatch):
    monkeypatch.setattr(main, "setup_logging", lambda *args, **kwargs: None)


def write_config(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(body)
    return path


def test_shipped_config_loads():
    args = main.parse_args([])
    assert args.config == main.CONFIG_FILE
    config = main.build_config(args)
    config.validate()


def test_seed_override(tmp_path):
    path = write_config(tmp_path, "generation:\n  seed: 5\n")
    args = main.parse_args(["--config", str(path), "--seed", "77"])
    assert main.build_config(args).seed == 77


def test_render_map_uses_glyphs():
    grid = TileGrid(3, 1)
    grid.set(Position(1, 0), TileType.DOOR, 1)
    assert main.render_map(grid) == "#+#"


def test_main_prints_map(tmp_path, capsys, no_logging_setup):
    path = write_config(tmp_path, "generation:\n  width: 21\n  height: 11\n")
    assert main.main(["--config", str(path), "--seed", "3"]) == 0
    glyphs = set(main.MAP_GLYPHS.values())
    map_lines = [
        line
        for line in capsys.readouterr().out.splitlines()
        if line and set(line) <= glyphs
    ]
    assert len(map_lines) == 11
    assert all(len(line) == 21 for line in map_lines)


def test_main_missing_config_exits_non_zero(tmp_path, no_logging_setup):
    assert main.main(["--config", str(tmp_path / "missing.yaml")]) == 1


def test_main_invalid_config_exits_non_zero(tmp_path, no_logging_setup):
    path = write_config(tmp_path, "generation:\n  room_min: 9\n  room_max: 3\n")
    assert main.main(["--config", str(path)]) == 1


def test_main_fractional_size_exits_non_zero(tmp_path, no_logging_setup):
    path = write_config(tmp_path, "generation:\n  width: 20.5\n  height: 20\n")
    assert main.main(["--config", str(path)]) == 1
