# main.py
import argparse
import dataclasses
import logging
import sys
import time
from pathlib import Path
from typing import Dict, List, Optional

import structlog

from dungeon.constants import TileType
from dungeon.world.generation_config import GenerationConfig
from dungeon.world.mapgen import MapGenerator
from dungeon.world.tile_grid import TileGrid
from utils.config_loader import load_generation_config
from utils.logging_utils import parse_level, setup_logging

log = structlog.get_logger()

# --- Paths relative to this script's location ---
SCRIPT_DIR = Path(__file__).parent.resolve()
CONFIG_DIR = SCRIPT_DIR / "config"
CONFIG_FILE = CONFIG_DIR / "config.yaml"
# --- End Paths ---

MAP_GLYPHS: Dict[TileType, str] = {
    TileType.INVALID: " ",
    TileType.WALL: "#",
    TileType.ROOM: ".",
    TileType.HALLWAY: ",",
    TileType.DOOR: "+",
    TileType.CONNECTOR: "*",
}


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate a procedural dungeon map and print it as ASCII."
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=CONFIG_FILE,
        help=f"YAML config file (default: {CONFIG_FILE})",
    )
    parser.add_argument(
        "--seed", type=int, default=None, help="Override the configured seed."
    )
    parser.add_argument(
        "--random-seed",
        action="store_true",
        help="Use a time-based seed instead of the configured one.",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="INFO",
        help="Logging level",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--no-color", action="store_true", help="Disable coloured log output"
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> GenerationConfig:
    """Loads the configured generation settings and applies CLI overrides."""
    config = load_generation_config(args.config)
    if args.seed is not None:
        config = dataclasses.replace(config, seed=args.seed)
    elif args.random_seed:
        config = dataclasses.replace(config, seed=int(time.time() * 1000))
    log.info("Using dungeon seed", seed=config.seed)
    return config


def render_map(grid: TileGrid) -> str:
    return "\n".join(grid.render(MAP_GLYPHS))


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    args = parse_args(argv)
    setup_logging(
        logging.DEBUG if args.verbose else parse_level(args.log_level),
        colors=not args.no_color,
    )
    log.info("Application starting...", config=str(args.config))

    try:
        config = build_config(args)
    except FileNotFoundError as e:
        log.critical("Required file not found during init", error=str(e))
        return 1
    except (ValueError, TypeError) as e:
        log.critical("Invalid configuration", error=str(e))
        return 1

    start = time.perf_counter()
    generator = MapGenerator()
    grid, regions = generator.generate(config)
    log.info(
        "Dungeon generated",
        width=grid.width,
        height=grid.height,
        rooms=len(generator.rooms),
        regions=regions.count(),
        fully_connected=generator.fully_connected,
        seconds=round(time.perf_counter() - start, 3),
    )

    print(render_map(grid))
    return 0


if __name__ == "__main__":
    sys.exit(main())
