# dungeon/world/mapgen.py
"""
Map Generation Algorithm
========================

A map is generated in five phases, each finishing before the next starts:

1. Rooms: random odd-sized rectangles are dropped onto even coordinates,
   rejecting any that would touch an existing room (a one-tile wall buffer is
   kept between rooms). Each room is its own region.
2. Hallways: the remaining even-coordinate walls are filled with mazes. A maze
   walks two cells at a time in a random direction; when stuck it hunts for
   any hallway cell next to unvisited wall and carries on from there. Pockets
   the maze cannot reach start a new maze, and so a new region.
3. Connectors: every wall cell sitting between a room and a hallway, or
   between two rooms, is a candidate door joining two regions. A random room
   becomes the root region.
4. Region connection: connectors touching the root are turned into doors one
   at a time, merging the region on the far side into the root, until one
   region remains or the root runs out of connectors.
5. Dead ends: hallway cells closed in on three sides are walled up until the
   configured number remain, then any door left facing nothing is removed.
"""

import time
from collections import deque
from typing import Callable, Deque, Dict, List, NamedTuple, Optional, Set, Tuple

import numpy as np
import structlog

from dungeon.constants import SOLID_TILE_TYPES, WALL_REGION_ID, Direction, TileType
from dungeon.world.generation_config import GenerationConfig
from dungeon.world.geometry import Bounds, Position
from dungeon.world.region_table import RegionTable
from dungeon.world.tile_grid import TileGrid
from game_rng import GameRNG

log = structlog.get_logger()

# --- Configuration ---
ROOM_BORDER = 1  # wall tiles kept between rooms
MAZE_STRIDE = 2
DOOR_CLEARANCE = 2  # no two doors closer than this (Chebyshev distance)
HUNT_DIRECTIONS = (Direction.WEST, Direction.EAST, Direction.NORTH, Direction.SOUTH)
CONNECTABLE_PAIRS = frozenset(
    {
        (TileType.HALLWAY, TileType.ROOM),
        (TileType.ROOM, TileType.HALLWAY),
        (TileType.ROOM, TileType.ROOM),
    }
)
PROGRESS_ROOMS = 0.2
PROGRESS_HALLWAYS = 0.4
PROGRESS_CONNECTORS = 0.6
PROGRESS_REGIONS = 0.8
PROGRESS_DONE = 1.0

ProgressCallback = Callable[[float], None]
StepCallback = Callable[["MapGenerator"], None]


class MapConnector(NamedTuple):
    """A wall cell that would join two regions if it became a door."""

    position: Position
    first_region_id: int
    second_region_id: int

    def touches(self, region_id: int) -> bool:
        return region_id in (self.first_region_id, self.second_region_id)

    def other(self, region_id: int) -> int:
        """The endpoint that is not ``region_id``."""
        if self.first_region_id == region_id:
            return self.second_region_id
        return self.first_region_id

    def joins(self, a: int, b: int) -> bool:
        return {self.first_region_id, self.second_region_id} == {a, b}

    def recolored(self, old_id: int, new_id: int) -> "MapConnector":
        if self.first_region_id == old_id:
            return self._replace(first_region_id=new_id)
        if self.second_region_id == old_id:
            return self._replace(second_region_id=new_id)
        return self


class MapGenerator:
    def __init__(
        self,
        on_progress: Optional[ProgressCallback] = None,
        on_step: Optional[StepCallback] = None,
    ):
        """
        ``on_progress`` is called with each new progress fraction and
        ``on_step`` after every carve step, both on the generating thread, so
        a renderer can redraw the grid while it is being built.
        """
        self.config = GenerationConfig()
        self.grid: Optional[TileGrid] = None
        self.regions: Optional[RegionTable] = None
        self.rng: Optional[GameRNG] = None
        self.rooms: List[Bounds] = []
        self.root_region_id: Optional[int] = None
        # Set after region connection; a region that was never merged keeps it
        # False even when dead-end removal later empties that region.
        self.fully_connected = False
        self._on_progress = on_progress
        self._on_step = on_step
        self._progress = 0.0
        self._current_region_id = WALL_REGION_ID
        self._hallway_count = 0
        # region id -> connectors touching it, so a merged region's connectors
        # can be handed to the root in one go.
        self._connectors: Dict[int, Deque[MapConnector]] = {}

    def generate(self, config: GenerationConfig) -> Tuple[TileGrid, RegionTable]:
        """Runs every generation phase for ``config``.

        Returns the finished grid and region table, which stay available as
        ``self.grid`` and ``self.regions``.
        """
        config.validate()
        self.config = config
        self.rng = GameRNG(seed=config.seed)
        self.grid = TileGrid(config.width, config.height)
        self.regions = RegionTable(self.grid)
        self.rooms = []
        self.root_region_id = None
        self.fully_connected = False
        self._current_region_id = WALL_REGION_ID
        self._hallway_count = 0
        self._connectors = {}

        log.info(
            "Starting map generation",
            seed=config.seed,
            width=config.width,
            height=config.height,
        )
        if config.stairs or config.edge_egress:
            log.info(
                "Reserved feature flags are not generated",
                stairs=config.stairs,
                edge_egress=config.edge_egress,
            )

        self._set_progress(0.0)
        self._generate_rooms()
        self._set_progress(PROGRESS_ROOMS)
        self._generate_hallways()
        self._set_progress(PROGRESS_HALLWAYS)
        self._generate_connectors()
        self._set_progress(PROGRESS_CONNECTORS)
        self._connect_regions()
        self._set_progress(PROGRESS_REGIONS)
        self._remove_dead_ends()
        self._set_progress(PROGRESS_DONE)

        log.info(
            "Map generation complete",
            seed=config.seed,
            rooms=len(self.rooms),
            regions=self.regions.count(),
            fully_connected=self.fully_connected,
        )
        return self.grid, self.regions

    def generation_progress(self) -> float:
        return self._progress

    # --- Shared helpers ---

    def _set_progress(self, value: float) -> None:
        self._progress = value
        log.debug("Generation progress", progress=value)
        if self._on_progress is not None:
            self._on_progress(value)

    def _step(self) -> None:
        if self.config.step_delay_ms > 0:
            time.sleep(self.config.step_delay_ms / 1000.0)
        if self._on_step is not None:
            self._on_step(self)

    def _set_tile(self, pos: Position, tile_type: TileType, region_id: int) -> None:
        """Writes a tile and keeps the region table in step with it."""
        if not self.grid.in_bounds(pos):
            log.warning(
                "Ignoring carve outside grid", pos=tuple(pos), tile_type=tile_type.name
            )
            return
        self.regions.set(pos, region_id)
        self.grid.set(pos, tile_type, region_id)

    def _carve(
        self, location: Position, direction: Direction, distance: int
    ) -> Position:
        """Carves hallway from ``location`` and returns the cell landed on."""
        for step in range(1, distance + 1):
            self._set_tile(
                location.step(direction, step),
                TileType.HALLWAY,
                self._current_region_id,
            )
        self._step()
        return location.step(direction, distance)

    # --- Phase 1: rooms ---

    def _generate_rooms(self) -> None:
        cfg = self.config
        log.info("Generating rooms", attempts=cfg.room_attempts)
        # Sides are 2k+1 so a room starting on an even cell also ends on one.
        k_min = cfg.room_min // 2
        k_max = (cfg.room_max - 1) // 2
        if k_min > k_max:
            log.warning(
                "No odd room size fits the configured bounds",
                room_min=cfg.room_min,
                room_max=cfg.room_max,
            )
            return

        for attempt in range(cfg.room_attempts):
            room_width = self.rng.get_int(k_min, k_max) * 2 + 1
            room_height = self.rng.get_int(k_min, k_max) * 2 + 1
            ratio = room_width / room_height
            if not cfg.room_ratio_min <= ratio <= cfg.room_ratio_max:
                continue

            # Even-aligned top-left with the border inside the grid.
            max_left = self.grid.width - ROOM_BORDER - room_width
            max_top = self.grid.height - ROOM_BORDER - room_height
            if max_left < MAZE_STRIDE or max_top < MAZE_STRIDE:
                log.debug(
                    "Room does not fit on the grid",
                    attempt=attempt,
                    room_width=room_width,
                    room_height=room_height,
                )
                continue
            room = Bounds(
                self.rng.get_int(1, max_left // 2) * 2,
                self.rng.get_int(1, max_top // 2) * 2,
                room_width,
                room_height,
            )
            if self._room_exists(room):
                continue

            region_id = self.regions.add(f"room#{len(self.rooms)}")
            for pos in room.positions():
                self._set_tile(pos, TileType.ROOM, region_id)
            self.rooms.append(room)
            log.debug("Placed room", room=tuple(room), region_id=region_id)
            self._step()

        log.info("Rooms generated", count=len(self.rooms))

    def _room_exists(self, room: Bounds) -> bool:
        """True if anything but wall lies within the room or its border."""
        area = room.expanded(ROOM_BORDER)
        return any(
            self.grid.contains(area, tile_type)
            for tile_type in TileType
            if tile_type not in SOLID_TILE_TYPES
        )

    # --- Phase 2: hallways ---

    def _generate_hallways(self) -> None:
        log.info("Generating hallways")
        seeds = self._lattice_walls()
        # First maze starts two cells in from the edges when the map allows it.
        inner = [
            pos
            for pos in seeds
            if MAZE_STRIDE <= pos.x < self.grid.width - MAZE_STRIDE
            and MAZE_STRIDE <= pos.y < self.grid.height - MAZE_STRIDE
        ]
        candidates = inner or seeds
        if candidates:
            self._start_walking(self.rng.choice(candidates))
        while self._scan_for_walls():
            pass
        log.info("Hallways generated", mazes=self._hallway_count)

    def _lattice_walls(self) -> List[Position]:
        lattice = self.grid.types[::MAZE_STRIDE, ::MAZE_STRIDE]
        return [
            Position(int(x) * MAZE_STRIDE, int(y) * MAZE_STRIDE)
            for y, x in np.argwhere(lattice == TileType.WALL)
        ]

    def _start_walking(self, location: Position) -> None:
        """Grows a new maze region from ``location`` until it cannot grow."""
        self._hallway_count += 1
        self._current_region_id = self.regions.add(f"hallway#{self._hallway_count}")
        self._set_tile(location, TileType.HALLWAY, self._current_region_id)
        log.debug(
            "Starting maze", pos=tuple(location), region_id=self._current_region_id
        )

        current: Optional[Position] = location
        while current is not None:
            current = self._maze_walk(current)
            if current is None:
                current = self._maze_hunt()

    def _maze_walk(self, location: Position) -> Optional[Position]:
        directions = list(Direction)
        self.rng.shuffle(directions)
        for direction in directions:
            if self.grid.is_type(location.step(direction, MAZE_STRIDE), TileType.WALL):
                return self._carve(location, direction, MAZE_STRIDE)
        return None

    def _maze_hunt(self) -> Optional[Position]:
        """Finds a hallway cell with unvisited wall beside it and carves into it.

        Rows are searched in random order, cells left to right within a row.
        Returns None once no lattice wall is reachable from any hallway.
        """
        lattice = self.grid.types[::MAZE_STRIDE, ::MAZE_STRIDE]
        wall = lattice == TileType.WALL
        frontier = np.zeros_like(wall)
        frontier[:, 1:] |= wall[:, :-1]
        frontier[:, :-1] |= wall[:, 1:]
        frontier[1:, :] |= wall[:-1, :]
        frontier[:-1, :] |= wall[1:, :]
        frontier &= lattice == TileType.HALLWAY
        if not frontier.any():
            return None

        rows = list(range(frontier.shape[0]))
        self.rng.shuffle(rows)
        for row in rows:
            columns = np.flatnonzero(frontier[row])
            if columns.size == 0:
                continue
            location = Position(int(columns[0]) * MAZE_STRIDE, row * MAZE_STRIDE)
            for direction in HUNT_DIRECTIONS:
                target = location.step(direction, MAZE_STRIDE)
                if self.grid.is_type(target, TileType.WALL):
                    log.debug("Maze hunt resumed", pos=tuple(location))
                    return self._carve(location, direction, MAZE_STRIDE)
        return None

    def _scan_for_walls(self) -> bool:
        """Starts a maze at every lattice wall left over. True if any were found."""
        found_walls = False
        rows = list(range(0, self.grid.height, MAZE_STRIDE))
        self.rng.shuffle(rows)
        for y in rows:
            for x in range(0, self.grid.width, MAZE_STRIDE):
                location = Position(x, y)
                if self.grid.is_type(location, TileType.WALL):
                    found_walls = True
                    self._start_walking(location)
        return found_walls

    # --- Phase 3: connectors ---

    def _generate_connectors(self) -> None:
        room_cells = self.grid.positions_of(TileType.ROOM)
        if not room_cells:
            log.warning("No rooms were placed; skipping region connection")
            return

        root_cell = self.rng.choice(room_cells)
        self.root_region_id = self.grid.get(root_cell).region_id
        log.info(
            "Selected root region",
            pos=tuple(root_cell),
            region_id=self.root_region_id,
            name=self.regions.get_name(self.root_region_id),
        )

        connector_count = 0
        for pos in self.grid.positions_of(TileType.WALL):
            connector = self._new_connector_at(pos)
            if connector is None:
                continue
            self._set_tile(pos, TileType.CONNECTOR, connector.first_region_id)
            self._add_connector(connector.first_region_id, connector)
            self._add_connector(connector.second_region_id, connector)
            connector_count += 1

        log.info("Connectors found", count=connector_count)

    def _new_connector_at(self, pos: Position) -> Optional[MapConnector]:
        for first_dir, second_dir in (
            (Direction.EAST, Direction.WEST),
            (Direction.NORTH, Direction.SOUTH),
        ):
            first = self.grid.get(pos.step(first_dir))
            second = self.grid.get(pos.step(second_dir))
            if (
                (first.type, second.type) in CONNECTABLE_PAIRS
                and first.region_id != second.region_id
            ):
                return MapConnector(pos, first.region_id, second.region_id)
        return None

    def _add_connector(self, region_id: int, connector: MapConnector) -> None:
        self._connectors.setdefault(region_id, deque()).append(connector)

    # --- Phase 4: region connection ---

    def _connect_regions(self) -> None:
        root = self.root_region_id
        if root is None:
            self.fully_connected = self.regions.count() <= 1
            return

        log.info("Connecting regions", regions=self.regions.count(), root=root)
        for region_id, pending in self._connectors.items():
            shuffled = list(pending)
            self.rng.shuffle(shuffled)
            self._connectors[region_id] = deque(shuffled)

        root_pending = self._connectors.setdefault(root, deque())
        merged: Set[int] = set()
        extra_connections: Set[int] = set()
        doors = 0
        extra_doors = 0

        connector = root_pending.popleft() if root_pending else None
        if connector is None:
            log.info("Root region has no connectors", root=root)
        while connector is not None and self.regions.count() > 1:
            other = connector.other(root)
            already_merged = other in merged
            allow_extra = (
                self.rng.get_int(0, 999) < self.config.extra_connector_chance
            )
            is_extra = (
                already_merged and other not in extra_connections and allow_extra
            )
            will_merge = (
                connector.touches(root)
                and (not already_merged or is_extra)
                and not self._is_near_door(connector.position)
            )

            if will_merge:
                self._set_tile(connector.position, TileType.DOOR, root)
                self._step()
                if already_merged:
                    extra_connections.add(other)
                    extra_doors += 1
                else:
                    self._merge_into_root(other)
                    merged.add(other)
                    doors += 1
            elif self.grid.is_type(connector.position, TileType.CONNECTOR):
                self._set_tile(connector.position, TileType.WALL, WALL_REGION_ID)

            if self.regions.count() <= 1:
                break
            if not root_pending:
                log.info(
                    "Out of root connectors before every region was connected",
                    remaining_regions=self.regions.count(),
                )
                break
            connector = root_pending.popleft()

        self._discard_unused_connectors()
        self._connectors.clear()
        self.fully_connected = self.regions.count() <= 1
        log.info(
            "Regions connected",
            doors=doors,
            extra_doors=extra_doors,
            remaining_regions=self.regions.count(),
            fully_connected=self.fully_connected,
        )

    def _merge_into_root(self, removed_id: int) -> None:
        """Folds ``removed_id`` into the root and hands its connectors over."""
        root = self.root_region_id
        self.regions.remove(removed_id, root)
        root_pending = self._connectors.setdefault(root, deque())
        for connector in self._connectors.pop(removed_id, ()):
            if connector.joins(removed_id, root):
                continue
            root_pending.append(connector.recolored(removed_id, root))

    def _is_near_door(self, pos: Position) -> bool:
        area = Bounds(
            pos.x - DOOR_CLEARANCE,
            pos.y - DOOR_CLEARANCE,
            DOOR_CLEARANCE * 2 + 1,
            DOOR_CLEARANCE * 2 + 1,
        )
        return self.grid.contains(area, TileType.DOOR)

    def _discard_unused_connectors(self) -> None:
        leftovers = self.grid.positions_of(TileType.CONNECTOR)
        for pos in leftovers:
            self._set_tile(pos, TileType.WALL, WALL_REGION_ID)
        if leftovers:
            log.debug("Unused connectors walled up", count=len(leftovers))

    # --- Phase 5: dead ends ---

    def _remove_dead_ends(self) -> None:
        target = self.config.dead_ends
        log.info("Removing dead ends", target=target)

        removed = 0
        dead_ends = self._find_dead_ends(TileType.HALLWAY)
        while dead_ends and len(dead_ends) > target:
            for pos in dead_ends[: len(dead_ends) - target]:
                self._set_tile(pos, TileType.WALL, WALL_REGION_ID)
                self._step()
                removed += 1
            # Filling a dead end can expose the cell behind it.
            dead_ends = self._find_dead_ends(TileType.HALLWAY)
        log.info("Hallway dead ends removed", removed=removed, remaining=len(dead_ends))

        dangling_doors = self._find_dead_ends(TileType.DOOR)
        for pos in dangling_doors:
            self._set_tile(pos, TileType.WALL, WALL_REGION_ID)
            self._step()
        log.info("Dangling doors removed", removed=len(dangling_doors))

        pruned = [
            region_id
            for region_id in self.regions.regions()
            if region_id != WALL_REGION_ID and self.regions.size(region_id) == 0
        ]
        if pruned:
            log.debug(
                "Unconnected regions were pruned away",
                region_ids=pruned,
                fully_connected=self.fully_connected,
            )

    def _find_dead_ends(self, tile_type: TileType) -> List[Position]:
        """Cells of ``tile_type`` with more than two solid neighbours, shuffled."""
        solid = np.isin(self.grid.types, [int(t) for t in SOLID_TILE_TYPES])
        # Off-grid neighbours count as solid.
        solid = np.pad(solid, 1, mode="constant", constant_values=True)
        solid_neighbors = (
            solid[:-2, 1:-1].astype(np.int8)
            + solid[2:, 1:-1]
            + solid[1:-1, :-2]
            + solid[1:-1, 2:]
        )
        mask = (self.grid.types == tile_type) & (solid_neighbors > 2)
        dead_ends = [Position(int(x), int(y)) for y, x in np.argwhere(mask)]
        self.rng.shuffle(dead_ends)
        return dead_ends


__all__ = ["MapGenerator", "MapConnector"]
