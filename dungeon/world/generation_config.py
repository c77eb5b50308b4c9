# dungeon/world/generation_config.py
from dataclasses import dataclass, fields
from numbers import Real
from typing import Any, List, Mapping

import structlog

log = structlog.get_logger()

INT_FIELDS = (
    "width",
    "height",
    "seed",
    "room_min",
    "room_max",
    "room_attempts",
    "extra_connector_chance",
    "dead_ends",
    "step_delay_ms",
)
FLOAT_FIELDS = ("room_ratio_min", "room_ratio_max")
BOOL_FIELDS = ("stairs", "edge_egress")


@dataclass(frozen=True)
class GenerationConfig:
    """Parameters for one map generation run.

    Room and maze placement step by 2, so odd widths/heights give a map whose
    outer rows and columns are walkable lattice cells while even sizes leave a
    solid last row/column.
    """

    width: int = 120
    height: int = 120
    seed: int = 1
    room_min: int = 3  # smallest room side, in tiles
    room_max: int = 9  # largest room side, in tiles
    room_attempts: int = 1000
    room_ratio_min: float = 0.3  # accepted room width:height window
    room_ratio_max: float = 1.7
    extra_connector_chance: int = 100  # per mille
    dead_ends: int = 0  # hallway dead ends to leave in place
    step_delay_ms: int = 0  # sleep after each carve step, for animation
    stairs: bool = False  # reserved
    edge_egress: bool = False  # reserved

    def validate(self) -> None:
        """Raises ValueError when the configuration cannot be generated."""
        problems = self._type_problems()
        if problems:
            log.error("Invalid generation config", problems=problems, config=self)
            raise ValueError("; ".join(problems))

        problems = []
        if self.width <= 0 or self.height <= 0:
            problems.append("width and height must be positive")
        if self.room_min < 1:
            problems.append("room_min must be at least 1")
        if self.room_min > self.room_max:
            problems.append("room_min must not exceed room_max")
        if self.room_attempts < 0:
            problems.append("room_attempts must not be negative")
        if not 0 < self.room_ratio_min <= self.room_ratio_max:
            problems.append("room ratio window must satisfy 0 < min <= max")
        if not 0 <= self.extra_connector_chance <= 1000:
            problems.append("extra_connector_chance must be within 0..1000")
        if self.dead_ends < 0:
            problems.append("dead_ends must not be negative")
        if self.step_delay_ms < 0:
            problems.append("step_delay_ms must not be negative")
        if problems:
            log.error("Invalid generation config", problems=problems, config=self)
            raise ValueError("; ".join(problems))

    def _type_problems(self) -> List[str]:
        problems = []
        for name in INT_FIELDS:
            value = getattr(self, name)
            # bool is an int subclass.
            if isinstance(value, bool) or not isinstance(value, int):
                problems.append(f"{name} must be an integer, got {value!r}")
        for name in FLOAT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Real):
                problems.append(f"{name} must be a number, got {value!r}")
        for name in BOOL_FIELDS:
            if not isinstance(getattr(self, name), bool):
                problems.append(f"{name} must be true or false")
        return problems

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "GenerationConfig":
        """Builds a config from a plain mapping, e.g. a parsed YAML section.

        Unknown keys are logged and ignored; missing keys keep their defaults.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            log.warning("Ignoring unknown generation config keys", keys=unknown)
        return cls(**{key: value for key, value in data.items() if key in known})


__all__ = ["GenerationConfig"]
