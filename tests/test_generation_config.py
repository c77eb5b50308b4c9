import pytest
from structlog.testing import capture_logs

from dungeon.world.generation_config import GenerationConfig


def test_defaults():
    config = GenerationConfig()
    assert (config.width, config.height) == (120, 120)
    assert config.seed == 1
    assert (config.room_min, config.room_max) == (3, 9)
    assert config.room_attempts == 1000
    assert config.extra_connector_chance == 100
    assert config.dead_ends == 0
    assert not config.stairs and not config.edge_egress
    config.validate()


@pytest.mark.parametrize(
    "overrides",
    [
        {"width": 0},
        {"height": -3},
        {"room_min": 7, "room_max": 5},
        {"room_min": 0},
        {"room_attempts": -1},
        {"room_ratio_min": 2.0, "room_ratio_max": 1.0},
        {"extra_connector_chance": 1001},
        {"dead_ends": -1},
        {"step_delay_ms": -5},
        {"width": 20.5},
        {"height": "20"},
        {"seed": 1.0},
        {"room_max": None},
        {"dead_ends": True},
        {"room_ratio_min": "0.3"},
        {"stairs": "yes"},
    ],
)
def test_validate_rejects_bad_values(overrides):
    with pytest.raises(ValueError):
        GenerationConfig(**overrides).validate()


def test_validate_logs_problems():
    with capture_logs() as logs:
        with pytest.raises(ValueError, match="dead_ends"):
            GenerationConfig(dead_ends=-2).validate()
    assert any(log["event"] == "Invalid generation config" for log in logs)


def test_from_mapping_ignores_unknown_keys():
    with capture_logs() as logs:
        config = GenerationConfig.from_mapping({"width": 31, "colour": "red"})
    assert config.width == 31
    assert config.height == 120
    assert any(
        log["event"] == "Ignoring unknown generation config keys"
        and log["keys"] == ["colour"]
        for log in logs
    )


def test_type_errors_are_reported_by_field():
    with pytest.raises(ValueError, match="width must be an integer"):
        GenerationConfig(width=20.5, height=20).validate()
