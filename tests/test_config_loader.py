import pytest
import yaml
from structlog.testing import capture_logs

from dungeon.world.generation_config import GenerationConfig
from utils.config_loader import load_generation_config, load_yaml_config


def test_missing_file_raises(tmp_path):
    with capture_logs() as logs:
        with pytest.raises(FileNotFoundError):
            load_yaml_config(tmp_path / "nope.yaml", "Main")
    assert any(log["event"] == "Main config file not found" for log in logs)


def test_parse_error_is_reraised(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("generation: [unclosed\n")
    with pytest.raises(yaml.YAMLError):
        load_yaml_config(path, "Main")


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    with capture_logs() as logs:
        config = load_generation_config(path)
    assert config == GenerationConfig()
    assert any(log["log_level"] == "warning" for log in logs)


def test_generation_section_is_applied(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("generation:\n  width: 41\n  height: 31\n  seed: 99\n")
    config = load_generation_config(path)
    assert (config.width, config.height, config.seed) == (41, 31, 99)
    assert config.room_max == 9


def test_non_mapping_section_raises(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("generation:\n  - 1\n  - 2\n")
    with pytest.raises(TypeError):
        load_generation_config(path)


def test_invalid_values_raise(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("generation:\n  width: 0\n")
    with pytest.raises(ValueError):
        load_generation_config(path)


def test_fractional_size_is_rejected_while_loading(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("generation:\n  width: 20.5\n  height: 20\n")
    with pytest.raises(ValueError, match="width"):
        load_generation_config(path)
