# utils/config_loader.py
from pathlib import Path
from typing import Any, Dict

import structlog
import yaml

from dungeon.world.generation_config import GenerationConfig

log = structlog.get_logger()

GENERATION_SECTION = "generation"


def load_yaml_config(config_path: Path, config_name: str) -> Dict[str, Any]:
    """Loads a generic YAML configuration file."""
    if not config_path.is_file():
        log.error(f"{config_name} config file not found", path=str(config_path))
        raise FileNotFoundError(
            f"{config_name} configuration file not found: {config_path}"
        )
    try:
        with config_path.open("r") as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        log.error(
            f"Error parsing YAML for {config_name}",
            path=str(config_path),
            error=str(e),
            exc_info=True,
        )
        raise
    if config_data is None:
        log.warning(f"{config_name} config file is empty.", path=str(config_path))
        return {}
    if not isinstance(config_data, dict):
        log.error(
            f"{config_name} config must be a mapping",
            path=str(config_path),
            found=type(config_data).__name__,
        )
        raise TypeError(f"{config_name} configuration must be a mapping")
    log.info(f"{config_name} config loaded", path=str(config_path))
    return config_data


def load_generation_config(config_path: Path) -> GenerationConfig:
    """Reads the ``generation`` section of a YAML file into a config.

    A file without that section yields the default configuration.
    """
    data = load_yaml_config(config_path, "Generation")
    section = data.get(GENERATION_SECTION, {})
    if section is None:
        section = {}
    if not isinstance(section, dict):
        log.error(
            "Generation section must be a mapping",
            path=str(config_path),
            found=type(section).__name__,
        )
        raise TypeError("generation section must be a mapping")
    config = GenerationConfig.from_mapping(section)
    config.validate()
    return config
