# utils/logging_utils.py
import logging

import structlog
from structlog.stdlib import add_log_level, add_logger_name


def parse_level(name: str | int) -> int:
    """Turns a level name such as ``"debug"`` into a ``logging`` level."""
    if isinstance(name, int):
        return name
    level = logging.getLevelName(str(name).upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name}")
    return level


def setup_logging(level: int = logging.INFO, colors: bool = True) -> None:
    """Configure structlog and standard logging with the given level."""
    logging.basicConfig(level=level, format="%(message)s")
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_logger_name,
            add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=False),
            structlog.dev.ConsoleRenderer(colors=colors),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
