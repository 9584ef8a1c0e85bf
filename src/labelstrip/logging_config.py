"""
Logging Configuration
Sets up the 'labelstrip' logger for whatever application embeds the engine.

The level can be given directly, by name ("DEBUG"), or left to the
LABELSTRIP_LOG_LEVEL environment variable.
"""
import logging
import os
import sys
from typing import Optional, Union

LOG_LEVEL_ENV = "LABELSTRIP_LOG_LEVEL"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATEFMT = '%H:%M:%S'


def resolve_level(level: Union[int, str, None]) -> int:
    """
    Turn a level given as int, name or None into a logging level.

    None falls back to the environment, then to INFO. Unknown names raise
    ValueError so a typo in the environment is not silently ignored.
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, logging.INFO)
    if isinstance(level, int):
        return level

    name = level.strip().upper()
    mapping = logging.getLevelNamesMapping()
    if name not in mapping:
        raise ValueError(f"Unknown log level '{level}'.")
    return mapping[name]


def _make_handler(handler: logging.Handler, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(level: Union[int, str, None] = None, log_file: Optional[str] = None) -> None:
    """
    Configures the logger for the 'labelstrip' namespace.

    Args:
        level: Logging level (e.g. logging.DEBUG or "debug"). None reads
            LABELSTRIP_LOG_LEVEL and defaults to INFO.
        log_file: Optional path to save logs to a file.
    """
    resolved = resolve_level(level)
    logger = logging.getLogger("labelstrip")
    logger.setLevel(resolved)

    # Calling again replaces the handlers
    if logger.hasHandlers():
        for old in logger.handlers:
            old.close()
        logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)
    logger.addHandler(_make_handler(logging.StreamHandler(sys.stdout), resolved, formatter))

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        logger.addHandler(_make_handler(file_handler, resolved, formatter))

    logger.info(f"Logging initialized at {logging.getLevelName(resolved)}.")
