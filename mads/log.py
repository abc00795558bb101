"""
Logging and console output helpers.

Warnings and errors go through the ``logging`` module; progress lines are
printed unless the run is quiet.
"""

import logging
from typing import Optional

from mads.config import DEFAULT_CONFIG, MadsConfig

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def setup_logging(config: Optional[MadsConfig] = None) -> logging.Logger:
    """Configure the ``mads`` logger hierarchy from the run configuration."""
    config = config or DEFAULT_CONFIG
    logger = logging.getLogger('mads')

    if config.quiet:
        level = logging.WARNING
    elif config.verbosity <= 1:
        level = logging.INFO
    else:
        level = logging.DEBUG
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger


def madsoutput(message: str, config: Optional[MadsConfig] = None) -> None:
    """Print a progress message unless quiet."""
    config = config or DEFAULT_CONFIG
    if not config.quiet:
        print(message)
