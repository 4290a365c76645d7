"""
Centralized logging configuration for the feed client.
"""

import logging
import sys
from typing import Optional

from .config import AppConfig

# Transport libraries that log every request at INFO/DEBUG
NOISY_LOGGERS = ('botocore', 'boto3', 'urllib3')


def _resolve_level(config: Optional[AppConfig]) -> int:
    if config is None:
        from .config import config as default_config
        config = default_config
    return getattr(logging, config.log_level.upper(), logging.INFO)


def setup_logging(config: Optional[AppConfig] = None) -> None:
    """
    Configure the root logger once for the whole client.

    Transport libraries are held at WARNING unless the client itself runs at DEBUG.

    Args:
        config: AppConfig instance, uses default if None
    """
    level = _resolve_level(config)

    logging.basicConfig(level=level,
                        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                        handlers=[logging.StreamHandler(sys.stdout)])

    transport_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(transport_level)


def get_logger(name: str, config: Optional[AppConfig] = None) -> logging.Logger:
    """
    Get a module logger at the configured level.

    Args:
        name: Logger name (usually __name__)
        config: AppConfig instance, uses default if None

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(_resolve_level(config))
    return logger
