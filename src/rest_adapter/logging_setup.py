"""
Logging configuration for command-line use of the REST adapter
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: Union[str, int] = logging.INFO,
                      log_file: Optional[Union[str, Path]] = None) -> None:
    """
    Install stream (and optional file) handlers on the root logger

    Args:
        level: Logging level name or number
        log_file: Optional path of a log file to write alongside stderr
    """
    if isinstance(level, str):
        name = level.upper()
        level = logging.getLevelName(name)
        if not isinstance(level, int):
            raise ValueError(f"Unknown logging level: {name}")

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)


def configure_from_settings(settings: Dict[str, Any], verbose: bool = False) -> None:
    """Apply the [logging] section of a client configuration"""
    level = 'DEBUG' if verbose else settings.get('level', 'INFO')
    configure_logging(level, settings.get('log_file'))
