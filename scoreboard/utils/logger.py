"""Logger factory shared by every scoreboard module."""

import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from scoreboard.config import Config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

def log_file_path(log_dir: Optional[str] = None, day: Optional[date] = None) -> Path:
    """Daily log file inside the configured log directory"""
    day = day or date.today()
    return Path(log_dir or Config.LOG_DIR) / f'scoreboard_{day:%Y%m%d}.log'

def setup_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Return the named logger, attaching console and daily file handlers once.

    The level follows the DEBUG setting unless one is given.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    if level is None:
        level = logging.DEBUG if Config.DEBUG else logging.INFO
    logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    path = log_file_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(path, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)

    for handler in (console_handler, file_handler):
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
