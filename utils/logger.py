"""
Logging configuration for the Greenspace Coverage Analysis tool.

Every module logs under the 'greenspace' root logger. The console shows the
INFO-level run narrative: step banners, reprojections, features per overlay,
regions summarised, uncovered point counts and join key mismatch warnings.
The log file under logs/ adds DEBUG detail such as already-aligned CRS pairs,
area unit conversion factors and postcodes that did not resolve.

Functions:
    setup_logging: Initialize logging handlers and return log file path
    get_logger: Get a logger instance for a specific module

Example:
    >>> from utils.logger import setup_logging, get_logger
    >>> log_file = setup_logging()
    >>> logger = get_logger(__name__)
    >>> logger.info("Analysis started")
"""

import logging
import sys
from pathlib import Path
from datetime import datetime
from typing import Optional

ROOT_LOGGER_NAME = 'greenspace'


def setup_logging(log_dir: Optional[Path] = None) -> Path:
    """
    Setup logging to console and file.

    Creates two handlers:
    - Console: INFO level with clean formatting
    - File: DEBUG level with timestamps and module names

    Parameters:
    -----------
    log_dir : Optional[Path]
        Directory for log files. Defaults to PROJECT_ROOT/logs

    Returns:
    --------
    Path
        Path to the created log file
    """
    if log_dir is None:
        log_dir = Path(__file__).parent.parent / 'logs'
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f'greenspace_{timestamp}.log'

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    # Remove existing handlers to avoid duplicates on repeated runs
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter('%(message)s'))

    file_handler = logging.FileHandler(log_file, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))

    logger.addHandler(console)
    logger.addHandler(file_handler)

    logger.debug(f"Logging initialized: {log_file}")

    return log_file


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Parameters:
    -----------
    name : str
        Module name (typically __name__)

    Returns:
    --------
    logging.Logger
        Logger nested under the 'greenspace' root logger
    """
    return logging.getLogger(f'{ROOT_LOGGER_NAME}.{name}')
