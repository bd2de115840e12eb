"""
Logging Setup
=============
Centralized logging configuration for the assistant process
"""

import logging
from pathlib import Path
from datetime import datetime
from typing import Optional


def setup_logging(
    level: str = "INFO",
    log_dir: Optional[str] = None,
    debug: bool = False
) -> logging.Logger:
    """
    Configure the root logger for the service.

    Args:
        level: Console logging level name (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory to save log files. Console only when empty.
        debug: Force DEBUG on the console regardless of `level`

    Returns:
        The configured root logger
    """
    console_level = logging.DEBUG if debug else getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)  # Handlers filter

    # Remove existing handlers (avoid duplicates on reload)
    logger.handlers.clear()

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(
        '%(levelname)-8s | %(name)s | %(message)s'
    ))
    logger.addHandler(console_handler)

    # Chatty HTTP client logs stay at WARNING unless debugging
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.DEBUG if debug else logging.WARNING)

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_path / f"murphybot_{timestamp}.log"

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)-8s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(file_handler)
        logger.info(f"Log file: {log_file}")

    return logger
