"""Logging setup with verbosity levels and file logging."""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

VERBOSITY_FLAGS = ("-v", "-vv", "-vvv")


def setup_logging(
    verbosity: int = 0,
    log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """
    Set up logging with verbosity levels and file output.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2+=DEBUG)
        log_file: Optional log file path. If None, logs/log_<timestamp>.log is used.

    Returns:
        Configured logger instance
    """
    if verbosity <= 0:
        log_level = logging.WARNING
    elif verbosity == 1:
        log_level = logging.INFO
    else:
        log_level = logging.DEBUG

    if log_file is None:
        logs_dir = Path("logs")
        logs_dir.mkdir(exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = logs_dir / f"log_{timestamp}.log"
    else:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.addHandler(console_handler)

    # File handler always captures everything
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.addHandler(file_handler)

    # Third-party HTTP clients are noisy at DEBUG
    if verbosity < 3:
        for name in ("httpx", "httpcore", "openai", "mcp"):
            logging.getLogger(name).setLevel(logging.INFO)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging initialized. Verbosity: {verbosity}, Log file: {log_file}")

    return logger


def parse_verbosity(args: List[str]) -> int:
    """
    Parse verbosity level from command line arguments.

    Args:
        args: Command line arguments

    Returns:
        Verbosity level (0-3)
    """
    verbosity = 0
    for arg in args:
        if arg in VERBOSITY_FLAGS:
            verbosity = VERBOSITY_FLAGS.index(arg) + 1
    return verbosity
