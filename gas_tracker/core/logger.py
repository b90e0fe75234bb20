"""Console + file logging for the gas tracker"""

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from gas_tracker.core.config import LOG_FILE, LOG_LEVEL

console = Console()

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Chatty third-party loggers kept at WARNING unless debugging
NOISY_LOGGERS = ("aiosqlite", "asyncio")


def setup_logger(
    name: str = "gas_tracker", level: str = LOG_LEVEL, log_file: str = LOG_FILE
) -> logging.Logger:
    """
    Rich console handler at `level` plus a DEBUG file handler.

    The log file lives next to the SQLite cache (data/ by default); its
    directory is created on setup and the file itself on first write.
    """
    logger = logging.getLogger(name)
    console_level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()

    console_handler = RichHandler(
        console=console,
        rich_tracebacks=True,
        markup=False,
        show_path=False,
    )
    console_handler.setLevel(console_level)
    logger.addHandler(console_handler)

    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_path, delay=True)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
    logger.addHandler(file_handler)

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(
            logging.DEBUG if console_level <= logging.DEBUG else logging.WARNING
        )

    return logger


def enable_debug(logger: logging.Logger):
    """Switch the console handler (and third-party loggers) to DEBUG"""
    for handler in logger.handlers:
        if isinstance(handler, RichHandler):
            handler.setLevel(logging.DEBUG)
    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.DEBUG)
    logger.debug("Debug logging enabled")


logger = setup_logger()
