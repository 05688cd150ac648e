import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(
    name: str = "goodlift",
    log_file: Optional[Path] = None,
    level: int = logging.INFO,
    console: bool = True,
    handler_level: Optional[int] = None,
) -> logging.Logger:
    """Configure and return a package logger.

    Handlers are only attached once, so calling this again is harmless.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        formatter = logging.Formatter(LOG_FORMAT)
        if log_file is not None:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(handler_level or level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        if console:
            console_handler = logging.StreamHandler()
            console_handler.setLevel(handler_level or level)
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

    return logger
