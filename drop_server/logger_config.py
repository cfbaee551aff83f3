import logging
import sys
from pathlib import Path
from typing import Optional

LOGGER_NAME = "drop_server"


def setup_logger(log_dir: Optional[Path] = None) -> logging.Logger:
    # Configure logger
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    # Console handler (for basic logging)
    if not any(type(h) is logging.StreamHandler for h in logger.handlers):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(levelname)s - %(message)s'
        ))
        logger.addHandler(console_handler)

    # File handler (for detailed logging), only once a log directory is known
    if log_dir is not None and not any(isinstance(h, logging.FileHandler) for h in logger.handlers):
        log_dir = Path(log_dir)
        log_dir.mkdir(exist_ok=True, parents=True)
        file_handler = logging.FileHandler(log_dir / "drop_server.log")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
        ))
        logger.addHandler(file_handler)

    return logger
