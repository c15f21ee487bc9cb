import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from typing import Optional

FORMATTER = logging.Formatter(
    "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None):
    """
    Configure the root logger for the whole process.

    Existing handlers are cleared first so repeated calls (uvicorn reload,
    entrypoint then app import) do not duplicate output.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level.upper())

    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(FORMATTER)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = TimedRotatingFileHandler(
            log_file, when="midnight", backupCount=10, encoding="utf-8"
        )
        file_handler.setFormatter(FORMATTER)
        root_logger.addHandler(file_handler)

    logging.getLogger(__name__).info(f"Logging configured: level={log_level.upper()}, file={log_file}")


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
