import logging
import sys

from core.config_loader import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str | None = None) -> None:
    root_logger = logging.getLogger()
    root_logger.setLevel((level or settings.LOG_LEVEL).upper())

    # uvicorn --reload imports the app twice
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(console_handler)
