"""
Logging Setup — Console plus LOG_DIR/server.log.
"""
import logging
import os

from portal.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(settings: Settings) -> None:
    """Attach console and file handlers to the `portal` logger (idempotent)."""
    logger = logging.getLogger("portal")
    logger.setLevel(settings.LOG_LEVEL.upper())
    if logger.handlers:
        return

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)

    try:
        os.makedirs(settings.LOG_DIR, exist_ok=True)
        file_handler = logging.FileHandler(os.path.join(settings.LOG_DIR, "server.log"), encoding="utf-8")
    except OSError:
        logger.warning("Log directory %s is not writable; logging to console only", settings.LOG_DIR)
        return
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)
