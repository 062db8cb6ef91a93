"""
Logging setup
"""
import logging

from kalakari.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = None):
    """Configure the root logger once; later calls only adjust the level"""
    level = (level or settings.LOG_LEVEL).upper()
    root = logging.getLogger()

    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    else:
        root.setLevel(level)

    # Uvicorn's access log duplicates RequestLoggingMiddleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
