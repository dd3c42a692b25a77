# /blog_auto/core/logging.py

import logging
import sys

LOG_LINE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"

_LOGGING_INITIALIZED = False


def setup_logging(level: str = "INFO") -> None:
    """Installs a single stdout handler on the root logger. Safe to call twice."""
    global _LOGGING_INITIALIZED
    if _LOGGING_INITIALIZED:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_LINE_FORMAT, datefmt=LOG_DATE_FORMAT))

    root = logging.getLogger()
    root.setLevel(level.upper())
    root.addHandler(handler)

    # uvicorn's access log is noisy with the client polling every ~2s.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    _LOGGING_INITIALIZED = True
