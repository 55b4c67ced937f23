# herd_sim/logging_config.py
from __future__ import annotations
import logging
import os

DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DEFAULT_DATEFMT = "%H:%M:%S"

def configure_logging(level: str | None = None, format: str = DEFAULT_FORMAT,
                      datefmt: str = DEFAULT_DATEFMT) -> logging.Logger:
    """
    Configure root logging once for the CLI / UI.
    Level: explicit arg, else HERD_SIM_LOG_LEVEL, else WARNING (the per-tick
    debug lines are very chatty).
    """
    raw = level if level is not None else os.getenv("HERD_SIM_LOG_LEVEL")
    resolved = (raw or "WARNING").upper()
    logging.basicConfig(level=resolved, format=format, datefmt=datefmt)
    logger = logging.getLogger("herd_sim")
    logger.setLevel(resolved)
    return logger
