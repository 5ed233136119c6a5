"""
logging_setup.py
================
Configures the root logger with a console handler and a rotating file
handler (``signalsim.log``, 1 MB, 2 backups).

Call :func:`setup_logging` once at startup, before the tick loop starts.
"""

import logging
from logging.handlers import RotatingFileHandler
from typing import Optional


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = "signalsim.log") -> None:
    """Apply a unified log format to console and (optionally) file output.

    Parameters
    ----------
    level : int
        Minimum severity level (e.g. ``logging.DEBUG``, ``logging.INFO``).
    log_file : str or None
        Rotating log file path; ``None`` logs to the console only.
    """
    root = logging.getLogger()
    root.setLevel(level)

    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )

    ch = logging.StreamHandler()
    ch.setFormatter(fmt)

    root.handlers.clear()
    root.addHandler(ch)

    if log_file:
        fh = RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=2)
        fh.setFormatter(fmt)
        root.addHandler(fh)
