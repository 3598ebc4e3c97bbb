"""
Logging Configuration for the Geodesic Solver.

The numerical core is silent in normal operation. Loggers exist so that
callers can observe the rare events worth knowing about: the inverse
iteration exhausting its bound, a consistency check failing, or an
ellipsoid being rejected by the strict guard.
"""

import logging
import sys


DEFAULT_FORMAT = '%(asctime)s | %(name)s | %(levelname)s | %(message)s'
DEFAULT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def get_logger(name: str, level: int = logging.WARNING) -> logging.Logger:
    """Get a logger configured for the geodesic solver.

    Parameters
    ----------
    name : str
        Logger name (typically __name__).
    level : int
        Logging level. Defaults to WARNING so that per-call debug
        messages in hot loops are not formatted unless requested.

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            DEFAULT_FORMAT,
            datefmt=DEFAULT_DATE_FORMAT
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger


def set_level(level: int, prefix: str = "geodesics") -> None:
    """Change the level of every logger created under a package prefix.

    Parameters
    ----------
    level : int
        New logging level (e.g. ``logging.DEBUG``).
    prefix : str
        Logger name prefix. Defaults to the solver package.
    """
    manager = logging.Logger.manager
    for name, logger in list(manager.loggerDict.items()):
        if isinstance(logger, logging.Logger) and (
            name == prefix or name.startswith(prefix + ".")
        ):
            logger.setLevel(level)
