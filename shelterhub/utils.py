"""
Shared helpers.
"""
import logging

from shelterhub.core import config

_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_handler: logging.Handler | None = None


def get_logger(name: str) -> logging.Logger:
    """
    Get a module logger that writes to stderr with the shared format.

    Usage:
        log = get_logger(__name__)
        log.info("Shelter %s created", shelter.id)
    """
    global _handler
    if _handler is None:
        _handler = logging.StreamHandler()
        _handler.setFormatter(logging.Formatter(_FORMAT))
        root = logging.getLogger("shelterhub")
        root.addHandler(_handler)
        root.setLevel(config.LOG_LEVEL)
        root.propagate = False

    if not name.startswith("shelterhub"):
        name = f"shelterhub.{name}"
    return logging.getLogger(name)
