"""
Logging helpers.
"""

import logging
from typing import Optional

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_configured = False


def configure_logging(level: Optional[str] = None) -> None:
    """Configure the root ``love4detailing`` logger once per process."""
    global _configured
    if _configured:
        return

    if level is None:
        from ..config import get_settings

        level = get_settings().log_level

    root = logging.getLogger("love4detailing")
    root.setLevel(level.upper())
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        root.addHandler(handler)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger namespaced under ``love4detailing``."""
    if not name.startswith("love4detailing"):
        name = f"love4detailing.{name}"
    return logging.getLogger(name)
