"""
Telemetry: logger factory for the runtime.

User-facing output goes through output sinks (print by default); this module
only covers diagnostics, which are silent unless DEBUG=1.
"""

from __future__ import annotations

import logging
import os

_LOG_FORMAT = "[%(name)s] %(message)s"


def debug_enabled() -> bool:
    """True when the process runs with DEBUG=1."""
    return os.environ.get("DEBUG") == "1"


def configure_logging() -> None:
    """Set the hcdev log level from the DEBUG environment variable."""
    root = logging.getLogger("hcdev")
    root.setLevel(logging.DEBUG if debug_enabled() else logging.WARNING)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a module logger.

    Args:
        name: module name, normally ``__name__``

    Returns:
        Logger under the ``hcdev`` hierarchy
    """
    return logging.getLogger(name)
