"""
Logging setup.

Every module asks for its own named logger; the console handler lives on the
package root logger and is attached only once.
"""

import logging

from talentflow.core.config import settings

ROOT_LOGGER_NAME = "talentflow"

_root = logging.getLogger(ROOT_LOGGER_NAME)
_root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

# Console handler for terminal output
if not _root.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(
        "[TALENTFLOW] %(levelname)s %(name)s: %(message)s"
    ))
    _root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``talentflow`` hierarchy."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
