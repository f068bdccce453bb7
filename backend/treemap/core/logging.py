"""Process-wide logging setup.

Modules obtain their own logger with ``logging.getLogger(__name__)``;
this module only configures the root handler once, when the application
is created.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from treemap.core import config

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings: config.Settings) -> None:
    """Configure the root logger from settings.

    Repeated calls only adjust the level; handlers are installed once.

    Args:
        settings: Application settings providing ``log_level``.
    """
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=LOG_FORMAT)
    root.setLevel(level)
