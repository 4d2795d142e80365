"""
Utilities for glyphwriter.

The package logger lives here. Its level defaults to WARNING and can be
set with the ``GLYPHWRITER_LOG_LEVEL`` environment variable, either as a
number or as a level name (e.g. "debug").
"""

import os
import logging


logger = logging.getLogger("glyphwriter")


def _set_log_level():
    # Set default level
    logger.setLevel(logging.WARN)
    # Set user-specified level
    level = os.getenv("GLYPHWRITER_LOG_LEVEL", "")
    if level:
        try:
            if level.isnumeric():
                logger.setLevel(int(level))
            else:
                logger.setLevel(level.upper())
        except Exception:
            logger.warning(f"Invalid glyphwriter log level: {level}")


_set_log_level()
