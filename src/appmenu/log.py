# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Logging setup for command line and application entry points.

Library modules only create loggers with logging.getLogger(__name__); the
handlers are attached here, once, by whatever process embeds the store.
"""

from __future__ import annotations

import logging

LOGGER_NAME = 'appmenu'
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def setup_logging(level: str | int = logging.WARNING) -> logging.Logger:
    """Attach a console handler to the package logger.

    Calling it again replaces the previous handler instead of duplicating it.

    Args:
        level: Level name ('DEBUG', 'INFO', ...) or numeric level.

    Returns:
        The configured package logger.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    if logger.handlers:
        logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger
