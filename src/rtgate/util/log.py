#!/usr/bin/env python3

# rtgate - XML-RPC gateway for the rTorrent BitTorrent daemon
# Copyright (C) 2025  Anton Larionov
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

import logging
import time
from functools import wraps
from pathlib import Path

from platformdirs import user_log_dir

LOGGER_NAME = "rtgate"

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


def get_logger() -> logging.Logger:
    """Get the rtgate logger instance.

    Returns:
        Logger instance shared by the gateway, CLI and config loader
    """
    return logging.getLogger(LOGGER_NAME)


def get_log_path() -> Path:
    """Get the path of the log file inside the user log directory."""
    return Path(user_log_dir(LOGGER_NAME, appauthor=False)) / "rtgate.log"


def init_logger(log_level: str) -> None:
    """Initialize logging configuration.

    Args:
        log_level: Log level (debug, info, warning, error, critical).
            Unknown values fall back to warning.
    """
    level = LOG_LEVELS.get(log_level.lower(), logging.WARNING)

    log_file = get_log_path()
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=str(log_file),
        encoding="utf-8",
        format="%(asctime)s.%(msecs)03d %(module)-15s "
        "%(levelname)-8s %(message)s",
        level=level,
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    get_logger().info(
        f"Logging initialized: level={log_level.upper()}, file={log_file}"
    )


def log_time(func):
    """Decorator to log function execution time if it exceeds 1ms."""

    @wraps(func)
    def log_time_wrapper(*args, **kwargs):
        start_time = time.perf_counter()

        result = func(*args, **kwargs)

        total_time_ms = (time.perf_counter() - start_time) * 1000

        if total_time_ms > 1:
            get_logger().debug(
                f'Function "{func.__qualname__}": {total_time_ms:.4f} ms'
            )

        return result

    return log_time_wrapper
