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

from datetime import datetime
from functools import cache

SIZE_UNITS = ("", "k", "M", "G", "T", "P", "E", "Z", "Y")


def _scale(num: float, base: int) -> tuple[float, str]:
    for unit in SIZE_UNITS:
        if abs(num) < base:
            return num, unit
        num /= base

    return num * base, SIZE_UNITS[-1]


@cache
def print_size(num: int, suffix: str = "B", size_bytes: int = 1000) -> str:
    """Format a number of bytes as a human-readable size string."""
    value, unit = _scale(num, size_bytes)
    r_size = f"{value:.2f}".rstrip("0").rstrip(".")

    return f"{r_size} {unit}{suffix}"


@cache
def print_speed(num: int, suffix: str = "B", speed_bytes: int = 1000) -> str:
    """Format a transfer rate in bytes/second, e.g. ``1.5 MB/s``."""
    return f"{print_size(num, suffix, speed_bytes)}/s"


@cache
def print_progress(progress: float) -> str:
    return f"{progress * 100:.1f}%"


@cache
def print_ratio(ratio: float) -> str:
    return f"{ratio:.2f}"


def print_date(dt: datetime | None) -> str:
    if dt is None:
        return "-"

    return dt.strftime("%Y-%m-%d %H:%M")
