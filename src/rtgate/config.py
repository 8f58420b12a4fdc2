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

import configparser
import sys
from argparse import Action, Namespace
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "rtgate"

DEFAULT_HOST = "localhost"
DEFAULT_PORT = "8000"
DEFAULT_PATH = "/RPC2"
DEFAULT_LOG_LEVEL = "info"


class TrackSetAction(Action):
    SET_POSTFIX = "_was_set"

    def __call__(self, parser, namespace, values, option_string=None):
        setattr(namespace, self.dest, values)
        setattr(namespace, f"{self.dest}{self.SET_POSTFIX}", True)


def get_config_dir() -> Path:
    """
    Get the configuration directory path using platformdirs.

    Returns the platform-appropriate user config directory for rtgate.
    """
    return Path(user_config_dir(APP_NAME, appauthor=False))


def get_config_path(profile: str | None = None) -> Path:
    """
    Get the configuration file path.

    Args:
        profile: Optional profile name. If provided, returns path to
                 rtgate-PROFILE.conf, otherwise returns rtgate.conf

    Returns:
        Path to the configuration file
    """
    config_dir = get_config_dir()
    if profile:
        return config_dir / f"{APP_NAME}-{profile}.conf"
    else:
        return config_dir / f"{APP_NAME}.conf"


def get_available_profiles() -> list[str]:
    """
    Get list of available configuration profiles.

    Returns:
        List of profile names (without rtgate- prefix and .conf suffix)
    """
    config_dir = get_config_dir()
    if not config_dir.exists():
        return []

    return sorted(
        config_file.stem.removeprefix(f"{APP_NAME}-")
        for config_file in config_dir.glob(f"{APP_NAME}-*.conf")
    )


def _get_string_option(
    parser: configparser.ConfigParser, section: str, option: str
) -> str | None:
    """Get string option, returning None if empty or missing."""
    if parser.has_option(section, option):
        val = parser.get(section, option)
        return val.strip() if val and val.strip() else None
    return None


def _get_float_option(
    parser: configparser.ConfigParser, section: str, option: str
) -> float | None:
    """Get float option, returning None if empty, missing, or invalid."""
    val = _get_string_option(parser, section, option)
    if val is not None:
        try:
            return float(val)
        except ValueError as e:
            print(
                f"Warning: Invalid {option} value in config: {e}",
                file=sys.stderr,
            )
    return None


def _get_port_option(
    parser: configparser.ConfigParser, section: str, option: str
) -> str | None:
    """Get port option, returning None if empty, missing, or not a number."""
    val = _get_string_option(parser, section, option)
    if val is not None:
        if val.isdigit():
            return val
        print(
            f"Warning: Invalid {option} value in config: {val!r}",
            file=sys.stderr,
        )
    return None


def _load_rtorrent_section(
    parser: configparser.ConfigParser, config: dict
) -> None:
    """Load [rtorrent] section options into config dict."""
    if not parser.has_section("rtorrent"):
        return

    for key in ("host", "path", "username", "password"):
        val = _get_string_option(parser, "rtorrent", key)
        if val:
            config[key] = val

    val = _get_port_option(parser, "rtorrent", "port")
    if val:
        config["port"] = val
    val = _get_float_option(parser, "rtorrent", "timeout")
    if val is not None:
        config["timeout"] = val


def _load_debug_section(
    parser: configparser.ConfigParser, config: dict
) -> None:
    """Load [debug] section options into config dict."""
    if not parser.has_section("debug"):
        return

    val = _get_string_option(parser, "debug", "log_level")
    if val:
        config["log_level"] = val


def _load_config_file(config_path: Path, config: dict) -> None:
    """
    Load configuration from a single INI file and merge into config dict.

    Args:
        config_path: Path to the config file
        config: Dictionary to merge config values into
    """
    if not config_path.exists():
        return

    parser = configparser.ConfigParser()
    try:
        parser.read(config_path)
    except configparser.Error as e:
        print(
            f"Warning: Failed to parse config file {config_path}: {e}",
            file=sys.stderr,
        )
        print("Continuing with default values...", file=sys.stderr)
        return

    _load_rtorrent_section(parser, config)
    _load_debug_section(parser, config)


def load_config(profile: str | None = None) -> dict:
    """
    Load configuration from INI file(s).

    If profile is specified, loads base config (rtgate.conf) first, then
    overlays profile config (rtgate-PROFILE.conf) on top.

    Args:
        profile: Optional profile name

    Returns:
        Dictionary with config values. Returns empty dict if files
        don't exist or on parsing errors.
    """
    config = {}

    _load_config_file(get_config_path(), config)

    if profile:
        profile_config_path = get_config_path(profile)
        if not profile_config_path.exists():
            print(
                f"Error: Profile config not found: {profile_config_path}",
                file=sys.stderr,
            )
            sys.exit(1)
        _load_config_file(profile_config_path, config)

    return config


def create_default_config(path: Path) -> None:
    """
    Create a default configuration file with comments.

    Args:
        path: Path where the config file should be created
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    config_content = f"""\
# rtgate Configuration File
# This file uses INI format. Empty values use defaults.

[rtorrent]
# XML-RPC endpoint of the rTorrent daemon (or the web server proxying it)
# Defaults: host = {DEFAULT_HOST}, port = {DEFAULT_PORT}, path = {DEFAULT_PATH}
host =
port =
path =

# HTTP basic authentication (leave empty if not required)
username =
password =

# Request timeout in seconds (leave empty to wait indefinitely)
timeout =

[debug]
# Log level: debug, info, warning, error, critical
log_level =

"""

    try:
        path.write_text(config_content)
    except OSError as e:
        print(
            f"Error: Failed to create config file {path}: {e}", file=sys.stderr
        )
        sys.exit(1)


def merge_config_with_args(config: dict, args: Namespace) -> None:
    """
    Merge config file values with CLI arguments.

    CLI arguments take priority over config file values.
    Modifies args in place.

    Args:
        config: Dictionary of config values from load_config()
        args: Parsed command-line arguments from argparse
    """

    for key, value in config.items():
        if not hasattr(args, f"{key}{TrackSetAction.SET_POSTFIX}"):
            setattr(args, key, value)
