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
from argparse import Namespace
from unittest.mock import patch

import pytest

from src.rtgate.config import (
    TrackSetAction,
    _load_debug_section,
    _load_rtorrent_section,
    create_default_config,
    get_available_profiles,
    get_config_path,
    load_config,
    merge_config_with_args,
)


def parse(config_text):
    parser = configparser.ConfigParser()
    parser.read_string(config_text)
    return parser


class TestLoadRtorrentSection:
    """Test cases for _load_rtorrent_section function."""

    def test_empty_config(self):
        """Test handling of empty config without [rtorrent] section."""
        config = {}

        _load_rtorrent_section(parse(""), config)

        assert config == {}

    def test_empty_section(self):
        """Test handling of [rtorrent] section with all empty values."""
        config_text = """
[rtorrent]
host =
port =
path =
username =
password =
timeout =
"""
        config = {}

        _load_rtorrent_section(parse(config_text), config)

        assert config == {}

    def test_filled_values(self):
        """Test handling of [rtorrent] section with all values filled."""
        config_text = """
[rtorrent]
host = 192.168.1.100
port = 8080
path = /RPC2
username = admin
password = secret123
timeout = 7.5
"""
        config = {}

        _load_rtorrent_section(parse(config_text), config)

        assert config == {
            "host": "192.168.1.100",
            "port": "8080",
            "path": "/RPC2",
            "username": "admin",
            "password": "secret123",
            "timeout": 7.5,
        }

    def test_trimming_whitespace(self):
        """Test that values are trimmed from left/right whitespace."""
        config_text = """
[rtorrent]
host =   seedbox
port =   \t
"""
        config = {}

        _load_rtorrent_section(parse(config_text), config)

        assert config == {"host": "seedbox"}

    def test_invalid_port(self, capsys):
        """Test that a non-numeric port is skipped with a warning."""
        config_text = """
[rtorrent]
host = localhost
port = http
"""
        config = {}

        _load_rtorrent_section(parse(config_text), config)

        assert config == {"host": "localhost"}
        captured = capsys.readouterr()
        assert "Warning: Invalid port value in config" in captured.err

    def test_invalid_timeout(self, capsys):
        config_text = """
[rtorrent]
timeout = soon
"""
        config = {}

        _load_rtorrent_section(parse(config_text), config)

        assert config == {}
        captured = capsys.readouterr()
        assert "Warning: Invalid timeout value in config" in captured.err


class TestLoadDebugSection:
    """Test cases for _load_debug_section function."""

    def test_empty_config(self):
        config = {}
        _load_debug_section(parse(""), config)
        assert config == {}

    def test_log_level(self):
        config_text = """
[debug]
log_level = debug
"""
        config = {}

        _load_debug_section(parse(config_text), config)

        assert config == {"log_level": "debug"}


class TestConfigFiles:
    """Test cases for config file discovery and loading."""

    @pytest.fixture(autouse=True)
    def config_dir(self, tmp_path):
        with patch(
            "src.rtgate.config.user_config_dir", return_value=str(tmp_path)
        ):
            yield tmp_path

    def test_config_path(self, config_dir):
        assert get_config_path() == config_dir / "rtgate.conf"
        assert get_config_path("seedbox") == config_dir / "rtgate-seedbox.conf"

    def test_no_config_file(self):
        assert load_config() == {}

    def test_available_profiles(self, config_dir):
        (config_dir / "rtgate.conf").write_text("")
        (config_dir / "rtgate-seedbox.conf").write_text("")
        (config_dir / "rtgate-home.conf").write_text("")

        assert get_available_profiles() == ["home", "seedbox"]

    def test_profile_overlays_base(self, config_dir):
        (config_dir / "rtgate.conf").write_text(
            "[rtorrent]\nhost = localhost\nport = 8000\n"
        )
        (config_dir / "rtgate-seedbox.conf").write_text(
            "[rtorrent]\nhost = seedbox.lan\n"
        )

        config = load_config("seedbox")

        assert config == {"host": "seedbox.lan", "port": "8000"}

    def test_missing_profile_exits(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            load_config("missing")

        assert exc_info.value.code == 1
        assert "Profile config not found" in capsys.readouterr().err

    def test_broken_config_file(self, config_dir, capsys):
        (config_dir / "rtgate.conf").write_text("host = no section\n")

        assert load_config() == {}
        assert "Failed to parse config file" in capsys.readouterr().err

    def test_default_config_loads_empty(self, config_dir):
        """Test that the generated config file only carries defaults."""
        path = get_config_path()
        create_default_config(path)

        assert path.exists()
        assert "[rtorrent]" in path.read_text()
        assert load_config() == {}


class TestMergeConfigWithArgs:
    """Test cases for merge_config_with_args function."""

    def test_config_fills_unset_args(self):
        args = Namespace(host="localhost", port="8000")

        merge_config_with_args({"host": "seedbox", "port": "5000"}, args)

        assert args.host == "seedbox"
        assert args.port == "5000"

    def test_explicit_args_win(self):
        args = Namespace(host="cli-host")
        setattr(args, f"host{TrackSetAction.SET_POSTFIX}", True)

        merge_config_with_args({"host": "seedbox"}, args)

        assert args.host == "cli-host"
