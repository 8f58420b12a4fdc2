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

from unittest.mock import MagicMock, patch

import pytest

from src.rtgate.app import main
from src.rtgate.rtorrent.models import (
    AddOptions,
    ConnectionResult,
    GlobalStats,
    RpcFault,
)
from src.rtgate.rtorrent.rows import TORRENT_COLUMNS, parse_torrent_row

HASH = "0123456789ABCDEF0123456789ABCDEF01234567"


@pytest.fixture
def client():
    instance = MagicMock()
    instance.connect.return_value = instance
    with patch("src.rtgate.app.RtorrentClient") as cls:
        cls.return_value = instance
        instance.cls = cls
        yield instance


@pytest.fixture(autouse=True)
def environment():
    with (
        patch("src.rtgate.app.load_config", return_value={}) as load_config,
        patch("src.rtgate.app.init_logger"),
    ):
        yield load_config


class TestMain:
    """Test cases for the command line entry point."""

    def test_lists_torrents_by_default(self, client, capsys):
        row = [0] * len(TORRENT_COLUMNS)
        row[0], row[1] = HASH, "ubuntu.iso"
        client.torrents.return_value = [parse_torrent_row(row)]

        assert main([]) == 0

        out = capsys.readouterr().out
        assert HASH in out
        assert "ubuntu.iso" in out
        client.disconnect.assert_called_once()

    def test_connection_options(self, client):
        main(["--host", "seedbox", "--port", "5000", "--timeout", "3"])

        kwargs = client.cls.call_args[1]
        assert kwargs["host"] == "seedbox"
        assert kwargs["port"] == "5000"
        assert kwargs["path"] == "/RPC2"
        assert kwargs["timeout"] == 3.0

    def test_config_file_values(self, client, environment):
        environment.return_value = {"host": "from-config", "port": "9000"}

        main(["--port", "7000"])

        kwargs = client.cls.call_args[1]
        assert kwargs["host"] == "from-config"
        assert kwargs["port"] == "7000"

    def test_connection_test(self, client, capsys):
        client.test_connection.return_value = ConnectionResult(
            success=True, version="0.9.8"
        )

        assert main(["--test"]) == 0
        assert "0.9.8" in capsys.readouterr().out

    def test_connection_test_failure(self, client, capsys):
        client.test_connection.return_value = ConnectionResult(
            success=False, error="Connection refused"
        )

        assert main(["--test"]) == 1
        assert "Connection refused" in capsys.readouterr().err

    def test_stats(self, client, capsys):
        client.stats.return_value = GlobalStats(listen_port=51413, pid=99)

        assert main(["--stats"]) == 0
        assert "51413" in capsys.readouterr().out

    def test_trackers(self, client):
        client.trackers.return_value = {HASH: []}

        assert main(["--trackers", "abc", "def"]) == 0
        client.trackers.assert_called_once_with(["abc", "def"])

    def test_add_torrent(self, client, capsys):
        client.add_torrent.return_value = HASH

        assert (
            main(
                [
                    "-a",
                    "magnet:?xt=urn:btih:" + HASH,
                    "--label",
                    "tv",
                    "--priority",
                    "3",
                    "--paused",
                ]
            )
            == 0
        )

        client.add_torrent.assert_called_once_with(
            "magnet:?xt=urn:btih:" + HASH,
            AddOptions(start=False, label="tv", priority="3"),
        )
        assert HASH in capsys.readouterr().out

    def test_start(self, client):
        assert main(["--start", HASH]) == 0
        client.start_torrent.assert_called_once_with(HASH)
        client.torrents.assert_not_called()

    def test_set_priority(self, client):
        assert main(["--set-priority", HASH, "1"]) == 0
        client.set_priority.assert_called_once_with(HASH, "1")

    def test_mutation_failure(self, client, capsys):
        """Test that a failed mutation exits with error status."""
        client.remove_torrent.side_effect = RpcFault(-501, "Unknown hash")

        assert main(["--remove", HASH]) == 1
        assert "Unknown hash" in capsys.readouterr().err
        client.disconnect.assert_called_once()

    def test_add_missing_file(self, client, capsys):
        client.add_torrent.side_effect = FileNotFoundError("missing.torrent")

        assert main(["-a", "missing.torrent"]) == 1
        assert "missing.torrent" in capsys.readouterr().err

    @pytest.mark.parametrize(
        "error", [IsADirectoryError("downloads"), PermissionError("locked")]
    )
    def test_add_unreadable_path(self, client, capsys, error):
        """Test that any file system error exits with error status."""
        client.add_torrent.side_effect = error

        assert main(["-a", "some.torrent"]) == 1
        assert "Failed to add torrent" in capsys.readouterr().err
        client.disconnect.assert_called_once()

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert "rtgate" in capsys.readouterr().out
