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

import pytest

from src.rtgate.rtorrent.client import RtorrentClient
from src.rtgate.rtorrent.models import GlobalStats, Torrent


@pytest.fixture(scope="module")
def client(request):
    """Create RtorrentClient instance for all tests.

    Port can be configured with --rtorrent-port option.
    Default port: 8000

    Requires rTorrent with an XML-RPC endpoint running on localhost.
    """
    port = request.config.getoption("--rtorrent-port")
    client = RtorrentClient(host="localhost", port=port).connect()
    yield client
    client.disconnect()


@pytest.mark.integration
class TestRtorrentClientLifecycle:
    """Test RtorrentClient against a live daemon."""

    def test_test_connection(self, client):
        result = client.test_connection()
        assert result.success is True
        assert result.version

    def test_meta(self, client):
        meta = client.meta()
        assert meta["name"] == "rTorrent"
        assert isinstance(meta["version"], str)


@pytest.mark.integration
class TestRtorrentClientQueries:
    """Test read operations against a live daemon."""

    def test_torrents(self, client):
        torrents = client.torrents()
        assert isinstance(torrents, list)
        for t in torrents:
            assert isinstance(t, Torrent)
            assert t.hash == t.hash.upper()
            assert 0.0 <= t.progress <= 1.0

    def test_stats(self, client):
        stats = client.stats()
        assert isinstance(stats, GlobalStats)
        assert stats.pid > 0

    def test_default_directory(self, client):
        assert isinstance(client.default_directory(), str)

    def test_trackers_and_peers(self, client):
        hashes = [t.hash for t in client.torrents()]

        trackers = client.trackers(hashes)
        peers = client.peers(hashes)

        assert set(trackers) == set(hashes)
        assert set(peers) == set(hashes)

    def test_unknown_hash_degrades(self, client):
        unknown = "0" * 40
        assert client.trackers([unknown]) == {unknown: []}
        assert client.files(unknown) == []
