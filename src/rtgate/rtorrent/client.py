"""rTorrent torrent client implementation."""

import logging
import os
from collections.abc import Callable, Sequence
from typing import Any

from ..util.log import get_logger, log_time
from .models import (
    AddOptions,
    ClientMeta,
    ConnectionResult,
    GlobalStats,
    PathInfo,
    Peer,
    RpcFault,
    Torrent,
    TorrentFile,
    Tracker,
)
from .multicall import Call, is_fault, multicall
from .rows import (
    file_params,
    parse_file_rows,
    parse_peer_rows,
    parse_torrent_row,
    parse_tracker_rows,
    peer_call,
    torrent_list_params,
    tracker_call,
)
from .transport import Transport, XmlRpcTransport
from .util import (
    clamp_priority,
    normalize_hash,
    parse_magnet_hash,
    quote_command_arg,
    to_flag,
    to_int,
    to_str,
)


class RtorrentClient:
    """rTorrent client implementation using XML-RPC.

    Read operations (torrents, trackers, peers, stats, files, default
    directory) never raise: on failure they log a warning and return an
    empty result. Mutations raise ClientError subclasses.

    Documentation: https://kannibalox.github.io/rtorrent-docs/cmd-ref.html
    """

    NAME = "rTorrent"
    DEFAULT_VIEW = "main"

    # d.open: opens files on disk (no-op if already open)
    # d.start: sets state=1 and adds to the started view, is_active stays 0
    # d.resume: sets is_active=1, this is what actually starts transfers
    START_SEQUENCE = ("d.open", "d.start", "d.resume")

    GLOBAL_STATS_CALLS = (
        Call("throttle.global_down.rate"),
        Call("throttle.global_up.rate"),
        Call("throttle.global_down.total"),
        Call("throttle.global_up.total"),
        Call("network.port_open"),
        Call("network.listen.port"),
        Call("system.pid"),
    )

    # ========================================================================
    # Client Lifecycle & Metadata
    # ========================================================================

    def __init__(
        self,
        host: str = "localhost",
        port: str | int = 8000,
        path: str = "/RPC2",
        username: str | None = None,
        password: str | None = None,
        timeout: float | None = None,
        transport: Transport | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Create the client. No request is made until connect().

        Args:
            host: The hostname or IP address of the daemon
            port: The port of the daemon's XML-RPC endpoint
            path: The XML-RPC path
            username: Optional basic auth username
            password: Optional basic auth password
            timeout: Optional request timeout in seconds
            transport: Transport to use instead of XML-RPC over HTTP
            logger: Logger for degraded read operations
        """
        self.transport = transport or XmlRpcTransport(
            host=host,
            port=port,
            path=path,
            username=username,
            password=password,
            timeout=timeout,
        )
        self.logger = logger or get_logger()

    def connect(self) -> "RtorrentClient":
        self.transport.connect()
        return self

    def disconnect(self) -> None:
        self.transport.disconnect()

    @property
    def is_connected(self) -> bool:
        return self.transport.connected

    @log_time
    def test_connection(self) -> ConnectionResult:
        """Probe the daemon, connecting first if needed.

        Never raises; failures are reported in the result.
        """
        try:
            if not self.transport.connected:
                self.transport.connect()
            version = self.transport.call("system.client_version")
        except Exception as e:
            self.logger.warning(f"Connection test failed: {e}")
            return ConnectionResult(
                success=False, error=str(e) or "Connection failed"
            )

        return ConnectionResult(success=True, version=to_str(version))

    @log_time
    def meta(self) -> ClientMeta:
        """Get daemon name and version."""
        version = self.call("system.client_version")
        return {"name": self.NAME, "version": to_str(version)}

    def call(self, method: str, params: list[Any] | None = None) -> Any:
        return self.transport.call(method, params)

    def multicall(self, calls: Sequence[Call]) -> list[Any]:
        return multicall(self.transport, calls)

    # ========================================================================
    # Torrent Retrieval
    # ========================================================================

    @log_time
    def torrents(self, view: str = DEFAULT_VIEW) -> list[Torrent]:
        """Get list of all torrents in a single d.multicall2 request."""
        try:
            rows = self.call("d.multicall2", torrent_list_params(view))
        except Exception as e:
            self.logger.warning(f"Failed to list torrents: {e}")
            return []

        if not isinstance(rows, list):
            return []

        return [parse_torrent_row(row) for row in rows]

    @log_time
    def trackers(self, hashes: Sequence[str]) -> dict[str, list[Tracker]]:
        """Get trackers for many torrents in one system.multicall request.

        Returns:
            Mapping of upper-cased hash to trackers. A torrent whose
            query failed maps to an empty list.
        """
        return self._fetch_detailed(
            "trackers", hashes, tracker_call, parse_tracker_rows
        )

    @log_time
    def peers(self, hashes: Sequence[str]) -> dict[str, list[Peer]]:
        """Get peers for many torrents in one system.multicall request.

        Returns:
            Mapping of upper-cased hash to peers. A torrent whose query
            failed maps to an empty list.
        """
        return self._fetch_detailed(
            "peers", hashes, peer_call, parse_peer_rows
        )

    @log_time
    def files(self, hash: str) -> list[TorrentFile]:
        """Get files of one torrent."""
        try:
            rows = self.call("f.multicall", file_params(normalize_hash(hash)))
        except Exception as e:
            self.logger.warning(f"Failed to list files of {hash}: {e}")
            return []

        if not isinstance(rows, list):
            return []

        return parse_file_rows(rows)

    @log_time
    def stats(self) -> GlobalStats:
        """Get global transfer rates, totals, port and daemon pid."""
        try:
            results = self.multicall(self.GLOBAL_STATS_CALLS)
        except Exception as e:
            self.logger.warning(f"Failed to get global stats: {e}")
            return GlobalStats()

        # Faulted elements read as 0
        return GlobalStats(
            download_speed=to_int(results[0]),
            upload_speed=to_int(results[1]),
            download_total=to_int(results[2]),
            upload_total=to_int(results[3]),
            port_open=to_flag(results[4]),
            listen_port=to_int(results[5]),
            pid=to_int(results[6]),
        )

    @log_time
    def default_directory(self) -> str:
        """Get the default download directory configured in rTorrent."""
        try:
            return to_str(self.call("directory.default"))
        except Exception as e:
            self.logger.warning(f"Failed to get default directory: {e}")
            return ""

    @log_time
    def path_info(self, hash: str) -> PathInfo:
        """Get on-disk location of a torrent's data."""
        hash = normalize_hash(hash)
        base_path = self.call("d.base_path", [hash])
        is_multi_file = self.call("d.is_multi_file", [hash])

        return PathInfo(
            base_path=to_str(base_path), is_multi_file=to_flag(is_multi_file)
        )

    # ========================================================================
    # Torrent Lifecycle Operations
    # ========================================================================

    @log_time
    def add_torrent(
        self, value: str, options: AddOptions | None = None
    ) -> str | None:
        """Add a torrent from magnet link or local .torrent file path.

        Returns:
            Info-hash for magnet links, None for torrent files
        """
        if value.strip().lower().startswith("magnet:"):
            return self.add_magnet(value.strip(), options)

        with open(os.path.expanduser(value), "rb") as f:
            self.add_torrent_raw(f.read(), options)

        return None

    @log_time
    def add_torrent_raw(
        self, data: bytes, options: AddOptions | None = None
    ) -> None:
        """Add a torrent from raw .torrent file contents.

        Used when rTorrent has no filesystem access to the torrent file.
        """
        options = options or AddOptions()
        method = "load.raw_start" if options.start else "load.raw"

        self.call(method, ["", data, *self._post_add_commands(options)])

    @log_time
    def add_magnet(
        self, magnet_uri: str, options: AddOptions | None = None
    ) -> str | None:
        """Add a torrent from a magnet link.

        Returns:
            Upper-cased info-hash from the link, or None if it has none
        """
        options = options or AddOptions()
        method = "load.start" if options.start else "load.normal"

        self.call(method, ["", magnet_uri, *self._post_add_commands(options)])

        return parse_magnet_hash(magnet_uri)

    @log_time
    def start_torrent(self, hash: str) -> None:
        """Start a torrent.

        The steps are sent in order and the first failure aborts the
        rest.
        """
        hash = normalize_hash(hash)
        for method in self.START_SEQUENCE:
            self.call(method, [hash])

    @log_time
    def stop_torrent(self, hash: str) -> None:
        self.call("d.stop", [normalize_hash(hash)])

    @log_time
    def close_torrent(self, hash: str) -> None:
        """Close a torrent, releasing its files."""
        self.call("d.close", [normalize_hash(hash)])

    @log_time
    def remove_torrent(self, hash: str) -> None:
        """Remove a torrent from the daemon. Downloaded data is kept."""
        self.call("d.erase", [normalize_hash(hash)])

    # ========================================================================
    # Torrent Organization & Metadata
    # ========================================================================

    @log_time
    def set_label(self, hash: str, label: str) -> None:
        self.call("d.custom1.set", [normalize_hash(hash), label])

    @log_time
    def set_priority(self, hash: str, priority: int | str) -> None:
        """Set torrent priority (0=off, 1=low, 2=normal, 3=high)."""
        self.call(
            "d.priority.set", [normalize_hash(hash), clamp_priority(priority)]
        )

    @log_time
    def set_label_and_priority(
        self, hash: str, label: str, priority: int | str
    ) -> None:
        """Set label and priority in one round trip.

        Raises:
            RpcFault: If either of the two calls failed
        """
        hash = normalize_hash(hash)
        results = self.multicall(
            [
                Call("d.custom1.set", [hash, label]),
                Call("d.priority.set", [hash, clamp_priority(priority)]),
            ]
        )

        for result in results:
            if is_fault(result):
                raise RpcFault(result.fault_code, result.error)

    # ========================================================================
    # Internal Helpers
    # ========================================================================

    def _fetch_detailed(
        self,
        kind: str,
        hashes: Sequence[str],
        make_call: Callable[[str], Call],
        parse_rows: Callable[[list[Any]], list],
    ) -> dict[str, list]:
        keys = list(dict.fromkeys(normalize_hash(h) for h in hashes))
        if not keys:
            return {}

        try:
            results = self.multicall([make_call(h) for h in keys])
        except Exception as e:
            self.logger.warning(f"Failed to fetch {kind}: {e}")
            return {h: [] for h in keys}

        detailed = {}
        for hash, result in zip(keys, results):
            if is_fault(result):
                self.logger.debug(
                    f"Failed to fetch {kind} of {hash}: {result.error}"
                )
                detailed[hash] = []
            elif isinstance(result, list):
                detailed[hash] = parse_rows(result)
            else:
                detailed[hash] = []

        return detailed

    @staticmethod
    def _post_add_commands(options: AddOptions) -> list[str]:
        """Inline commands applied by the load call to the new torrent."""
        commands = []

        if options.label:
            commands.append(
                f"d.custom1.set={quote_command_arg(options.label)}"
            )
        if options.directory:
            commands.append(
                f"d.directory.set={quote_command_arg(options.directory)}"
            )
        if options.priority is not None:
            commands.append(
                f"d.priority.set={clamp_priority(options.priority)}"
            )

        return commands
