from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TypedDict


class TorrentStatus(str, Enum):
    """Canonical torrent lifecycle status derived from rTorrent flags."""

    CHECKING = "checking"
    """Files are being hash-checked right now."""

    HASHING_QUEUED = "hashing-queued"
    """Hash check is requested but has not started yet."""

    STOPPED = "stopped"
    COMPLETED = "completed"
    PAUSED = "paused"
    SEEDING = "seeding"
    DOWNLOADING = "downloading"
    UNKNOWN = "unknown"


class TrackerStatus(str, Enum):
    DISABLED = "disabled"
    WORKING = "working"
    ERROR = "error"
    UNRELIABLE = "unreliable"
    NOT_CONTACTED = "not_contacted"
    UNKNOWN = "unknown"


class TrackerType(str, Enum):
    HTTP = "http"
    UDP = "udp"
    DHT = "dht"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class PeerSummary:
    """Peer counters reported in the torrent listing."""

    connected: int
    seeders: int
    total: int


@dataclass(frozen=True)
class Torrent:
    """Data Transfer Object for one torrent known to the daemon (immutable).

    Note: All size fields are in bytes, all speed fields are in bytes/second.
    Note: status is derived from the raw flags on every refresh.
    """

    hash: str
    name: str
    size: int  # bytes
    completed_bytes: int  # bytes
    progress: float  # 0.0 - 1.0
    download_speed: int  # bytes/second
    upload_speed: int  # bytes/second
    download_total: int  # bytes
    upload_total: int  # bytes
    status: TorrentStatus
    state: int
    is_active: bool
    is_open: bool
    is_hash_checking: bool
    is_complete: bool
    hashing: int  # 0=none, 1=initial, 2=end-game, 3=rehash
    ratio: float
    label: str
    directory: str
    creation_date: datetime | None
    started_time: datetime | None
    finished_time: datetime | None
    peers: PeerSummary
    message: str
    is_multi_file: bool
    priority: int  # 0=off, 1=low, 2=normal, 3=high


@dataclass(frozen=True)
class Tracker:
    """Data Transfer Object for tracker information.

    Note: scrape counters keep -1 when the tracker did not report them.
    """

    url: str
    enabled: bool
    usable: bool
    type: TrackerType
    status: TrackerStatus
    message: str
    scrape_complete: int
    scrape_incomplete: int
    scrape_downloaded: int
    failed_count: int
    success_count: int
    last_activity: datetime | None = None
    next_activity: datetime | None = None


@dataclass(frozen=True)
class Peer:
    """Data Transfer Object for peer information.

    Note: All speed fields are in bytes/second.
    """

    address: str
    port: int
    client: str
    peer_id: str
    flags: str
    completed_percent: int
    download_rate: int  # bytes/second
    upload_rate: int  # bytes/second
    download_total: int  # bytes
    upload_total: int  # bytes
    peer_download_rate: int  # bytes/second
    peer_download_total: int  # bytes
    is_encrypted: bool
    is_incoming: bool


@dataclass(frozen=True)
class TorrentFile:
    """Data Transfer Object for torrent file information.

    Note: progress is a percentage rounded to two decimals.
    """

    index: int
    path: str
    size: int  # bytes
    progress: float
    priority: int  # 0=off, 1=normal, 2=high
    completed_chunks: int
    total_chunks: int


@dataclass(frozen=True)
class GlobalStats:
    download_speed: int = 0
    upload_speed: int = 0
    download_total: int = 0
    upload_total: int = 0
    port_open: bool = False
    listen_port: int = 0
    pid: int = 0


@dataclass(frozen=True)
class PathInfo:
    base_path: str
    is_multi_file: bool


@dataclass(frozen=True)
class ConnectionResult:
    """Outcome of a connectivity probe."""

    success: bool
    version: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class AddOptions:
    """Options applied while adding a torrent.

    label, directory and priority are sent as inline commands of the
    load call itself.
    """

    start: bool = True
    label: str | None = None
    directory: str | None = None
    priority: int | str | None = None


@dataclass(frozen=True)
class MulticallFault:
    """Fault returned for a single element of a multicall batch."""

    error: str
    fault_code: int


class ClientMeta(TypedDict):
    """Metadata about the torrent client daemon."""

    name: str
    version: str


class ClientError(Exception):
    """Base exception for all client errors."""

    pass


class TransportError(ClientError):
    """Daemon could not be reached or answered with a broken response."""

    pass


class NotConnectedError(TransportError):
    def __init__(self) -> None:
        super().__init__("Not connected. Call connect() first.")


class RpcFault(ClientError):
    """Daemon accepted the call but returned a method-level fault."""

    def __init__(self, fault_code: int, fault_string: str) -> None:
        self.fault_code = fault_code
        self.fault_string = fault_string
        super().__init__(f"RPC fault {fault_code}: {fault_string}")
