"""Normalization of positional rTorrent rows into typed records.

rTorrent's ``*.multicall`` verbs return bare arrays whose values follow
the order of the requested getters. Each column table below defines
both the getter sent to the daemon and the key the value is read back
under, so query and parser can't drift apart.
"""

from collections.abc import Sequence
from typing import Any, NamedTuple

from .models import (
    Peer,
    PeerSummary,
    Torrent,
    TorrentFile,
    Tracker,
    TrackerType,
)
from .multicall import Call
from .peerid import resolve_client
from .status import classify_tracker, derive_status
from .util import from_timestamp, to_flag, to_int, to_str

TRACKER_URL_SCHEMES = ("http", "udp")

TRACKER_TYPES = {
    1: TrackerType.HTTP,
    2: TrackerType.UDP,
    3: TrackerType.DHT,
}


class Column(NamedTuple):
    key: str
    command: str


TORRENT_COLUMNS: tuple[Column, ...] = (
    Column("hash", "d.hash="),
    Column("name", "d.name="),
    Column("size", "d.size_bytes="),
    Column("completed_bytes", "d.completed_bytes="),
    Column("download_speed", "d.down.rate="),
    Column("upload_speed", "d.up.rate="),
    Column("upload_total", "d.up.total="),
    Column("download_total", "d.down.total="),
    Column("state", "d.state="),
    Column("is_active", "d.is_active="),
    Column("is_open", "d.is_open="),
    Column("is_hash_checking", "d.is_hash_checking="),
    Column("is_complete", "d.complete="),
    Column("ratio", "d.ratio="),
    Column("label", "d.custom1="),
    Column("directory", "d.directory="),
    Column("creation_date", "d.creation_date="),
    Column("started_time", "d.timestamp.started="),
    Column("finished_time", "d.timestamp.finished="),
    Column("peers_connected", "d.peers_connected="),
    Column("peers_complete", "d.peers_complete="),
    Column("peers_accounted", "d.peers_accounted="),
    Column("message", "d.message="),
    Column("is_multi_file", "d.is_multi_file="),
    Column("hashing", "d.hashing="),
    Column("priority", "d.priority="),
)

TRACKER_COLUMNS: tuple[Column, ...] = (
    Column("url", "t.url="),
    Column("enabled", "t.is_enabled="),
    Column("usable", "t.is_usable="),
    Column("type", "t.type="),
    Column("scrape_complete", "t.scrape_complete="),
    Column("scrape_incomplete", "t.scrape_incomplete="),
    Column("scrape_downloaded", "t.scrape_downloaded="),
    Column("failed_count", "t.failed_counter="),
    Column("success_count", "t.success_counter="),
    Column("last_activity", "t.activity_time_last="),
    Column("next_activity", "t.activity_time_next="),
)

PEER_COLUMNS: tuple[Column, ...] = (
    Column("address", "p.address="),
    Column("client_version", "p.client_version="),
    Column("peer_id", "p.id="),
    Column("completed_percent", "p.completed_percent="),
    Column("download_rate", "p.down_rate="),
    Column("upload_rate", "p.up_rate="),
    Column("download_total", "p.down_total="),
    Column("upload_total", "p.up_total="),
    Column("peer_download_rate", "p.peer_rate="),
    Column("peer_download_total", "p.peer_total="),
    Column("is_encrypted", "p.is_encrypted="),
    Column("is_incoming", "p.is_incoming="),
    Column("port", "p.port="),
)

FILE_COLUMNS: tuple[Column, ...] = (
    Column("path", "f.path="),
    Column("size", "f.size_bytes="),
    Column("completed_chunks", "f.completed_chunks="),
    Column("total_chunks", "f.size_chunks="),
    Column("priority", "f.priority="),
)


def commands(columns: Sequence[Column]) -> list[str]:
    return [c.command for c in columns]


def row_to_dict(columns: Sequence[Column], row: Any) -> dict[str, Any]:
    """Map a positional row onto column keys.

    Missing trailing values (or a row that is not an array at all) read
    as None.
    """
    values = list(row) if isinstance(row, (list, tuple)) else []
    values += [None] * (len(columns) - len(values))

    return {c.key: v for c, v in zip(columns, values)}


# ============================================================================
# Queries
# ============================================================================


def torrent_list_params(view: str = "main") -> list[str]:
    """Parameters of ``d.multicall2`` for the torrent listing."""
    return ["", view, *commands(TORRENT_COLUMNS)]


def tracker_call(hash: str) -> Call:
    return Call("t.multicall", [hash, "", *commands(TRACKER_COLUMNS)])


def peer_call(hash: str) -> Call:
    return Call("p.multicall", [hash, "", *commands(PEER_COLUMNS)])


def file_params(hash: str) -> list[str]:
    return [hash, "", *commands(FILE_COLUMNS)]


# ============================================================================
# Normalizers
# ============================================================================


def parse_torrent_row(row: Any) -> Torrent:
    """Convert one ``d.multicall2`` row to Torrent. Never raises."""
    t = row_to_dict(TORRENT_COLUMNS, row)

    hash = to_str(t["hash"]).upper()
    size = to_int(t["size"])
    completed = to_int(t["completed_bytes"])
    progress = min(1.0, max(0.0, completed / size)) if size > 0 else 0.0

    is_hash_checking = to_flag(t["is_hash_checking"])
    hashing = to_int(t["hashing"])
    is_open = to_flag(t["is_open"])
    is_active = to_flag(t["is_active"])
    is_complete = to_flag(t["is_complete"])

    return Torrent(
        hash=hash,
        name=to_str(t["name"]) or f"[Magnet] {hash[:8]}...",
        size=size,
        completed_bytes=completed,
        progress=progress,
        download_speed=to_int(t["download_speed"]),
        upload_speed=to_int(t["upload_speed"]),
        download_total=to_int(t["download_total"]),
        upload_total=to_int(t["upload_total"]),
        status=derive_status(
            is_hash_checking, hashing, is_open, is_active, is_complete
        ),
        state=to_int(t["state"]),
        is_active=is_active,
        is_open=is_open,
        is_hash_checking=is_hash_checking,
        is_complete=is_complete,
        hashing=hashing,
        # rTorrent stores ratio multiplied by 1000
        ratio=to_int(t["ratio"]) / 1000,
        label=to_str(t["label"]),
        directory=to_str(t["directory"]),
        creation_date=from_timestamp(t["creation_date"]),
        started_time=from_timestamp(t["started_time"]),
        finished_time=from_timestamp(t["finished_time"]),
        peers=PeerSummary(
            connected=to_int(t["peers_connected"]),
            seeders=to_int(t["peers_complete"]),
            total=to_int(t["peers_accounted"]),
        ),
        message=to_str(t["message"]),
        is_multi_file=to_flag(t["is_multi_file"]),
        priority=to_int(t["priority"]),
    )


def parse_tracker_row(row: Any) -> Tracker:
    t = row_to_dict(TRACKER_COLUMNS, row)

    enabled = bool(to_int(t["enabled"]))
    usable = bool(to_int(t["usable"]))
    failed_count = to_int(t["failed_count"])
    success_count = to_int(t["success_count"])

    return Tracker(
        url=to_str(t["url"]),
        enabled=enabled,
        usable=usable,
        type=TRACKER_TYPES.get(to_int(t["type"]), TrackerType.UNKNOWN),
        status=classify_tracker(enabled, usable, failed_count, success_count),
        message="",
        scrape_complete=to_int(t["scrape_complete"]),
        scrape_incomplete=to_int(t["scrape_incomplete"]),
        scrape_downloaded=to_int(t["scrape_downloaded"]),
        failed_count=failed_count,
        success_count=success_count,
        last_activity=from_timestamp(t["last_activity"]),
        next_activity=from_timestamp(t["next_activity"]),
    )


def parse_tracker_rows(rows: list[Any]) -> list[Tracker]:
    """Parse ``t.multicall`` rows, keeping only http(s) and udp trackers.

    DHT pseudo-trackers and rows with an empty URL are dropped.
    """
    trackers = (parse_tracker_row(r) for r in rows)
    return [t for t in trackers if t.url.startswith(TRACKER_URL_SCHEMES)]


def parse_peer_row(row: Any) -> Peer:
    p = row_to_dict(PEER_COLUMNS, row)

    is_encrypted = bool(to_int(p["is_encrypted"]))
    is_incoming = bool(to_int(p["is_incoming"]))
    peer_id = to_str(p["peer_id"])

    # ruTorrent style flags
    flags = ("E" if is_encrypted else "") + ("I" if is_incoming else "")

    return Peer(
        address=to_str(p["address"]),
        port=to_int(p["port"]),
        client=resolve_client(peer_id, to_str(p["client_version"])),
        peer_id=peer_id,
        flags=flags,
        completed_percent=to_int(p["completed_percent"]),
        download_rate=to_int(p["download_rate"]),
        upload_rate=to_int(p["upload_rate"]),
        download_total=to_int(p["download_total"]),
        upload_total=to_int(p["upload_total"]),
        peer_download_rate=to_int(p["peer_download_rate"]),
        peer_download_total=to_int(p["peer_download_total"]),
        is_encrypted=is_encrypted,
        is_incoming=is_incoming,
    )


def parse_peer_rows(rows: list[Any]) -> list[Peer]:
    return [parse_peer_row(r) for r in rows]


def parse_file_row(index: int, row: Any) -> TorrentFile:
    f = row_to_dict(FILE_COLUMNS, row)

    completed_chunks = to_int(f["completed_chunks"])
    total_chunks = to_int(f["total_chunks"])
    progress = (
        completed_chunks / total_chunks * 100 if total_chunks > 0 else 0.0
    )

    return TorrentFile(
        index=index,
        path=to_str(f["path"]),
        size=to_int(f["size"]),
        progress=round(progress, 2),
        priority=to_int(f["priority"]),
        completed_chunks=completed_chunks,
        total_chunks=total_chunks,
    )


def parse_file_rows(rows: list[Any]) -> list[TorrentFile]:
    return [parse_file_row(i, r) for i, r in enumerate(rows)]
