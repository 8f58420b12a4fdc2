"""Status derivation for torrents and trackers."""

from .models import TorrentStatus, TrackerStatus


def derive_status(
    is_hash_checking: bool,
    hashing: int,
    is_open: bool,
    is_active: bool,
    is_complete: bool,
) -> TorrentStatus:
    """Compute the canonical status of a torrent from its raw flags.

    rTorrent reports "open" and "active" as independent toggles: open
    means the files are available on disk, active means data is being
    transferred. See https://kannibalox.github.io/rtorrent-docs/cmd-ref.html

    - Stopped/closed: state=0, is_open=0, is_active=0
    - Paused: state=1, is_open=1, is_active=0
    - Active: state=1, is_open=1, is_active=1

    The flags overlap, so the checks below are ordered and the first
    match wins.

    Args:
        is_hash_checking: Hash check is running right now
        hashing: 0=none, 1=initial, 2=end-game, 3=rehash
        is_open: Files are opened by the daemon
        is_active: Torrent is transferring data
        is_complete: All wanted data is downloaded

    Returns:
        TorrentStatus value
    """
    if is_hash_checking:
        return TorrentStatus.CHECKING

    if hashing > 0:
        return TorrentStatus.HASHING_QUEUED

    if not is_open:
        return (
            TorrentStatus.COMPLETED if is_complete else TorrentStatus.STOPPED
        )

    if not is_active:
        return TorrentStatus.PAUSED

    return TorrentStatus.SEEDING if is_complete else TorrentStatus.DOWNLOADING


def classify_tracker(
    enabled: bool,
    usable: bool,
    failed_count: int,
    success_count: int,
) -> TrackerStatus:
    """Classify tracker health from its announce counters.

    Evaluated top to bottom, first match wins.
    """
    if not enabled:
        return TrackerStatus.DISABLED

    if usable and success_count > 0:
        return TrackerStatus.WORKING

    if failed_count > 0 and success_count == 0:
        return TrackerStatus.ERROR

    if failed_count > success_count:
        return TrackerStatus.UNRELIABLE

    if success_count > 0:
        return TrackerStatus.WORKING

    return TrackerStatus.NOT_CONTACTED
