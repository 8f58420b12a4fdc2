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

import argparse
import sys

from .config import (
    DEFAULT_HOST,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PATH,
    DEFAULT_PORT,
    TrackSetAction,
    create_default_config,
    get_available_profiles,
    get_config_path,
    load_config,
    merge_config_with_args,
)
from .rtorrent.client import RtorrentClient
from .rtorrent.models import (
    AddOptions,
    ClientError,
    GlobalStats,
    Peer,
    Torrent,
    TorrentFile,
    Tracker,
)
from .util.log import LOG_LEVELS, get_logger, init_logger, log_time
from .util.print import (
    print_date,
    print_progress,
    print_ratio,
    print_size,
    print_speed,
)
from .version import __version__

logger = get_logger()


def _setup_argument_parser(version: str) -> argparse.ArgumentParser:
    """Set up and return the argument parser."""
    p = argparse.ArgumentParser(
        prog="rtgate",
        description="Command line gateway to the rTorrent XML-RPC interface",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    # Queries
    p.add_argument(
        "--test",
        action="store_true",
        help="Test connection to the daemon and exit",
    )
    p.add_argument(
        "--stats",
        action="store_true",
        help="Show global transfer statistics and exit",
    )
    p.add_argument(
        "--trackers",
        type=str,
        nargs="+",
        metavar="HASH",
        help="Show trackers of the given torrents and exit",
    )
    p.add_argument(
        "--peers",
        type=str,
        nargs="+",
        metavar="HASH",
        help="Show peers of the given torrents and exit",
    )
    p.add_argument(
        "--files",
        type=str,
        metavar="HASH",
        help="Show files of the given torrent and exit",
    )

    # Actions
    p.add_argument(
        "-a",
        "--add-torrent",
        type=str,
        metavar="PATH_OR_MAGNET",
        help="Add torrent from file path or magnet link and exit",
    )
    p.add_argument(
        "--label",
        type=str,
        help="Label applied to the added torrent",
    )
    p.add_argument(
        "--directory",
        type=str,
        help="Download directory of the added torrent",
    )
    p.add_argument(
        "--priority",
        type=str,
        help="Priority of the added torrent (0=off, 1=low, 2=normal, 3=high)",
    )
    p.add_argument(
        "--paused",
        action="store_true",
        help="Add the torrent without starting it",
    )
    p.add_argument("--start", type=str, metavar="HASH", help="Start torrent")
    p.add_argument("--stop", type=str, metavar="HASH", help="Stop torrent")
    p.add_argument(
        "--close",
        type=str,
        metavar="HASH",
        help="Close torrent and release its files",
    )
    p.add_argument(
        "--remove",
        type=str,
        metavar="HASH",
        help="Remove torrent from the daemon (data is kept)",
    )
    p.add_argument(
        "--set-label",
        type=str,
        nargs=2,
        metavar=("HASH", "LABEL"),
        help="Set torrent label",
    )
    p.add_argument(
        "--set-priority",
        type=str,
        nargs=2,
        metavar=("HASH", "PRIORITY"),
        help="Set torrent priority (0=off, 1=low, 2=normal, 3=high)",
    )
    p.add_argument(
        "--create-config",
        action="store_true",
        help="Create default configuration file and exit",
    )

    # Connection
    p.add_argument(
        "--host",
        type=str,
        default=DEFAULT_HOST,
        action=TrackSetAction,
        help="rTorrent XML-RPC host",
    )
    p.add_argument(
        "--port",
        type=str,
        default=DEFAULT_PORT,
        action=TrackSetAction,
        help="rTorrent XML-RPC port",
    )
    p.add_argument(
        "--path",
        type=str,
        default=DEFAULT_PATH,
        action=TrackSetAction,
        help="rTorrent XML-RPC path",
    )
    p.add_argument(
        "--username",
        type=str,
        action=TrackSetAction,
        help="Basic auth username",
    )
    p.add_argument(
        "--password",
        type=str,
        action=TrackSetAction,
        help="Basic auth password",
    )
    p.add_argument(
        "--timeout",
        type=float,
        action=TrackSetAction,
        help="Request timeout in seconds",
    )

    # Profiles
    p.add_argument(
        "--profile",
        type=str,
        action=TrackSetAction,
        help="Load configuration profile from rtgate-PROFILE.conf",
    )
    p.add_argument(
        "--profiles",
        action="store_true",
        help="List available configuration profiles and exit",
    )

    # Other
    p.add_argument(
        "--log-level",
        type=str,
        default=DEFAULT_LOG_LEVEL,
        choices=list(LOG_LEVELS),
        action=TrackSetAction,
        help="Set logging level",
    )
    p.add_argument(
        "--version",
        action="version",
        version="%(prog)s " + version,
        help="Show version and exit",
    )

    return p


def _print_torrents(torrents: list[Torrent]) -> None:
    for t in torrents:
        print(
            f"{t.hash}  {t.status.value:<14} "
            f"{print_progress(t.progress):>6}  {print_size(t.size):>10}  "
            f"D: {print_speed(t.download_speed):>10}  "
            f"U: {print_speed(t.upload_speed):>10}  "
            f"{print_ratio(t.ratio):>6}  {t.label or '-':<12} {t.name}"
        )


def _print_trackers(trackers: dict[str, list[Tracker]]) -> None:
    for hash, items in trackers.items():
        print(hash)
        for t in items:
            print(
                f"  {t.status.value:<14} {t.type.value:<5} "
                f"S: {t.scrape_complete:>5}  L: {t.scrape_incomplete:>5}  "
                f"last: {print_date(t.last_activity)}  {t.url}"
            )


def _print_peers(peers: dict[str, list[Peer]]) -> None:
    for hash, items in peers.items():
        print(hash)
        for p in items:
            print(
                f"  {p.address}:{p.port:<6} {p.flags:<3} "
                f"{p.completed_percent:>3}%  "
                f"D: {print_speed(p.download_rate):>10}  "
                f"U: {print_speed(p.upload_rate):>10}  {p.client}"
            )


def _print_files(files: list[TorrentFile]) -> None:
    for f in files:
        print(
            f"{f.index:>4}  {f.progress:>6.2f}%  {print_size(f.size):>10}  "
            f"prio: {f.priority}  {f.path}"
        )


def _print_stats(stats: GlobalStats) -> None:
    print(f"Download speed: {print_speed(stats.download_speed)}")
    print(f"Upload speed:   {print_speed(stats.upload_speed)}")
    print(f"Downloaded:     {print_size(stats.download_total)}")
    print(f"Uploaded:       {print_size(stats.upload_total)}")
    print(
        f"Listen port:    {stats.listen_port} "
        f"({'open' if stats.port_open else 'closed'})"
    )
    print(f"Daemon PID:     {stats.pid}")


def _create_client(args) -> RtorrentClient:
    return RtorrentClient(
        host=args.host,
        port=args.port,
        path=args.path,
        username=args.username,
        password=args.password,
        timeout=args.timeout,
    ).connect()


def _run_query(client: RtorrentClient, args) -> int:
    if args.test:
        result = client.test_connection()
        if not result.success:
            print(f"Connection failed: {result.error}", file=sys.stderr)
            return 1
        print(f"Connected to rTorrent {result.version}")
    elif args.stats:
        _print_stats(client.stats())
    elif args.trackers:
        _print_trackers(client.trackers(args.trackers))
    elif args.peers:
        _print_peers(client.peers(args.peers))
    elif args.files:
        _print_files(client.files(args.files))
    else:
        _print_torrents(client.torrents())

    return 0


def _run_action(client: RtorrentClient, args) -> bool:
    """Run the requested mutation, if any.

    Returns:
        True if an action was requested and run
    """
    if args.add_torrent:
        options = AddOptions(
            start=not args.paused,
            label=args.label,
            directory=args.directory,
            priority=args.priority,
        )
        info_hash = client.add_torrent(args.add_torrent, options)
        print(f"Added torrent {info_hash or args.add_torrent}")
    elif args.start:
        client.start_torrent(args.start)
    elif args.stop:
        client.stop_torrent(args.stop)
    elif args.close:
        client.close_torrent(args.close)
    elif args.remove:
        client.remove_torrent(args.remove)
    elif args.set_label:
        client.set_label(*args.set_label)
    elif args.set_priority:
        client.set_priority(*args.set_priority)
    else:
        return False

    return True


def _handle_profiles_command():
    """Handle --profiles command to list available profiles."""
    profiles = get_available_profiles()
    if profiles:
        print("Available profiles:")
        for profile in profiles:
            print(f"  - {profile}")
    else:
        print("No profiles found")
    sys.exit(0)


def _handle_create_config_command(profile: str | None):
    """Handle --create-config command to create config file."""
    config_path = get_config_path(profile)
    create_default_config(config_path)
    if profile:
        print(f"Profile config file created: {config_path}")
    else:
        print(f"Config file created: {config_path}")
    sys.exit(0)


def _handle_commands(args) -> None:
    if args.profiles:
        _handle_profiles_command()

    if args.create_config:
        _handle_create_config_command(getattr(args, "profile", None))


@log_time
def main(argv: list[str] | None = None) -> int:
    """Parse arguments, run one query or action and return exit status."""
    parser = _setup_argument_parser(__version__)
    args = parser.parse_args(argv)

    _handle_commands(args)

    profile = getattr(args, "profile", None)
    config = load_config(profile)
    merge_config_with_args(config, args)

    init_logger(args.log_level)

    logger.info(f"Start rtgate {__version__}...")
    if profile:
        logger.info(f"Using configuration profile: {profile}")

    client = _create_client(args)
    try:
        if _run_action(client, args):
            return 0
        return _run_query(client, args)
    except ClientError as e:
        print(f"rTorrent request failed: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Failed to add torrent: {e}", file=sys.stderr)
        return 1
    finally:
        client.disconnect()


def cli():
    """CLI entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli()
