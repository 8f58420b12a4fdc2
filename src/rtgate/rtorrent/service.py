"""Future-returning facade over RtorrentClient."""

from collections.abc import Callable, Sequence
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, TypeVar

from .client import RtorrentClient
from .models import (
    AddOptions,
    ConnectionResult,
    GlobalStats,
    Peer,
    Torrent,
    TorrentFile,
    Tracker,
)

T = TypeVar("T")


class RtorrentService:
    """Run client operations off the caller's thread.

    A single worker executes all operations, so calls against the one
    daemon connection are serialized in submission order. Errors raised
    by mutations surface from Future.result().

    Callers impose their own timeouts, e.g. ``future.result(timeout=10)``.
    """

    def __init__(
        self, client: RtorrentClient, executor: Executor | None = None
    ) -> None:
        self.client = client
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="rtgate"
        )

    def submit(
        self, fn: Callable[..., T], /, *args: Any, **kwargs: Any
    ) -> "Future[T]":
        return self._executor.submit(fn, *args, **kwargs)

    def test_connection(self) -> "Future[ConnectionResult]":
        return self.submit(self.client.test_connection)

    def torrents(
        self, view: str = RtorrentClient.DEFAULT_VIEW
    ) -> "Future[list[Torrent]]":
        return self.submit(self.client.torrents, view)

    def trackers(
        self, hashes: Sequence[str]
    ) -> "Future[dict[str, list[Tracker]]]":
        return self.submit(self.client.trackers, list(hashes))

    def peers(self, hashes: Sequence[str]) -> "Future[dict[str, list[Peer]]]":
        return self.submit(self.client.peers, list(hashes))

    def files(self, hash: str) -> "Future[list[TorrentFile]]":
        return self.submit(self.client.files, hash)

    def stats(self) -> "Future[GlobalStats]":
        return self.submit(self.client.stats)

    def default_directory(self) -> "Future[str]":
        return self.submit(self.client.default_directory)

    def add_torrent(
        self, value: str, options: AddOptions | None = None
    ) -> "Future[str | None]":
        return self.submit(self.client.add_torrent, value, options)

    def add_torrent_raw(
        self, data: bytes, options: AddOptions | None = None
    ) -> "Future[None]":
        return self.submit(self.client.add_torrent_raw, data, options)

    def add_magnet(
        self, magnet_uri: str, options: AddOptions | None = None
    ) -> "Future[str | None]":
        return self.submit(self.client.add_magnet, magnet_uri, options)

    def start_torrent(self, hash: str) -> "Future[None]":
        return self.submit(self.client.start_torrent, hash)

    def stop_torrent(self, hash: str) -> "Future[None]":
        return self.submit(self.client.stop_torrent, hash)

    def close_torrent(self, hash: str) -> "Future[None]":
        return self.submit(self.client.close_torrent, hash)

    def remove_torrent(self, hash: str) -> "Future[None]":
        return self.submit(self.client.remove_torrent, hash)

    def set_label(self, hash: str, label: str) -> "Future[None]":
        return self.submit(self.client.set_label, hash, label)

    def set_priority(self, hash: str, priority: int | str) -> "Future[None]":
        return self.submit(self.client.set_priority, hash, priority)

    def set_label_and_priority(
        self, hash: str, label: str, priority: int | str
    ) -> "Future[None]":
        return self.submit(
            self.client.set_label_and_priority, hash, label, priority
        )

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "RtorrentService":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()
