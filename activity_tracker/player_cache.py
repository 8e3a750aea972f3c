"""Time-to-live cache for the Sleeper player directory.

The directory is large (~5MB) and changes slowly, so a snapshot is kept for
24 hours. A snapshot is always replaced wholesale, never patched.
"""
import hashlib
import json
import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from .errors import DirectoryUnavailable
from .models import PlayerDirectory

logger = logging.getLogger(__name__)

CACHE_KEY = 'sleeper_players_cache'
TTL_SECONDS = 24 * 3600

# fields kept per player in the stored snapshot
KEEP_FIELDS = ('first_name', 'last_name', 'full_name', 'position', 'team')


@dataclass(frozen=True)
class Snapshot:
    fetched_at: float
    data: Dict[str, Dict[str, Any]]


class MemorySnapshotStore:
    def __init__(self):
        self._items: Dict[str, Snapshot] = {}

    def load(self, key: str) -> Optional[Snapshot]:
        return self._items.get(key)

    def save(self, key: str, snapshot: Snapshot) -> None:
        self._items[key] = snapshot

    def delete(self, key: str) -> None:
        self._items.pop(key, None)


class FileSnapshotStore:
    """One JSON file per key under ``cache_dir``: ``{"ts": ..., "data": {...}}``."""

    def __init__(self, cache_dir: str):
        self.cache_dir = cache_dir

    def _path(self, key: str) -> str:
        return os.path.join(self.cache_dir, hashlib.sha256(key.encode()).hexdigest() + '.json')

    def load(self, key: str) -> Optional[Snapshot]:
        path = self._path(key)
        if not os.path.exists(path):
            return None
        try:
            with open(path, 'r', encoding='utf-8') as fh:
                raw = json.load(fh)
            return Snapshot(fetched_at=float(raw['ts']), data=dict(raw['data']))
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("ignoring unreadable player cache %s: %s", path, e)
            return None

    def save(self, key: str, snapshot: Snapshot) -> None:
        os.makedirs(self.cache_dir, exist_ok=True)
        path = self._path(key)
        tmp = path + '.tmp'
        with open(tmp, 'w', encoding='utf-8') as fh:
            json.dump({'ts': snapshot.fetched_at, 'data': snapshot.data}, fh)
        os.replace(tmp, path)

    def delete(self, key: str) -> None:
        try:
            os.remove(self._path(key))
        except FileNotFoundError:
            pass


def slim_players(players: Any) -> Dict[str, Dict[str, Any]]:
    out: Dict[str, Dict[str, Any]] = {}
    if not isinstance(players, dict):
        return out
    for pid, p in players.items():
        if isinstance(p, dict):
            out[str(pid)] = {k: p.get(k) for k in KEEP_FIELDS if p.get(k) is not None}
    return out


class PlayerDirectoryCache:
    """Serve the player directory from ``store`` while it is younger than ``ttl``.

    ``fetch`` is any callable returning the full player mapping, normally
    ``SleeperClient.get_players``. ``clock`` returns epoch seconds.
    """

    def __init__(self, fetch: Callable[[], Any], store=None, clock: Callable[[], float] = time.time,
                 ttl: float = TTL_SECONDS, key: str = CACHE_KEY):
        self.fetch = fetch
        self.store = store if store is not None else MemorySnapshotStore()
        self.clock = clock
        self.ttl = ttl
        self.key = key
        self._snapshot: Optional[Snapshot] = None

    def _fresh(self, snap: Optional[Snapshot], now: float) -> bool:
        return snap is not None and now - snap.fetched_at < self.ttl

    def get_player_directory(self) -> PlayerDirectory:
        now = self.clock()
        if self._fresh(self._snapshot, now):
            return self._snapshot.data
        stored = self.store.load(self.key)
        if self._fresh(stored, now):
            self._snapshot = stored
            return stored.data

        logger.info("refreshing player directory")
        try:
            players = self.fetch()
        except Exception as e:
            raise DirectoryUnavailable(f"player directory fetch failed: {e}") from e
        if not isinstance(players, dict):
            raise DirectoryUnavailable(f"unexpected player directory payload: {type(players).__name__}")

        snap = Snapshot(fetched_at=self.clock(), data=slim_players(players))
        try:
            self.store.save(self.key, snap)
        except (OSError, TypeError, ValueError) as e:
            logger.warning("could not persist player directory: %s", e)
        self._snapshot = snap
        return snap.data

    def invalidate(self) -> None:
        """Forget the current snapshot so the next call refetches."""
        self._snapshot = None
        self.store.delete(self.key)
