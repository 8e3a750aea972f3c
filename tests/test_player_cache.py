import json
import os
import tempfile
import unittest
from unittest import mock

from activity_tracker.errors import DirectoryUnavailable
from activity_tracker.player_cache import (
    CACHE_KEY,
    TTL_SECONDS,
    FileSnapshotStore,
    MemorySnapshotStore,
    PlayerDirectoryCache,
    Snapshot,
)

PLAYERS = {
    '100': {'first_name': 'Puka', 'last_name': 'Nacua', 'position': 'WR', 'team': 'LAR', 'college': 'BYU'},
    '200': {'first_name': 'Bo', 'last_name': 'Nix', 'position': 'QB', 'team': 'DEN'},
}


class FakeClock:
    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestPlayerDirectoryCache(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.fetch = mock.Mock(return_value=PLAYERS)
        self.store = MemorySnapshotStore()
        self.cache = PlayerDirectoryCache(self.fetch, self.store, clock=self.clock)

    def test_second_call_within_ttl_does_not_fetch(self):
        first = self.cache.get_player_directory()
        self.clock.now += TTL_SECONDS - 1
        second = self.cache.get_player_directory()
        self.assertEqual(self.fetch.call_count, 1)
        self.assertEqual(first, second)
        self.assertEqual(first['100']['first_name'], 'Puka')
        self.assertNotIn('college', first['100'])

    def test_call_after_ttl_refetches_once(self):
        self.cache.get_player_directory()
        self.clock.now += TTL_SECONDS
        self.cache.get_player_directory()
        self.cache.get_player_directory()
        self.assertEqual(self.fetch.call_count, 2)
        self.assertEqual(self.store.load(CACHE_KEY).fetched_at, self.clock.now)

    def test_fresh_snapshot_in_store_is_used(self):
        self.store.save(CACHE_KEY, Snapshot(fetched_at=self.clock.now - 60, data={'1': {'first_name': 'A'}}))
        self.assertEqual(self.cache.get_player_directory(), {'1': {'first_name': 'A'}})
        self.fetch.assert_not_called()

    def test_fetch_failure_raises_directory_unavailable(self):
        self.fetch.side_effect = RuntimeError('boom')
        with self.assertRaises(DirectoryUnavailable):
            self.cache.get_player_directory()

    def test_stale_snapshot_is_not_served_when_fetch_fails(self):
        self.store.save(CACHE_KEY, Snapshot(fetched_at=self.clock.now - TTL_SECONDS - 1, data={'1': {}}))
        self.fetch.side_effect = RuntimeError('offline')
        with self.assertRaises(DirectoryUnavailable):
            self.cache.get_player_directory()

    def test_non_mapping_payload_is_unavailable(self):
        self.fetch.return_value = ['not', 'a', 'dict']
        with self.assertRaises(DirectoryUnavailable):
            self.cache.get_player_directory()

    def test_invalidate_forces_refetch(self):
        self.cache.get_player_directory()
        self.cache.invalidate()
        self.cache.get_player_directory()
        self.assertEqual(self.fetch.call_count, 2)

    def test_failed_write_still_returns_fresh_data(self):
        self.store.save = mock.Mock(side_effect=OSError('disk full'))
        with self.assertLogs('activity_tracker.player_cache', level='WARNING') as logs:
            data = self.cache.get_player_directory()
        self.assertEqual(data['200']['last_name'], 'Nix')
        self.assertIn('disk full', logs.output[0])
        # served from memory on the next call even though nothing was stored
        self.assertEqual(self.cache.get_player_directory(), data)
        self.assertEqual(self.fetch.call_count, 1)


class TestFileSnapshotStore(unittest.TestCase):
    def test_persists_across_cache_instances(self):
        clock = FakeClock()
        with tempfile.TemporaryDirectory() as tmp:
            fetch = mock.Mock(return_value=PLAYERS)
            PlayerDirectoryCache(fetch, FileSnapshotStore(tmp), clock=clock).get_player_directory()
            fetch.side_effect = AssertionError('Should not refetch when cached')
            clock.now += 3600
            data = PlayerDirectoryCache(fetch, FileSnapshotStore(tmp), clock=clock).get_player_directory()
            self.assertEqual(data['200']['last_name'], 'Nix')
            self.assertEqual(fetch.call_count, 1)

    def test_corrupt_file_is_a_miss(self):
        with tempfile.TemporaryDirectory() as tmp:
            store = FileSnapshotStore(tmp)
            os.makedirs(tmp, exist_ok=True)
            with open(store._path(CACHE_KEY), 'w', encoding='utf-8') as fh:
                fh.write('{not json')
            self.assertIsNone(store.load(CACHE_KEY))

    def test_file_layout(self):
        with tempfile.TemporaryDirectory() as tmp:
            store = FileSnapshotStore(tmp)
            store.save(CACHE_KEY, Snapshot(fetched_at=12.5, data={'1': {'first_name': 'A'}}))
            with open(store._path(CACHE_KEY), 'r', encoding='utf-8') as fh:
                raw = json.load(fh)
            self.assertEqual(raw, {'ts': 12.5, 'data': {'1': {'first_name': 'A'}}})
            store.delete(CACHE_KEY)
            self.assertIsNone(store.load(CACHE_KEY))


if __name__ == '__main__':
    unittest.main()
