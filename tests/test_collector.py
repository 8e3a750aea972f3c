import unittest
from unittest import mock

import requests

from activity_tracker.collector import collect
from activity_tracker.errors import InvalidLeagueId
from activity_tracker.sleeper_api import SleeperAPIError


class TestCollect(unittest.TestCase):
    def setUp(self):
        self.client = mock.Mock()

    def test_failed_week_is_skipped_and_later_weeks_still_fetched(self):
        def get_transactions(league_id, week):
            if week == 2:
                raise SleeperAPIError('GET failed: 500')
            return [{'type': 'waiver', 'adds': {str(week): 1}}]

        self.client.get_transactions.side_effect = get_transactions
        result = collect(self.client, 'L1', 4)
        self.assertEqual([r.adds for r in result.records], [{'1': 1}, {'3': 1}, {'4': 1}])
        self.assertEqual(result.failed_weeks, [2])
        self.assertEqual(self.client.get_transactions.call_count, 4)
        self.assertIn('week 2', str(result.outcomes[1].error))

    def test_network_errors_are_contained(self):
        self.client.get_transactions.side_effect = [
            requests.ConnectionError('reset'),
            [{'type': 'free_agent', 'adds': {'9': 1}}],
        ]
        result = collect(self.client, 'L1', 2)
        self.assertEqual(len(result.records), 1)
        self.assertEqual(result.failed_weeks, [1])

    def test_non_list_payload_counts_as_empty(self):
        self.client.get_transactions.side_effect = [None, {'error': 'x'}, [{'type': 'trade'}]]
        result = collect(self.client, 'L1', 3)
        self.assertEqual(len(result.records), 1)
        self.assertEqual(result.failed_weeks, [])
        self.assertEqual([o.count for o in result.outcomes], [0, 0, 1])

    def test_keeps_week_then_api_order(self):
        self.client.get_transactions.side_effect = [
            [{'type': 'waiver', 'adds': {'a': 1}}, {'type': 'waiver', 'adds': {'b': 1}}],
            [{'type': 'waiver', 'adds': {'c': 1}}],
        ]
        result = collect(self.client, 'L1', 2)
        self.assertEqual([list(r.adds)[0] for r in result.records], ['a', 'b', 'c'])

    def test_bad_league_id_raises(self):
        for bad in ('', '   ', None, '12/34'):
            with self.assertRaises(InvalidLeagueId):
                collect(self.client, bad, 3)
        self.client.get_transactions.assert_not_called()


if __name__ == '__main__':
    unittest.main()
