import logging
from dataclasses import dataclass, field
from typing import List, Optional

import requests

from .errors import InvalidLeagueId, WeekFetchFailed
from .models import TransactionRecord
from .sleeper_api import SleeperAPIError

logger = logging.getLogger(__name__)


@dataclass
class WeekOutcome:
    week: int
    count: int = 0
    error: Optional[WeekFetchFailed] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class CollectionResult:
    league_id: str
    records: List[TransactionRecord] = field(default_factory=list)
    outcomes: List[WeekOutcome] = field(default_factory=list)

    @property
    def failed_weeks(self) -> List[int]:
        return [o.week for o in self.outcomes if not o.ok]


def check_league_id(league_id) -> str:
    if not isinstance(league_id, str) or not league_id.strip():
        raise InvalidLeagueId(f"league id must be a non-empty string, got {league_id!r}")
    lid = league_id.strip()
    if '/' in lid or '?' in lid or '#' in lid:
        raise InvalidLeagueId(f"league id {lid!r} is not path-safe")
    return lid


def collect(client, league_id: str, max_week: int) -> CollectionResult:
    """Pull transactions for weeks 1..max_week of one league.

    A failed week is recorded in its outcome and contributes no records; the
    remaining weeks are still fetched.
    """
    lid = check_league_id(league_id)
    result = CollectionResult(league_id=lid)
    for week in range(1, max_week + 1):
        try:
            data = client.get_transactions(lid, week)
        except (SleeperAPIError, requests.RequestException, ValueError) as e:
            failure = WeekFetchFailed(lid, week, str(e))
            logger.warning("skipping transactions for %s", failure)
            result.outcomes.append(WeekOutcome(week, error=failure))
            continue
        if not isinstance(data, list):
            # empty weeks sometimes come back as null
            data = []
        result.records.extend(TransactionRecord.from_api(t) for t in data)
        result.outcomes.append(WeekOutcome(week, count=len(data)))
    return result
