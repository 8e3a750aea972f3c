"""Failure types for the activity tracker.

Per-week failures are contained by the collector, per-league failures by the
summary builder. Only ``DirectoryUnavailable`` is allowed to abort a run.
"""


class ActivityTrackerError(Exception):
    pass


class DirectoryUnavailable(ActivityTrackerError):
    """The player directory could not be served from cache nor fetched."""


class WeekFetchFailed(ActivityTrackerError):
    def __init__(self, league_id: str, week: int, reason: str):
        super().__init__(f"league {league_id} week {week}: {reason}")
        self.league_id = league_id
        self.week = week
        self.reason = reason


class LeagueProcessingFailed(ActivityTrackerError):
    def __init__(self, league_id: str, reason: str):
        super().__init__(f"league {league_id}: {reason}")
        self.league_id = league_id
        self.reason = reason


class InvalidLeagueId(ActivityTrackerError, ValueError):
    pass
