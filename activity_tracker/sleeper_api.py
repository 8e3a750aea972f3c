import requests
from typing import Any, Dict, Optional

BASE = 'https://api.sleeper.app/v1'

DEFAULT_MAX_WEEK = 18


class SleeperAPIError(Exception):
    pass


class SleeperClient:
    def __init__(self, base_url: str = BASE, timeout: int = 10, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({'User-Agent': 'activity-tracker/0.1'})

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        resp = self.session.get(url, params=params, timeout=self.timeout)
        if not resp.ok:
            raise SleeperAPIError(f"GET {url} failed: {resp.status_code} {resp.text}")
        return resp.json()

    def get_state(self) -> Dict[str, Any]:
        """Return the current NFL state (season, week, season_type, ...)."""
        return self._get('/state/nfl')

    def get_players(self) -> Dict[str, Any]:
        """Return mapping of player_id -> player object (large payload, ~5MB)"""
        return self._get('/players/nfl')

    def get_transactions(self, league_id: str, week: int) -> Any:
        # Sleeper calls the week a "round" for transactions; it lives in the path
        return self._get(f'/league/{league_id}/transactions/{week}')


def resolve_max_week(state: Any) -> int:
    """Last week to pull transactions for, given a /state/nfl payload.

    A missing, zero or non-integer week falls back to the full regular season.
    """
    week = state.get('week') if isinstance(state, dict) else None
    if isinstance(week, bool) or not isinstance(week, int):
        week = None
    return max(1, week or DEFAULT_MAX_WEEK)
