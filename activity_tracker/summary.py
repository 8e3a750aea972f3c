"""Per-league leaderboards shared by the live page and the batch writer."""
import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, Union

from .aggregator import aggregate
from .collector import collect
from .errors import DirectoryUnavailable, LeagueProcessingFailed
from .models import LeaderboardEntry, LeagueFailure, LeagueSummary
from .scoring import rank

logger = logging.getLogger(__name__)

LeagueResult = Union[LeagueSummary, LeagueFailure]


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace('+00:00', 'Z')


def summarize_league(client, league_id: str, max_week: int, directory) -> LeagueSummary:
    collected = collect(client, league_id, max_week)
    entries = rank(aggregate(collected.records), directory)
    return LeagueSummary(league_id=collected.league_id, entries=entries, failed_weeks=collected.failed_weeks)


def build_summaries(
    client,
    league_ids: Iterable[str],
    max_week: int,
    directory_cache,
    *,
    stamp: bool = False,
    allow_raw_ids: bool = False,
    now: Callable[[], str] = utc_now_iso,
) -> Dict[str, LeagueResult]:
    """Build one result per requested league id, in request order.

    The player directory is resolved once, before any league is touched.
    ``DirectoryUnavailable`` aborts the run unless ``allow_raw_ids`` is set,
    in which case every leaderboard shows raw player ids. A league that fails
    for any other reason gets a ``LeagueFailure`` and the run moves on.
    """
    try:
        directory = directory_cache.get_player_directory()
    except DirectoryUnavailable as e:
        if not allow_raw_ids:
            raise
        logger.warning("%s; ranking with raw player ids", e)
        directory = {}

    out: Dict[str, LeagueResult] = {}
    for lid in league_ids:
        key = lid.strip() if isinstance(lid, str) else str(lid)
        try:
            result: LeagueResult = summarize_league(client, key, max_week, directory)
        except Exception as e:
            failure = LeagueProcessingFailed(key, f"{type(e).__name__}: {e}")
            logger.warning("league failed: %s", failure)
            result = LeagueFailure(league_id=key, reason=failure.reason)
        if stamp:
            result.computed_at = now()
        out[key] = result
    return out


def result_to_dict(result: LeagueResult) -> Dict[str, Any]:
    if isinstance(result, LeagueFailure):
        return {
            'league_id': result.league_id,
            'status': 'failed',
            'computed_at': result.computed_at,
            'error': result.reason,
            'summary': [],
        }
    return {
        'league_id': result.league_id,
        'status': 'ok',
        'computed_at': result.computed_at,
        'summary': [e.to_dict() for e in result.entries],
        'failed_weeks': list(result.failed_weeks),
    }


def _entry_from_dict(r: Any) -> LeaderboardEntry:
    if not isinstance(r, dict) or r.get('player_id') in (None, ''):
        raise ValueError(f"summary row without a player_id: {r!r}")
    pid = str(r['player_id'])
    try:
        return LeaderboardEntry(
            player_id=pid,
            name=r.get('name') or pid,
            score=int(r.get('score') or 0),
            adds=int(r.get('adds') or 0),
            trades=int(r.get('trades') or 0),
            drops=int(r.get('drops') or 0),
        )
    except (TypeError, ValueError) as e:
        raise ValueError(f"bad counters for player {pid}: {e}") from e


def result_from_dict(league_id: str, raw: Any) -> LeagueResult:
    if not isinstance(raw, dict):
        raise ValueError(f"league {league_id}: expected an object, got {type(raw).__name__}")
    if raw.get('status') == 'failed':
        return LeagueFailure(league_id=league_id, reason=raw.get('error') or 'unknown error',
                             computed_at=raw.get('computed_at'))
    rows = raw.get('summary') or []
    failed_weeks = raw.get('failed_weeks') or []
    if not isinstance(rows, list) or not isinstance(failed_weeks, list):
        raise ValueError(f"league {league_id}: summary and failed_weeks must be lists")
    try:
        entries = [_entry_from_dict(r) for r in rows]
    except ValueError as e:
        raise ValueError(f"league {league_id}: {e}") from e
    return LeagueSummary(league_id=league_id, entries=entries, computed_at=raw.get('computed_at'),
                         failed_weeks=list(failed_weeks))


def summaries_to_json(results: Dict[str, LeagueResult]) -> Dict[str, Any]:
    return {lid: result_to_dict(r) for lid, r in results.items()}


def write_results(path: str, results: Dict[str, LeagueResult]) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as fh:
        json.dump(summaries_to_json(results), fh, indent=2)


def load_results(path: str) -> Dict[str, LeagueResult]:
    with open(path, 'r', encoding='utf-8') as fh:
        raw = json.load(fh)
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: expected an object keyed by league id")
    try:
        return {str(lid): result_from_dict(str(lid), body) for lid, body in raw.items()}
    except ValueError as e:
        raise ValueError(f"{path}: {e}") from e

