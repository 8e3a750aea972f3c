import argparse
import json
import logging
from typing import Dict, List, Optional

import requests

from .config import (
    DEFAULT_CACHE_DIR,
    DEFAULT_LEAGUES_FILE,
    DEFAULT_RESULTS_PATH,
    DISPLAY_LIMIT,
    load_league_ids,
)
from .errors import DirectoryUnavailable
from .player_cache import FileSnapshotStore, MemorySnapshotStore, PlayerDirectoryCache
from .sleeper_api import SleeperAPIError, SleeperClient, resolve_max_week
from .summary import LeagueResult, build_summaries, load_results, summaries_to_json, write_results

logger = logging.getLogger(__name__)


def print_tables(results: Dict[str, LeagueResult], limit: int = DISPLAY_LIMIT) -> None:
    print('SUMMARY_TABLE_START')
    for league_id, res in results.items():
        print(f"League {league_id}")
        if not res.ok:
            print(f"  FAILED: {res.reason}")
            continue
        header = f"{'Player':30} {'Score':>6} {'Adds':>5} {'Trades':>6} {'Drops':>5}"
        print(header)
        print('-' * len(header))
        for e in res.entries[:limit]:
            print(f"{e.name[:30]:30} {e.score:6d} {e.adds:5d} {e.trades:6d} {e.drops:5d}")
        if res.failed_weeks:
            print(f"  (weeks skipped: {', '.join(str(w) for w in res.failed_weeks)})")
    print('SUMMARY_TABLE_END')


def compute(league_ids: List[str], cache_dir: Optional[str], max_week: Optional[int] = None,
            stamp: bool = False, allow_raw_ids: bool = False) -> Dict[str, LeagueResult]:
    """Run the whole pipeline against the live Sleeper API."""
    client = SleeperClient()
    if max_week is None:
        max_week = resolve_max_week(client.get_state())
    logger.info("pulling transactions for weeks 1-%d of %d league(s)", max_week, len(league_ids))
    store = FileSnapshotStore(cache_dir) if cache_dir else MemorySnapshotStore()
    players = PlayerDirectoryCache(client.get_players, store)
    return build_summaries(client, league_ids, max_week, players, stamp=stamp, allow_raw_ids=allow_raw_ids)


def week_number(value: str) -> int:
    try:
        week = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid week: {value!r}") from None
    if week < 1:
        raise argparse.ArgumentTypeError(f"week must be 1 or later, got {week}")
    return week


def _league_ids_from_args(args) -> List[str]:
    if getattr(args, 'league', None):
        return [str(lid).strip() for lid in args.league if str(lid).strip()]
    return load_league_ids(args.leagues)


def cmd_update(args) -> int:
    try:
        league_ids = _league_ids_from_args(args)
    except (OSError, ValueError) as e:
        logger.error("could not load league ids: %s", e)
        return 1
    try:
        results = compute(league_ids, args.cache_dir, args.max_week, stamp=True, allow_raw_ids=args.allow_raw_ids)
    except (SleeperAPIError, requests.RequestException, ValueError) as e:
        logger.error("could not read NFL state: %s", e)
        return 1
    except DirectoryUnavailable as e:
        logger.error("%s", e)
        return 1
    write_results(args.output, results)
    failed = [lid for lid, r in results.items() if not r.ok]
    print(f"Wrote {args.output} ({len(results) - len(failed)} ok, {len(failed)} failed)")
    return 0


def cmd_show(args) -> int:
    if args.results:
        try:
            results = load_results(args.results)
        except (OSError, ValueError) as e:
            logger.error("could not load results: %s", e)
            return 1
    else:
        try:
            league_ids = _league_ids_from_args(args)
        except (OSError, ValueError) as e:
            logger.error("could not load league ids: %s", e)
            return 1
        try:
            results = compute(league_ids, args.cache_dir, args.max_week, allow_raw_ids=args.allow_raw_ids)
        except (SleeperAPIError, requests.RequestException, ValueError, DirectoryUnavailable) as e:
            logger.error("%s", e)
            return 1
    if args.json:
        print(json.dumps(summaries_to_json(results), indent=2))
    else:
        print_tables(results, limit=args.limit)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog='activity-tracker')
    parser.add_argument('--log-level', default='INFO', help='Logging level (default INFO)')
    sub = parser.add_subparsers(dest='cmd')

    def add_common(p):
        p.add_argument('--leagues', default=DEFAULT_LEAGUES_FILE, help='JSON file with a list of league ids')
        p.add_argument('--league', action='append', help='League id; repeat for several (overrides --leagues)')
        p.add_argument('--cache-dir', default=DEFAULT_CACHE_DIR, help='Directory for the player directory cache ("" disables)')
        p.add_argument('--max-week', type=week_number, default=None, help='Last week to pull (default: current NFL week)')
        p.add_argument('--allow-raw-ids', action='store_true', help='Show raw player ids if the player directory cannot be loaded')

    upd = sub.add_parser('update', help='Recompute all leagues and write the results file')
    add_common(upd)
    upd.add_argument('--output', default=DEFAULT_RESULTS_PATH, help='Where to write results JSON')

    show = sub.add_parser('show', help='Print the most active players per league')
    add_common(show)
    show.add_argument('--results', help='Render a saved results file instead of fetching')
    show.add_argument('--limit', type=int, default=DISPLAY_LIMIT, help='Rows per league')
    show.add_argument('--json', action='store_true', help='Print JSON instead of tables')

    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.INFO),
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    if args.cmd == 'update':
        return cmd_update(args)
    if args.cmd == 'show':
        return cmd_show(args)
    parser.print_help()
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
