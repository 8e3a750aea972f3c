from dataclasses import dataclass
from typing import Dict, List, Optional

from .models import LeaderboardEntry, PlayerCounters, PlayerDirectory


@dataclass(frozen=True)
class ActivityWeights:
    add: int = 1
    trade: int = 3
    drop: int = 0


DEFAULT_WEIGHTS = ActivityWeights()


def score(m: PlayerCounters, weights: ActivityWeights = DEFAULT_WEIGHTS) -> int:
    return m.adds * weights.add + m.trades * weights.trade + m.drops * weights.drop


def display_name(directory: Optional[PlayerDirectory], player_id: str) -> str:
    """"First Last" for a known player, otherwise the raw id."""
    p = directory.get(player_id) if directory else None
    if not isinstance(p, dict):
        return player_id
    name = f"{p.get('first_name') or ''} {p.get('last_name') or ''}".strip()
    # team defenses only carry full_name in some snapshots
    return name or p.get('full_name') or player_id


def rank(counters: Dict[str, PlayerCounters], directory: Optional[PlayerDirectory] = None,
         weights: ActivityWeights = DEFAULT_WEIGHTS) -> List[LeaderboardEntry]:
    entries = [
        LeaderboardEntry(
            player_id=pid,
            name=display_name(directory, pid),
            score=score(m, weights),
            adds=m.adds,
            trades=m.trades,
            drops=m.drops,
        )
        for pid, m in counters.items()
    ]
    # sorted() is stable, so equal scores keep first-appearance order
    return sorted(entries, key=lambda e: -e.score)
