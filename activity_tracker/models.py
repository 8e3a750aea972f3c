from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

# player_id -> raw Sleeper player record (first_name, last_name, ...)
PlayerDirectory = Mapping[str, Dict[str, Any]]


@dataclass(frozen=True)
class TransactionRecord:
    kind: Optional[str]
    adds: Optional[Mapping[str, Any]] = None
    drops: Optional[Mapping[str, Any]] = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, obj: Any) -> 'TransactionRecord':
        """Build a record from one item of a /transactions/{week} payload.

        Sleeper sends ``null`` for empty adds/drops; anything that is not a
        mapping is treated as absent. Unknown fields are kept in ``extra``.
        """
        if not isinstance(obj, Mapping):
            return cls(kind=None)
        kind = obj.get('type')
        adds = obj.get('adds')
        drops = obj.get('drops')
        return cls(
            kind=kind if isinstance(kind, str) and kind else None,
            adds=adds if isinstance(adds, Mapping) else None,
            drops=drops if isinstance(drops, Mapping) else None,
            extra={k: v for k, v in obj.items() if k not in ('type', 'adds', 'drops')},
        )


@dataclass
class PlayerCounters:
    adds: int = 0
    drops: int = 0
    trades: int = 0


@dataclass(frozen=True)
class LeaderboardEntry:
    player_id: str
    name: str
    score: int
    adds: int
    trades: int
    drops: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'player_id': self.player_id,
            'name': self.name,
            'adds': self.adds,
            'trades': self.trades,
            'drops': self.drops,
            'score': self.score,
        }


@dataclass
class LeagueSummary:
    league_id: str
    entries: List[LeaderboardEntry]
    computed_at: Optional[str] = None
    failed_weeks: List[int] = field(default_factory=list)

    ok = True


@dataclass
class LeagueFailure:
    """Explicit marker for a league that could not be summarized."""
    league_id: str
    reason: str
    computed_at: Optional[str] = None

    ok = False
