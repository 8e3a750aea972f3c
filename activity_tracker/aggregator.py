"""Fold transaction records into per-player activity counters."""
import math
from typing import Any, Dict, Iterable, Mapping

from .models import PlayerCounters, TransactionRecord

TRADE = 'trade'


def parse_quantity(value: Any) -> int:
    """Quantity attached to a player in an adds/drops mapping.

    Positive whole numbers (or strings holding one) are used as-is; anything
    else, including missing, zero, negative and non-numeric values, counts
    as a single unit.
    """
    if isinstance(value, bool) or value is None:
        return 1
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return 1
    if isinstance(value, int):
        return value if value > 0 else 1
    if isinstance(value, float) and math.isfinite(value) and value > 0 and value.is_integer():
        return int(value)
    return 1


def _bump(metrics: Dict[str, PlayerCounters], mapping: Mapping[str, Any], attr: str) -> None:
    for pid, qty in mapping.items():
        m = metrics.setdefault(str(pid), PlayerCounters())
        setattr(m, attr, getattr(m, attr) + parse_quantity(qty))


def aggregate(records: Iterable[TransactionRecord]) -> Dict[str, PlayerCounters]:
    """Return player_id -> counters, keyed in order of first appearance."""
    metrics: Dict[str, PlayerCounters] = {}
    for t in records:
        if not t.kind:
            continue
        if t.adds is not None:
            _bump(metrics, t.adds, 'adds')
        if t.drops is not None:
            _bump(metrics, t.drops, 'drops')
        # one trade per player that changed hands, whatever the add quantity;
        # pick-only trades have no adds and count for nobody
        if t.kind == TRADE and t.adds is not None:
            for pid in t.adds:
                metrics.setdefault(str(pid), PlayerCounters()).trades += 1
    return metrics
