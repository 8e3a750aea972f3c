import json
import os
from typing import Any, List

DEFAULT_LEAGUES_FILE = os.environ.get("AT_LEAGUES_FILE", "leagues.json")
DEFAULT_RESULTS_PATH = os.environ.get("AT_RESULTS_PATH", os.path.join("data", "results.json"))
DEFAULT_CACHE_DIR = os.environ.get("AT_CACHE_DIR", ".cache")

# rows shown per league by the table renderers; the engine never truncates
DISPLAY_LIMIT = 200


def _normalize_ids(raw: Any, source: str) -> List[str]:
    if not isinstance(raw, list):
        raise ValueError(f"{source}: expected a JSON list of league ids")
    out: List[str] = []
    for item in raw:
        if isinstance(item, bool) or not isinstance(item, (str, int)):
            raise ValueError(f"{source}: league id {item!r} is not a string")
        lid = str(item).strip()
        if lid and lid not in out:
            out.append(lid)
    return out


def load_league_ids(path: str = DEFAULT_LEAGUES_FILE) -> List[str]:
    """Read league ids from a JSON list such as ``["1180...", "1181..."]``."""
    with open(path, 'r', encoding='utf-8') as fh:
        return _normalize_ids(json.load(fh), path)


def parse_league_input(text: str) -> List[str]:
    """Split comma-separated league ids typed into the live page."""
    return _normalize_ids([s for s in (text or '').split(',')], 'input')
