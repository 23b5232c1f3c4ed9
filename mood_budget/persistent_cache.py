"""UI preferences that survive a browser reload.

The transaction list remembers the last profile, mood filter and sort
order in a small JSON file.  Values read back are sanitized: unknown
keys are dropped, legacy mood tags are upgraded and anything that no
longer validates falls back to the default.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from . import config
from .data_processing import SORT_ORDERS
from .exceptions import InvalidMoodError
from .moods import parse_mood

logger = logging.getLogger(__name__)

DEFAULT_CACHE: Dict[str, Any] = {
    'user_id': '',
    'mood_filter': [],
    'sort_order': 'desc',
}


def _clean_moods(raw: Any) -> list:
    if not isinstance(raw, list):
        return []
    moods = []
    for value in raw:
        try:
            mood = parse_mood(value).value
        except InvalidMoodError:
            continue
        if mood not in moods:
            moods.append(mood)
    return moods


def sanitize_cache(data: Any) -> Dict[str, Any]:
    cache = dict(DEFAULT_CACHE, mood_filter=[])
    if not isinstance(data, dict):
        return cache
    if isinstance(data.get('user_id'), str):
        cache['user_id'] = data['user_id'].strip()
    cache['mood_filter'] = _clean_moods(data.get('mood_filter'))
    if data.get('sort_order') in SORT_ORDERS:
        cache['sort_order'] = data['sort_order']
    return cache


def load_cache(path: Optional[Path] = None) -> Dict[str, Any]:
    target = Path(path or config.CACHE_PATH)
    if not target.exists():
        return sanitize_cache(None)
    try:
        data = json.loads(target.read_text(encoding='utf-8'))
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Ignoring unreadable preference cache %s: %s", target, e)
        data = None
    return sanitize_cache(data)


def save_cache(cache: Dict[str, Any], path: Optional[Path] = None) -> None:
    target = Path(path or config.CACHE_PATH)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(sanitize_cache(cache), indent=2, sort_keys=True), encoding='utf-8')
