#!/usr/bin/env python3
"""Report (and optionally rewrite) transactions still tagged with legacy moods."""

from __future__ import annotations

import argparse
import sqlite3
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from mood_budget import db
from mood_budget.moods import LEGACY_MOOD_ALIASES


def main(apply: bool = False) -> int:
    print(f"Database: {db.DB_PATH}")
    if not Path(db.DB_PATH).exists():
        print("No database yet. Nothing to migrate.")
        return 0

    try:
        counts = db.count_legacy_moods()
    except sqlite3.OperationalError as e:
        print(f"Nothing to migrate ({e}).")
        return 0

    if not counts:
        print("All transactions use the current mood tags. 🎉")
        return 0

    print("Legacy mood tags found:")
    for alias, count in sorted(counts.items()):
        print(f"  {alias:>6} -> {LEGACY_MOOD_ALIASES[alias].value:<8} {count} transaction(s)")

    if not apply:
        print("\nRun again with --apply to rewrite them.")
        return 1

    changed = db.migrate_legacy_moods()
    print(f"\nRewrote {sum(changed.values())} transaction(s).")
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Migrate legacy mood tags (rad/good/meh/bad/awful).')
    parser.add_argument('--apply', action='store_true', help='Rewrite the tags instead of only reporting them')
    args = parser.parse_args()
    sys.exit(main(apply=args.apply))
