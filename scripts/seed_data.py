"""
CLI helper to provision the portfolio document store from a JSON file.

Usage:
  python scripts/seed_data.py --data data/initial-data.json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from portfolio.dependencies import get_document_store
from portfolio.errors import ValidationFailedError
from portfolio.seed import seed_portfolio


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed portfolio profile and projects")
    parser.add_argument(
        "--data",
        type=Path,
        default=ROOT / "data" / "initial-data.json",
        help="JSON file with 'profile' and 'projects' keys",
    )
    parser.add_argument(
        "--skip-projects",
        action="store_true",
        help="Only write the profile document",
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO)

    data = json.loads(args.data.read_text(encoding="utf-8"))
    if args.skip_projects:
        data.pop("projects", None)

    try:
        summary = seed_portfolio(get_document_store(), data)
    except ValidationFailedError as e:
        print(f"Seed data rejected: {e.message}: {e.fields}", file=sys.stderr)
        return 1
    print(f"Profile seeded: {summary['profile']}; projects seeded: {len(summary['projects'])}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
