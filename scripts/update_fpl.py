#!/usr/bin/env python3
"""
Update FPL gameweeks, player links and gameweek history.

Steps:
1. Store the season's gameweek deadlines
2. Link host-competition fixtures to gameweeks
3. Resolve every FPL element to a canonical player and store its history

FPL only serves the current season. Run update_fixtures.py first: FPL
elements are matched against players football-data has already reported.

Usage:
    python scripts/update_fpl.py
    python scripts/update_fpl.py --skip-history
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from touchline.api import FPLAPI
from touchline.config import settings
from touchline.db.session import get_session
from touchline.exceptions import SeasonMismatch
from touchline.gameweeks import add_fixture_gameweeks, process_gameweeks
from touchline.players import PlayerResolver
from touchline.seasons import current_season
from touchline.services.fpl_ingestion import ingest_fpl_season

logging.basicConfig(level=settings.log_level, format=settings.log_format)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Update FPL gameweeks and player data")
    parser.add_argument("--season", type=int, default=None, help="Season start year (default: current season)")
    parser.add_argument("--skip-history", action="store_true", help="Only update gameweeks and fixture links")
    parser.add_argument("--stop-on-error", action="store_true", help="Abort on the first failing element")
    args = parser.parse_args()

    season = args.season or current_season()

    with get_session() as session, FPLAPI() as api:
        try:
            process_gameweeks(session, api.gameweeks(), season)
        except SeasonMismatch as e:
            logger.error(str(e))
            return 1

        linked = add_fixture_gameweeks(session, season)
        logger.info(f"Linked {linked} fixtures to gameweeks")

        if args.skip_history:
            return 0

        resolver = PlayerResolver(session)
        stats = ingest_fpl_season(session, resolver, api, season, stop_on_error=args.stop_on_error)

    return 1 if stats.errors else 0


if __name__ == "__main__":
    sys.exit(main())
