#!/usr/bin/env python3
"""
Ingest a season of fixtures and player attendance from football-data.

Fetches the season's match list for each competition, then the full
match (lineups, bookings, substitutions) for every finished one. New
players are fetched from football-data and created as they turn up.

Safe to re-run: fixtures and player rows that already exist are left alone.

Usage:
    python scripts/update_fixtures.py
    python scripts/update_fixtures.py --season 2019 --competition PL --competition ELC
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from touchline.api import FootballDataAPI
from touchline.config import settings
from touchline.db.session import get_session
from touchline.exceptions import TouchlineError
from touchline.fixtures import is_finished
from touchline.players import PlayerResolver
from touchline.seasons import current_season
from touchline.services.fixture_ingestion import FixtureIngestionStats, update_fixture_info

logging.basicConfig(level=settings.log_level, format=settings.log_format)
logger = logging.getLogger(__name__)


def update_competition(session, api, resolver, code: str, season: int, stop_on_error: bool):
    """Ingest every match of one competition season."""
    stats = FixtureIngestionStats()
    matches = api.competition_matches(code, season)
    logger.info(f"{code} {season}: {len(matches)} matches")

    for summary in matches:
        try:
            # The season listing has no lineups, only finished matches need more
            fixture_data = api.match(summary["id"]) if is_finished(summary) else summary
            stats.merge(update_fixture_info(session, fixture_data, season, resolver))
        except TouchlineError as e:
            session.rollback()
            error_msg = f"football-data match {summary.get('id')}: {e}"
            logger.error(f"Error processing fixture: {error_msg}")
            stats.errors.append(error_msg)
            if stop_on_error:
                raise

    return stats


def main():
    parser = argparse.ArgumentParser(description="Update fixtures and player attendance from football-data")
    parser.add_argument("--season", type=int, default=None, help="Season start year (default: current season)")
    parser.add_argument(
        "--competition",
        action="append",
        default=None,
        help="football-data competition code, repeatable (default: PL)",
    )
    parser.add_argument("--stop-on-error", action="store_true", help="Abort on the first failing fixture")
    args = parser.parse_args()

    season = args.season or current_season()
    competitions = args.competition or ["PL"]

    stats = FixtureIngestionStats()
    with get_session() as session, FootballDataAPI() as api:
        resolver = PlayerResolver(session, football_data=api)
        for code in competitions:
            stats.merge(update_competition(session, api, resolver, code, season, args.stop_on_error))

    logger.info(stats.summary())
    return 1 if stats.errors else 0


if __name__ == "__main__":
    sys.exit(main())
