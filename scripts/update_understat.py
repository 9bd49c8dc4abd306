#!/usr/bin/env python3
"""
Fill understat metrics for host-competition fixtures.

For every player with an understat ID and at least one fixture this
season still missing metrics, fetch their understat match list and merge
it into their participation rows. Rows that already have metrics are
never overwritten.

Usage:
    python scripts/update_understat.py
    python scripts/update_understat.py --season 2019
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from touchline.api import UnderstatAPI
from touchline.config import settings
from touchline.db.session import get_session
from touchline.exceptions import TouchlineError
from touchline.fixtures import get_competition_id
from touchline.players import PlayerStore
from touchline.seasons import current_season
from touchline.services.understat_ingestion import ingest_understat_history

logging.basicConfig(level=settings.log_level, format=settings.log_format)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Update understat per-fixture metrics")
    parser.add_argument("--season", type=int, default=None, help="Season start year (default: current season)")
    args = parser.parse_args()

    season = args.season or current_season()
    updated = 0
    errors = 0

    with get_session() as session, UnderstatAPI() as api:
        competition_id = get_competition_id(
            session, settings.host_competition_name, settings.host_country_name
        )
        if competition_id is None:
            logger.error(f"No competition {settings.host_competition_name} ({settings.host_country_name})")
            return 1

        players = PlayerStore(session).get_without_understat_data(season, [competition_id])
        logger.info(f"{len(players)} players with missing understat data for {season}")

        for player_id, understat_id in players:
            try:
                matches = api.player_matches(understat_id)
                stats = ingest_understat_history(session, player_id, matches, season=season)
                updated += stats.rows_updated
            except TouchlineError as e:
                session.rollback()
                logger.error(f"Player #{player_id} (understat {understat_id}): {e}")
                errors += 1

    logger.info(f"Updated {updated} player fixtures, {errors} players failed")
    return 1 if errors else 0


if __name__ == "__main__":
    sys.exit(main())
