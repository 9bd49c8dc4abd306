#!/usr/bin/env python3
"""
Find understat IDs for players who don't have one yet.

Searches understat for each host-competition player missing an ID and
keeps the first result whose team the player has played for. Players
that can't be found are logged for fixing by hand.

Usage:
    python scripts/find_understat_ids.py
    python scripts/find_understat_ids.py --limit 50
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
from touchline.players import PlayerResolver

logging.basicConfig(level=settings.log_level, format=settings.log_format)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Find missing understat IDs")
    parser.add_argument("--limit", type=int, default=0, help="Maximum players to search for (0 = no limit)")
    args = parser.parse_args()

    found = 0
    failed = 0

    with get_session() as session, UnderstatAPI() as api:
        competition_id = get_competition_id(
            session, settings.host_competition_name, settings.host_country_name
        )
        if competition_id is None:
            logger.error(f"No competition {settings.host_competition_name} ({settings.host_country_name})")
            return 1

        resolver = PlayerResolver(session, understat=api)
        player_ids = resolver.store.get_with_missing_understat_ids([competition_id])
        if args.limit:
            player_ids = player_ids[:args.limit]

        logger.info(f"Searching understat for {len(player_ids)} players")

        for player_id in player_ids:
            try:
                resolver.resolve_by_understat_search(player_id)
                found += 1
            except TouchlineError as e:
                session.rollback()
                logger.error(f"Player #{player_id}: {e}")
                failed += 1

    logger.info(f"Found: {found}, not found: {failed}")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
