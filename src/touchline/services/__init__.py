"""
Touchline services — ingestion pipelines.

Pipeline stages:
1. Fixture ingestion: fixtures and per-player attendance from football-data
2. FPL ingestion: FPL IDs, season info and gameweek history
3. Understat ingestion: advanced per-fixture metrics

Usage:
    from touchline.services import (
        ingest_fixtures,
        ingest_fpl_season,
        ingest_understat_history,
    )
"""

from touchline.services.fixture_ingestion import (
    ingest_fixtures,
    ingest_fixture_players,
    update_fixture_info,
    FixtureIngestionStats,
)
from touchline.services.fpl_ingestion import (
    ingest_fpl_season,
    link_fpl_element,
    process_fpl_season_history,
    FPLIngestionStats,
)
from touchline.services.understat_ingestion import (
    ingest_understat_history,
    update_understat_fixture_info,
    UnderstatIngestionStats,
)

__all__ = [
    # Fixture ingestion
    "ingest_fixtures",
    "ingest_fixture_players",
    "update_fixture_info",
    "FixtureIngestionStats",
    # FPL ingestion
    "ingest_fpl_season",
    "link_fpl_element",
    "process_fpl_season_history",
    "FPLIngestionStats",
    # Understat ingestion
    "ingest_understat_history",
    "update_understat_fixture_info",
    "UnderstatIngestionStats",
]
