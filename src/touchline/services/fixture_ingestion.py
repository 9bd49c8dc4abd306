"""
Fixture ingestion service — per-player attendance facts from football-data.

For each finished fixture, every player listed in either team's lineup or
bench gets one players_fixtures row holding:

- minutes: starters play 90 unless substituted off (then the minute they
  went off); bench players play 0 unless brought on (then 90 minus the
  minute they came on)
- yellow_card / red_card: independent flags from the bookings list

Players football-data lists that we haven't seen before are fetched from
the API and created. This is the only ingestion path that creates players.

Rows are never re-written. Once a (player, fixture, team) row exists,
ingesting the same fixture again leaves it alone, so a run that died part
way through can simply be repeated.

Processing order is fixed: home team then away team, lineup then bench.

Usage:
    from touchline.services.fixture_ingestion import update_fixture_info

    resolver = PlayerResolver(session, football_data=api)
    stats = update_fixture_info(session, api.match(303700), 2020, resolver)
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from sqlalchemy.orm import Session

from touchline.db.models import Fixture, PlayerFixture
from touchline.exceptions import TouchlineError
from touchline.fixtures import is_finished, process_fixture_data
from touchline.players.resolver import PlayerResolver

logger = logging.getLogger(__name__)

FULL_MATCH_MINUTES = 90


@dataclass
class FixtureIngestionStats:
    """Statistics from a fixture ingestion run."""
    fixtures_processed: int = 0
    fixtures_skipped_unfinished: int = 0
    rows_created: int = 0
    rows_existing: int = 0
    errors: list[str] = field(default_factory=list)

    def merge(self, other: "FixtureIngestionStats") -> None:
        self.fixtures_processed += other.fixtures_processed
        self.fixtures_skipped_unfinished += other.fixtures_skipped_unfinished
        self.rows_created += other.rows_created
        self.rows_existing += other.rows_existing
        self.errors.extend(other.errors)

    def summary(self) -> str:
        """Return a human-readable summary of ingestion results."""
        lines = [
            "Fixture ingestion complete:",
            f"  Fixtures processed:        {self.fixtures_processed}",
            f"  Skipped (not finished):    {self.fixtures_skipped_unfinished}",
            f"  Player rows created:       {self.rows_created}",
            f"  Player rows already there: {self.rows_existing}",
        ]
        if self.errors:
            lines.append(f"  Errors: {len(self.errors)}")
            for err in self.errors[:5]:
                lines.append(f"    - {err}")
            if len(self.errors) > 5:
                lines.append(f"    ... and {len(self.errors) - 5} more")
        return "\n".join(lines)


# =============================================================================
# Event Maps
# =============================================================================

def build_booking_map(bookings: Iterable[Mapping]) -> dict[int, set[str]]:
    """Source player ID -> every card type booked against them."""
    cards: dict[int, set[str]] = {}
    for booking in bookings or []:
        cards.setdefault(booking["player"]["id"], set()).add(booking["card"])
    return cards


def build_substitution_maps(
    substitutions: Iterable[Mapping],
) -> tuple[dict[int, int], dict[int, int]]:
    """
    Source player ID -> minute, for players going off and coming on.

    Returns:
        Tuple of (subs_off, subs_on)
    """
    subs_off: dict[int, int] = {}
    subs_on: dict[int, int] = {}
    for sub in substitutions or []:
        subs_off[sub["playerOut"]["id"]] = sub["minute"]
        subs_on[sub["playerIn"]["id"]] = sub["minute"]
    return subs_off, subs_on


def has_card(player_id: int, bookings: Mapping[int, set[str]], colour: str) -> bool:
    """
    True if the player was shown a card of this colour.

    A second yellow (YELLOW_RED_CARD) counts as a red.
    """
    cards = bookings.get(player_id, set())
    if colour == "RED" and "YELLOW_RED_CARD" in cards:
        return True
    return f"{colour}_CARD" in cards


def starter_minutes(player_id: int, subs_off: Mapping[int, int]) -> int:
    """90, or the minute a starter was substituted off."""
    return subs_off.get(player_id, FULL_MATCH_MINUTES)


def substitute_minutes(player_id: int, subs_on: Mapping[int, int]) -> int:
    """0, or 90 minus the minute a bench player came on."""
    if player_id in subs_on:
        return FULL_MATCH_MINUTES - subs_on[player_id]
    return 0


# =============================================================================
# Ingestion
# =============================================================================

def insert_player_fixture(db: Session, info: Mapping) -> tuple[PlayerFixture, bool]:
    """
    Insert a players_fixtures row unless one exists for (player, fixture, team).

    An existing row is returned untouched.

    Returns:
        Tuple of (row, created)
    """
    existing = db.query(PlayerFixture).filter(
        PlayerFixture.player_id == info["player_id"],
        PlayerFixture.fixture_id == info["fixture_id"],
        PlayerFixture.team_id == info["team_id"],
    ).first()

    if existing is not None:
        return existing, False

    row = PlayerFixture(**info)
    db.add(row)
    db.commit()
    return row, True


def ingest_fixture_players(
    db: Session,
    fixture: Fixture,
    fixture_data: Mapping,
    resolver: PlayerResolver,
) -> FixtureIngestionStats:
    """
    Store attendance facts for every player in a finished fixture.

    Args:
        db: SQLAlchemy database session
        fixture: The stored fixture the payload describes
        fixture_data: football-data match payload with lineups and events
        resolver: Resolver used to find (or create) each player

    Returns:
        FixtureIngestionStats for this fixture
    """
    stats = FixtureIngestionStats(fixtures_processed=1)

    bookings = build_booking_map(fixture_data.get("bookings"))
    subs_off, subs_on = build_substitution_maps(fixture_data.get("substitutions"))

    for team_id, team_info in (
        (fixture.home_team_id, fixture_data["homeTeam"]),
        (fixture.away_team_id, fixture_data["awayTeam"]),
    ):
        entries = [
            (source_player, starter_minutes(source_player["id"], subs_off))
            for source_player in team_info.get("lineup") or []
        ] + [
            (source_player, substitute_minutes(source_player["id"], subs_on))
            for source_player in team_info.get("bench") or []
        ]

        for source_player, minutes in entries:
            source_id = source_player["id"]
            player = resolver.get_or_fetch(source_id)

            _, created = insert_player_fixture(db, {
                "player_id": player.id,
                "fixture_id": fixture.id,
                "team_id": team_id,
                "minutes": minutes,
                "yellow_card": has_card(source_id, bookings, "YELLOW"),
                "red_card": has_card(source_id, bookings, "RED"),
            })

            if created:
                stats.rows_created += 1
            else:
                stats.rows_existing += 1

    logger.debug(
        "Fixture #%d: %d rows created, %d already present",
        fixture.id, stats.rows_created, stats.rows_existing,
    )
    return stats


def update_fixture_info(
    db: Session,
    fixture_data: Mapping,
    season: int,
    resolver: PlayerResolver,
) -> FixtureIngestionStats:
    """
    Store a football-data match and, once it has finished, its player rows.

    Player rows are only processed for finished fixtures; an unfinished
    fixture is stored (or found) and counted as skipped.
    """
    fixture = process_fixture_data(db, fixture_data, season)

    if not is_finished(fixture_data):
        logger.debug("Fixture #%d not finished, skipping players", fixture.id)
        return FixtureIngestionStats(fixtures_skipped_unfinished=1)

    return ingest_fixture_players(db, fixture, fixture_data, resolver)


def ingest_fixtures(
    db: Session,
    fixtures_data: Iterable[Mapping],
    season: int,
    resolver: PlayerResolver,
    stop_on_error: bool = False,
) -> FixtureIngestionStats:
    """
    Run update_fixture_info over many match payloads.

    A failing fixture is logged and recorded in stats.errors, and the run
    moves on to the next one unless stop_on_error is set.
    """
    stats = FixtureIngestionStats()

    for fixture_data in fixtures_data:
        try:
            stats.merge(update_fixture_info(db, fixture_data, season, resolver))
        except TouchlineError as e:
            db.rollback()
            error_msg = f"football-data match {fixture_data.get('id')}: {e}"
            logger.error("Error processing fixture: %s", error_msg)
            stats.errors.append(error_msg)
            if stop_on_error:
                raise

    logger.info(stats.summary())
    return stats
