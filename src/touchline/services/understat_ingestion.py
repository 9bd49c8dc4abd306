"""
Understat ingestion service — advanced per-fixture metrics.

Fills the metrics block (goals, assists, shots, key passes, the xG family
and position) of players_fixtures rows that football-data ingestion has
already created. The row is found by (player, fixture, team).

The block is write-once. If a row already has goals set, the merge does
nothing and reports zero rows changed, so a later run with less precise
numbers can't overwrite earlier ones.

Usage:
    from touchline.services.understat_ingestion import ingest_understat_history

    matches = understat_api.player_matches(player.understat_id)
    stats = ingest_understat_history(session, player.id, matches, season=2020)
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Mapping, Optional

from sqlalchemy.orm import Session

from touchline.db.models import Fixture, PlayerFixture, Position
from touchline.exceptions import MissingRequiredField

logger = logging.getLogger(__name__)

# understat field -> players_fixtures column
UNDERSTAT_FIELDS: dict[str, str] = {
    "goals": "goals",
    "assists": "assists",
    "shots": "shots",
    "key_passes": "key_passes",
    "xG": "xg",
    "xA": "xa",
    "xGBuildup": "xg_buildup",
    "xGChain": "xg_chain",
    "npg": "npg",
    "npxG": "npxg",
    "position": "position_id",
}

_INTEGER_FIELDS = {"goals", "assists", "shots", "key_passes", "npg"}


@dataclass
class UnderstatIngestionStats:
    """Statistics from an understat ingestion run."""
    total_matches: int = 0
    rows_updated: int = 0
    skipped_existing: int = 0
    skipped_no_fixture: int = 0
    skipped_other_season: int = 0
    errors: list[str] = field(default_factory=list)

    def summary(self) -> str:
        """Return a human-readable summary of ingestion results."""
        lines = [
            "Understat ingestion complete:",
            f"  Matches processed:          {self.total_matches}",
            f"  Rows updated:               {self.rows_updated}",
            f"  Skipped (already filled):   {self.skipped_existing}",
            f"  Skipped (no fixture found): {self.skipped_no_fixture}",
            f"  Skipped (other season):     {self.skipped_other_season}",
        ]
        if self.errors:
            lines.append(f"  Errors: {len(self.errors)}")
            for err in self.errors[:5]:
                lines.append(f"    - {err}")
        return "\n".join(lines)


def get_position_id(db: Session, name: str) -> int:
    """ID of the named position, adding it if understat reports a new one."""
    position = db.query(Position).filter(Position.name == name).first()
    if position is None:
        position = Position(name=name)
        db.add(position)
        db.commit()
        logger.info("Added position '%s'", name)
    return position.id


def update_understat_fixture_info(
    db: Session,
    player_id: int,
    fixture_id: int,
    team_id: int,
    understat_info: Mapping,
) -> int:
    """
    Merge understat metrics into the row for (player, fixture, team).

    Args:
        db: SQLAlchemy database session
        player_id: Canonical player ID
        fixture_id: Fixture ID
        team_id: Team the player represented
        understat_info: understat match record (see UNDERSTAT_FIELDS)

    Returns:
        Number of rows updated: 1 on success, 0 if the metrics were
        already stored or the row doesn't exist

    Raises:
        MissingRequiredField: If understat_info lacks any metric
    """
    row = db.query(PlayerFixture).filter(
        PlayerFixture.player_id == player_id,
        PlayerFixture.fixture_id == fixture_id,
        PlayerFixture.team_id == team_id,
    ).first()

    if row is not None and row.goals is not None:
        return 0

    to_update = {}
    for source_field, column in UNDERSTAT_FIELDS.items():
        value = understat_info.get(source_field)
        if value is None:
            raise MissingRequiredField(source_field, "understat info")

        if source_field == "position":
            to_update[column] = get_position_id(db, value)
        elif source_field in _INTEGER_FIELDS:
            to_update[column] = int(value)
        else:
            to_update[column] = float(value)

    if row is None:
        return 0

    for column, value in to_update.items():
        setattr(row, column, value)
    db.commit()
    return 1


def find_player_fixture_on(
    db: Session, player_id: int, fixture_date: date
) -> Optional[PlayerFixture]:
    """The player's participation row for a fixture played on this date."""
    return (
        db.query(PlayerFixture)
        .join(Fixture, Fixture.id == PlayerFixture.fixture_id)
        .filter(
            PlayerFixture.player_id == player_id,
            Fixture.fixture_date == fixture_date,
        )
        .first()
    )


def ingest_understat_history(
    db: Session,
    player_id: int,
    matches: Iterable[Mapping],
    season: Optional[int] = None,
) -> UnderstatIngestionStats:
    """
    Merge a player's understat match list into their participation rows.

    Each understat match is paired with the player's fixture on the same
    date; matches with no such fixture (cup games we don't track, say)
    are skipped.

    Args:
        db: SQLAlchemy database session
        player_id: Canonical player ID
        matches: Records from UnderstatAPI.player_matches()
        season: If given, only matches from this season are considered

    Returns:
        UnderstatIngestionStats with counts of what happened
    """
    stats = UnderstatIngestionStats()

    for match in matches:
        stats.total_matches += 1

        if season is not None and str(match.get("season")) != str(season):
            stats.skipped_other_season += 1
            continue

        if not match.get("date"):
            raise MissingRequiredField("date", "understat info")

        match_date = date.fromisoformat(str(match["date"])[:10])
        row = find_player_fixture_on(db, player_id, match_date)

        if row is None:
            logger.debug(
                "Player #%d: no fixture on %s for understat match %s",
                player_id, match_date, match.get("id"),
            )
            stats.skipped_no_fixture += 1
            continue

        updated = update_understat_fixture_info(
            db, player_id, row.fixture_id, row.team_id, match
        )
        if updated:
            stats.rows_updated += 1
        else:
            stats.skipped_existing += 1

    logger.debug(stats.summary())
    return stats
