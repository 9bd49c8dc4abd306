"""
Canonical player store.

Thin read/write layer over the players table and the participation
history the resolver needs. Each write commits on its own: there is no
transaction spanning a whole resolution or ingestion call, and re-running
an interrupted job is the recovery path.

Uniqueness of external IDs is enforced by the table's unique constraints.
Writes that attach a source ID to an existing player turn a constraint
violation into IdentityConflict, naming the player already holding the ID.
"""

import logging
from typing import Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from touchline.db.models import (
    Competition,
    Country,
    Fixture,
    FPLName,
    Player,
    PlayerFixture,
    Team,
)
from touchline.exceptions import IdentityConflict, UnknownPlayer

logger = logging.getLogger(__name__)


class PlayerStore:
    """
    Read/write access to canonical players.

    Usage:
        store = PlayerStore(db_session)
        player = store.get_by_football_data_id(154)
    """

    def __init__(self, db: Session):
        self.db = db

    # =========================================================================
    # Reads
    # =========================================================================

    def get(self, player_id: int) -> Optional[Player]:
        return self.db.get(Player, player_id)

    def get_by_football_data_id(self, football_data_id: int) -> Optional[Player]:
        """Player carrying this football-data ID, or None. Never inserts."""
        return self.db.query(Player).filter(
            Player.football_data_id == football_data_id
        ).first()

    def get_name(self, player_id: int) -> tuple[str, str]:
        """
        (first_name, last_name) of a player.

        Raises:
            UnknownPlayer: If the player doesn't exist
        """
        player = self.get(player_id)
        if player is None:
            raise UnknownPlayer(player_id)
        return player.first_name, player.last_name

    def get_team_names(self, player_id: int) -> list[str]:
        """Names of every team the player has a participation row for."""
        rows = (
            self.db.query(Team.name)
            .join(PlayerFixture, PlayerFixture.team_id == Team.id)
            .filter(PlayerFixture.player_id == player_id)
            .distinct()
            .order_by(Team.name)
            .all()
        )
        return [row.name for row in rows]

    def get_team_for_player_fixture(self, player_id: int, fixture_id: int) -> Optional[int]:
        """Team the player represented in a fixture, or None if they didn't play."""
        row = self.db.query(PlayerFixture.team_id).filter(
            PlayerFixture.player_id == player_id,
            PlayerFixture.fixture_id == fixture_id,
        ).first()
        return row.team_id if row else None

    def get_competition_players(
        self, competition_name: str, country_name: str
    ) -> list[Player]:
        """
        Players with at least one fixture in the given competition.

        The appearance can be from any season.
        """
        return (
            self.db.query(Player)
            .join(PlayerFixture, PlayerFixture.player_id == Player.id)
            .join(Fixture, Fixture.id == PlayerFixture.fixture_id)
            .join(Competition, Competition.id == Fixture.competition_id)
            .join(Country, Country.id == Competition.country_id)
            .filter(
                Competition.name == competition_name,
                Country.name == country_name,
            )
            .distinct()
            .order_by(Player.id)
            .all()
        )

    def get_with_missing_understat_ids(
        self, competition_ids: Sequence[int] = ()
    ) -> list[int]:
        """
        IDs of players without an understat ID.

        With competition_ids, only players with a fixture in one of those
        competitions are returned (in any season, regardless of where
        they play now).
        """
        if not competition_ids:
            rows = (
                self.db.query(Player.id)
                .filter(Player.understat_id.is_(None))
                .order_by(Player.id)
                .all()
            )
            return [row.id for row in rows]

        rows = (
            self.db.query(Player.id)
            .join(PlayerFixture, PlayerFixture.player_id == Player.id)
            .join(Fixture, Fixture.id == PlayerFixture.fixture_id)
            .filter(
                Fixture.competition_id.in_(competition_ids),
                Player.understat_id.is_(None),
            )
            .distinct()
            .order_by(Player.id)
            .all()
        )
        return [row.id for row in rows]

    def get_without_understat_data(
        self, season: int, competition_ids: Sequence[int]
    ) -> list[tuple[int, int]]:
        """
        Players with an understat ID but missing understat metrics.

        Only fixtures of the given season and competitions count.

        Returns:
            List of (player_id, understat_id)
        """
        rows = (
            self.db.query(Player.id, Player.understat_id)
            .join(PlayerFixture, PlayerFixture.player_id == Player.id)
            .join(Fixture, Fixture.id == PlayerFixture.fixture_id)
            .filter(
                Fixture.competition_id.in_(competition_ids),
                Fixture.season == season,
                Player.understat_id.isnot(None),
                PlayerFixture.goals.is_(None),
            )
            .distinct()
            .order_by(Player.id)
            .all()
        )
        return [(row.id, row.understat_id) for row in rows]

    # =========================================================================
    # Writes
    # =========================================================================

    def insert(
        self,
        first_name: str,
        last_name: str,
        country_id: int,
        football_data_id: int,
    ) -> Player:
        """Insert a new canonical player and commit."""
        player = Player(
            first_name=first_name,
            last_name=last_name,
            country_id=country_id,
            football_data_id=football_data_id,
        )
        self.db.add(player)
        self.db.commit()
        logger.info(
            "Created player #%d %s %s (football-data %d)",
            player.id, first_name, last_name, football_data_id,
        )
        return player

    def update_fpl_id(self, player_id: int, fpl_id: int) -> int:
        """
        Set the player's FPL ID if they don't have one yet.

        Returns:
            Number of rows changed (0 if an FPL ID was already set)
        """
        player = self.get(player_id)
        if player is None or player.fpl_id is not None:
            return 0

        player.fpl_id = fpl_id
        self.db.commit()
        return 1

    def set_understat_id(self, player_id: int, understat_id: int) -> None:
        """
        Store the player's understat ID and commit.

        Raises:
            UnknownPlayer: If the player doesn't exist
            IdentityConflict: If another player already holds the understat ID
        """
        holder = self.db.query(Player.id).filter(
            Player.understat_id == understat_id,
            Player.id != player_id,
        ).first()
        if holder is not None:
            raise IdentityConflict("understat", understat_id, [holder.id, player_id])

        updated = self.db.query(Player).filter(Player.id == player_id).update(
            {"understat_id": understat_id}
        )
        if not updated:
            raise UnknownPlayer(player_id)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise IdentityConflict("understat", understat_id, [player_id])

    def get_by_fpl_name(self, name: str) -> Optional[Player]:
        """Player a manual FPL name override points at, or None."""
        return (
            self.db.query(Player)
            .join(FPLName, FPLName.player_id == Player.id)
            .filter(FPLName.name == name)
            .first()
        )

    def add_fpl_name(self, player_id: int, name: str) -> FPLName:
        """Record a manual override mapping an FPL full name to a player."""
        if self.get(player_id) is None:
            raise UnknownPlayer(player_id)
        alias = FPLName(player_id=player_id, name=name)
        self.db.add(alias)
        self.db.commit()
        logger.info("Added FPL name override '%s' -> player #%d", name, player_id)
        return alias
