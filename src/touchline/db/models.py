"""
SQLAlchemy ORM models for Touchline.

This module defines all database tables and their relationships.
The schema is designed around a canonical player identity system
where each player has one record regardless of which source
(football-data, FPL, understat) reported them.

Key design decisions:
- Players have optional football-data/FPL/understat IDs, each unique
- Per-fixture facts link to players via foreign keys (never raw names)
- A player appears at most once per (fixture, team)
- Advanced per-fixture metrics live on the same row and are write-once
- Reference data (countries, competitions, teams) is kept deliberately thin

Tables:
- countries / country_alternate_names: Nationality reference data
- competitions, teams, fixtures: Match reference data
- positions: Positions reported by understat
- players: Canonical player records
- players_fixtures: One player's involvement in one fixture
- fpl_gameweeks / fixtures_fpl_gameweeks: FPL calendar
- fpl_positions / fpl_season_info / fpl_players_gameweeks: FPL facts
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


# =============================================================================
# Reference Data Models
# =============================================================================

class Country(Base):
    """A country, referenced by player nationality and competitions."""
    __tablename__ = "countries"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)

    alternate_names: Mapped[list["CountryAlternateName"]] = relationship(
        back_populates="country", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Country(id={self.id}, name='{self.name}')>"


class CountryAlternateName(Base):
    """
    Other spellings of a country name.

    Sources disagree on country names ("Korea Republic" vs "South Korea",
    "Côte d'Ivoire" vs "Ivory Coast"), so lookups fall back to this table.
    """
    __tablename__ = "country_alternate_names"

    id: Mapped[int] = mapped_column(primary_key=True)
    country_id: Mapped[int] = mapped_column(ForeignKey("countries.id", ondelete="CASCADE"))
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)

    country: Mapped["Country"] = relationship(back_populates="alternate_names")

    def __repr__(self) -> str:
        return f"<CountryAlternateName(name='{self.name}')>"


class Competition(Base):
    """A league or cup, e.g. the Premier League."""
    __tablename__ = "competitions"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    country_id: Mapped[int] = mapped_column(ForeignKey("countries.id"))
    football_data_id: Mapped[Optional[int]] = mapped_column(Integer, unique=True, nullable=True)

    country: Mapped["Country"] = relationship()

    __table_args__ = (
        UniqueConstraint("name", "country_id", name="uq_competition_name_country"),
    )

    def __repr__(self) -> str:
        return f"<Competition(id={self.id}, name='{self.name}')>"


class Team(Base):
    """A club or national team."""
    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    football_data_id: Mapped[Optional[int]] = mapped_column(Integer, unique=True, nullable=True)

    def __repr__(self) -> str:
        return f"<Team(id={self.id}, name='{self.name}')>"


class Fixture(Base):
    """
    One scheduled match between two teams.

    Goals are null until the fixture has finished.
    """
    __tablename__ = "fixtures"

    id: Mapped[int] = mapped_column(primary_key=True)
    competition_id: Mapped[int] = mapped_column(ForeignKey("competitions.id"))
    home_team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"))
    away_team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"))

    # Season is the calendar year the season starts in (2020 for 2020/21)
    season: Mapped[int] = mapped_column(Integer, nullable=False)
    fixture_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    home_team_goals: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    away_team_goals: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    football_data_id: Mapped[Optional[int]] = mapped_column(Integer, unique=True, nullable=True)

    competition: Mapped["Competition"] = relationship()
    home_team: Mapped["Team"] = relationship(foreign_keys=[home_team_id])
    away_team: Mapped["Team"] = relationship(foreign_keys=[away_team_id])

    __table_args__ = (
        Index("idx_fixtures_competition_season", "competition_id", "season"),
    )

    def __repr__(self) -> str:
        return (
            f"<Fixture(id={self.id}, home={self.home_team_id}, "
            f"away={self.away_team_id}, date={self.fixture_date})>"
        )


class Position(Base):
    """A playing position as reported by understat (e.g. 'FW', 'AMC')."""
    __tablename__ = "positions"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<Position(name='{self.name}')>"


# =============================================================================
# Player Models
# =============================================================================

class Player(Base):
    """
    Canonical player record.

    Each person has exactly one record in this table, regardless of which
    source reported them. External IDs from each source are separate
    nullable columns with unique constraints: at most one player can carry
    a given ID per source.

    Rows are created only from football-data (the authoritative source).
    FPL and understat IDs are attached later, once resolution succeeds.
    """
    __tablename__ = "players"

    id: Mapped[int] = mapped_column(primary_key=True)

    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Nationality, not country of birth
    country_id: Mapped[int] = mapped_column(ForeignKey("countries.id"))

    football_data_id: Mapped[Optional[int]] = mapped_column(Integer, unique=True, nullable=True)
    # FPL "code": stable across seasons, unlike the per-season element ID
    fpl_id: Mapped[Optional[int]] = mapped_column(Integer, unique=True, nullable=True)
    understat_id: Mapped[Optional[int]] = mapped_column(Integer, unique=True, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    country: Mapped["Country"] = relationship()
    fixtures: Mapped[list["PlayerFixture"]] = relationship(back_populates="player")

    __table_args__ = (
        Index("idx_players_name", "last_name", "first_name"),
    )

    def __repr__(self) -> str:
        return f"<Player(id={self.id}, name='{self.first_name} {self.last_name}')>"


class PlayerFixture(Base):
    """
    One player's involvement in one fixture.

    Attendance facts (minutes, cards) come from football-data and are set
    once, on the first ingestion of the fixture. The advanced metrics block
    (goals through position) comes later from understat and is write-once:
    it is only filled while goals is still null.

    team_id records which side the player represented, since a player can
    appear for either team across their career.
    """
    __tablename__ = "players_fixtures"

    id: Mapped[int] = mapped_column(primary_key=True)
    player_id: Mapped[int] = mapped_column(ForeignKey("players.id"))
    fixture_id: Mapped[int] = mapped_column(ForeignKey("fixtures.id"))
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"))

    # Attendance
    minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    yellow_card: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    red_card: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Advanced metrics (understat)
    goals: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    assists: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    shots: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    key_passes: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    npg: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    xg: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    xa: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    npxg: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    xg_buildup: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    xg_chain: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    position_id: Mapped[Optional[int]] = mapped_column(ForeignKey("positions.id"), nullable=True)

    player: Mapped["Player"] = relationship(back_populates="fixtures")
    fixture: Mapped["Fixture"] = relationship()
    team: Mapped["Team"] = relationship()

    __table_args__ = (
        UniqueConstraint(
            "player_id", "fixture_id", "team_id", name="uq_player_fixture_team"
        ),
        Index("idx_players_fixtures_fixture", "fixture_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<PlayerFixture(player={self.player_id}, fixture={self.fixture_id}, "
            f"team={self.team_id}, minutes={self.minutes})>"
        )


# =============================================================================
# Fantasy League Models
# =============================================================================

class FPLGameweek(Base):
    """A numbered FPL round within a season, with its transfer deadline."""
    __tablename__ = "fpl_gameweeks"

    id: Mapped[int] = mapped_column(primary_key=True)
    season: Mapped[int] = mapped_column(Integer, nullable=False)
    gameweek: Mapped[int] = mapped_column(Integer, nullable=False)
    deadline: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (
        UniqueConstraint("season", "gameweek", name="uq_fpl_gameweek_season"),
    )

    def __repr__(self) -> str:
        return f"<FPLGameweek(season={self.season}, gw={self.gameweek})>"


class FixtureGameweek(Base):
    """Links a fixture to the FPL gameweek it is played in."""
    __tablename__ = "fixtures_fpl_gameweeks"

    id: Mapped[int] = mapped_column(primary_key=True)
    fixture_id: Mapped[int] = mapped_column(ForeignKey("fixtures.id"), unique=True)
    gameweek_id: Mapped[int] = mapped_column(ForeignKey("fpl_gameweeks.id"))

    def __repr__(self) -> str:
        return f"<FixtureGameweek(fixture={self.fixture_id}, gw={self.gameweek_id})>"


class FPLPosition(Base):
    """FPL element types: 1 = GKP, 2 = DEF, 3 = MID, 4 = FWD."""
    __tablename__ = "fpl_positions"

    id: Mapped[int] = mapped_column(primary_key=True)
    element_type_id: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(20), nullable=False)

    def __repr__(self) -> str:
        return f"<FPLPosition(element_type={self.element_type_id}, name='{self.name}')>"


class FPLName(Base):
    """
    Manual override from an FPL full name to a canonical player.

    For players whose FPL name shares nothing with their football-data
    name. Checked before any automatic matching.
    """
    __tablename__ = "fpl_names"

    id: Mapped[int] = mapped_column(primary_key=True)
    player_id: Mapped[int] = mapped_column(ForeignKey("players.id", ondelete="CASCADE"))
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<FPLName(name='{self.name}', player={self.player_id})>"


class FPLSeasonInfo(Base):
    """A player's per-season FPL element ID and position."""
    __tablename__ = "fpl_season_info"

    id: Mapped[int] = mapped_column(primary_key=True)
    player_id: Mapped[int] = mapped_column(ForeignKey("players.id"))
    season: Mapped[int] = mapped_column(Integer, nullable=False)
    fpl_season_id: Mapped[int] = mapped_column(Integer, nullable=False)
    fpl_positions_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("fpl_positions.id"), nullable=True
    )

    __table_args__ = (
        UniqueConstraint("player_id", "season", name="uq_fpl_season_info_player_season"),
    )

    def __repr__(self) -> str:
        return f"<FPLSeasonInfo(player={self.player_id}, season={self.season})>"


class FPLPlayerGameweek(Base):
    """A player's FPL figures for one completed gameweek."""
    __tablename__ = "fpl_players_gameweeks"

    id: Mapped[int] = mapped_column(primary_key=True)
    player_id: Mapped[int] = mapped_column(ForeignKey("players.id"))
    fpl_gameweek_id: Mapped[int] = mapped_column(ForeignKey("fpl_gameweeks.id"))

    bonus_points: Mapped[int] = mapped_column(Integer, nullable=False)
    bps: Mapped[int] = mapped_column(Integer, nullable=False)
    total_points: Mapped[int] = mapped_column(Integer, nullable=False)
    transfers_in: Mapped[int] = mapped_column(Integer, nullable=False)
    transfers_out: Mapped[int] = mapped_column(Integer, nullable=False)
    selected: Mapped[int] = mapped_column(Integer, nullable=False)
    # Stored in millions (5.5), not the API's tenths (55)
    value: Mapped[Decimal] = mapped_column(Numeric(4, 1), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "player_id", "fpl_gameweek_id", name="uq_fpl_player_gameweek"
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<FPLPlayerGameweek(player={self.player_id}, "
            f"gw={self.fpl_gameweek_id}, points={self.total_points})>"
        )
