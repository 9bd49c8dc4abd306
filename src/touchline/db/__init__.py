"""
Database module for Touchline.

Provides SQLAlchemy ORM models and session management.

Usage:
    from touchline.db import get_session, Player, PlayerFixture

    with get_session() as session:
        players = session.query(Player).all()
"""

from touchline.db.models import (
    Base,
    Competition,
    Country,
    CountryAlternateName,
    Fixture,
    FixtureGameweek,
    FPLGameweek,
    FPLName,
    FPLPlayerGameweek,
    FPLPosition,
    FPLSeasonInfo,
    Player,
    PlayerFixture,
    Position,
    Team,
)
from touchline.db.session import get_session, get_engine, SessionLocal

__all__ = [
    # Base
    "Base",
    # Reference data
    "Country",
    "CountryAlternateName",
    "Competition",
    "Team",
    "Fixture",
    "Position",
    # Players
    "Player",
    "PlayerFixture",
    # Fantasy league
    "FPLGameweek",
    "FixtureGameweek",
    "FPLPosition",
    "FPLName",
    "FPLSeasonInfo",
    "FPLPlayerGameweek",
    # Session
    "get_session",
    "get_engine",
    "SessionLocal",
]
