"""
Pytest configuration and fixtures.

This file is automatically loaded by pytest and provides
shared fixtures for all tests.
"""

from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from touchline.db.models import (
    Base,
    Competition,
    Country,
    Fixture,
    Player,
    PlayerFixture,
    Team,
)


@pytest.fixture
def db_session():
    """
    Create a clean in-memory database for each test.

    Services commit after every write, so each test gets its own engine
    rather than a rolled-back transaction.
    """
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)

    Session = sessionmaker(bind=engine)
    session = Session()

    yield session

    session.close()
    engine.dispose()


@pytest.fixture
def england(db_session):
    country = Country(name="England")
    db_session.add(country)
    db_session.commit()
    return country


@pytest.fixture
def argentina(db_session):
    country = Country(name="Argentina")
    db_session.add(country)
    db_session.commit()
    return country


@pytest.fixture
def premier_league(db_session, england):
    competition = Competition(name="Premier League", country_id=england.id, football_data_id=2021)
    db_session.add(competition)
    db_session.commit()
    return competition


@pytest.fixture
def make_player(db_session, england):
    """Factory for canonical players (English unless told otherwise)."""
    def _make(first_name, last_name, football_data_id=None, country=None, **kwargs):
        player = Player(
            first_name=first_name,
            last_name=last_name,
            country_id=(country or england).id,
            football_data_id=football_data_id,
            **kwargs,
        )
        db_session.add(player)
        db_session.commit()
        return player
    return _make


@pytest.fixture
def make_fixture(db_session, premier_league):
    """Factory for fixtures between named teams (Premier League by default)."""
    def _team(name):
        team = db_session.query(Team).filter(Team.name == name).first()
        if team is None:
            team = Team(name=name)
            db_session.add(team)
            db_session.commit()
        return team

    def _make(
        home="Fulham FC",
        away="Arsenal FC",
        fixture_date=date(2020, 9, 12),
        season=2020,
        competition=None,
    ):
        fixture = Fixture(
            competition_id=(competition or premier_league).id,
            home_team_id=_team(home).id,
            away_team_id=_team(away).id,
            season=season,
            fixture_date=fixture_date,
        )
        db_session.add(fixture)
        db_session.commit()
        return fixture
    return _make


@pytest.fixture
def appear(db_session):
    """Record that a player played in a fixture (for the home side by default)."""
    def _appear(player, fixture, team_id=None, minutes=90):
        row = PlayerFixture(
            player_id=player.id,
            fixture_id=fixture.id,
            team_id=team_id or fixture.home_team_id,
            minutes=minutes,
        )
        db_session.add(row)
        db_session.commit()
        return row
    return _appear


class FakeFootballData:
    """football-data gateway serving player records from a dict."""

    def __init__(self, players=None):
        self.players = players or {}
        self.requested = []

    def player(self, player_id):
        self.requested.append(player_id)
        return self.players[player_id]


class FakeUnderstat:
    """understat gateway serving search results from a dict."""

    def __init__(self, results=None):
        self.results = results or {}
        self.searches = []

    def search(self, name):
        self.searches.append(name)
        return self.results.get(name, [])

