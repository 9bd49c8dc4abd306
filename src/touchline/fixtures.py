"""
Fixture reference data from football-data match payloads.

Turns a football-data match into competition, team and fixture rows,
creating whichever of them are missing. Rows are keyed by football-data
ID, so processing the same match twice finds the existing rows.

Match payload shape (API v2, abbreviated):
    {
        "id": 303700,
        "utcDate": "2020-09-12T11:30:00Z",
        "competition": {"id": 2021, "name": "Premier League",
                        "area": {"name": "England"}},
        "score": {"fullTime": {"homeTeam": 0, "awayTeam": 3}},
        "homeTeam": {"id": 63, "name": "Fulham FC", "lineup": [...], "bench": [...]},
        "awayTeam": {"id": 57, "name": "Arsenal FC", ...},
        "bookings": [...],
        "substitutions": [...]
    }
"""

import logging
from datetime import date
from typing import Mapping, Optional

from sqlalchemy.orm import Session

from touchline.countries import resolve_country_id
from touchline.db.models import Competition, Country, Fixture, Team
from touchline.exceptions import MissingRequiredField

logger = logging.getLogger(__name__)


def is_finished(fixture_data: Mapping) -> bool:
    """True once football-data reports a full-time home score."""
    full_time = (fixture_data.get("score") or {}).get("fullTime") or {}
    return full_time.get("homeTeam") is not None


def process_fixture_data(db: Session, fixture_data: Mapping, season: int) -> Fixture:
    """
    Get or create the fixture described by a football-data match.

    Also gets or creates the competition and both teams. Scores are
    updated on an existing fixture once they become available.

    Args:
        db: SQLAlchemy session
        fixture_data: football-data match payload
        season: Season the fixture belongs to (starting year)

    Returns:
        The Fixture row

    Raises:
        MissingRequiredField: If the payload lacks an ID, teams or competition
        UnknownCountry: If the competition's area isn't a known country
    """
    for field in ("id", "competition", "homeTeam", "awayTeam"):
        if fixture_data.get(field) is None:
            raise MissingRequiredField(field, "fixture data")

    competition = _get_or_create_competition(db, fixture_data["competition"], fixture_data)
    home = _get_or_create_team(db, fixture_data["homeTeam"])
    away = _get_or_create_team(db, fixture_data["awayTeam"])

    full_time = (fixture_data.get("score") or {}).get("fullTime") or {}

    fixture = db.query(Fixture).filter(
        Fixture.football_data_id == fixture_data["id"]
    ).first()

    if fixture is None:
        fixture = Fixture(
            competition_id=competition.id,
            home_team_id=home.id,
            away_team_id=away.id,
            season=season,
            fixture_date=_parse_date(fixture_data.get("utcDate")),
            home_team_goals=full_time.get("homeTeam"),
            away_team_goals=full_time.get("awayTeam"),
            football_data_id=fixture_data["id"],
        )
        db.add(fixture)
        db.commit()
        logger.debug("Created fixture #%d (football-data %d)", fixture.id, fixture_data["id"])
        return fixture

    if fixture.home_team_goals is None and full_time.get("homeTeam") is not None:
        fixture.home_team_goals = full_time.get("homeTeam")
        fixture.away_team_goals = full_time.get("awayTeam")
        db.commit()

    return fixture


def get_competition_id(db: Session, name: str, country_name: str) -> Optional[int]:
    """ID of the competition with this name in this country, or None."""
    row = (
        db.query(Competition.id)
        .join(Country, Country.id == Competition.country_id)
        .filter(Competition.name == name, Country.name == country_name)
        .first()
    )
    return row.id if row else None


def _get_or_create_competition(
    db: Session, competition_data: Mapping, fixture_data: Mapping
) -> Competition:
    competition = db.query(Competition).filter(
        Competition.football_data_id == competition_data.get("id")
    ).first()
    if competition is not None:
        return competition

    area = competition_data.get("area") or fixture_data.get("area") or {}
    if area.get("name") is None:
        raise MissingRequiredField("competition area name", "fixture data")
    if competition_data.get("name") is None:
        raise MissingRequiredField("competition name", "fixture data")

    country_id = resolve_country_id(db, area["name"])

    competition = db.query(Competition).filter(
        Competition.name == competition_data["name"],
        Competition.country_id == country_id,
    ).first()

    if competition is None:
        competition = Competition(
            name=competition_data["name"],
            country_id=country_id,
            football_data_id=competition_data.get("id"),
        )
        db.add(competition)
    elif competition.football_data_id is None:
        competition.football_data_id = competition_data.get("id")

    db.commit()
    return competition


def _get_or_create_team(db: Session, team_data: Mapping) -> Team:
    if team_data.get("id") is None:
        raise MissingRequiredField("team id", "fixture data")

    team = db.query(Team).filter(Team.football_data_id == team_data["id"]).first()
    if team is None:
        team = Team(name=team_data.get("name") or "", football_data_id=team_data["id"])
        db.add(team)
        db.commit()
    return team


def _parse_date(utc_date: Optional[str]) -> Optional[date]:
    """'2020-09-12T11:30:00Z' -> date(2020, 9, 12)."""
    if not utc_date:
        return None
    return date.fromisoformat(utc_date[:10])
