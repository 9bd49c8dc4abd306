"""
Unit tests for competition, team and fixture rows built from match payloads.
"""

from datetime import date

import pytest

from touchline.db.models import Competition, Fixture, Team
from touchline.exceptions import MissingRequiredField, UnknownCountry
from touchline.fixtures import get_competition_id, is_finished, process_fixture_data


def match(**overrides):
    data = {
        "id": 303700,
        "utcDate": "2020-09-12T11:30:00Z",
        "competition": {"id": 2021, "name": "Premier League", "area": {"name": "England"}},
        "score": {"fullTime": {"homeTeam": None, "awayTeam": None}},
        "homeTeam": {"id": 63, "name": "Fulham FC"},
        "awayTeam": {"id": 57, "name": "Arsenal FC"},
    }
    data.update(overrides)
    return data


def test_is_finished():
    assert not is_finished(match())
    assert is_finished(match(score={"fullTime": {"homeTeam": 0, "awayTeam": 3}}))
    assert not is_finished({})


def test_creates_reference_rows(db_session, england):
    fixture = process_fixture_data(db_session, match(), 2020)

    assert fixture.season == 2020
    assert fixture.fixture_date == date(2020, 9, 12)
    assert fixture.football_data_id == 303700
    assert fixture.home_team_goals is None

    competition = db_session.query(Competition).one()
    assert (competition.name, competition.country_id) == ("Premier League", england.id)
    assert {t.name for t in db_session.query(Team)} == {"Fulham FC", "Arsenal FC"}


def test_reuses_rows_and_fills_in_scores(db_session, england):
    first = process_fixture_data(db_session, match(), 2020)
    finished = match(score={"fullTime": {"homeTeam": 0, "awayTeam": 3}})

    second = process_fixture_data(db_session, finished, 2020)

    assert second.id == first.id
    assert (second.home_team_goals, second.away_team_goals) == (0, 3)
    assert db_session.query(Fixture).count() == 1
    assert db_session.query(Team).count() == 2


def test_existing_competition_found_by_name(db_session, england):
    existing = Competition(name="Premier League", country_id=england.id)
    db_session.add(existing)
    db_session.commit()

    process_fixture_data(db_session, match(), 2020)

    competition = db_session.query(Competition).one()
    assert competition.id == existing.id
    assert competition.football_data_id == 2021


def test_unknown_area(db_session, england):
    competition = {"id": 2014, "name": "Primera Division", "area": {"name": "Spain"}}
    with pytest.raises(UnknownCountry):
        process_fixture_data(db_session, match(competition=competition), 2020)


def test_missing_team(db_session, england):
    data = match()
    del data["awayTeam"]
    with pytest.raises(MissingRequiredField) as exc_info:
        process_fixture_data(db_session, data, 2020)
    assert exc_info.value.field == "awayTeam"


def test_get_competition_id(db_session, premier_league):
    assert get_competition_id(db_session, "Premier League", "England") == premier_league.id
    assert get_competition_id(db_session, "Premier League", "Scotland") is None
