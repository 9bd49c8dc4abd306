"""
Unit tests for the FPL gameweek calendar.
"""

from datetime import date, datetime

import pytest

from touchline.db.models import FixtureGameweek, FPLGameweek
from touchline.exceptions import SeasonMismatch, UnknownGameweek
from touchline.gameweeks import (
    add_fixture_gameweeks,
    find_gameweek_for_date,
    get_gameweek_id,
    parse_deadline,
    process_gameweeks,
)


EVENTS = [
    {"id": 1, "deadline_time": "2020-09-12T10:00:00Z"},
    {"id": 2, "deadline_time": "2020-09-19T10:00:00Z"},
    {"id": 3, "deadline_time": "2020-09-26T10:00:00Z"},
]


def test_parse_deadline():
    assert parse_deadline("2020-09-12T10:00:00Z") == datetime(2020, 9, 12, 10, 0)


class TestProcessGameweeks:

    def test_stores_and_updates(self, db_session):
        assert process_gameweeks(db_session, EVENTS, 2020) == 3

        moved = [dict(EVENTS[0]), dict(EVENTS[1], deadline_time="2020-09-20T17:30:00Z")]
        process_gameweeks(db_session, moved, 2020)

        assert db_session.query(FPLGameweek).count() == 3
        gw2 = db_session.get(FPLGameweek, get_gameweek_id(db_session, 2020, 2))
        assert gw2.deadline == datetime(2020, 9, 20, 17, 30)

    def test_season_mismatch(self, db_session):
        with pytest.raises(SeasonMismatch):
            process_gameweeks(db_session, EVENTS, 2021)
        assert db_session.query(FPLGameweek).count() == 0

    def test_unknown_gameweek(self, db_session):
        process_gameweeks(db_session, EVENTS, 2020)
        with pytest.raises(UnknownGameweek):
            get_gameweek_id(db_session, 2020, 38)


class TestFixtureGameweeks:

    def test_find_gameweek_for_date(self):
        gameweeks = [
            FPLGameweek(season=2020, gameweek=e["id"], deadline=parse_deadline(e["deadline_time"]))
            for e in EVENTS
        ]

        assert find_gameweek_for_date(date(2020, 9, 14), gameweeks).gameweek == 1
        assert find_gameweek_for_date(date(2020, 9, 19), gameweeks).gameweek == 2
        assert find_gameweek_for_date(date(2020, 10, 3), gameweeks).gameweek == 3

    def test_links_fixtures(self, db_session, make_fixture):
        process_gameweeks(db_session, EVENTS, 2020)
        first = make_fixture(fixture_date=date(2020, 9, 12))
        second = make_fixture(home="Liverpool FC", away="Leeds United FC", fixture_date=date(2020, 9, 21))

        assert add_fixture_gameweeks(db_session, 2020) == 2

        links = {
            link.fixture_id: db_session.get(FPLGameweek, link.gameweek_id).gameweek
            for link in db_session.query(FixtureGameweek)
        }
        assert links == {first.id: 1, second.id: 2}

    def test_rescheduled_fixture_moves(self, db_session, make_fixture):
        process_gameweeks(db_session, EVENTS, 2020)
        fixture = make_fixture(fixture_date=date(2020, 9, 12))
        add_fixture_gameweeks(db_session, 2020)

        fixture.fixture_date = date(2020, 9, 27)
        db_session.commit()
        add_fixture_gameweeks(db_session, 2020)

        link = db_session.query(FixtureGameweek).one()
        assert db_session.get(FPLGameweek, link.gameweek_id).gameweek == 3

    def test_no_gameweeks(self, db_session, make_fixture):
        make_fixture()
        with pytest.raises(UnknownGameweek):
            add_fixture_gameweeks(db_session, 2020)
