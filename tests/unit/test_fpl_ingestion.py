"""
Unit tests for FPL linking, season info and gameweek history.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from touchline.db.models import (
    FPLGameweek,
    FPLPlayerGameweek,
    FPLPosition,
    FPLSeasonInfo,
)
from touchline.exceptions import IdentityConflict, UnknownGameweek
from touchline.players.resolver import PlayerResolver
from touchline.players.store import PlayerStore
from touchline.services.fpl_ingestion import (
    add_fpl_season_info,
    ingest_fpl_season,
    link_fpl_element,
    process_fpl_season_history,
)


SALAH = {
    "id": 254,
    "code": 118748,
    "first_name": "Mohamed",
    "second_name": "Salah",
    "web_name": "Salah",
    "element_type": 3,
}


def history_entry(gw, team_h_score=2, **overrides):
    data = {
        "round": gw,
        "team_h_score": team_h_score,
        "bonus": 3,
        "bps": 41,
        "total_points": 13,
        "transfers_in": 120000,
        "transfers_out": 5400,
        "selected": 3500000,
        "value": 121,
    }
    data.update(overrides)
    return data


@pytest.fixture
def gameweeks(db_session):
    rows = [
        FPLGameweek(season=2020, gameweek=1, deadline=datetime(2020, 9, 12, 10)),
        FPLGameweek(season=2020, gameweek=2, deadline=datetime(2020, 9, 19, 10)),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return rows


@pytest.fixture
def fpl_positions(db_session):
    rows = [
        FPLPosition(element_type_id=element_type, name=name)
        for element_type, name in ((1, "GKP"), (2, "DEF"), (3, "MID"), (4, "FWD"))
    ]
    db_session.add_all(rows)
    db_session.commit()
    return {row.element_type_id: row for row in rows}


@pytest.fixture
def salah(make_player, make_fixture, appear):
    player = make_player("Mohamed", "Salah", football_data_id=3754)
    appear(player, make_fixture(home="Liverpool FC", away="Leeds United FC"))
    return player


class TestSeasonHistory:

    def test_value_stored_in_millions(self, db_session, salah, gameweeks):
        inserted = process_fpl_season_history(db_session, salah.id, [history_entry(1)], 2020)

        row = db_session.query(FPLPlayerGameweek).one()
        assert inserted == 1
        assert row.value == Decimal("12.1")
        assert (row.bonus_points, row.bps, row.total_points) == (3, 41, 13)
        assert row.fpl_gameweek_id == gameweeks[0].id

    def test_incomplete_gameweek_skipped(self, db_session, salah, gameweeks):
        inserted = process_fpl_season_history(
            db_session, salah.id, [history_entry(2, team_h_score=None)], 2020
        )

        assert inserted == 0
        assert db_session.query(FPLPlayerGameweek).count() == 0

    def test_scoreless_home_side_is_complete(self, db_session, salah, gameweeks):
        inserted = process_fpl_season_history(
            db_session, salah.id, [history_entry(1, team_h_score=0)], 2020
        )
        assert inserted == 1

    def test_never_overwrites(self, db_session, salah, gameweeks):
        process_fpl_season_history(db_session, salah.id, [history_entry(1)], 2020)

        inserted = process_fpl_season_history(
            db_session, salah.id, [history_entry(1, total_points=2), history_entry(2)], 2020
        )

        assert inserted == 1
        points = {
            row.fpl_gameweek_id: row.total_points
            for row in db_session.query(FPLPlayerGameweek)
        }
        assert points == {gameweeks[0].id: 13, gameweeks[1].id: 13}

    def test_unknown_gameweek(self, db_session, salah, gameweeks):
        with pytest.raises(UnknownGameweek):
            process_fpl_season_history(db_session, salah.id, [history_entry(3)], 2020)


class TestSeasonInfo:

    def test_check_then_insert(self, db_session, salah, fpl_positions):
        first = add_fpl_season_info(db_session, salah.id, 2020, 254, 3)
        second = add_fpl_season_info(db_session, salah.id, 2020, 999, 4)

        info = db_session.query(FPLSeasonInfo).one()
        assert first == second == info.id
        assert info.fpl_season_id == 254
        assert info.fpl_positions_id == fpl_positions[3].id


class TestLinkElement:

    def test_links_by_name_then_by_code(self, db_session, salah, fpl_positions):
        resolver = PlayerResolver(db_session)

        player = link_fpl_element(db_session, resolver, SALAH, 2020)
        assert player.id == salah.id
        assert player.fpl_id == 118748

        # Found by code even though the name no longer matches anyone
        renamed = dict(SALAH, first_name="Mo", web_name="Mo Salah")
        assert link_fpl_element(db_session, resolver, renamed, 2020).id == salah.id

    def test_update_fpl_id_only_once(self, db_session, salah):
        store = PlayerStore(db_session)

        assert store.update_fpl_id(salah.id, 118748) == 1
        assert store.update_fpl_id(salah.id, 1) == 0
        assert store.get(salah.id).fpl_id == 118748

    def test_different_fpl_id_is_a_conflict(self, db_session, salah, fpl_positions):
        salah.fpl_id = 1
        db_session.commit()

        with pytest.raises(IdentityConflict) as exc_info:
            link_fpl_element(db_session, PlayerResolver(db_session), SALAH, 2020)

        assert exc_info.value.player_ids == [salah.id]
        assert PlayerStore(db_session).get(salah.id).fpl_id == 1
        assert db_session.query(FPLSeasonInfo).count() == 0


class FakeFPL:

    def __init__(self, elements, histories):
        self._elements = elements
        self._histories = histories

    def elements(self):
        return self._elements

    def player_history(self, element_id):
        return self._histories[element_id]


class TestIngestSeason:

    def test_unmatched_elements_reported(self, db_session, salah, gameweeks, fpl_positions):
        unknown = dict(SALAH, id=1, code=1, first_name="Nobody", second_name="Here", web_name="Here")
        api = FakeFPL(
            [unknown, SALAH],
            {254: [history_entry(1), history_entry(2, team_h_score=None)]},
        )

        stats = ingest_fpl_season(db_session, PlayerResolver(db_session), api, 2020)

        assert stats.total_elements == 2
        assert stats.players_linked == 1
        assert stats.gameweeks_inserted == 1
        assert len(stats.errors) == 1
        assert "Nobody" in stats.errors[0]

    def test_fpl_id_conflict_reported(self, db_session, salah, gameweeks, fpl_positions):
        salah.fpl_id = 1
        db_session.commit()
        api = FakeFPL([SALAH], {254: [history_entry(1)]})

        stats = ingest_fpl_season(db_session, PlayerResolver(db_session), api, 2020)

        assert stats.players_linked == 0
        assert stats.gameweeks_inserted == 0
        assert len(stats.errors) == 1
        assert "118748" in stats.errors[0]
