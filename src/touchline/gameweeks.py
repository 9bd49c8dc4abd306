"""
FPL gameweek calendar.

A gameweek is a numbered FPL round. Gameweeks are stored per season with
their transfer deadline, and each host-competition fixture is linked to
the gameweek it falls in: the last gameweek whose deadline date is not
after the fixture date.

Usage:
    from touchline.gameweeks import process_gameweeks, add_fixture_gameweeks

    process_gameweeks(session, fpl_api.gameweeks(), season=2020)
    add_fixture_gameweeks(session, season=2020)
"""

import logging
from datetime import date, datetime, timezone
from typing import Iterable, Mapping, Optional, Sequence

from sqlalchemy.orm import Session

from touchline.config import settings
from touchline.db.models import (
    Competition,
    Country,
    Fixture,
    FixtureGameweek,
    FPLGameweek,
)
from touchline.exceptions import SeasonMismatch, UnknownGameweek

logger = logging.getLogger(__name__)


def parse_deadline(deadline_time: str) -> datetime:
    """'2020-09-12T10:00:00Z' -> naive UTC datetime."""
    parsed = datetime.fromisoformat(deadline_time.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def process_gameweeks(db: Session, events: Iterable[Mapping], season: int) -> int:
    """
    Store or update the gameweeks of a season from FPL "events".

    The first gameweek's deadline must fall in the season's starting year.
    FPL only serves the current season, so a mismatch means the season
    has rolled over (or the wrong season was passed in).

    Returns:
        Number of gameweeks inserted or updated

    Raises:
        SeasonMismatch: If gameweek 1's deadline isn't in the season's year
    """
    updated = 0

    for event in events:
        gw_number = event["id"]
        deadline = parse_deadline(event["deadline_time"])

        if gw_number == 1 and deadline.year != season:
            raise SeasonMismatch(
                f"Deadline for first gameweek ({deadline.date()}) doesn't match "
                f"season {season}. Has the next season started?"
            )

        gameweek = db.query(FPLGameweek).filter(
            FPLGameweek.season == season,
            FPLGameweek.gameweek == gw_number,
        ).first()

        if gameweek is None:
            db.add(FPLGameweek(season=season, gameweek=gw_number, deadline=deadline))
        else:
            gameweek.deadline = deadline

        db.commit()
        updated += 1

    logger.info("Processed %d gameweeks for %d", updated, season)
    return updated


def get_gameweek_id(db: Session, season: int, gameweek: int) -> int:
    """
    Database ID of a season's gameweek.

    Raises:
        UnknownGameweek: If the gameweek hasn't been stored
    """
    row = db.query(FPLGameweek.id).filter(
        FPLGameweek.season == season,
        FPLGameweek.gameweek == gameweek,
    ).first()

    if row is None:
        raise UnknownGameweek(season, gameweek)
    return row.id


def find_gameweek_for_date(
    fixture_date: date, gameweeks: Sequence[FPLGameweek]
) -> FPLGameweek:
    """
    The gameweek a fixture on fixture_date belongs to.

    gameweeks must be sorted by gameweek number. A fixture before the
    second deadline belongs to gameweek 1; after the last deadline, to the
    last gameweek.
    """
    for previous, current in zip(gameweeks, gameweeks[1:]):
        if fixture_date < current.deadline.date():
            return previous
    return gameweeks[-1]


def add_fixture_gameweeks(
    db: Session,
    season: int,
    competition_name: Optional[str] = None,
    country_name: Optional[str] = None,
) -> int:
    """
    Link every host-competition fixture of the season to its gameweek.

    Existing links are updated, since fixtures get rescheduled.

    Returns:
        Number of links inserted or updated

    Raises:
        UnknownGameweek: If no gameweeks are stored for the season
    """
    competition_name = competition_name or settings.host_competition_name
    country_name = country_name or settings.host_country_name

    gameweeks = (
        db.query(FPLGameweek)
        .filter(FPLGameweek.season == season)
        .order_by(FPLGameweek.gameweek)
        .all()
    )
    if not gameweeks:
        raise UnknownGameweek(season, 1)

    fixtures = (
        db.query(Fixture)
        .join(Competition, Competition.id == Fixture.competition_id)
        .join(Country, Country.id == Competition.country_id)
        .filter(
            Fixture.season == season,
            Competition.name == competition_name,
            Country.name == country_name,
            Fixture.fixture_date.isnot(None),
        )
        .order_by(Fixture.id)
        .all()
    )

    updated = 0
    for fixture in fixtures:
        gameweek = find_gameweek_for_date(fixture.fixture_date, gameweeks)

        link = db.query(FixtureGameweek).filter(
            FixtureGameweek.fixture_id == fixture.id
        ).first()

        if link is None:
            db.add(FixtureGameweek(fixture_id=fixture.id, gameweek_id=gameweek.id))
        else:
            link.gameweek_id = gameweek.id

        db.commit()
        updated += 1

    logger.info("Linked %d fixtures to gameweeks for %d", updated, season)
    return updated
