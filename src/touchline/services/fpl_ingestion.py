"""
FPL ingestion service — fantasy-league IDs, positions and gameweek history.

For each FPL element (player) this service:
1. Finds the canonical player: by stored FPL ID if we have one, otherwise
   through the resolver's name cascade, after which the FPL ID is stored
2. Records the element's per-season ID and position
3. Stores each completed gameweek of the season history

FPL never creates canonical players. An element whose player football-data
hasn't reported yet fails with NoMatchFound.

Stored history is never overwritten. Gameweeks still being played (no home
score yet) are skipped completely and picked up on a later run.

Usage:
    from touchline.services.fpl_ingestion import ingest_fpl_season

    with get_session() as session, FPLAPI() as api:
        resolver = PlayerResolver(session)
        stats = ingest_fpl_season(session, resolver, api, season=2020)
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Mapping

from sqlalchemy.orm import Session

from touchline.db.models import (
    FPLPlayerGameweek,
    FPLPosition,
    FPLSeasonInfo,
    Player,
)
from touchline.exceptions import IdentityConflict, MissingRequiredField, TouchlineError
from touchline.gameweeks import get_gameweek_id
from touchline.players.resolver import PlayerResolver

logger = logging.getLogger(__name__)

_HISTORY_FIELDS = (
    "bonus", "bps", "total_points", "transfers_in",
    "transfers_out", "selected", "value",
)


@dataclass
class FPLIngestionStats:
    """Statistics from an FPL ingestion run."""
    total_elements: int = 0
    players_linked: int = 0
    gameweeks_inserted: int = 0
    errors: list[str] = field(default_factory=list)

    def summary(self) -> str:
        """Return a human-readable summary of ingestion results."""
        lines = [
            "FPL ingestion complete:",
            f"  Elements processed:  {self.total_elements}",
            f"  Players linked:      {self.players_linked}",
            f"  Gameweeks inserted:  {self.gameweeks_inserted}",
        ]
        if self.errors:
            lines.append(f"  Errors: {len(self.errors)}")
            for err in self.errors[:5]:
                lines.append(f"    - {err}")
            if len(self.errors) > 5:
                lines.append(f"    ... and {len(self.errors) - 5} more")
        return "\n".join(lines)


def add_fpl_season_info(
    db: Session,
    player_id: int,
    season: int,
    fpl_id: int,
    position_id: int,
) -> int:
    """
    Record a player's FPL element ID and position for a season.

    Does nothing if the season is already recorded.

    Args:
        fpl_id: The element ID for this season (not the stable "code")
        position_id: FPL element type, 1 to 4

    Returns:
        ID of the (new or existing) fpl_season_info row
    """
    existing = db.query(FPLSeasonInfo).filter(
        FPLSeasonInfo.player_id == player_id,
        FPLSeasonInfo.season == season,
    ).first()
    if existing is not None:
        return existing.id

    position = db.query(FPLPosition).filter(
        FPLPosition.element_type_id == position_id
    ).first()

    info = FPLSeasonInfo(
        player_id=player_id,
        season=season,
        fpl_season_id=fpl_id,
        fpl_positions_id=position.id if position else None,
    )
    db.add(info)
    db.commit()
    return info.id


def process_fpl_season_history(
    db: Session,
    player_id: int,
    history: Iterable[Mapping],
    season: int,
) -> int:
    """
    Store a player's per-gameweek FPL history for a season.

    Gameweeks already stored are left alone. A gameweek with no home score
    is still in progress and is skipped entirely.

    value is stored in millions: the API's 55 becomes 5.5.

    Returns:
        Number of gameweek rows inserted

    Raises:
        UnknownGameweek: If a completed round has no stored gameweek
        MissingRequiredField: If a completed round lacks a figure
    """
    count = 0

    for gameweek in history:
        gw_number = gameweek["round"]

        if gameweek.get("team_h_score") is None:
            logger.debug("Skipping GW%s, it's incomplete", gw_number)
            continue

        gw_id = get_gameweek_id(db, season, gw_number)

        existing = db.query(FPLPlayerGameweek.id).filter(
            FPLPlayerGameweek.player_id == player_id,
            FPLPlayerGameweek.fpl_gameweek_id == gw_id,
        ).first()
        if existing is not None:
            continue

        for field_name in _HISTORY_FIELDS:
            if gameweek.get(field_name) is None:
                raise MissingRequiredField(field_name, f"FPL history GW{gw_number}")

        db.add(FPLPlayerGameweek(
            player_id=player_id,
            fpl_gameweek_id=gw_id,
            bonus_points=gameweek["bonus"],
            bps=gameweek["bps"],
            total_points=gameweek["total_points"],
            transfers_in=gameweek["transfers_in"],
            transfers_out=gameweek["transfers_out"],
            selected=gameweek["selected"],
            value=Decimal(gameweek["value"]) / 10,
        ))
        db.commit()
        count += 1

    return count


def link_fpl_element(
    db: Session,
    resolver: PlayerResolver,
    element: Mapping,
    season: int,
) -> Player:
    """
    Find the canonical player for an FPL element and record its season info.

    A player already carrying the element's code is used directly;
    otherwise the resolver's name cascade runs and the code is stored.

    Raises:
        AmbiguousMatch, NoMatchFound: From the resolver
        IdentityConflict: If the matched player already has a different FPL ID
    """
    for field_name in ("id", "code", "element_type"):
        if element.get(field_name) is None:
            raise MissingRequiredField(field_name, "FPL element")

    player = db.query(Player).filter(Player.fpl_id == element["code"]).first()

    if player is None:
        player = resolver.resolve_by_fpl_info(element)
        if not resolver.store.update_fpl_id(player.id, element["code"]):
            raise IdentityConflict("FPL", element["code"], [player.id])

    add_fpl_season_info(db, player.id, season, element["id"], element["element_type"])
    return player


def ingest_fpl_season(
    db: Session,
    resolver: PlayerResolver,
    api,
    season: int,
    stop_on_error: bool = False,
) -> FPLIngestionStats:
    """
    Link every FPL element and store its season history.

    Failures for one element are logged and recorded in stats.errors, and
    the run moves on unless stop_on_error is set.

    Args:
        api: FPL gateway (needs elements() and player_history(id))
    """
    elements = api.elements()
    stats = FPLIngestionStats(total_elements=len(elements))

    for element in elements:
        try:
            player = link_fpl_element(db, resolver, element, season)
            stats.players_linked += 1
            stats.gameweeks_inserted += process_fpl_season_history(
                db, player.id, api.player_history(element["id"]), season
            )
        except TouchlineError as e:
            db.rollback()
            error_msg = (
                f"FPL element {element.get('id')} "
                f"({element.get('first_name')} {element.get('second_name')}): {e}"
            )
            logger.error("Error processing FPL element: %s", error_msg)
            stats.errors.append(error_msg)
            if stop_on_error:
                raise

    logger.info(stats.summary())
    return stats
