"""
Cross-source player identity resolution.

This is the core service for player identification. It maps a record from
any of the three sources onto exactly one canonical player:

- football-data (authoritative): matched by football-data ID. The only
  source allowed to create a new canonical player.
- FPL: matched by name, through an ordered cascade of exact-match rules.
  Never creates players.
- understat: located by free-text search, confirmed by team name. Never
  creates players.

The matching strategy prioritizes reliability over coverage. Every rule is
an exact comparison; a rule that finds two or more players stops the
cascade with AmbiguousMatch rather than picking one, and running out of
rules raises NoMatchFound. Both are meant to reach an operator.

The resolver keeps no state between calls. Everything it needs is re-read
from the database each time.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Sequence

from sqlalchemy.orm import Session

from touchline.config import settings
from touchline.countries import resolve_country_id
from touchline.db.models import Player
from touchline.exceptions import (
    AmbiguousMatch,
    MissingGateway,
    MissingRequiredField,
    NoMatchFound,
)
from touchline.players.names import (
    first_token,
    name_similarity,
    sanitize_source_name,
    split_full_name,
)
from touchline.players.store import PlayerStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    """A player in the matching pool."""
    id: int
    first_name: str
    last_name: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


# A rule takes the query record and the candidate pool and returns every
# candidate it considers a match.
MatchRule = Callable[[Mapping, Sequence[Candidate]], list[Candidate]]


# =============================================================================
# FPL Matching Rules
# =============================================================================

def match_fpl_full_name(info: Mapping, pool: Sequence[Candidate]) -> list[Candidate]:
    """(first_name, second_name) equal to the player's (first, last)."""
    return [
        c for c in pool
        if c.first_name == info["first_name"] and c.last_name == info["second_name"]
    ]


def match_fpl_web_name(info: Mapping, pool: Sequence[Candidate]) -> list[Candidate]:
    """
    web_name equal to the last name, and the first token of first_name
    equal to the first name.

    FPL often uses a player's common surname as the web name and lists
    every given name in first_name ("Gabriel Fernando" / "de Jesus" /
    "Jesus").
    """
    first = first_token(info["first_name"])
    return [
        c for c in pool
        if c.last_name == info["web_name"] and c.first_name == first
    ]


def match_fpl_split_web_name(info: Mapping, pool: Sequence[Candidate]) -> list[Candidate]:
    """
    web_name split into (first, last), both equal.

    Only applies to multi-word web names ("Bernardo Silva"). A web name with
    nothing after the whitespace ("Son ") is treated as one word.
    """
    first, last = split_full_name(info["web_name"], require_both=False)
    if not last:
        return []

    return [c for c in pool if c.first_name == first and c.last_name == last]


FPL_MATCH_RULES: tuple[tuple[str, MatchRule], ...] = (
    ("full_name", match_fpl_full_name),
    ("web_name", match_fpl_web_name),
    ("split_web_name", match_fpl_split_web_name),
)


def run_cascade(
    rules: Sequence[tuple[str, MatchRule]],
    query: Mapping,
    pool: Sequence[Candidate],
) -> Optional[Candidate]:
    """
    Evaluate rules in order until one identifies a single candidate.

    - Exactly one match: returned straight away, later rules are not run
    - More than one match: AmbiguousMatch, ties are never broken
    - No match: fall through to the next rule

    Returns:
        The matched candidate, or None if every rule came back empty

    Raises:
        AmbiguousMatch: If any rule matches two or more candidates
    """
    for step, rule in rules:
        matches = rule(query, pool)

        if len(matches) == 1:
            logger.debug("Matched player #%d at step '%s'", matches[0].id, step)
            return matches[0]

        if len(matches) > 1:
            raise AmbiguousMatch(step, [m.id for m in matches])

    return None


# =============================================================================
# Resolver
# =============================================================================

class PlayerResolver:
    """
    Service mapping source records to canonical players.

    Usage:
        resolver = PlayerResolver(db_session, football_data=FootballDataAPI())

        # Authoritative record, creating the player if needed
        player = resolver.resolve_or_create(154, {
            "first_name": "Lionel",
            "last_name": "Messi",
            "country_name": "Argentina",
        })

        # FPL bootstrap element
        player = resolver.resolve_by_fpl_info(element)

        # understat, for a player we already know
        player = resolver.resolve_by_understat_search(player.id)
    """

    def __init__(
        self,
        db: Session,
        football_data=None,
        understat=None,
        host_competition: Optional[str] = None,
        host_country: Optional[str] = None,
    ):
        """
        Args:
            db: SQLAlchemy session for database operations
            football_data: Authoritative gateway (needs player(id))
            understat: Scrape-target gateway (needs search(name))
            host_competition: Competition the FPL pool is drawn from
            host_country: Country of host_competition
        """
        self.db = db
        self.store = PlayerStore(db)
        self.football_data = football_data
        self.understat = understat
        self.host_competition = host_competition or settings.host_competition_name
        self.host_country = host_country or settings.host_country_name
        self.suggestion_threshold = settings.match_suggestion_threshold

    # =========================================================================
    # Authoritative Source
    # =========================================================================

    def resolve_or_create(self, football_data_id: int, info: Mapping) -> Player:
        """
        Fetch the player with this football-data ID, inserting them if new.

        An existing player is returned as stored: the names in info are
        never written over the stored ones.

        Args:
            football_data_id: The player's football-data ID
            info: first_name, last_name and country_name (nationality, not
                  country of birth). Only read when the player is new.

        Raises:
            MissingRequiredField: If the player is new and info is incomplete
            UnknownCountry: If country_name can't be resolved
        """
        player = self.store.get_by_football_data_id(football_data_id)
        if player is not None:
            return player

        for field in ("first_name", "last_name", "country_name"):
            if info.get(field) is None:
                raise MissingRequiredField(field, "player info")

        country_id = resolve_country_id(self.db, info["country_name"])

        return self.store.insert(
            first_name=info["first_name"],
            last_name=info["last_name"],
            country_id=country_id,
            football_data_id=football_data_id,
        )

    def get_or_fetch(self, football_data_id: int) -> Player:
        """
        Find a player by football-data ID, fetching and storing them if unknown.

        This is the ingestion path that creates identities: football-data
        is the only source trusted to say that a player exists.
        """
        player = self.store.get_by_football_data_id(football_data_id)
        if player is not None:
            return player

        if self.football_data is None:
            raise MissingGateway("football-data gateway required to fetch new players")

        record = self.football_data.player(football_data_id)
        first, last = sanitize_source_name(record)

        return self.resolve_or_create(football_data_id, {
            "first_name": first,
            "last_name": last,
            "country_name": record.get("nationality"),
        })

    # =========================================================================
    # Fantasy League Source
    # =========================================================================

    def resolve_by_fpl_info(self, info: Mapping) -> Player:
        """
        Find the canonical player an FPL element refers to.

        A manual override in fpl_names for the element's full name wins
        outright, whether or not that player is in the pool. Otherwise runs
        FPL_MATCH_RULES against players who have played in the host
        competition at some point (any season). Restricting the pool stops
        matches against namesakes who never played in the league FPL covers.

        Args:
            info: FPL element with first_name, second_name and web_name

        Raises:
            MissingRequiredField: If info lacks one of the name fields
            AmbiguousMatch: If any rule matches more than one player
            NoMatchFound: If no rule matches
        """
        for field in ("first_name", "second_name", "web_name"):
            if info.get(field) is None:
                raise MissingRequiredField(field, "FPL info")

        wanted = f"{info['first_name']} {info['second_name']}"
        override = self.store.get_by_fpl_name(wanted)
        if override is not None:
            return override

        players = self.store.get_competition_players(
            self.host_competition, self.host_country
        )
        pool = [Candidate(p.id, p.first_name, p.last_name) for p in players]

        match = run_cascade(FPL_MATCH_RULES, info, pool)
        if match is None:
            raise NoMatchFound(
                f"FPL player {wanted} ({info['web_name']})",
                suggestions=self._suggest(wanted, pool),
            )

        return self.store.get(match.id)

    def _suggest(self, name: str, pool: Sequence[Candidate], limit: int = 3) -> list[str]:
        """Closest names in the pool, for the operator reading the alert."""
        scored = [(name_similarity(name, c.full_name), c) for c in pool]
        scored = [item for item in scored if item[0] >= self.suggestion_threshold]
        scored.sort(key=lambda item: item[0], reverse=True)
        return [f"#{c.id} {c.full_name}" for _, c in scored[:limit]]

    # =========================================================================
    # Scrape-Target Source
    # =========================================================================

    def resolve_by_understat_search(self, player_id: int) -> Player:
        """
        Find and store the understat ID for a canonical player.

        Steps:
        1. Collect the names of every team the player has played for
        2. Search understat for the full name, then the last name, then
           the first name (only the first name when there is no last name)
        3. Accept the first search result whose team name appears inside
           one of the player's team names. understat team names are usually
           shorter than ours ("Wolverhampton Wanderers" vs "Wolverhampton"),
           hence the substring check.

        Raises:
            NoMatchFound: If no search string yields a result with a known
                          team. Every tracked player should be on understat,
                          so this needs fixing by hand.
            UpstreamError: If understat returns a malformed response
            IdentityConflict: If the found understat ID belongs to another player
            MissingGateway: If the resolver has no understat gateway
        """
        if self.understat is None:
            raise MissingGateway("understat gateway required for understat search")

        teams = self.store.get_team_names(player_id)
        first, last = self.store.get_name(player_id)
        full = f"{first} {last}"

        if last != "":
            options = [full, last, first]
        else:
            options = [first]

        for search_string in options:
            result = self._search_understat(search_string, teams)
            if result is not None:
                self.store.set_understat_id(player_id, result["id"])
                logger.info(
                    "Player #%d %s -> understat %d (%s)",
                    player_id, full, result["id"], result["team"],
                )
                return self.store.get(player_id)

        raise NoMatchFound(f"understat ID for player #{player_id}: {full}")

    def _search_understat(self, search_string: str, teams: Sequence[str]) -> Optional[dict]:
        """First search result whose team is a substring of a known team name."""
        for result in self.understat.search(search_string):
            # a result without a team can't be confirmed
            if not result.get("team"):
                continue
            if any(result["team"] in team for team in teams):
                return result
        return None
