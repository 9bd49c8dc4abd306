"""
Error taxonomy for resolution and ingestion.

Nothing in the core catches these. Every failure aborts processing of the
current record and reaches the caller, which decides whether a batch carries
on with the next record or stops.
"""

from typing import Optional, Sequence


class TouchlineError(Exception):
    """Base class for all Touchline errors."""


class MissingRequiredField(TouchlineError):
    """A caller supplied an incomplete record. Never retried."""

    def __init__(self, field: str, context: str = "record"):
        self.field = field
        self.context = context
        super().__init__(f"{field} not provided in {context}")


class UnknownCountry(TouchlineError):
    """No country (or alternate country name) matches the given name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No country with name {name} found")


class AmbiguousName(TouchlineError):
    """A name could not be split into first and last parts."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Cannot split '{name}' into first and last name")


class AmbiguousMatch(TouchlineError):
    """A resolution step found more than one candidate player."""

    def __init__(self, step: str, candidate_ids: Sequence[int]):
        self.step = step
        self.candidate_ids = list(candidate_ids)
        super().__init__(
            f"Multiple matches at step '{step}': players {self.candidate_ids}"
        )


class NoMatchFound(TouchlineError):
    """Every resolution step came back empty."""

    def __init__(self, description: str, suggestions: Optional[Sequence[str]] = None):
        self.description = description
        self.suggestions = list(suggestions or [])
        message = f"No match found for {description}"
        if self.suggestions:
            message += f" (closest: {', '.join(self.suggestions)})"
        super().__init__(message)


class IdentityConflict(TouchlineError):
    """
    Storing a source ID would merge two identities.

    Either the ID already belongs to another player, or the player already
    carries a different ID from the same source.
    """

    def __init__(self, source: str, source_id: int, player_ids: Sequence[int]):
        self.source = source
        self.source_id = source_id
        self.player_ids = list(player_ids)
        super().__init__(
            f"{source} ID {source_id} conflicts with players {self.player_ids}"
        )


class UnknownPlayer(TouchlineError):
    """No canonical player has the given ID."""

    def __init__(self, player_id: int):
        self.player_id = player_id
        super().__init__(f"Player {player_id} not found")


class MissingGateway(TouchlineError):
    """A resolution path needs a source gateway the resolver wasn't given."""


class UpstreamError(TouchlineError):
    """A source gateway returned a malformed or failed response."""


class UnknownGameweek(TouchlineError):
    """No gameweek is stored for the requested season and number."""

    def __init__(self, season: int, gameweek: int):
        self.season = season
        self.gameweek = gameweek
        super().__init__(f"No gameweek found for {season} gw {gameweek}")


class SeasonMismatch(TouchlineError):
    """Fantasy-league calendar data belongs to a different season."""
