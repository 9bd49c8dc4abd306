"""
Fantasy Premier League API client.

Endpoints used:
    GET bootstrap-static/        -> {"elements": [...], "events": [...], ...}
    GET element-summary/{id}/    -> {"history": [...], ...}

Elements carry {id, code, first_name, second_name, web_name, element_type}.
The element "id" changes every season; "code" is stable.

History entries carry {round, team_h_score, bonus, bps, total_points,
transfers_in, transfers_out, selected, value}. value is in tenths of a
million (55 means 5.5m) and team_h_score is null while the gameweek is
still being played.
"""

from touchline.api.base import BaseAPIClient
from touchline.config import settings
from touchline.exceptions import UpstreamError


class FPLAPI(BaseAPIClient):
    """Client for the FPL REST API."""

    SOURCE = "fpl"

    def __init__(self, **kwargs):
        kwargs.setdefault("base_url", settings.fpl_base_url)
        super().__init__(**kwargs)
        self._bootstrap = None

    def bootstrap(self) -> dict:
        """Fetch (once per client) the bootstrap-static payload."""
        if self._bootstrap is None:
            self._bootstrap = self.get_json("bootstrap-static/")
        return self._bootstrap

    def elements(self) -> list[dict]:
        """All players in the current FPL season."""
        return self._section("elements")

    def gameweeks(self) -> list[dict]:
        """All gameweeks ("events") in the current FPL season."""
        return self._section("events")

    def player_history(self, element_id: int) -> list[dict]:
        """Per-gameweek history for one element in the current season."""
        payload = self.get_json(f"element-summary/{element_id}/")
        if "history" not in payload:
            raise UpstreamError(f"fpl: no history for element {element_id}")
        return payload["history"]

    def _section(self, key: str) -> list[dict]:
        data = self.bootstrap()
        if key not in data:
            raise UpstreamError(f"fpl: bootstrap-static has no '{key}'")
        return data[key]
