"""
football-data.org client — the authoritative source.

football-data is the only source trusted to say a player exists, so it is
the only one whose records can create canonical players.

Endpoints used (API v2):
    GET players/{id}                        -> player record
    GET matches/{id}                        -> {"match": {...}}
    GET competitions/{code}/matches?season= -> {"matches": [...]}

Player record shape:
    {"id": 154, "name": "Lionel Messi", "firstName": "Lionel",
     "lastName": "Messi", "nationality": "Argentina", ...}

firstName/lastName are missing for some players, in which case only the
combined name is present. See players/names.py.
"""

from typing import Optional

from touchline.api.base import BaseAPIClient
from touchline.config import settings
from touchline.exceptions import UpstreamError


class FootballDataAPI(BaseAPIClient):
    """Client for the football-data.org REST API."""

    SOURCE = "football-data"

    def __init__(self, api_key: Optional[str] = None, **kwargs):
        kwargs.setdefault("base_url", settings.football_data_base_url)
        kwargs.setdefault(
            "min_request_interval", settings.football_data_min_request_interval
        )
        super().__init__(**kwargs)
        self.api_key = api_key or settings.football_data_api_key

    def _headers(self) -> dict[str, str]:
        if self.api_key:
            return {"X-Auth-Token": self.api_key}
        return {}

    def player(self, player_id: int) -> dict:
        """Fetch a single player record."""
        return self.get_json(f"players/{player_id}")

    def match(self, match_id: int) -> dict:
        """Fetch a single match, including lineups, bookings and substitutions."""
        payload = self.get_json(f"matches/{match_id}")
        if "match" not in payload:
            raise UpstreamError(f"football-data: no match in response for {match_id}")
        return payload["match"]

    def competition_matches(self, competition_code: str, season: int) -> list[dict]:
        """Fetch the summary of every match in a competition season."""
        payload = self.get_json(
            f"competitions/{competition_code}/matches", params={"season": season}
        )
        if "matches" not in payload:
            raise UpstreamError(
                f"football-data: no matches in response for {competition_code} {season}"
            )
        return payload["matches"]
