"""
understat.com client.

understat has no public API. Player search is served as JSON by an
internal endpoint, while per-match player data is embedded in the player
page as a JavaScript string:

    <script>
        var matchesData = JSON.parse('[{\\x22goals\\x22:\\x220\\x22, ...}]');
    </script>

The string uses \\xNN escapes for quotes and non-ASCII characters, which
are decoded before the JSON is parsed.

Usage:
    with UnderstatAPI() as api:
        results = api.search("Harry Kane")   # [{"id": 647, "team": "Tottenham", ...}]
        matches = api.player_matches(647)
"""

import json
import logging
import re
from urllib.parse import quote

from bs4 import BeautifulSoup

from touchline.api.base import BaseAPIClient
from touchline.config import settings
from touchline.exceptions import UpstreamError

logger = logging.getLogger(__name__)

_MATCHES_DATA_RE = re.compile(r"matchesData\s*=\s*JSON\.parse\('(.*?)'\)", re.DOTALL)
_HEX_ESCAPE_RE = re.compile(r"\\x([0-9a-fA-F]{2})")


class UnderstatAPI(BaseAPIClient):
    """Client for understat.com search and player pages."""

    SOURCE = "understat"

    def __init__(self, **kwargs):
        kwargs.setdefault("base_url", settings.understat_base_url)
        kwargs.setdefault("min_request_interval", settings.understat_min_request_interval)
        super().__init__(**kwargs)

    def search(self, name: str) -> list[dict]:
        """
        Search understat for players by name.

        The full name gives the most accurate results, but partial names
        work too.

        Returns:
            List of {"id": int, "name": str, "team": str or None}. A defined
            but false success indicator means no players were found.

        Raises:
            UpstreamError: If the response has no success indicator at all
        """
        payload = self.get_json(f"main/getPlayersName/{quote(name)}")
        response = payload.get("response") if isinstance(payload, dict) else None

        if not isinstance(response, dict) or response.get("success") is None:
            raise UpstreamError(f"Unknown error from understat: search for {name}")

        return [
            {
                "id": int(player["id"]),
                "name": player.get("player_name") or player.get("name"),
                "team": player.get("team") or None,
            }
            for player in response.get("players") or []
        ]

    def player_matches(self, understat_id: int) -> list[dict]:
        """
        Fetch the per-match data embedded in a player's page.

        Each entry is understat's raw match record: goals, shots, xG, time,
        position, h_team, a_team, date, id, season, xA, assists,
        key_passes, npg, npxG, xGChain, xGBuildup. Numbers are strings.
        """
        html = self.get_text(f"player/{understat_id}")
        return parse_matches_data(html)


def parse_matches_data(html: str) -> list[dict]:
    """
    Extract and decode the matchesData JSON from an understat player page.

    Raises:
        UpstreamError: If no script tag carries match data
    """
    soup = BeautifulSoup(html, "html.parser")

    for script in soup.find_all("script"):
        text = script.string or ""
        if "matchesData" not in text:
            continue

        found = _MATCHES_DATA_RE.search(text)
        if not found:
            break

        raw = _HEX_ESCAPE_RE.sub(lambda m: chr(int(m.group(1), 16)), found.group(1))
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise UpstreamError("understat: could not decode matchesData") from e

    raise UpstreamError("No match data found in script tag")
