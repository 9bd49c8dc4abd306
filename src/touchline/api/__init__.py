"""
Source gateways.

One client per upstream source. Clients return parsed records and never
perform matching; see touchline.players for that.

- FootballDataAPI: fixtures and players (authoritative)
- FPLAPI: fantasy-league players, gameweeks and per-gameweek history
- UnderstatAPI: player search and per-match advanced metrics
"""

from touchline.api.base import BaseAPIClient
from touchline.api.football_data import FootballDataAPI
from touchline.api.fpl import FPLAPI
from touchline.api.understat import UnderstatAPI

__all__ = [
    "BaseAPIClient",
    "FootballDataAPI",
    "FPLAPI",
    "UnderstatAPI",
]
