"""
Player identity management module.

This module handles the critical task of matching player records from
different sources (football-data, FPL, understat) to canonical player
records.

Key components:
- PlayerResolver: Maps source records to canonical players
- PlayerStore: Reads and writes canonical players
- names: Splitting and comparing name strings

The matching strategy per source:
1. football-data: exact football-data ID, creating the player if new
2. FPL: ordered exact-name rules within the host competition's players
3. understat: name search confirmed by team name
"""

from touchline.players.names import sanitize_source_name, split_full_name
from touchline.players.resolver import PlayerResolver, run_cascade
from touchline.players.store import PlayerStore

__all__ = [
    "PlayerResolver",
    "PlayerStore",
    "run_cascade",
    "sanitize_source_name",
    "split_full_name",
]
