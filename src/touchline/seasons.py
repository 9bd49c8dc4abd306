"""
Season helpers.

A season is identified by the year it starts in: 2020 means 2020/21.
Everything below the entry points takes the season as an argument; only
scripts call current_season(), once, at startup.
"""

from datetime import date
from typing import Optional

# Seasons are treated as starting in July, once the previous one is over
SEASON_START_MONTH = 7


def current_season(today: Optional[date] = None) -> int:
    """The season in progress (or about to start) on the given day."""
    today = today or date.today()
    if today.month >= SEASON_START_MONTH:
        return today.year
    return today.year - 1
