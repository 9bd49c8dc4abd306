"""
Player name splitting and comparison utilities.

Football sources disagree on how they present names:
- football-data: "firstName"/"lastName", sometimes only a combined "name"
- FPL: "first_name"/"second_name" plus a "web_name" ("Son", "Bernardo Silva")
- understat: a single display name

The splitting rules here are deliberately simple: split on the first run of
whitespace, no transliteration, no handling of multi-word family names.
Stored names and lookups elsewhere depend on these exact rules, so any
smarter heuristic would change which players match.
"""

import unicodedata
from typing import Mapping, Optional

import jellyfish
from rapidfuzz import fuzz

from touchline.exceptions import AmbiguousName


def split_full_name(full: str, require_both: bool = True) -> tuple[str, str]:
    """
    Split a full name into (first, last) on the first whitespace run.

    The first token is the given name; everything after the first
    whitespace run is the family name.

    Args:
        full: Full name, e.g. "Kevin De Bruyne"
        require_both: If True, a name without whitespace is an error.
                      If False, it is returned as (full, "").

    Returns:
        Tuple of (first, last)

    Raises:
        AmbiguousName: If the name has no whitespace and require_both is set

    Examples:
        >>> split_full_name("Kevin De Bruyne")
        ('Kevin', 'De Bruyne')
        >>> split_full_name("Fred", require_both=False)
        ('Fred', '')
    """
    parts = full.strip().split(None, 1)

    if len(parts) == 2:
        return parts[0], parts[1]

    if require_both:
        raise AmbiguousName(full)

    return (parts[0] if parts else ""), ""


def first_token(name: str) -> str:
    """Return the first whitespace-separated token of a name ("" if empty)."""
    parts = name.split()
    return parts[0] if parts else ""


def has_whitespace(name: Optional[str]) -> bool:
    """True if the name contains any whitespace character."""
    return bool(name) and any(char.isspace() for char in name)


def sanitize_source_name(record: Mapping) -> tuple[str, str]:
    """
    Get a (first, last) pair out of an authoritative-source player record.

    football-data records carry "firstName" and "lastName" for most
    players, but some only have the combined "name".

    - Both parts present: returned unchanged
    - Otherwise the combined name is split on its first whitespace run
    - A one-word combined name fills the missing part with "", so that
      the player's attendance facts can still be stored

    Args:
        record: Player record with optional firstName, lastName and name

    Returns:
        Tuple of (first, last)
    """
    first = record.get("firstName")
    last = record.get("lastName")

    if first is not None and last is not None:
        return first, last

    full = record.get("name") or ""

    if has_whitespace(full):
        return split_full_name(full, require_both=False)

    if first is None and last is None:
        # Single-word display names ("Fred") are treated as the given name
        return full, ""
    if last is None:
        return first, ""
    return "", last


def strip_accents(name: str) -> str:
    """Remove combining accents ("Ødegaard" stays, "Fabiánski" -> "Fabianski")."""
    decomposed = unicodedata.normalize("NFD", name)
    return "".join(
        char for char in decomposed
        if unicodedata.category(char) != "Mn"  # Mn = Mark, Nonspacing
    )


def name_similarity(name1: str, name2: str) -> float:
    """
    Score how alike two full names are, from 0.0 to 1.0.

    Only used to suggest likely candidates when resolution fails, so an
    operator can fix the data. It never decides a match.

    Takes the best of Jaro-Winkler (typos, prefix agreement) and token
    sort ratio (reordered given/family names), after lowercasing and
    removing accents.
    """
    n1 = " ".join(strip_accents(name1).lower().split())
    n2 = " ".join(strip_accents(name2).lower().split())

    if not n1 or not n2:
        return 0.0
    if n1 == n2:
        return 1.0

    jw_score = jellyfish.jaro_winkler_similarity(n1, n2)
    token_sort = fuzz.token_sort_ratio(n1, n2) / 100.0

    return max(jw_score, token_sort)
