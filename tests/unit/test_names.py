"""
Unit tests for name splitting and similarity.
"""

import pytest

from touchline.exceptions import AmbiguousName
from touchline.players.names import (
    first_token,
    has_whitespace,
    name_similarity,
    sanitize_source_name,
    split_full_name,
    strip_accents,
)


class TestSplitFullName:
    """Tests for splitting on the first whitespace run."""

    def test_two_words(self):
        assert split_full_name("Harry Kane") == ("Harry", "Kane")

    def test_multi_word_family_name_stays_together(self):
        assert split_full_name("Kevin De Bruyne") == ("Kevin", "De Bruyne")

    def test_surrounding_and_repeated_whitespace(self):
        assert split_full_name("  Heung-Min   Son ") == ("Heung-Min", "Son")

    def test_single_word_raises_by_default(self):
        with pytest.raises(AmbiguousName):
            split_full_name("Fred")

    def test_single_word_allowed(self):
        assert split_full_name("Fred", require_both=False) == ("Fred", "")


class TestSanitizeSourceName:
    """Tests for getting (first, last) out of football-data records."""

    def test_both_parts_returned_unchanged(self):
        record = {"firstName": "Lionel", "lastName": "Messi", "name": "Lionel Andrés Messi"}
        assert sanitize_source_name(record) == ("Lionel", "Messi")

    def test_combined_name_is_split(self):
        assert sanitize_source_name({"name": "Bruno Fernandes"}) == ("Bruno", "Fernandes")

    def test_combined_name_used_when_one_part_missing(self):
        record = {"firstName": "Bruno", "name": "Bruno Fernandes"}
        assert sanitize_source_name(record) == ("Bruno", "Fernandes")

    def test_single_word_name_becomes_first_name(self):
        assert sanitize_source_name({"name": "Fred"}) == ("Fred", "")

    def test_single_word_with_first_name(self):
        assert sanitize_source_name({"firstName": "Fred", "name": "Fred"}) == ("Fred", "")

    def test_single_word_with_last_name(self):
        record = {"lastName": "Jorginho", "name": "Jorginho"}
        assert sanitize_source_name(record) == ("", "Jorginho")


class TestTokenHelpers:

    def test_first_token(self):
        assert first_token("Gabriel Fernando") == "Gabriel"
        assert first_token("Jesus") == "Jesus"
        assert first_token("") == ""

    def test_has_whitespace(self):
        assert has_whitespace("Bernardo Silva")
        assert not has_whitespace("Jesus")
        assert not has_whitespace("")
        assert not has_whitespace(None)


class TestNameSimilarity:
    """Similarity is only used for suggestions, never for matching."""

    def test_identical(self):
        assert name_similarity("Harry Kane", "harry  kane") == 1.0

    def test_accents_ignored(self):
        assert strip_accents("Nicolás Otamendi") == "Nicolas Otamendi"
        assert name_similarity("Nicolás Otamendi", "Nicolas Otamendi") == 1.0

    def test_reordered_names(self):
        assert name_similarity("Son Heung-Min", "Heung-Min Son") == 1.0

    def test_typo_scores_high(self):
        assert name_similarity("Mohammed Salah", "Mohamed Salah") > 0.9

    def test_different_people_score_low(self):
        assert name_similarity("Harry Kane", "Mohamed Salah") < 0.85

    def test_empty(self):
        assert name_similarity("", "Harry Kane") == 0.0
