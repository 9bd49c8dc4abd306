"""
Unit tests for country lookups.
"""

import pytest

from touchline.countries import get_country_id, get_id_for_alternate_name, resolve_country_id
from touchline.db.models import Country, CountryAlternateName
from touchline.exceptions import UnknownCountry


@pytest.fixture
def south_korea(db_session):
    country = Country(name="South Korea")
    db_session.add(country)
    db_session.flush()
    db_session.add(CountryAlternateName(country_id=country.id, name="Korea Republic"))
    db_session.commit()
    return country


def test_exact_name(db_session, south_korea):
    assert get_country_id(db_session, "South Korea") == south_korea.id
    assert resolve_country_id(db_session, "South Korea") == south_korea.id


def test_alternate_name(db_session, south_korea):
    assert get_country_id(db_session, "Korea Republic") is None
    assert get_id_for_alternate_name(db_session, "Korea Republic") == south_korea.id
    assert resolve_country_id(db_session, "Korea Republic") == south_korea.id


def test_unknown_country(db_session, south_korea):
    with pytest.raises(UnknownCountry) as exc_info:
        resolve_country_id(db_session, "Narnia")
    assert exc_info.value.name == "Narnia"
