"""
Country lookups.

Sources spell countries differently, so a name is checked against the
countries table first and the alternate-name table second.
"""

from typing import Optional

from sqlalchemy.orm import Session

from touchline.db.models import Country, CountryAlternateName
from touchline.exceptions import UnknownCountry


def get_country_id(db: Session, name: str) -> Optional[int]:
    """ID of the country with exactly this name, or None."""
    country = db.query(Country).filter(Country.name == name).first()
    return country.id if country else None


def get_id_for_alternate_name(db: Session, name: str) -> Optional[int]:
    """ID of the country that has this alternate name, or None."""
    alternate = db.query(CountryAlternateName).filter(
        CountryAlternateName.name == name
    ).first()
    return alternate.country_id if alternate else None


def resolve_country_id(db: Session, name: str) -> int:
    """
    Resolve a country name to an ID, falling back to alternate names.

    Raises:
        UnknownCountry: If neither lookup finds the name
    """
    country_id = get_country_id(db, name)
    if country_id is None:
        country_id = get_id_for_alternate_name(db, name)
    if country_id is None:
        raise UnknownCountry(name)
    return country_id
