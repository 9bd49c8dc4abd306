from datetime import date

from touchline.seasons import current_season


def test_autumn_is_the_starting_year():
    assert current_season(date(2020, 9, 12)) == 2020


def test_spring_belongs_to_previous_year():
    assert current_season(date(2021, 3, 1)) == 2020


def test_season_rolls_over_in_july():
    assert current_season(date(2021, 6, 30)) == 2020
    assert current_season(date(2021, 7, 1)) == 2021
