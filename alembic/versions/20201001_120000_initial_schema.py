"""Initial schema: reference data, canonical players, participation and FPL tables

Revision ID: 5f1c2a9d3e70
Revises:
Create Date: 2020-10-01 12:00:00.000000+00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# Revision identifiers, used by Alembic.
revision: str = "5f1c2a9d3e70"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Reference data
    op.create_table(
        "countries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_table(
        "country_alternate_names",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("country_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.ForeignKeyConstraint(["country_id"], ["countries.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_table(
        "competitions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("country_id", sa.Integer(), nullable=False),
        sa.Column("football_data_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["country_id"], ["countries.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("football_data_id"),
        sa.UniqueConstraint("name", "country_id", name="uq_competition_name_country"),
    )
    op.create_table(
        "teams",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("football_data_id", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("football_data_id"),
    )
    op.create_table(
        "fixtures",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("competition_id", sa.Integer(), nullable=False),
        sa.Column("home_team_id", sa.Integer(), nullable=False),
        sa.Column("away_team_id", sa.Integer(), nullable=False),
        sa.Column("season", sa.Integer(), nullable=False),
        sa.Column("fixture_date", sa.Date(), nullable=True),
        sa.Column("home_team_goals", sa.Integer(), nullable=True),
        sa.Column("away_team_goals", sa.Integer(), nullable=True),
        sa.Column("football_data_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["competition_id"], ["competitions.id"]),
        sa.ForeignKeyConstraint(["home_team_id"], ["teams.id"]),
        sa.ForeignKeyConstraint(["away_team_id"], ["teams.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("football_data_id"),
    )
    op.create_index(
        "idx_fixtures_competition_season", "fixtures", ["competition_id", "season"], unique=False
    )
    op.create_table(
        "positions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=20), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    # Canonical players
    op.create_table(
        "players",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("first_name", sa.String(length=255), nullable=False),
        sa.Column("last_name", sa.String(length=255), nullable=False),
        sa.Column("country_id", sa.Integer(), nullable=False),
        sa.Column("football_data_id", sa.Integer(), nullable=True),
        sa.Column("fpl_id", sa.Integer(), nullable=True),
        sa.Column("understat_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["country_id"], ["countries.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("football_data_id"),
        sa.UniqueConstraint("fpl_id"),
        sa.UniqueConstraint("understat_id"),
    )
    op.create_index("idx_players_name", "players", ["last_name", "first_name"], unique=False)

    op.create_table(
        "players_fixtures",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("player_id", sa.Integer(), nullable=False),
        sa.Column("fixture_id", sa.Integer(), nullable=False),
        sa.Column("team_id", sa.Integer(), nullable=False),
        sa.Column("minutes", sa.Integer(), nullable=False),
        sa.Column("yellow_card", sa.Boolean(), nullable=False),
        sa.Column("red_card", sa.Boolean(), nullable=False),
        sa.Column("goals", sa.Integer(), nullable=True),
        sa.Column("assists", sa.Integer(), nullable=True),
        sa.Column("shots", sa.Integer(), nullable=True),
        sa.Column("key_passes", sa.Integer(), nullable=True),
        sa.Column("npg", sa.Integer(), nullable=True),
        sa.Column("xg", sa.Float(), nullable=True),
        sa.Column("xa", sa.Float(), nullable=True),
        sa.Column("npxg", sa.Float(), nullable=True),
        sa.Column("xg_buildup", sa.Float(), nullable=True),
        sa.Column("xg_chain", sa.Float(), nullable=True),
        sa.Column("position_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["player_id"], ["players.id"]),
        sa.ForeignKeyConstraint(["fixture_id"], ["fixtures.id"]),
        sa.ForeignKeyConstraint(["team_id"], ["teams.id"]),
        sa.ForeignKeyConstraint(["position_id"], ["positions.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "player_id", "fixture_id", "team_id", name="uq_player_fixture_team"
        ),
    )
    op.create_index(
        "idx_players_fixtures_fixture", "players_fixtures", ["fixture_id"], unique=False
    )

    # Fantasy league
    op.create_table(
        "fpl_gameweeks",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("season", sa.Integer(), nullable=False),
        sa.Column("gameweek", sa.Integer(), nullable=False),
        sa.Column("deadline", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("season", "gameweek", name="uq_fpl_gameweek_season"),
    )
    op.create_table(
        "fixtures_fpl_gameweeks",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("fixture_id", sa.Integer(), nullable=False),
        sa.Column("gameweek_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["fixture_id"], ["fixtures.id"]),
        sa.ForeignKeyConstraint(["gameweek_id"], ["fpl_gameweeks.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("fixture_id"),
    )
    fpl_positions = op.create_table(
        "fpl_positions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("element_type_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=20), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("element_type_id"),
    )
    op.bulk_insert(
        fpl_positions,
        [
            {"element_type_id": 1, "name": "GKP"},
            {"element_type_id": 2, "name": "DEF"},
            {"element_type_id": 3, "name": "MID"},
            {"element_type_id": 4, "name": "FWD"},
        ],
    )
    op.create_table(
        "fpl_season_info",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("player_id", sa.Integer(), nullable=False),
        sa.Column("season", sa.Integer(), nullable=False),
        sa.Column("fpl_season_id", sa.Integer(), nullable=False),
        sa.Column("fpl_positions_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["player_id"], ["players.id"]),
        sa.ForeignKeyConstraint(["fpl_positions_id"], ["fpl_positions.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("player_id", "season", name="uq_fpl_season_info_player_season"),
    )
    op.create_table(
        "fpl_players_gameweeks",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("player_id", sa.Integer(), nullable=False),
        sa.Column("fpl_gameweek_id", sa.Integer(), nullable=False),
        sa.Column("bonus_points", sa.Integer(), nullable=False),
        sa.Column("bps", sa.Integer(), nullable=False),
        sa.Column("total_points", sa.Integer(), nullable=False),
        sa.Column("transfers_in", sa.Integer(), nullable=False),
        sa.Column("transfers_out", sa.Integer(), nullable=False),
        sa.Column("selected", sa.Integer(), nullable=False),
        sa.Column("value", sa.Numeric(precision=4, scale=1), nullable=False),
        sa.ForeignKeyConstraint(["player_id"], ["players.id"]),
        sa.ForeignKeyConstraint(["fpl_gameweek_id"], ["fpl_gameweeks.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("player_id", "fpl_gameweek_id", name="uq_fpl_player_gameweek"),
    )


def downgrade() -> None:
    op.drop_table("fpl_players_gameweeks")
    op.drop_table("fpl_season_info")
    op.drop_table("fpl_positions")
    op.drop_table("fixtures_fpl_gameweeks")
    op.drop_table("fpl_gameweeks")
    op.drop_index("idx_players_fixtures_fixture", table_name="players_fixtures")
    op.drop_table("players_fixtures")
    op.drop_index("idx_players_name", table_name="players")
    op.drop_table("players")
    op.drop_table("positions")
    op.drop_index("idx_fixtures_competition_season", table_name="fixtures")
    op.drop_table("fixtures")
    op.drop_table("teams")
    op.drop_table("competitions")
    op.drop_table("country_alternate_names")
    op.drop_table("countries")
