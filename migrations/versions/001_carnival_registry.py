"""Carnival registry — initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

Changes:
  - Create clubs, users, club_players, carnivals, carnival_clubs,
    carnival_club_players and sponsors tables
  - Player identity is unique per club on (first_name, last_name, date_of_birth);
    email carries a plain index only
  - One attendance per (carnival, club), one assignment per (attendance, player)
  - Sponsor identity is unique on (sponsor_name, club_id, state, location)
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── clubs / users ─────────────────────────────────────────────────────────
    op.create_table(
        "clubs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("state", sa.String(3), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(254), nullable=False),
        sa.Column("club_id", sa.Integer(), sa.ForeignKey("clubs.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    # ── club_players: roster ──────────────────────────────────────────────────
    op.create_table(
        "club_players",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("club_id", sa.Integer(), sa.ForeignKey("clubs.id"), nullable=False),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column("email", sa.String(254), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("registered_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("shorts", sa.String(20), nullable=False, server_default="Unrestricted"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.UniqueConstraint(
            "club_id", "first_name", "last_name", "date_of_birth",
            name="uq_club_players_identity",
        ),
    )
    op.create_index("ix_club_players_club_id", "club_players", ["club_id"])
    op.create_index("ix_club_players_email", "club_players", ["email"])

    # ── carnivals ─────────────────────────────────────────────────────────────
    op.create_table(
        "carnivals",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("subtitle", sa.String(255), nullable=True),
        sa.Column("event_date", sa.DateTime(), nullable=True),
        sa.Column("state", sa.String(3), nullable=True),
        sa.Column("location_address_part1", sa.String(200), nullable=True),
        sa.Column("location_address_part2", sa.String(200), nullable=True),
        sa.Column("location_address_part3", sa.String(200), nullable=True),
        sa.Column("location_address_part4", sa.String(200), nullable=True),
        sa.Column("organiser_contact_name", sa.String(255), nullable=True),
        sa.Column("organiser_contact_email", sa.String(254), nullable=True),
        sa.Column("team_registration_fee", sa.Numeric(10, 2), nullable=False, server_default="0.00"),
        sa.Column("per_player_fee", sa.Numeric(10, 2), nullable=False, server_default="0.00"),
        sa.Column("my_sideline_id", sa.String(64), nullable=True, unique=True),
        sa.Column("my_sideline_subtitle", sa.String(255), nullable=True),
        sa.Column("last_my_sideline_sync", sa.DateTime(), nullable=True),
        sa.Column("original_my_sideline_contact_email", sa.String(254), nullable=True),
        sa.Column("is_manually_entered", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("club_id", sa.Integer(), sa.ForeignKey("clubs.id"), nullable=True),
        sa.Column("claimed_by_user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("claimed_at", sa.DateTime(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    # ── carnival_clubs: attendance ────────────────────────────────────────────
    op.create_table(
        "carnival_clubs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "carnival_id",
            sa.Integer(),
            sa.ForeignKey("carnivals.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "club_id",
            sa.Integer(),
            sa.ForeignKey("clubs.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("number_of_teams", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("approval_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("registered_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("carnival_id", "club_id", name="uq_carnival_clubs_carnival_club"),
        sa.CheckConstraint("number_of_teams >= 1", name="ck_carnival_clubs_number_of_teams"),
    )
    op.create_index("ix_carnival_clubs_carnival_id", "carnival_clubs", ["carnival_id"])
    op.create_index("ix_carnival_clubs_club_id", "carnival_clubs", ["club_id"])

    # ── carnival_club_players: team assignments ───────────────────────────────
    op.create_table(
        "carnival_club_players",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "carnival_club_id",
            sa.Integer(),
            sa.ForeignKey("carnival_clubs.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "club_player_id",
            sa.Integer(),
            sa.ForeignKey("club_players.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("attendance_status", sa.String(20), nullable=False, server_default="confirmed"),
        sa.Column("team_number", sa.Integer(), nullable=True),
        sa.Column("added_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.UniqueConstraint(
            "carnival_club_id", "club_player_id",
            name="uq_carnival_club_players_assignment",
        ),
        sa.CheckConstraint("team_number >= 1", name="ck_carnival_club_players_team_number"),
    )
    op.create_index(
        "ix_carnival_club_players_carnival_club_id", "carnival_club_players", ["carnival_club_id"]
    )
    op.create_index(
        "ix_carnival_club_players_club_player_id", "carnival_club_players", ["club_player_id"]
    )

    # ── sponsors ──────────────────────────────────────────────────────────────
    op.create_table(
        "sponsors",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("sponsor_name", sa.String(255), nullable=False),
        sa.Column("club_id", sa.Integer(), sa.ForeignKey("clubs.id"), nullable=False),
        sa.Column("state", sa.String(3), nullable=False, server_default=""),
        sa.Column("location", sa.String(255), nullable=False, server_default=""),
        sa.Column("sponsorship_level", sa.String(20), nullable=False, server_default="Supporting"),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="999"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint(
            "sponsor_name", "club_id", "state", "location",
            name="uq_sponsors_identity",
        ),
    )
    op.create_index("ix_sponsors_club_id", "sponsors", ["club_id"])


def downgrade() -> None:
    op.drop_index("ix_sponsors_club_id", table_name="sponsors")
    op.drop_table("sponsors")
    op.drop_index("ix_carnival_club_players_club_player_id", table_name="carnival_club_players")
    op.drop_index("ix_carnival_club_players_carnival_club_id", table_name="carnival_club_players")
    op.drop_table("carnival_club_players")
    op.drop_index("ix_carnival_clubs_club_id", table_name="carnival_clubs")
    op.drop_index("ix_carnival_clubs_carnival_id", table_name="carnival_clubs")
    op.drop_table("carnival_clubs")
    op.drop_table("carnivals")
    op.drop_index("ix_club_players_email", table_name="club_players")
    op.drop_index("ix_club_players_club_id", table_name="club_players")
    op.drop_table("club_players")
    op.drop_table("users")
    op.drop_table("clubs")
