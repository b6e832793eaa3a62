"""Initial migration: create team, competition, competitionteam, match, feedback tables

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create team table
    op.create_table(
        "team",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("captain_id", sa.String(), nullable=False),
        sa.Column("logo", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("wins", sa.Integer(), nullable=False),
        sa.Column("losses", sa.Integer(), nullable=False),
        sa.Column("draws", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_team_name", "team", ["name"], unique=True)
    op.create_index("ix_team_captain_id", "team", ["captain_id"])

    # Create competition table; bracket_json holds the bracket snapshot
    op.create_table(
        "competition",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("sport", sa.String(), nullable=False),
        sa.Column("venue", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=False),
        sa.Column("registration_deadline", sa.DateTime(), nullable=False),
        sa.Column("max_teams", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("organizer_id", sa.String(), nullable=False),
        sa.Column("rules", sa.JSON(), nullable=True),
        sa.Column("prizes", sa.JSON(), nullable=True),
        sa.Column("bracket_json", sa.JSON(), nullable=True),
        sa.Column("winner_team_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["winner_team_id"], ["team.id"]),
    )
    op.create_index("ix_competition_name", "competition", ["name"], unique=True)
    op.create_index("ix_competition_organizer_id", "competition", ["organizer_id"])

    # Create competitionteam (registration) table
    op.create_table(
        "competitionteam",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("competition_id", sa.Integer(), nullable=False),
        sa.Column("team_id", sa.Integer(), nullable=False),
        sa.Column("registered_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["competition_id"], ["competition.id"]),
        sa.ForeignKeyConstraint(["team_id"], ["team.id"]),
        sa.UniqueConstraint("competition_id", "team_id", name="uq_competition_team"),
    )
    op.create_index("ix_competitionteam_competition_id", "competitionteam", ["competition_id"])
    op.create_index("ix_competitionteam_team_id", "competitionteam", ["team_id"])

    # Create match table
    op.create_table(
        "match",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("competition_id", sa.Integer(), nullable=False),
        sa.Column("round_number", sa.Integer(), nullable=False),
        sa.Column("match_number", sa.Integer(), nullable=False),
        sa.Column("team1_id", sa.Integer(), nullable=False),
        sa.Column("team1_score", sa.Integer(), nullable=False),
        sa.Column("team2_id", sa.Integer(), nullable=False),
        sa.Column("team2_score", sa.Integer(), nullable=False),
        sa.Column("winner_id", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("start_time", sa.DateTime(), nullable=False),
        sa.Column("end_time", sa.DateTime(), nullable=True),
        sa.Column("started_at", sa.DateTime(), nullable=True),
        sa.Column("venue", sa.String(), nullable=False),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("highlights", sa.JSON(), nullable=True),
        sa.Column("referee_id", sa.String(), nullable=True),
        sa.Column("in_bracket", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["competition_id"], ["competition.id"]),
        sa.ForeignKeyConstraint(["team1_id"], ["team.id"]),
        sa.ForeignKeyConstraint(["team2_id"], ["team.id"]),
        sa.ForeignKeyConstraint(["winner_id"], ["team.id"]),
    )
    op.create_index("ix_match_competition_id", "match", ["competition_id"])

    # Create feedback table
    op.create_table(
        "feedback",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("competition_id", sa.Integer(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.String(), nullable=False),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("admin_response", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["competition_id"], ["competition.id"]),
        sa.UniqueConstraint("user_id", "competition_id", name="uq_feedback_user_competition"),
    )
    op.create_index("ix_feedback_user_id", "feedback", ["user_id"])
    op.create_index("ix_feedback_competition_id", "feedback", ["competition_id"])


def downgrade() -> None:
    op.drop_index("ix_feedback_competition_id", table_name="feedback")
    op.drop_index("ix_feedback_user_id", table_name="feedback")
    op.drop_table("feedback")
    op.drop_index("ix_match_competition_id", table_name="match")
    op.drop_table("match")
    op.drop_index("ix_competitionteam_team_id", table_name="competitionteam")
    op.drop_index("ix_competitionteam_competition_id", table_name="competitionteam")
    op.drop_table("competitionteam")
    op.drop_index("ix_competition_organizer_id", table_name="competition")
    op.drop_index("ix_competition_name", table_name="competition")
    op.drop_table("competition")
    op.drop_index("ix_team_captain_id", table_name="team")
    op.drop_index("ix_team_name", table_name="team")
    op.drop_table("team")
