"""initial gamecast tables

Revision ID: 20261017000100
Revises:
Create Date: 2026-10-17 00:01:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261017000100"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "game_events",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("event_id", sa.String(), nullable=False),
        sa.Column("game_id", sa.String(), nullable=False),
        sa.Column("app_id", sa.String(), nullable=True),
        sa.Column("sport", sa.String(), nullable=True),
        sa.Column("type", sa.String(), nullable=False, server_default=""),
        sa.Column("timestamp", sa.String(), nullable=True),
        sa.Column("created_at", sa.String(), nullable=True),
        sa.Column("raw_json", sa.Text(), nullable=False, server_default="{}"),
        sa.Column("inserted_at_utc", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("event_id", name="uq_game_events_event_id"),
    )
    op.create_index(op.f("ix_game_events_id"), "game_events", ["id"], unique=False)
    op.create_index(op.f("ix_game_events_game_id"), "game_events", ["game_id"], unique=False)

    op.create_table(
        "game_sessions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("game_id", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="active"),
        sa.Column("current_quarter", sa.String(), nullable=True),
        sa.Column("scores_json", sa.Text(), nullable=False, server_default="{}"),
        sa.Column("timeouts_json", sa.Text(), nullable=False, server_default="{}"),
        sa.Column("last_event_at", sa.String(), nullable=True),
        sa.Column("created_at", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("game_id", name="uq_game_sessions_game_id"),
    )
    op.create_index(op.f("ix_game_sessions_id"), "game_sessions", ["id"], unique=False)

    op.create_table(
        "articles",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("game_id", sa.String(), nullable=False),
        sa.Column("model", sa.String(), nullable=False, server_default=""),
        sa.Column("article_json", sa.Text(), nullable=False, server_default="{}"),
        sa.Column("raw_ai_json", sa.Text(), nullable=False, server_default=""),
        sa.Column("created_at_utc", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at_utc", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("game_id", name="uq_articles_game_id"),
    )
    op.create_index(op.f("ix_articles_id"), "articles", ["id"], unique=False)

    op.create_table(
        "app_settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("llm_api_key_enc", sa.Text(), nullable=True),
        sa.Column("llm_model", sa.String(), nullable=False, server_default="gpt-5"),
        sa.Column("llm_reasoning_effort", sa.String(), nullable=False, server_default="low"),
        sa.Column("updated_at_utc", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("app_settings")
    op.drop_index(op.f("ix_articles_id"), table_name="articles")
    op.drop_table("articles")
    op.drop_index(op.f("ix_game_sessions_id"), table_name="game_sessions")
    op.drop_table("game_sessions")
    op.drop_index(op.f("ix_game_events_game_id"), table_name="game_events")
    op.drop_index(op.f("ix_game_events_id"), table_name="game_events")
    op.drop_table("game_events")
