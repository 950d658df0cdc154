"""Initial schema: profiles, video analyses, user/video links, generations, sessions.

Revision ID: 0001_initial
Revises:
Create Date: 2026-01-10
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

JSONDoc = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")

INSERT_VIDEO_ANALYSIS_SERVER = """
CREATE OR REPLACE FUNCTION insert_video_analysis_server(
  p_youtube_id text,
  p_title text,
  p_author text,
  p_duration integer,
  p_thumbnail_url text,
  p_transcript jsonb,
  p_topics jsonb,
  p_summary jsonb DEFAULT NULL,
  p_suggested_questions jsonb DEFAULT NULL,
  p_model_used text DEFAULT NULL,
  p_user_id text DEFAULT NULL,
  p_language text DEFAULT NULL,
  p_available_languages jsonb DEFAULT NULL
) RETURNS text
LANGUAGE plpgsql
AS $$
DECLARE
  v_video_id text;
  v_now timestamp := (now() AT TIME ZONE 'utc');
BEGIN
  INSERT INTO video_analyses (
    id, youtube_id, title, author, duration, thumbnail_url, transcript, topics,
    summary, suggested_questions, model_used, language, available_languages,
    created_by, created_at, updated_at
  )
  VALUES (
    gen_random_uuid()::text, p_youtube_id, p_title, p_author, p_duration, p_thumbnail_url, p_transcript, p_topics,
    p_summary, p_suggested_questions, p_model_used, p_language, p_available_languages,
    p_user_id, v_now, v_now
  )
  ON CONFLICT (youtube_id) DO UPDATE SET
    transcript = EXCLUDED.transcript,
    topics = EXCLUDED.topics,
    summary = COALESCE(EXCLUDED.summary, video_analyses.summary),
    suggested_questions = COALESCE(EXCLUDED.suggested_questions, video_analyses.suggested_questions),
    model_used = COALESCE(EXCLUDED.model_used, video_analyses.model_used),
    language = COALESCE(EXCLUDED.language, video_analyses.language),
    available_languages = COALESCE(EXCLUDED.available_languages, video_analyses.available_languages),
    updated_at = v_now
  RETURNING id INTO v_video_id;

  IF p_user_id IS NOT NULL THEN
    INSERT INTO user_videos (id, user_id, video_id, accessed_at, created_at)
    VALUES (gen_random_uuid()::text, p_user_id, v_video_id, v_now, v_now)
    ON CONFLICT (user_id, video_id) DO UPDATE SET accessed_at = EXCLUDED.accessed_at;
  END IF;

  RETURN v_video_id;
END;
$$;
"""


def upgrade() -> None:
    bind = op.get_bind()
    is_postgres = bind.dialect.name == "postgresql"
    if is_postgres:
        op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto")

    op.create_table(
        "profiles",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_profiles_email", "profiles", ["email"], unique=False)

    op.create_table(
        "video_analyses",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("youtube_id", sa.String(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("author", sa.String(), nullable=True),
        sa.Column("duration", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("thumbnail_url", sa.Text(), nullable=True),
        sa.Column("transcript", JSONDoc, nullable=True),
        sa.Column("topics", JSONDoc, nullable=True),
        sa.Column("summary", JSONDoc, nullable=True),
        sa.Column("suggested_questions", JSONDoc, nullable=True),
        sa.Column("model_used", sa.String(), nullable=True),
        sa.Column("language", sa.String(), nullable=True),
        sa.Column("available_languages", JSONDoc, nullable=True),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_video_analyses_youtube_id", "video_analyses", ["youtube_id"], unique=True)

    op.create_table(
        "user_videos",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("video_id", sa.String(), nullable=False),
        sa.Column("accessed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"], name="user_videos_user_id_fkey", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["video_id"], ["video_analyses.id"], name="user_videos_video_id_fkey", ondelete="CASCADE"
        ),
        sa.UniqueConstraint("user_id", "video_id", name="user_videos_user_id_video_id_key"),
    )
    op.create_index("ix_user_videos_user_id", "user_videos", ["user_id"], unique=False)
    op.create_index("ix_user_videos_video_id", "user_videos", ["video_id"], unique=False)

    op.create_table(
        "video_generations",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=True),
        sa.Column("youtube_id", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_video_generations_user_id", "video_generations", ["user_id"], unique=False)
    op.create_index("ix_video_generations_youtube_id", "video_generations", ["youtube_id"], unique=False)

    op.create_table(
        "auth_sessions",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("token_hash", sa.String(), nullable=False),
        sa.Column("issued_at", sa.DateTime(), nullable=True),
        sa.Column("expires_at", sa.DateTime(), nullable=True),
        sa.Column("revoked_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_auth_sessions_user_id", "auth_sessions", ["user_id"], unique=False)
    op.create_index("ix_auth_sessions_token_hash", "auth_sessions", ["token_hash"], unique=False)

    if is_postgres:
        op.execute(INSERT_VIDEO_ANALYSIS_SERVER)


def downgrade() -> None:
    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        op.execute(
            "DROP FUNCTION IF EXISTS insert_video_analysis_server("
            "text, text, text, integer, text, jsonb, jsonb, jsonb, jsonb, text, text, text, jsonb)"
        )

    op.drop_index("ix_auth_sessions_token_hash", table_name="auth_sessions")
    op.drop_index("ix_auth_sessions_user_id", table_name="auth_sessions")
    op.drop_table("auth_sessions")

    op.drop_index("ix_video_generations_youtube_id", table_name="video_generations")
    op.drop_index("ix_video_generations_user_id", table_name="video_generations")
    op.drop_table("video_generations")

    op.drop_index("ix_user_videos_video_id", table_name="user_videos")
    op.drop_index("ix_user_videos_user_id", table_name="user_videos")
    op.drop_table("user_videos")

    op.drop_index("ix_video_analyses_youtube_id", table_name="video_analyses")
    op.drop_table("video_analyses")

    op.drop_index("ix_profiles_email", table_name="profiles")
    op.drop_table("profiles")
