"""Backfill user_videos rows for generations whose save call failed.

When insert_video_analysis_server failed (typically the profile FK on a fresh
signup) the link was never written, but the video_generations row was. This
inserts the missing links, skipping generations whose user has no profile.
Applied to production on 2026-01-22; scripts/repair_user_videos.py runs the
same statement on demand.

Revision ID: 0002_fix_missing_user_videos
Revises: 0001_initial
Create Date: 2026-01-22
"""

from alembic import op
import sqlalchemy as sa

from app.services.user_video_repair import repair_statement


revision = "0002_fix_missing_user_videos"
down_revision = "0001_initial"
branch_labels = None
depends_on = None


def upgrade() -> None:
    bind = op.get_bind()
    bind.execute(sa.text(repair_statement(bind.dialect.name)))


def downgrade() -> None:
    # Data-only backfill; the inserted rows are indistinguishable from regular links.
    pass
