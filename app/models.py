from datetime import datetime
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, JSON, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB

from .db import Base


def _uuid() -> str:
    return str(uuid.uuid4())


JSONDoc = JSON().with_variant(JSONB(), "postgresql")


class Profile(Base):
    __tablename__ = "profiles"
    id = Column(String, primary_key=True)
    email = Column(String, nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class VideoAnalysis(Base):
    __tablename__ = "video_analyses"
    id = Column(String, primary_key=True, default=_uuid)
    youtube_id = Column(String, nullable=False, unique=True, index=True)
    title = Column(Text, nullable=False)
    author = Column(String, nullable=True)
    duration = Column(Integer, nullable=False, default=0)
    thumbnail_url = Column(Text, nullable=True)
    transcript = Column(JSONDoc, nullable=True)
    topics = Column(JSONDoc, nullable=True)
    summary = Column(JSONDoc, nullable=True)
    suggested_questions = Column(JSONDoc, nullable=True)
    model_used = Column(String, nullable=True)
    language = Column(String, nullable=True)
    available_languages = Column(JSONDoc, nullable=True)
    created_by = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class UserVideo(Base):
    __tablename__ = "user_videos"
    __table_args__ = (UniqueConstraint("user_id", "video_id", name="user_videos_user_id_video_id_key"),)
    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(
        String,
        ForeignKey("profiles.id", ondelete="CASCADE", name="user_videos_user_id_fkey"),
        nullable=False,
        index=True,
    )
    video_id = Column(
        String,
        ForeignKey("video_analyses.id", ondelete="CASCADE", name="user_videos_video_id_fkey"),
        nullable=False,
        index=True,
    )
    accessed_at = Column(DateTime, default=datetime.utcnow)
    created_at = Column(DateTime, default=datetime.utcnow)


class VideoGeneration(Base):
    # Recorded at credit consumption; user_id has no FK so rows outlive deleted profiles.
    __tablename__ = "video_generations"
    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, nullable=True, index=True)
    youtube_id = Column(String, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class AuthSession(Base):
    __tablename__ = "auth_sessions"
    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, index=True, nullable=False)
    token_hash = Column(String, index=True, nullable=False)
    issued_at = Column(DateTime, default=datetime.utcnow)
    expires_at = Column(DateTime, nullable=True)
    revoked_at = Column(DateTime, nullable=True)
