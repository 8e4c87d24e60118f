"""
SQLite database setup and models for Sonar.
Uses SQLAlchemy for ORM.
"""
import uuid
from datetime import datetime
from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Integer, JSON, String, Text,
    UniqueConstraint, create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import settings

# Create SQLite engine
engine = create_engine(
    settings.database_url,
    connect_args={"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


class User(Base):
    """Authenticated caller. Requests carry `api_token` as a bearer token."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String(255), nullable=True)
    api_token = Column(String(128), nullable=False, unique=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class ScoutBrief(Base):
    """A saved search definition owned by one user."""
    __tablename__ = "scout_briefs"

    id = Column(String(36), primary_key=True, default=_uuid)
    auth_user_id = Column(String(36), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    required_skills = Column(JSON, default=list)
    preferred_location = Column(String(255), nullable=True)
    project_type = Column(String(255), nullable=True)
    search_frequency = Column(String(20), default="daily")  # daily, weekly (informational only)

    # Job fields usually extracted from a posting
    salary_min = Column(Integer, nullable=True)
    salary_max = Column(Integer, nullable=True)
    salary_period = Column(String(50), nullable=True)
    experience_level = Column(String(50), nullable=True)
    employment_type = Column(String(50), nullable=True)
    remote_policy = Column(String(50), nullable=True)
    company_name = Column(String(255), nullable=True)

    is_active = Column(Boolean, default=True)
    last_search_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class SonarResult(Base):
    """A persisted, scored candidate tied to one brief."""
    __tablename__ = "scout_results"
    __table_args__ = (
        UniqueConstraint("brief_id", "github_username", name="uq_result_brief_username"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    brief_id = Column(String(36), ForeignKey("scout_briefs.id", ondelete="CASCADE"), nullable=False, index=True)
    github_username = Column(String(255), nullable=False)
    github_name = Column(String(255), nullable=True)
    github_avatar_url = Column(String(500), nullable=True)
    github_bio = Column(Text, nullable=True)
    github_location = Column(String(255), nullable=True)
    match_score = Column(Integer, nullable=True)
    match_reasons = Column(JSON, default=list)
    concerns = Column(JSON, default=list)
    top_languages = Column(JSON, default=list)
    total_stars = Column(Integer, nullable=True)
    followers = Column(Integer, nullable=True)
    repo_count = Column(Integer, nullable=True)
    search_query = Column(Text, nullable=True)
    status = Column(String(20), default="new")  # new, viewed, saved, contacted, dismissed
    notes = Column(Text, nullable=True)
    discovered_at = Column(DateTime, default=datetime.utcnow)


def init_db(bind=None):
    """Initialize database tables."""
    Base.metadata.create_all(bind=bind or engine)


def get_db():
    """Dependency for getting database sessions."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
