"""
Shared fixtures: in-memory database, seeded users/briefs and collaborator doubles.
"""
from typing import Dict, List, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from sonar.database import Base, ScoutBrief, User
from sonar.errors import UpstreamSearchError
from sonar.models import ActivityLevel, CandidateProfile, LanguageShare, ProfileSignals
from sonar.store import SonarStore


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    yield session
    session.close()


@pytest.fixture
def store(db_session):
    return SonarStore(db_session)


@pytest.fixture
def user(db_session):
    user = User(id="user-1", email="recruiter@example.com", api_token="token-1")
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def other_user(db_session):
    user = User(id="user-2", email="other@example.com", api_token="token-2")
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def brief(db_session, user):
    brief = ScoutBrief(
        id="brief-1",
        auth_user_id=user.id,
        name="Backend engineer",
        description="Senior Rust engineer for distributed storage systems",
        required_skills=["Rust", "Go"],
        preferred_location="Berlin",
        project_type="database",
    )
    db_session.add(brief)
    db_session.commit()
    return brief


@pytest.fixture
def make_profile():
    """Factory for CandidateProfile with neutral defaults (no score effect)."""

    def _make(username: str = "octocat", **overrides) -> CandidateProfile:
        languages = overrides.pop("languages", [])
        signals = overrides.pop("signals", {"has_bio": True})
        data = {
            "username": username,
            "name": username.title(),
            "bio": "Builds things",
            "location": None,
            "followers": 0,
            "public_repos": 0,
            "account_age_years": 0.0,
            "total_stars": 0,
            "topics": [],
            "activity_level": ActivityLevel.LOW,
            "recently_active_repos": 0,
        }
        data.update(overrides)
        return CandidateProfile(
            languages=[LanguageShare(name=name, percentage=pct) for name, pct in languages],
            signals=ProfileSignals(**signals),
            **data,
        )

    return _make


class FakeSearchClient:
    """Returns canned results per query; queries listed in `failing` raise."""

    def __init__(self, results: Dict[str, List[str]], failing: Optional[List[str]] = None):
        self.results = results
        self.failing = failing or []
        self.calls: List[dict] = []

    async def search(self, query, num_results=20, include_domains=None):
        self.calls.append({"query": query, "num_results": num_results, "include_domains": include_domains})
        if query in self.failing:
            raise UpstreamSearchError(f"boom: {query}")
        return [{"url": url, "title": url} for url in self.results.get(query, [])]


class FakeEnricher:
    """Serves prepared profiles; unknown usernames behave like a failed profile fetch."""

    def __init__(self, profiles: Dict[str, CandidateProfile]):
        self.profiles = profiles
        self.calls: List[str] = []

    async def enrich(self, username, now=None):
        self.calls.append(username)
        return self.profiles.get(username)


@pytest.fixture
def fake_search_client():
    return FakeSearchClient


@pytest.fixture
def fake_enricher():
    return FakeEnricher
