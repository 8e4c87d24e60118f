"""
GitHub Enricher - The Researcher Agent

This module uses the GitHub REST API to enrich a candidate username with:
1. Profile basics (name, bio, location, followers, public repos)
2. Language breakdown by repository bytes (top 8)
3. Stars and topics across the user's own (non-fork) repositories
4. Activity level from public events in the last 30 days
5. Hireability and profile completeness signals

Author: Sonar
"""
import asyncio
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import httpx
import structlog

from ..errors import UpstreamProfileError
from ..models import ActivityLevel, CandidateProfile, LanguageShare, ProfileSignals

logger = structlog.get_logger(__name__)

RECENT_WINDOW = timedelta(days=30)
DAYS_PER_YEAR = 365
MAX_LANGUAGES = 8

# (minimum events in window, level), checked top down
ACTIVITY_TIERS = [
    (50, ActivityLevel.VERY_ACTIVE),
    (20, ActivityLevel.ACTIVE),
    (5, ActivityLevel.MODERATE),
    (1, ActivityLevel.LOW),
]


class GitHubClient:
    """
    Async client for the three GitHub REST resources used during enrichment.

    Any non-2xx response or transport failure raises UpstreamProfileError.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the GitHub client.

        Args:
            token: Optional bearer token for a higher rate limit
            base_url: API root (overridable for GitHub Enterprise)
            timeout: Per-request timeout in seconds
            transport: Custom httpx transport (used by tests)
        """
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/vnd.github.v3+json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(f"{self.base_url}{path}", headers=self.headers, params=params)
        except httpx.HTTPError as e:
            raise UpstreamProfileError(f"GET {path} failed: {e}") from e

        if not response.is_success:
            raise UpstreamProfileError(f"GET {path} returned {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamProfileError(f"GET {path} returned invalid JSON") from e

    async def get_profile(self, username: str) -> Dict[str, Any]:
        return await self._get(f"/users/{username}")

    async def list_repos(self, username: str) -> List[Dict[str, Any]]:
        return await self._get(f"/users/{username}/repos", {"per_page": 100, "sort": "pushed"})

    async def list_events(self, username: str) -> List[Dict[str, Any]]:
        return await self._get(f"/users/{username}/events", {"per_page": 100})


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse GitHub's ISO-8601 timestamps ("2020-01-01T00:00:00Z")."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round with halves going up (12.5 -> 13), unlike the built-in round."""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def calculate_top_languages(repos: List[Dict[str, Any]], limit: int = MAX_LANGUAGES) -> List[LanguageShare]:
    """
    Aggregate repository sizes into per-language percentages.

    Repos without a language or with zero size are ignored. Percentages are
    rounded to whole numbers and sorted descending.
    """
    language_bytes: Dict[str, int] = {}
    total_size = 0

    for repo in repos:
        language = repo.get("language")
        size = repo.get("size") or 0
        if language and size > 0:
            language_bytes[language] = language_bytes.get(language, 0) + size
            total_size += size

    if total_size == 0:
        return []

    shares = [
        LanguageShare(name=name, percentage=int(round_half_up(size / total_size * 100)))
        for name, size in language_bytes.items()
    ]
    shares.sort(key=lambda share: share.percentage, reverse=True)
    return shares[:limit]


def classify_activity(recent_event_count: int) -> ActivityLevel:
    for minimum, level in ACTIVITY_TIERS:
        if recent_event_count >= minimum:
            return level
    return ActivityLevel.INACTIVE


def build_candidate_profile(
    profile: Dict[str, Any],
    repos: List[Dict[str, Any]],
    events: List[Dict[str, Any]],
    now: Optional[datetime] = None,
) -> CandidateProfile:
    """
    Derive a CandidateProfile from raw GitHub payloads.

    Args:
        profile: /users/{username} payload
        repos: /users/{username}/repos payload (may be empty)
        events: /users/{username}/events payload (may be empty)
        now: Reference time, defaults to the current UTC time

    Returns:
        The enriched profile
    """
    now = now or datetime.now(timezone.utc)
    cutoff = now - RECENT_WINDOW

    created_at = _parse_timestamp(profile.get("created_at"))
    account_age = 0.0
    if created_at:
        account_age = round_half_up((now - created_at).total_seconds() / (DAYS_PER_YEAR * 86400), 1)

    own_repos = [repo for repo in repos if not repo.get("fork")]
    total_stars = sum(repo.get("stargazers_count") or 0 for repo in own_repos)

    # Ordered union, first appearance wins
    topics: List[str] = []
    for repo in own_repos:
        for topic in repo.get("topics") or []:
            if topic not in topics:
                topics.append(topic)

    recent_events = 0
    for event in events:
        created = _parse_timestamp(event.get("created_at"))
        if created and created > cutoff:
            recent_events += 1

    recently_active_repos = 0
    for repo in own_repos:
        updated = _parse_timestamp(repo.get("updated_at"))
        if updated and updated > cutoff:
            recently_active_repos += 1

    return CandidateProfile(
        username=profile.get("login") or "",
        name=profile.get("name"),
        bio=profile.get("bio"),
        location=profile.get("location"),
        followers=profile.get("followers") or 0,
        public_repos=profile.get("public_repos") or 0,
        account_age_years=account_age,
        total_stars=total_stars,
        languages=calculate_top_languages(repos),
        topics=topics,
        activity_level=classify_activity(recent_events),
        recently_active_repos=recently_active_repos,
        signals=ProfileSignals(
            is_hireable=profile.get("hireable") is True,
            has_email=bool(profile.get("email")),
            has_bio=bool(profile.get("bio")),
            has_website=bool(profile.get("blog")),
        ),
    )


class ProfileEnricher:
    """
    Fetches and derives metrics for one candidate.

    The profile, repository and event fetches run concurrently. A failed
    profile fetch drops the candidate; failed repo or event fetches degrade
    to empty lists.
    """

    def __init__(self, client: GitHubClient):
        self.client = client

    async def enrich(self, username: str, now: Optional[datetime] = None) -> Optional[CandidateProfile]:
        """
        Enrich a single username.

        Args:
            username: GitHub login
            now: Reference time for age and recency metrics

        Returns:
            CandidateProfile, or None when the profile is unavailable
        """
        profile, repos, events = await asyncio.gather(
            self.client.get_profile(username),
            self.client.list_repos(username),
            self.client.list_events(username),
            return_exceptions=True,
        )

        if isinstance(profile, BaseException):
            if not isinstance(profile, UpstreamProfileError):
                raise profile
            logger.info("enrich.profile_unavailable", username=username, error=str(profile))
            return None

        repos = self._or_empty(username, "repos", repos)
        events = self._or_empty(username, "events", events)
        if isinstance(profile, dict) and not profile.get("login"):
            profile = {**profile, "login": username}

        try:
            return build_candidate_profile(profile, repos, events, now=now)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("enrich.malformed_payload", username=username, error=str(e))
            return None

    def _or_empty(self, username: str, resource: str, value: Any) -> List[Dict[str, Any]]:
        if isinstance(value, BaseException):
            if not isinstance(value, UpstreamProfileError):
                raise value
            logger.info("enrich.resource_unavailable", username=username, resource=resource, error=str(value))
            return []
        if not isinstance(value, list):
            return []
        return value
