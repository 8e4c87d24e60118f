"""
Pydantic models for request/response schemas and pipeline data.
"""
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime


class ActivityLevel(str, Enum):
    """Bucketed count of public events in the last 30 days."""
    VERY_ACTIVE = "very_active"
    ACTIVE = "active"
    MODERATE = "moderate"
    LOW = "low"
    INACTIVE = "inactive"


class ResultStatus(str, Enum):
    """Review state of a persisted result."""
    NEW = "new"
    VIEWED = "viewed"
    SAVED = "saved"
    CONTACTED = "contacted"
    DISMISSED = "dismissed"


class SearchFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"


# ---------------------------------------------------------------------------
# Pipeline data
# ---------------------------------------------------------------------------

class BriefCriteria(BaseModel):
    """The fields of a brief that drive query planning and scoring."""
    model_config = ConfigDict(from_attributes=True)

    description: Optional[str] = None
    required_skills: List[str] = Field(default_factory=list)
    preferred_location: Optional[str] = None
    project_type: Optional[str] = None

    @field_validator("required_skills", mode="before")
    @classmethod
    def _skills_or_empty(cls, value):
        return value or []


class LanguageShare(BaseModel):
    """Share of a user's repository bytes written in one language."""
    name: str
    percentage: int


class ProfileSignals(BaseModel):
    is_hireable: bool = False
    has_email: bool = False
    has_bio: bool = False
    has_website: bool = False


class CandidateProfile(BaseModel):
    """Enriched GitHub profile. Recomputed on every run, never stored as-is."""
    username: str
    name: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    followers: int = 0
    public_repos: int = 0
    account_age_years: float = 0.0
    total_stars: int = 0
    languages: List[LanguageShare] = Field(default_factory=list)
    topics: List[str] = Field(default_factory=list)
    activity_level: ActivityLevel = ActivityLevel.INACTIVE
    recently_active_repos: int = 0
    signals: ProfileSignals = Field(default_factory=ProfileSignals)

    @property
    def top_language_names(self) -> List[str]:
        return [lang.name for lang in self.languages[:5]]


class ScoreResult(BaseModel):
    score: int = Field(..., ge=0, le=100)
    match_reasons: List[str] = Field(default_factory=list)
    concerns: List[str] = Field(default_factory=list)


class ScoredCandidate(BaseModel):
    """An enriched profile plus its score against one brief."""
    profile: CandidateProfile
    score: int = Field(..., ge=0, le=100)
    match_reasons: List[str] = Field(default_factory=list)
    concerns: List[str] = Field(default_factory=list)

    @property
    def username(self) -> str:
        return self.profile.username


class SearchSummary(BaseModel):
    """Aggregate outcome of one search run."""
    new_candidates_persisted: int
    total_identifiers_examined: int


# ---------------------------------------------------------------------------
# API schemas
# ---------------------------------------------------------------------------

class SearchRequest(BaseModel):
    """Request body for triggering a search run."""
    model_config = ConfigDict(populate_by_name=True)

    brief_id: Optional[str] = Field(None, alias="briefId")


class SearchResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    new_candidates: int = Field(..., alias="newCandidates")
    searched_profiles: int = Field(..., alias="searchedProfiles")


class BriefCreate(BaseModel):
    """Request model for creating a brief."""
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    required_skills: List[str] = Field(default_factory=list)
    preferred_location: Optional[str] = None
    project_type: Optional[str] = None
    search_frequency: SearchFrequency = SearchFrequency.DAILY
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    salary_period: Optional[str] = None
    experience_level: Optional[str] = None
    employment_type: Optional[str] = None
    remote_policy: Optional[str] = None
    company_name: Optional[str] = None


class BriefUpdate(BaseModel):
    """Partial update. Only fields that are sent are written."""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    required_skills: Optional[List[str]] = None
    preferred_location: Optional[str] = None
    project_type: Optional[str] = None
    is_active: Optional[bool] = None
    search_frequency: Optional[SearchFrequency] = None
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    salary_period: Optional[str] = None
    experience_level: Optional[str] = None
    employment_type: Optional[str] = None
    remote_policy: Optional[str] = None
    company_name: Optional[str] = None

    @field_validator("name", "required_skills", "is_active", "search_frequency")
    @classmethod
    def _not_null(cls, value, info):
        # These columns always hold a value; null is only "unset" when omitted
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


class BriefOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    required_skills: List[str] = Field(default_factory=list)
    preferred_location: Optional[str] = None
    project_type: Optional[str] = None
    search_frequency: Optional[str] = None
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    salary_period: Optional[str] = None
    experience_level: Optional[str] = None
    employment_type: Optional[str] = None
    remote_policy: Optional[str] = None
    company_name: Optional[str] = None
    is_active: bool = True
    last_search_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    total_results: int = 0
    new_results: int = 0

    @field_validator("required_skills", mode="before")
    @classmethod
    def _skills_or_empty(cls, value):
        return value or []


class ResultOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    brief_id: str
    github_username: str
    github_name: Optional[str] = None
    github_avatar_url: Optional[str] = None
    github_bio: Optional[str] = None
    github_location: Optional[str] = None
    match_score: Optional[int] = None
    match_reasons: List[str] = Field(default_factory=list)
    concerns: List[str] = Field(default_factory=list)
    top_languages: List[str] = Field(default_factory=list)
    total_stars: Optional[int] = None
    followers: Optional[int] = None
    repo_count: Optional[int] = None
    search_query: Optional[str] = None
    status: ResultStatus = ResultStatus.NEW
    notes: Optional[str] = None
    discovered_at: Optional[datetime] = None


class ResultStatusUpdate(BaseModel):
    status: ResultStatus
    notes: Optional[str] = None
