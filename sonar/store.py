"""
Persistence layer for Sonar.

SonarStore wraps a SQLAlchemy session and exposes the operations the search
pipeline and the API need. Every write commits on its own, so results saved
before a failure stay saved.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .database import ScoutBrief, SonarResult, User
from .errors import PersistenceError
from .models import ResultStatus, ScoredCandidate


class SonarStore:
    """
    Database client for briefs and results.
    """

    def __init__(self, db: Session):
        self.db = db

    def _commit(self, action: str):
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Failed to {action}: {e}") from e

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def get_user_by_token(self, api_token: str) -> Optional[User]:
        return self.db.query(User).filter(User.api_token == api_token).first()

    # ------------------------------------------------------------------
    # Search pipeline
    # ------------------------------------------------------------------

    def read_brief(self, brief_id: str, owner_id: str) -> Optional[ScoutBrief]:
        """Get a brief only if it belongs to `owner_id`."""
        return self.db.query(ScoutBrief).filter(
            ScoutBrief.id == brief_id,
            ScoutBrief.auth_user_id == owner_id,
        ).first()

    def list_existing_result_usernames(self, brief_id: str) -> List[str]:
        rows = self.db.query(SonarResult.github_username).filter(SonarResult.brief_id == brief_id).all()
        return [row[0] for row in rows]

    def insert_result(
        self,
        brief_id: str,
        candidate: ScoredCandidate,
        search_description: Optional[str] = None,
    ) -> bool:
        """
        Save a scored candidate for a brief.

        Args:
            brief_id: Owning brief
            candidate: Scored candidate snapshot
            search_description: Brief description at search time

        Returns:
            True if a new result was inserted, False if an existing one was refreshed
        """
        profile = candidate.profile
        try:
            existing = self.db.query(SonarResult).filter(
                SonarResult.brief_id == brief_id,
                SonarResult.github_username == profile.username,
            ).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Failed to look up result: {e}") from e

        if existing:
            if candidate.score > 0:
                existing.match_score = candidate.score
                existing.match_reasons = list(candidate.match_reasons)
                existing.concerns = list(candidate.concerns)
                existing.discovered_at = datetime.utcnow()
                self._commit("refresh result")
            return False

        self.db.add(SonarResult(
            brief_id=brief_id,
            github_username=profile.username,
            github_name=profile.name,
            github_avatar_url=f"https://github.com/{profile.username}.png",
            github_bio=profile.bio,
            github_location=profile.location,
            match_score=candidate.score,
            match_reasons=list(candidate.match_reasons),
            concerns=list(candidate.concerns),
            top_languages=profile.top_language_names,
            total_stars=profile.total_stars,
            followers=profile.followers,
            repo_count=profile.public_repos,
            search_query=search_description or None,
            status=ResultStatus.NEW.value,
        ))
        self._commit("insert result")
        return True

    def mark_brief_searched(self, brief_id: str):
        self.db.query(ScoutBrief).filter(ScoutBrief.id == brief_id).update(
            {ScoutBrief.last_search_at: datetime.utcnow()},
            synchronize_session="fetch",
        )
        self._commit("mark brief searched")

    # ------------------------------------------------------------------
    # Brief management
    # ------------------------------------------------------------------

    def create_brief(self, owner_id: str, fields: Dict[str, Any]) -> ScoutBrief:
        brief = ScoutBrief(auth_user_id=owner_id, **fields)
        self.db.add(brief)
        self._commit("create brief")
        self.db.refresh(brief)
        return brief

    def _brief_stats_query(self):
        return self.db.query(
            ScoutBrief,
            func.count(SonarResult.id),
            func.count(case((SonarResult.status == ResultStatus.NEW.value, 1))),
        ).outerjoin(SonarResult, SonarResult.brief_id == ScoutBrief.id).group_by(ScoutBrief.id)

    def list_briefs(self, owner_id: str) -> List[Tuple[ScoutBrief, int, int]]:
        """Owned briefs, newest first, with (total, new) result counts."""
        return self._brief_stats_query().filter(
            ScoutBrief.auth_user_id == owner_id
        ).order_by(ScoutBrief.created_at.desc()).all()

    def get_brief_with_stats(self, brief_id: str, owner_id: str) -> Optional[Tuple[ScoutBrief, int, int]]:
        return self._brief_stats_query().filter(
            ScoutBrief.id == brief_id,
            ScoutBrief.auth_user_id == owner_id,
        ).first()

    def update_brief(self, brief_id: str, owner_id: str, changes: Dict[str, Any]) -> Optional[ScoutBrief]:
        brief = self.read_brief(brief_id, owner_id)
        if not brief:
            return None
        for key, value in changes.items():
            setattr(brief, key, value)
        brief.updated_at = datetime.utcnow()
        self._commit("update brief")
        self.db.refresh(brief)
        return brief

    def delete_brief(self, brief_id: str, owner_id: str) -> bool:
        brief = self.read_brief(brief_id, owner_id)
        if not brief:
            return False
        self.db.query(SonarResult).filter(SonarResult.brief_id == brief_id).delete(synchronize_session=False)
        self.db.delete(brief)
        self._commit("delete brief")
        return True

    # ------------------------------------------------------------------
    # Result browsing
    # ------------------------------------------------------------------

    def list_results(
        self,
        brief_id: str,
        status: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[SonarResult]:
        query = self.db.query(SonarResult).filter(SonarResult.brief_id == brief_id)
        if status:
            query = query.filter(SonarResult.status == status)
        return query.order_by(
            SonarResult.match_score.desc(),
            SonarResult.discovered_at.desc(),
        ).limit(limit).offset(offset).all()

    def get_owned_result(self, result_id: str, owner_id: str) -> Optional[SonarResult]:
        """Get a result only if its brief belongs to `owner_id`."""
        return self.db.query(SonarResult).join(
            ScoutBrief, ScoutBrief.id == SonarResult.brief_id
        ).filter(
            SonarResult.id == result_id,
            ScoutBrief.auth_user_id == owner_id,
        ).first()

    def update_result_status(self, result: SonarResult, status: ResultStatus, notes: Optional[str] = None) -> SonarResult:
        result.status = status.value
        if notes is not None:
            result.notes = notes
        self._commit("update result")
        self.db.refresh(result)
        return result
