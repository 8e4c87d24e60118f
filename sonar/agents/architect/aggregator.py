"""
Result Aggregator - The Architect Agent

Filters, ranks, truncates and persists the scored candidates of one run,
then stamps the brief as searched.

Author: Sonar
"""
from typing import List, Optional

import structlog

from ...errors import PersistenceError
from ...models import ScoredCandidate, SearchSummary

logger = structlog.get_logger(__name__)


class ResultAggregator:
    """
    Turns a batch of scored candidates into persisted results.

    Persistence is best-effort: a failed write for one candidate is logged and
    the remaining candidates are still written.
    """

    def __init__(self, store, threshold: int = 35, max_results: int = 10):
        """
        Args:
            store: Persistence collaborator (see SonarStore)
            threshold: Minimum score to keep a candidate
            max_results: Maximum results persisted per run
        """
        self.store = store
        self.threshold = threshold
        self.max_results = max_results

    def rank(self, candidates: List[ScoredCandidate]) -> List[ScoredCandidate]:
        """
        Keep candidates at or above the threshold, best first.

        `sorted` is stable, so equal scores keep discovery order.
        """
        qualifying = [c for c in candidates if c.score >= self.threshold]
        ranked = sorted(qualifying, key=lambda c: c.score, reverse=True)
        return ranked[:self.max_results]

    def aggregate(
        self,
        brief_id: str,
        candidates: List[ScoredCandidate],
        total_examined: int,
        search_description: Optional[str] = None,
    ) -> SearchSummary:
        """
        Rank, persist and summarize one run.

        Args:
            brief_id: Brief the run belongs to
            candidates: Scored candidates in discovery order
            total_examined: Number of usernames discovered by the search step
            search_description: Brief description stored with each result

        Returns:
            SearchSummary with counts for the caller
        """
        persisted = 0
        for candidate in self.rank(candidates):
            try:
                if self.store.insert_result(brief_id, candidate, search_description):
                    persisted += 1
            except PersistenceError as e:
                logger.error(
                    "sonar.result_persist_failed",
                    brief_id=brief_id,
                    username=candidate.username,
                    error=str(e),
                )

        try:
            self.store.mark_brief_searched(brief_id)
        except PersistenceError as e:
            logger.error("sonar.mark_searched_failed", brief_id=brief_id, error=str(e))

        return SearchSummary(
            new_candidates_persisted=persisted,
            total_identifiers_examined=total_examined,
        )
