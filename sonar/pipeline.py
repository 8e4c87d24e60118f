"""
Sonar search pipeline.

QueryPlanner -> SearchProviderAdapter -> ProfileEnricher -> Scorer
-> ResultAggregator, run once per request for a single brief.
"""
import asyncio
from typing import List, Optional

import structlog

from .agents.architect.aggregator import ResultAggregator
from .agents.architect.scorer import Scorer
from .agents.github_enricher import GitHubClient, ProfileEnricher
from .agents.researcher.query_planner import QueryPlanner
from .agents.researcher.search_provider import ExaSearchClient, SearchProviderAdapter
from .config import Settings, settings as default_settings
from .models import BriefCriteria, ScoredCandidate, SearchSummary

logger = structlog.get_logger(__name__)


class SonarPipeline:
    """
    End-to-end candidate discovery for one brief.

    Collaborators are injected so tests can swap in doubles. Candidates are
    enriched one at a time by default; `concurrency` > 1 runs a small bounded
    pool while keeping results in discovery order.
    """

    def __init__(
        self,
        *,
        store,
        planner: QueryPlanner,
        searcher: SearchProviderAdapter,
        enricher: ProfileEnricher,
        scorer: Optional[Scorer] = None,
        aggregator: Optional[ResultAggregator] = None,
        max_candidates: int = 20,
        concurrency: int = 1,
    ):
        self.store = store
        self.planner = planner
        self.searcher = searcher
        self.enricher = enricher
        self.scorer = scorer or Scorer()
        self.aggregator = aggregator or ResultAggregator(store)
        self.max_candidates = max_candidates
        self.concurrency = max(1, min(concurrency, 5))

    @classmethod
    def from_settings(cls, store, config: Settings = default_settings) -> "SonarPipeline":
        """Wire the production collaborators from settings."""
        return cls(
            store=store,
            planner=QueryPlanner(
                domain=config.search_domain,
                description_chars=config.description_query_chars,
            ),
            searcher=SearchProviderAdapter(
                ExaSearchClient(api_key=config.exa_api_key, base_url=config.exa_api_url),
                domain=config.search_domain,
                max_queries=config.max_queries,
                results_per_query=config.results_per_query,
            ),
            enricher=ProfileEnricher(
                GitHubClient(token=config.github_token, base_url=config.github_api_url)
            ),
            aggregator=ResultAggregator(
                store,
                threshold=config.score_threshold,
                max_results=config.max_results,
            ),
            max_candidates=config.max_candidates,
            concurrency=config.enrichment_concurrency,
        )

    async def run(self, brief_id: str, brief: BriefCriteria) -> SearchSummary:
        """
        Search, score and persist candidates for a brief.

        Args:
            brief_id: Id of the (already ownership-checked) brief
            brief: The brief's search criteria

        Returns:
            SearchSummary with persisted and examined counts
        """
        existing = self.store.list_existing_result_usernames(brief_id)
        queries = self.planner.plan(brief)
        usernames = await self.searcher.discover(queries, exclude=existing)

        selected = usernames[:self.max_candidates]
        scored = await self._score_all(selected, brief)

        summary = self.aggregator.aggregate(
            brief_id,
            scored,
            total_examined=len(usernames),
            search_description=brief.description,
        )

        logger.info(
            "sonar.search_completed",
            brief_id=brief_id,
            queries=len(queries),
            discovered=len(usernames),
            enriched=len(scored),
            persisted=summary.new_candidates_persisted,
        )
        return summary

    async def score_username(self, username: str, brief: BriefCriteria) -> Optional[ScoredCandidate]:
        """Enrich and score one username; None when the profile is unavailable."""
        profile = await self.enricher.enrich(username)
        if profile is None:
            return None
        result = self.scorer.calculate_score(profile, brief)
        return ScoredCandidate(
            profile=profile,
            score=result.score,
            match_reasons=result.match_reasons,
            concerns=result.concerns,
        )

    async def _score_all(self, usernames: List[str], brief: BriefCriteria) -> List[ScoredCandidate]:
        if self.concurrency == 1:
            scored = [await self.score_username(username, brief) for username in usernames]
        else:
            semaphore = asyncio.Semaphore(self.concurrency)

            async def bounded(username: str) -> Optional[ScoredCandidate]:
                async with semaphore:
                    return await self.score_username(username, brief)

            tasks = [asyncio.ensure_future(bounded(username)) for username in usernames]
            try:
                # gather keeps input order
                scored = await asyncio.gather(*tasks)
            except BaseException:
                # one failure stops the batch, siblings must not keep fetching
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise

        return [candidate for candidate in scored if candidate is not None]
