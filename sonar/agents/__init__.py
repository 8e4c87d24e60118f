"""
Agents package - The stages of the Sonar search pipeline.

Modules:
- github_enricher: GitHub REST client and profile enrichment
- researcher/: Query planning and web search (query planner, search provider)
- architect/: Scoring and result aggregation (scorer, aggregator)
"""
from .github_enricher import GitHubClient, ProfileEnricher
from .researcher import ExaSearchClient, QueryPlanner, SearchProviderAdapter
from .architect import ResultAggregator, Scorer

__all__ = [
    "GitHubClient",
    "ProfileEnricher",
    "ExaSearchClient",
    "QueryPlanner",
    "SearchProviderAdapter",
    "ResultAggregator",
    "Scorer",
]
