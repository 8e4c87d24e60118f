"""
Researcher Agent - Query planning and candidate discovery.
"""
from .query_planner import QueryPlanner
from .search_provider import ExaSearchClient, SearchProviderAdapter

__all__ = ["QueryPlanner", "ExaSearchClient", "SearchProviderAdapter"]
