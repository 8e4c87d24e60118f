"""
Query Planner - turns a brief into web search queries.

Queries are emitted broad to narrow:
1. The brief description (truncated)
2. Top required skills + "developer" (+ location)
3. Project type + "developer" + location

Order matters: discovery is capped downstream, so identities found by earlier
queries win the remaining slots.
"""
from typing import List

from ...models import BriefCriteria


class QueryPlanner:
    """Builds site-scoped search queries from a brief."""

    def __init__(self, domain: str = "github.com", description_chars: int = 200, max_skills: int = 3):
        self.domain = domain
        self.description_chars = description_chars
        self.max_skills = max_skills

    def plan(self, brief: BriefCriteria) -> List[str]:
        """
        Build the ordered query list for a brief.

        Args:
            brief: Search criteria

        Returns:
            Up to three query strings, each ending with a site filter
        """
        site = f"site:{self.domain}"
        queries: List[str] = []

        if brief.description:
            queries.append(f"{brief.description[:self.description_chars]} {site}")

        if brief.required_skills:
            skills = " ".join(brief.required_skills[:self.max_skills])
            location_part = f" {brief.preferred_location}" if brief.preferred_location else ""
            queries.append(f"{skills} developer{location_part} {site}")

        if brief.preferred_location and brief.project_type:
            queries.append(f"{brief.project_type} developer {brief.preferred_location} {site}")

        return queries
