"""
Search Provider - resolves search queries into GitHub usernames.

ExaSearchClient talks to the Exa search API. SearchProviderAdapter runs the
planned queries through any client exposing the same `search` coroutine,
parses profile URLs and keeps a running, case-insensitive deduplicated list
of usernames across queries.
"""
import re
from typing import Any, Dict, Iterable, List, Optional, Protocol

import httpx
import structlog

from ...errors import UpstreamSearchError

logger = structlog.get_logger(__name__)

# First path segments on github.com that are not user profiles
RESERVED_PATHS = frozenset({
    "orgs", "topics", "trending", "explore", "settings",
    "notifications", "new", "login", "join",
})


class SearchClient(Protocol):
    async def search(
        self,
        query: str,
        num_results: int,
        include_domains: List[str],
    ) -> List[Dict[str, Any]]:
        ...


class ExaSearchClient:
    """
    Minimal async client for the Exa search API.

    Only the result URLs are used downstream, but the full result dicts are
    returned unchanged.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.exa.ai",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def search(
        self,
        query: str,
        num_results: int = 20,
        include_domains: Optional[List[str]] = None,
    ) -> List[Dict[str, Any]]:
        if not self.api_key:
            raise UpstreamSearchError("Exa API key not configured")

        payload: Dict[str, Any] = {"query": query, "numResults": num_results}
        if include_domains:
            payload["includeDomains"] = include_domains

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    f"{self.base_url}/search",
                    headers={
                        "x-api-key": self.api_key,
                        "Content-Type": "application/json",
                        "Accept": "application/json",
                    },
                    json=payload,
                )
        except httpx.HTTPError as e:
            raise UpstreamSearchError(f"Exa request failed: {e}") from e

        if response.status_code != 200:
            raise UpstreamSearchError(f"Exa API error: {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamSearchError("Exa returned invalid JSON") from e

        return data.get("results", []) or []


class SearchProviderAdapter:
    """
    Runs planned queries and collects candidate usernames.

    A failing query is logged and skipped. The returned list is not capped;
    the caller decides how many usernames go on to enrichment.
    """

    def __init__(
        self,
        client: SearchClient,
        domain: str = "github.com",
        max_queries: int = 3,
        results_per_query: int = 20,
    ):
        self.client = client
        self.domain = domain
        self.max_queries = max_queries
        self.results_per_query = results_per_query
        self._profile_pattern = re.compile(
            r"^https?://(?:www\.)?" + re.escape(domain) + r"/([^/?#]+)/?$",
            re.IGNORECASE,
        )

    def extract_username(self, url: str) -> Optional[str]:
        """Return the username for a profile URL, or None for anything else."""
        match = self._profile_pattern.match(url.strip())
        if not match:
            return None
        username = match.group(1)
        if username.lower() in RESERVED_PATHS:
            return None
        return username

    async def discover(self, queries: List[str], exclude: Iterable[str] = ()) -> List[str]:
        """
        Run queries sequentially and collect usernames in discovery order.

        Args:
            queries: Planned queries, broad to narrow
            exclude: Usernames already known for the brief (any case)

        Returns:
            Unique usernames not in `exclude`, first query's finds first
        """
        seen = {name.lower() for name in exclude}
        usernames: List[str] = []

        for query in queries[:self.max_queries]:
            try:
                results = await self.client.search(
                    query,
                    num_results=self.results_per_query,
                    include_domains=[self.domain],
                )
            except Exception as e:  # noqa: BLE001 - one bad query never aborts the run
                logger.warning("search.query_failed", query=query, error=str(e))
                continue

            found = 0
            for result in results:
                username = self.extract_username(result.get("url") or "")
                if not username or username.lower() in seen:
                    continue
                seen.add(username.lower())
                usernames.append(username)
                found += 1

            logger.debug("search.query_completed", query=query, results=len(results), new_usernames=found)

        return usernames
