"""
GraphQL client for the Sourcegraph API.

RemoteQueryClient turns a raw {data, errors} response into data or a
RemoteQueryError. The channel that actually carries the query is injected;
HttpGraphQLChannel is the default one, talking to an instance over HTTP.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx
from pydantic import ValidationError

from codestats.config import settings
from codestats.exceptions import RemoteQueryError, TransientFetchFailure
from codestats.insights.models import LanguageStat

logger = logging.getLogger(__name__)

RunQuery = Callable[[str, Dict[str, Any]], Awaitable[Dict[str, Any]]]

SEARCH_RESULTS_STATS_QUERY = """
query SearchResultsStats($query: String!) {
    search(query: $query) {
        results {
            limitHit
        }
        stats {
            languages {
                name
                totalLines
            }
        }
    }
}
"""


class HttpGraphQLChannel:
    """Runs GraphQL documents against a Sourcegraph instance over HTTP."""

    def __init__(
        self,
        base_url: str = settings.SOURCEGRAPH_URL,
        access_token: Optional[str] = settings.SOURCEGRAPH_ACCESS_TOKEN,
        timeout: float = settings.GRAPHQL_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the channel.

        Args:
            base_url: Base URL of the Sourcegraph instance
            access_token: Optional access token sent as "Authorization: token ..."
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.timeout = timeout
        self.transport = transport
        self.client: Optional[httpx.AsyncClient] = None

    async def connect(self):
        """Initialize HTTP client."""
        if self.client is None:
            headers = {"User-Agent": "CodeStats-Insights-Python-Client/1.0"}
            if self.access_token:
                headers["Authorization"] = f"token {self.access_token}"
            self.client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=headers,
                transport=self.transport,
            )
            logger.info(f"[GraphQL] Connected to {self.base_url}")

    async def close(self):
        """Close HTTP client."""
        if self.client:
            await self.client.aclose()
            self.client = None

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def __call__(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        """Run one GraphQL document and return the raw {data, errors} body."""
        await self.connect()

        try:
            response = await self.client.post(
                settings.GRAPHQL_PATH,
                json={"query": query, "variables": variables},
            )
        except httpx.TransportError as e:
            # Covers timeouts and connection failures
            raise TransientFetchFailure(f"GraphQL request failed: {e}") from e

        if response.status_code >= 500:
            raise TransientFetchFailure(
                f"GraphQL request failed with HTTP {response.status_code}",
                status_code=response.status_code,
            )
        if response.status_code >= 400:
            raise RemoteQueryError([f"GraphQL request failed with HTTP {response.status_code}: {response.text}"])

        try:
            return response.json()
        except ValueError as e:
            raise TransientFetchFailure(f"GraphQL response is not JSON: {e}") from e


class RemoteQueryClient:
    """Executes GraphQL queries through an injected channel."""

    def __init__(self, run_query: RunQuery):
        self.run_query = run_query

    async def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Execute a query and return its data payload.

        Raises:
            RemoteQueryError: If the response is not an object or carries a non-empty error list
        """
        result = await self.run_query(query, variables or {})
        if not isinstance(result, dict):
            raise RemoteQueryError([f"Unexpected GraphQL response: {result!r}"])
        errors = result.get("errors")
        if errors:
            messages = [error.get("message", str(error)) if isinstance(error, dict) else str(error)
                        for error in errors]
            raise RemoteQueryError(messages)
        return result.get("data") or {}


async def fetch_language_stats(client: RemoteQueryClient, query: str) -> List[LanguageStat]:
    """
    Fetch per-language line totals for a search query.

    Raises:
        RemoteQueryError: If the search failed or its stats cannot be parsed
    """
    data = await client.execute(SEARCH_RESULTS_STATS_QUERY, {"query": query})

    search = data.get("search") if isinstance(data, dict) else None
    if not search:
        raise RemoteQueryError([f"No search results returned for query: {query}"])
    if not isinstance(search, dict):
        raise RemoteQueryError([f"Malformed search results for query: {query}"])

    if (search.get("results") or {}).get("limitHit"):
        logger.info(f"[GraphQL] Search hit its result limit, stats may be partial: {query}")

    languages = (search.get("stats") or {}).get("languages") or []
    try:
        return [LanguageStat.model_validate(language) for language in languages]
    except ValidationError as e:
        logger.error(f"[GraphQL] Could not parse language stats for {query}: {e}")
        raise RemoteQueryError([f"Malformed language stats for query: {query}"]) from e
