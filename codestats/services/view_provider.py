"""
View Content Provider

Builds the chart view for one insight on demand: picks the search query for
the rendering context, fetches language stats (retrying transient failures)
and aggregates them into a pie chart.
"""

import logging
from typing import List, Optional

from codestats.clients.graphql_client import RemoteQueryClient, fetch_language_stats
from codestats.config import settings
from codestats.exceptions import MalformedDefinition, RemoteQueryError, TransientFetchFailure
from codestats.insights.aggregator import aggregate
from codestats.insights.models import (
    ChartView,
    InsightDefinition,
    LanguageStat,
    PieChart,
    PieChartContent,
    RenderingContext,
)
from codestats.insights.query import (
    exact_repository_query,
    repo_name_from_uri,
    repository_query,
    stats_page_url,
)

logger = logging.getLogger(__name__)

# Retrying cannot fix these
NON_RETRYABLE_ERRORS = (RemoteQueryError, MalformedDefinition)


def resolve_query(definition: InsightDefinition, context: Optional[RenderingContext] = None) -> str:
    """
    Pick the search query for a view.

    Next to a directory, the stats of the repository being looked at win over
    whatever repository the insight was configured for.

    Raises:
        MalformedDefinition: If there is nothing to search for
    """
    if context is not None and context.directory_uri:
        return exact_repository_query(repo_name_from_uri(context.directory_uri))

    # Insights from the first version of the extension carry the full query
    if definition.query:
        return definition.query

    if definition.repository:
        return repository_query(definition.repository)

    raise MalformedDefinition(definition.id)


class ViewContentProvider:
    """Produces chart views for insight definitions."""

    def __init__(
        self,
        client: RemoteQueryClient,
        instance_url: str = settings.SOURCEGRAPH_URL,
        max_attempts: int = settings.MAX_QUERY_ATTEMPTS,
    ):
        """
        Initialize the provider.

        Args:
            client: Client used to run search stats queries
            instance_url: Sourcegraph instance the chart slices link back to
            max_attempts: Total attempts per view request, including the first
        """
        self.client = client
        self.stats_url = stats_page_url(instance_url, settings.STATS_PATH)
        self.max_attempts = max(1, max_attempts)

    async def _fetch_with_retry(self, query: str) -> List[LanguageStat]:
        """Fetch stats, retrying immediately on failure.

        The search may time out, but a retry is then likely faster because
        caches are warm.
        """
        last_exception = None

        for attempt in range(self.max_attempts):
            try:
                return await fetch_language_stats(self.client, query)
            except NON_RETRYABLE_ERRORS:
                raise
            except Exception as e:
                last_exception = e
                if attempt < self.max_attempts - 1:
                    logger.warning(f"Stats attempt {attempt + 1} failed: {e}. Retrying...")
                else:
                    logger.error(f"All {self.max_attempts} stats attempts failed. Last error: {e}")

        if isinstance(last_exception, TransientFetchFailure):
            raise last_exception
        raise TransientFetchFailure(str(last_exception) or type(last_exception).__name__) from last_exception

    async def provide_view(
        self,
        definition: InsightDefinition,
        context: Optional[RenderingContext] = None,
    ) -> ChartView:
        """
        Build the chart view for an insight.

        Args:
            definition: Insight to render
            context: Where the view is rendered; a directory switches the query to its repository

        Returns:
            ChartView with one pie chart

        Raises:
            MalformedDefinition: If the insight has nothing to search for
            RemoteQueryError: If the search returned errors
            TransientFetchFailure: If every attempt failed; other errors are wrapped in one
        """
        query = resolve_query(definition, context)
        logger.info(f"Providing view for {definition.id} with query: {query}")

        languages = await self._fetch_with_retry(query)

        other_threshold = definition.other_threshold
        if other_threshold is None:
            other_threshold = settings.DEFAULT_OTHER_THRESHOLD

        data = aggregate(languages, other_threshold, query, self.stats_url)
        return ChartView(
            title=definition.title,
            content=[PieChartContent(pies=[PieChart(data=data)])],
        )
