"""Clients for the remote query channel."""

from .graphql_client import (
    HttpGraphQLChannel,
    RemoteQueryClient,
    SEARCH_RESULTS_STATS_QUERY,
    fetch_language_stats,
)

__all__ = [
    "HttpGraphQLChannel",
    "RemoteQueryClient",
    "SEARCH_RESULTS_STATS_QUERY",
    "fetch_language_stats",
]
