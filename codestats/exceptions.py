"""
Exception hierarchy for the code stats insights extension.

Every error the core raises derives from CodeStatsError so the host surface
can map failures onto responses without catching unrelated exceptions.
"""

from typing import List, Optional


class CodeStatsError(Exception):
    """Base class for all code stats errors."""


class RemoteQueryError(CodeStatsError):
    """The remote query returned an error list (or an unusable response)."""

    def __init__(self, messages: List[str]):
        self.errors = list(messages)
        super().__init__("\n".join(self.errors))


class TransientFetchFailure(CodeStatsError):
    """Network or timeout-class failure talking to the query channel."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class MalformedDefinition(CodeStatsError):
    """An insight has no repository and no legacy query to search for."""

    def __init__(self, insight_id: str):
        self.insight_id = insight_id
        super().__init__(
            f"Insight '{insight_id}' has neither a repository nor a query to search for"
        )


class DuplicateRegistrationError(CodeStatsError):
    """A view provider with the same name is already registered."""


class UnknownViewError(CodeStatsError):
    """No live view provider is registered under the requested name."""
