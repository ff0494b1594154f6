"""
Pytest configuration and shared fixtures for the code stats test suite.

This module provides:
- Temporary directory fixtures
- Settings cascade files
- A scriptable fake GraphQL channel
- Sample language stats and insight definitions
"""

import json
import shutil
import sys
import tempfile
from pathlib import Path
from typing import Any, Dict, Generator, List

import pytest

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent))

from codestats.insights.models import InsightDefinition, LanguageStat


class FakeChannel:
    """
    Stand-in for the GraphQL channel.

    Each call pops the next scripted outcome: an exception instance is raised,
    anything else is returned as the raw {data, errors} response. The last
    outcome repeats once the script runs out.
    """

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    async def __call__(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append({"query": query, "variables": variables})
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def close(self):
        self.closed = True


def stats_response(languages: List[Dict[str, Any]], limit_hit: bool = False) -> Dict[str, Any]:
    """Build a SearchResultsStats response body."""
    return {
        "data": {
            "search": {
                "results": {"limitHit": limit_hit},
                "stats": {"languages": languages},
            }
        }
    }


@pytest.fixture(scope="function")
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    tmp = tempfile.mkdtemp()
    yield Path(tmp)
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def settings_files(temp_dir: Path) -> List[Path]:
    """Global, org and user settings files (not created yet), lowest precedence first."""
    return [temp_dir / "global.json", temp_dir / "org.json", temp_dir / "user.json"]


@pytest.fixture
def write_settings():
    """Write a settings dict as JSON to a path."""
    def _write(path: Path, data: Dict[str, Any]) -> Path:
        path.write_text(json.dumps(data), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def sample_languages() -> List[Dict[str, Any]]:
    """Language stats as returned by the search API."""
    return [
        {"name": "Go", "totalLines": 800},
        {"name": "TypeScript", "totalLines": 150},
        {"name": "Shell", "totalLines": 50},
    ]


@pytest.fixture
def sample_stats(sample_languages) -> List[LanguageStat]:
    return [LanguageStat.model_validate(language) for language in sample_languages]


@pytest.fixture
def make_channel():
    """Factory for scripted fake channels."""
    return FakeChannel


@pytest.fixture
def make_stats_response():
    """Factory for SearchResultsStats response bodies."""
    return stats_response


@pytest.fixture
def fake_channel(sample_languages) -> FakeChannel:
    """Channel that always answers with the sample language stats."""
    return FakeChannel(stats_response(sample_languages))


@pytest.fixture
def repository_insight() -> InsightDefinition:
    return InsightDefinition(
        id="codeStatsInsights.insight.sourcegraphLanguageUsage",
        title="Sourcegraph Language Usage",
        repository="github.com/sourcegraph/sourcegraph",
        other_threshold=0.1,
    )


@pytest.fixture
def legacy_insight() -> InsightDefinition:
    return InsightDefinition(
        id="codeStatsInsight.language",
        title="Language usage",
        query="repo:^github\\.com/sourcegraph/sourcegraph$",
    )


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom settings."""
    # Register custom markers
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies")
    config.addinivalue_line("markers", "integration: Integration tests wiring real components together")
    config.addinivalue_line("markers", "api: HTTP API tests")
