"""
Unit tests for insight resolution.

Tests how settings snapshots turn into (id, definition) pairs for both the
legacy single-query settings and the multi-insight settings.
"""

import pytest

from codestats.config import settings
from codestats.insights.models import InsightDefinition
from codestats.insights.resolver import resolve, resolutions_equal

LEGACY_ID = settings.LEGACY_INSIGHT_ID


class TestResolve:
    """Test the resolve() function."""

    @pytest.mark.unit
    def test_empty_snapshot_resolves_to_legacy_tombstone(self):
        assert resolve({}) == [(LEGACY_ID, None)]
        assert resolve(None) == [(LEGACY_ID, None)]

    @pytest.mark.unit
    def test_legacy_query(self):
        snapshot = {
            "codeStatsInsights.query": "repo:^github\\.com/sourcegraph/sourcegraph$",
            "codeStatsInsights.otherThreshold": 0.01,
        }

        assert resolve(snapshot) == [(
            LEGACY_ID,
            InsightDefinition(
                id=LEGACY_ID,
                title="Language usage",
                query="repo:^github\\.com/sourcegraph/sourcegraph$",
                other_threshold=0.01,
            ),
        )]

    @pytest.mark.unit
    def test_empty_legacy_query_is_a_tombstone(self):
        assert resolve({"codeStatsInsights.query": ""}) == [(LEGACY_ID, None)]

    @pytest.mark.unit
    def test_modern_insights(self):
        snapshot = {
            "codeStatsInsights.insight.sourcegraph": {
                "title": "Sourcegraph Language Usage",
                "repository": "github.com/sourcegraph/sourcegraph",
                "otherThreshold": "0.05",
            },
            "codeStatsInsights.insight.removed": None,
            "codeStatsInsights.insight.disabled": False,
            "search.defaultPatternType": "literal",
        }

        resolution = resolve(snapshot)

        assert [insight_id for insight_id, _ in resolution] == [
            "codeStatsInsights.insight.sourcegraph",
            "codeStatsInsights.insight.removed",
            "codeStatsInsights.insight.disabled",
            LEGACY_ID,
        ]
        definition = resolution[0][1]
        assert definition.id == "codeStatsInsights.insight.sourcegraph"
        assert definition.repository == "github.com/sourcegraph/sourcegraph"
        assert definition.other_threshold == 0.05
        assert definition.query is None
        assert [d for _, d in resolution[1:]] == [None, None, None]

    @pytest.mark.unit
    def test_modern_insight_without_title_uses_key(self):
        resolution = resolve({"codeStatsInsights.insight.myRepo": {"repository": "github.com/a/b"}})

        assert resolution[0][1].title == "myRepo"

    @pytest.mark.unit
    def test_malformed_values_resolve_to_tombstones(self):
        snapshot = {
            "codeStatsInsights.insight.notAnObject": "github.com/a/b",
            "codeStatsInsights.insight.badThreshold": {"title": "x", "otherThreshold": "lots"},
        }

        resolution = resolve(snapshot)

        assert resolution[0] == ("codeStatsInsights.insight.notAnObject", None)
        assert resolution[1] == ("codeStatsInsights.insight.badThreshold", None)

    @pytest.mark.unit
    def test_resolving_twice_is_equal(self):
        snapshot = {
            "codeStatsInsights.insight.a": {"title": "A", "repository": "github.com/a/a"},
            "codeStatsInsights.query": "repo:b",
        }

        first, second = resolve(snapshot), resolve(dict(snapshot))

        assert first == second
        assert resolutions_equal(first, second)
        assert first[0][1] is not second[0][1]


class TestResolutionsEqual:
    """Test structural comparison of resolutions."""

    @pytest.mark.unit
    def test_order_sensitive(self):
        a = resolve({"codeStatsInsights.insight.a": {"title": "A"}, "codeStatsInsights.insight.b": {"title": "B"}})
        b = resolve({"codeStatsInsights.insight.b": {"title": "B"}, "codeStatsInsights.insight.a": {"title": "A"}})

        assert not resolutions_equal(a, b)

    @pytest.mark.unit
    def test_value_sensitive(self):
        a = resolve({"codeStatsInsights.insight.a": {"title": "A"}})
        b = resolve({"codeStatsInsights.insight.a": {"title": "A2"}})

        assert not resolutions_equal(a, b)

    @pytest.mark.unit
    def test_none_only_equals_none(self):
        assert resolutions_equal(None, None)
        assert not resolutions_equal(None, [])
