"""
Code stats insights: resolution of insight definitions and chart building.

This package holds the pure parts of the extension, with no I/O: models,
settings resolution, query helpers and the stat aggregator.
"""

from .aggregator import aggregate
from .models import (
    ChartSeriesEntry,
    ChartView,
    InsightDefinition,
    LanguageStat,
    PieChart,
    PieChartContent,
    RenderingContext,
)
from .resolver import Resolution, resolve, resolutions_equal

__all__ = [
    "aggregate",
    "ChartSeriesEntry",
    "ChartView",
    "InsightDefinition",
    "LanguageStat",
    "PieChart",
    "PieChartContent",
    "RenderingContext",
    "Resolution",
    "resolve",
    "resolutions_equal",
]
