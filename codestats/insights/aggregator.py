"""
Stat aggregation for code stats pie charts.

Turns the per-language line counts of one search into pie slices: languages
whose share of the total falls below the threshold are folded into a single
trailing "Other" slice.
"""

import logging
from typing import Iterable, List

from .languages import FALLBACK_COLOR, language_color
from .models import ChartSeriesEntry, LanguageStat
from .query import build_stats_url

logger = logging.getLogger(__name__)

OTHER_NAME = "Other"


def aggregate(
    languages: Iterable[LanguageStat],
    other_threshold: float,
    query: str,
    base_stats_url: str,
) -> List[ChartSeriesEntry]:
    """
    Bucket language stats into pie chart slices.

    Args:
        languages: Per-language totals, in the order the search returned them
        other_threshold: Minimum share of all lines (0..1) for a language to get its own slice
        query: The search query the stats came from, used for the deep link
        base_stats_url: URL of the stats page the slices link to

    Returns:
        Kept languages in input order followed by an "Other" slice, which is
        always present (with 0 lines when nothing was folded).
    """
    languages = list(languages)
    total = sum(language.total_lines for language in languages)

    kept: List[LanguageStat] = []
    other_lines = 0
    for language in languages:
        # With no lines at all every share is undefined; fold everything
        if total > 0 and language.total_lines / total >= other_threshold:
            kept.append(language)
        else:
            other_lines += language.total_lines

    link_url = build_stats_url(base_stats_url, query)
    slices = [(language.name, language.total_lines) for language in kept]
    slices.append((OTHER_NAME, other_lines))

    logger.debug(
        f"Aggregated {len(languages)} languages into {len(slices)} slices "
        f"(threshold={other_threshold}, total={total})"
    )

    return [
        ChartSeriesEntry(
            name=name,
            total_lines=total_lines,
            fill_color=language_color(name) or FALLBACK_COLOR,
            link_url=link_url,
        )
        for name, total_lines in slices
    ]
