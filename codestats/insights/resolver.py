"""
Insight resolution from the settings cascade.

The cascade supports two ways of declaring insights:

1. Old API, a single insight for the whole cascade:

   "codeStatsInsights.query": "repo:^github\\.com/sourcegraph/sourcegraph$",
   "codeStatsInsights.otherThreshold": 0.01

2. New API, any number of insights created by the insight creation UI:

   "codeStatsInsights.insight.sourcegraphLanguageUsage": {
       "title": "Sourcegraph Language Usage",
       "repository": "github.com/sourcegraph/sourcegraph",
       "otherThreshold": "0.03"
   }

Resolution turns a snapshot into an ordered list of (id, definition) pairs.
A None definition is a tombstone: whatever was registered for that id must be
torn down and nothing registered in its place.
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from codestats.config import settings
from .models import InsightDefinition

logger = logging.getLogger(__name__)

Resolution = List[Tuple[str, Optional[InsightDefinition]]]


def _resolve_modern(key: str, value: Any) -> Optional[InsightDefinition]:
    if value is None or value is False:
        return None

    if not isinstance(value, Mapping):
        logger.warning(f"[Resolver] Ignoring {key}: expected an object, got {type(value).__name__}")
        return None

    fields = dict(value)
    fields["id"] = key
    fields.setdefault("title", key[len(settings.INSIGHT_KEY_PREFIX):])

    try:
        return InsightDefinition.model_validate(fields)
    except ValidationError as e:
        logger.warning(f"[Resolver] Ignoring malformed insight {key}: {e}")
        return None


def _resolve_legacy(snapshot: Mapping[str, Any]) -> Optional[InsightDefinition]:
    query = snapshot.get(settings.LEGACY_QUERY_KEY)
    if not query:
        return None

    try:
        return InsightDefinition.model_validate({
            "id": settings.LEGACY_INSIGHT_ID,
            "title": settings.LEGACY_INSIGHT_TITLE,
            "query": query,
            "otherThreshold": snapshot.get(settings.LEGACY_THRESHOLD_KEY),
        })
    except ValidationError as e:
        logger.warning(f"[Resolver] Ignoring malformed legacy insight settings: {e}")
        return None


def resolve_items(items: Iterable[Tuple[str, Any]]) -> Resolution:
    """Resolve insight definitions from settings key/value pairs."""
    items = list(items)
    resolution: Resolution = [
        (key, _resolve_modern(key, value))
        for key, value in items
        if key.startswith(settings.INSIGHT_KEY_PREFIX)
    ]

    # Always emitted, so removing the legacy key tears its insight down
    resolution.append((settings.LEGACY_INSIGHT_ID, _resolve_legacy(dict(items))))
    return resolution


def resolve(snapshot: Optional[Mapping[str, Any]]) -> Resolution:
    """
    Resolve the insight definitions of a configuration snapshot.

    Never raises: a snapshot without any recognized key resolves to a single
    legacy tombstone.
    """
    return resolve_items((snapshot or {}).items())


def resolutions_equal(a: Optional[Resolution], b: Optional[Resolution]) -> bool:
    """Structural, order-sensitive comparison of two resolutions."""
    if a is None or b is None:
        return a is b
    return list(a) == list(b)
