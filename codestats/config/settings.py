import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()  # Load .env file if it exists

# ============================================================================
# SOURCEGRAPH INSTANCE
# ============================================================================

SOURCEGRAPH_URL = os.getenv("SOURCEGRAPH_URL", "https://sourcegraph.com")
SOURCEGRAPH_ACCESS_TOKEN = os.getenv("SOURCEGRAPH_ACCESS_TOKEN")  # Optional, anonymous if unset
GRAPHQL_PATH = "/.api/graphql"
GRAPHQL_TIMEOUT = float(os.getenv("CODESTATS_GRAPHQL_TIMEOUT", "30.0"))  # seconds

# Deep links from every chart slice point at the stats page of the instance
STATS_PATH = "/stats"

# Search may time out on cold caches; attempts include the first call
MAX_QUERY_ATTEMPTS = int(os.getenv("CODESTATS_MAX_QUERY_ATTEMPTS", "4"))

# ============================================================================
# SETTINGS CASCADE
# ============================================================================

# Settings files, lowest precedence first (global -> org -> user)
DEFAULT_SETTINGS_CASCADE = [
    Path("settings/global.json"),
    Path("settings/org.json"),
    Path("settings/user.json"),
]


def get_settings_cascade():
    """Get the settings files to merge, honouring CODESTATS_SETTINGS_FILES"""
    configured = os.getenv("CODESTATS_SETTINGS_FILES")
    if not configured:
        return list(DEFAULT_SETTINGS_CASCADE)
    return [Path(p) for p in configured.split(os.pathsep) if p.strip()]


SETTINGS_WATCH_DEBOUNCE = 0.5  # seconds - editors often write a file several times per save

# Modern API: any number of "codeStatsInsights.insight.<name>" objects
INSIGHT_KEY_PREFIX = "codeStatsInsights.insight."

# Old API: a single insight described by a full search query
LEGACY_QUERY_KEY = "codeStatsInsights.query"
LEGACY_THRESHOLD_KEY = "codeStatsInsights.otherThreshold"
LEGACY_INSIGHT_ID = "codeStatsInsight.language"  # Reserved, cannot collide with the prefix above
LEGACY_INSIGHT_TITLE = "Language usage"

DEFAULT_OTHER_THRESHOLD = 0.03

# Registration names are "<prefix><id>.<where>"
VIEW_PROVIDER_PREFIX = "codeStatsInsight."

# ============================================================================
# SERVER & LOGGING
# ============================================================================

HOST = os.getenv("CODESTATS_HOST", "127.0.0.1")
PORT = int(os.getenv("CODESTATS_PORT", "8001"))
LOG_LEVEL = os.getenv("CODESTATS_LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("CODESTATS_LOG_FILE", "codestats.log")
