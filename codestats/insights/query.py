"""
Search query helpers.

Queries are opaque strings to the extension; these helpers only build the
repository filters it needs and the deep link back to the stats page.
"""

import re
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit

# Characters with a meaning in a search pattern
_REGEXP_SPECIAL = re.compile(r"[\\^$.*+?()[\]{}|]")


def escape_regexp(value: str) -> str:
    """Escape pattern metacharacters so `value` matches literally."""
    return _REGEXP_SPECIAL.sub(lambda m: "\\" + m.group(0), value)


def repo_name_from_uri(uri: str) -> str:
    """
    Extract the repository name from a directory viewer URI.

    "git://github.com/sourcegraph/sourcegraph?main#cmd" -> "github.com/sourcegraph/sourcegraph"
    """
    parts = urlsplit(uri)
    return parts.netloc + parts.path


def exact_repository_query(repo_name: str) -> str:
    """Filter matching exactly one repository."""
    return f"repo:^{escape_regexp(repo_name)}$"


def repository_query(repository: str) -> str:
    """Filter derived from an insight's configured repository (anchored at the start)."""
    return f"repo:^{escape_regexp(repository)}"


def stats_page_url(instance_url: str, stats_path: str = "/stats") -> str:
    """Absolute URL of the stats page on a Sourcegraph instance."""
    return urljoin(instance_url, stats_path)


def build_stats_url(stats_url: str, query: str) -> str:
    """Return `stats_url` with its `q` parameter set to `query`."""
    parts = urlsplit(stats_url)
    params = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != "q"]
    params.append(("q", query))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(params), parts.fragment))
