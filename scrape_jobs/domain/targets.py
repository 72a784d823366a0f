"""Scrape target resolution from free-form client queries."""

from __future__ import annotations

from urllib.parse import quote

_URI_COMPONENT_SAFE_CHARS = "!'()*-._~"


def domain_resolve_scrape_target(query: str, search_url_template: str) -> str:
    """Resolve a client query into the URL handed to the worker.

    Queries that already look like a URL (prefix `http`) are used verbatim.
    Anything else is treated as a search term, percent-encoded as one path
    segment and substituted into the search template.

    Args:
        query: Non-blank client query.
        search_url_template: Template containing a `{query}` placeholder.

    Returns:
        str: Target URL.

    Raises:
        ValueError: Raised when query is blank.
    """

    normalized_query = query.strip()
    if not normalized_query:
        raise ValueError("query must not be blank")

    if normalized_query.startswith("http"):
        return normalized_query

    return search_url_template.replace("{query}", quote(normalized_query, safe=_URI_COMPONENT_SAFE_CHARS))
