"""Regression tests for scrape target resolution."""

import pytest

from scrape_jobs.config.settings import DEFAULT_SEARCH_URL_TEMPLATE
from scrape_jobs.domain import JobStatus, domain_resolve_scrape_target


def test_domain_target_keeps_url_queries_verbatim() -> None:
    """Use URL-shaped queries as the target unchanged."""

    url = "https://www.google.com/maps/search/coffee+shops/@52.1,4.3,12z"

    assert domain_resolve_scrape_target(query=url, search_url_template=DEFAULT_SEARCH_URL_TEMPLATE) == url


def test_domain_target_expands_search_terms_into_template() -> None:
    """Encode search terms as one path segment of the search template.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when encoding is unexpected.
    """

    assert (
        domain_resolve_scrape_target(query="  coffee shops ", search_url_template=DEFAULT_SEARCH_URL_TEMPLATE)
        == "https://www.google.com/maps/search/coffee%20shops/"
    )
    assert (
        domain_resolve_scrape_target(query="cafés/bars & more", search_url_template="https://maps.test/{query}")
        == "https://maps.test/caf%C3%A9s%2Fbars%20%26%20more"
    )


def test_domain_target_rejects_blank_query() -> None:
    """Reject blank queries."""

    with pytest.raises(ValueError, match="query must not be blank"):
        domain_resolve_scrape_target(query="   ", search_url_template=DEFAULT_SEARCH_URL_TEMPLATE)


def test_domain_job_status_terminal_flags() -> None:
    """Only running is non-terminal."""

    assert not JobStatus.RUNNING.status_is_terminal()
    assert all(status.status_is_terminal() for status in (JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELLED))


def test_domain_target_leaves_uri_component_marks_unescaped() -> None:
    """Keep the marks a URI component may carry literally."""

    assert (
        domain_resolve_scrape_target(query="rock'n'roll (live)! *", search_url_template="https://maps.test/{query}")
        == "https://maps.test/rock'n'roll%20(live)!%20*"
    )
