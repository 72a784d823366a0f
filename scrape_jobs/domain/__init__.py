"""Domain models used across application layer boundaries."""

from .models import HealthStatus, JobRecord, JobStatus
from .targets import domain_resolve_scrape_target

__all__ = ["HealthStatus", "JobRecord", "JobStatus", "domain_resolve_scrape_target"]
