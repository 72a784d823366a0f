"""Scrape job service: asynchronous, cancellable scrape jobs behind an HTTP API."""
