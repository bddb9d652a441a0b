"""Prometheus metrics definitions for Bookxpert."""

from prometheus_client import Counter, Gauge, Histogram

# Business metrics
catalogue_fetches = Counter(
    "bookxpert_catalogue_fetches_total",
    "Catalogue fetches by where they were served from",
    ["source"],  # cache, remote
)

catalogue_mutations = Counter(
    "bookxpert_catalogue_mutations_total",
    "Successful catalogue edits and deletions",
    ["operation"],  # save, delete, delete_all
)

remote_fetch_duration = Histogram(
    "bookxpert_remote_fetch_duration_seconds",
    "Time to fetch the catalogue from the remote source",
    ["source"],  # rest, mock
)

document_fetches = Counter(
    "bookxpert_document_fetches_total",
    "Document requests by whether the in-memory cache answered",
    ["result"],  # hit, miss
)

# Current state gauges
catalogue_items = Gauge(
    "bookxpert_catalogue_items",
    "Items in the published catalogue snapshot",
)

# Error tracking
operation_errors = Counter(
    "bookxpert_operation_errors_total",
    "Total errors by operation",
    ["operation", "error_type"],
)
