"""Prometheus metrics for the student document service.

Recorded at the API edge from service results and raised DocumentErrors, so
the domain services stay free of metric code.
"""

from prometheus_client import Counter, Histogram

# Ingestion outcomes: outcome is "success" or a DocumentError code
documents_ingested_total = Counter(
    "studydocs_documents_ingested_total",
    "Total document ingestion attempts by outcome",
    ["outcome", "protection_level"]
)

ingest_compensations_total = Counter(
    "studydocs_ingest_compensations_total",
    "Blob compensations after a failed record write",
    ["result"]  # result: removed|orphaned
)

ingest_duration_seconds = Histogram(
    "studydocs_ingest_duration_seconds",
    "End-to-end ingestion time in seconds",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0]
)

# Review workflow
review_transitions_total = Counter(
    "studydocs_review_transitions_total",
    "Review decisions by target status and outcome",
    ["target_status", "outcome"]  # outcome: changed|unchanged|<error code>
)

documents_deleted_total = Counter(
    "studydocs_documents_deleted_total",
    "Administrative deletions by outcome",
    ["outcome"]
)
