"""Observability module for the student document service.

Provides structured logging, request correlation, metrics, and health checks.
"""

from .logging_config import configure_logging, get_logger
from .metrics import (
    documents_deleted_total,
    documents_ingested_total,
    ingest_compensations_total,
    ingest_duration_seconds,
    review_transitions_total,
)
from .request_id import generate_request_id, get_request_id, request_id_var, reset_request_id, set_request_id
from .middleware import RequestIDMiddleware

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    # Metrics
    "documents_deleted_total",
    "documents_ingested_total",
    "ingest_compensations_total",
    "ingest_duration_seconds",
    "review_transitions_total",
    # Request ID
    "request_id_var",
    "get_request_id",
    "set_request_id",
    "reset_request_id",
    "generate_request_id",
    # Middleware
    "RequestIDMiddleware",
]
