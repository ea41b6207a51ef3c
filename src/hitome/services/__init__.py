"""
Service layer for hitome.

Services own the database work and the calls to LINE and Google; routes stay
thin and translate service exceptions into HTTP errors.
"""

from .exceptions import (
    HitomeError,
    NotFoundError,
    AccessDeniedError,
    ValidationFailedError,
    ConflictError,
    NotConfiguredError,
    SignatureError,
    UpstreamError,
)
from .classifier import (
    DANGER_WORDS,
    Classification,
    StoreProfile,
    classify,
    has_danger_words,
)
from .signature import compute_signature, verify_signature
from .line_client import LineClient, LineLoginClient
from .google_client import GoogleBusinessClient
from .auth_service import (
    AuthService,
    parse_session_cookie,
    create_session_cookie,
)
from .store_service import StoreService
from .danger_word_service import DangerWordService
from .thread_service import ThreadService, apply_status
from .ingestion_service import IngestionService
from .metrics_service import MetricsService, KPIMetrics, calculate_metrics

__all__ = [
    # Errors
    "HitomeError",
    "NotFoundError",
    "AccessDeniedError",
    "ValidationFailedError",
    "ConflictError",
    "NotConfiguredError",
    "SignatureError",
    "UpstreamError",
    # Classification
    "DANGER_WORDS",
    "Classification",
    "StoreProfile",
    "classify",
    "has_danger_words",
    # Signature
    "compute_signature",
    "verify_signature",
    # Upstream clients
    "LineClient",
    "LineLoginClient",
    "GoogleBusinessClient",
    # Auth
    "AuthService",
    "parse_session_cookie",
    "create_session_cookie",
    # Stores and inbox
    "StoreService",
    "DangerWordService",
    "ThreadService",
    "apply_status",
    "IngestionService",
    # Metrics
    "MetricsService",
    "KPIMetrics",
    "calculate_metrics",
]
