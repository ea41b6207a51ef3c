"""
API routes for hitome.
"""

from . import auth, stores, threads, messages, webhook, danger_words, metrics

__all__ = [
    "auth",
    "stores",
    "threads",
    "messages",
    "webhook",
    "danger_words",
    "metrics",
]
