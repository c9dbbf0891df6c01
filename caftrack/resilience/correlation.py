#!/usr/bin/env python3
# CUI // SP-CTI
"""CAFTRACK Resilience: Correlation ID Middleware.

Correlation IDs tie a scoring API request, or one CLI run, to every log line
it produced. Requests carry theirs in the X-Correlation-ID header; CLI
entry points set one per run in thread-local storage.

Usage:
    from caftrack.resilience.correlation import register_correlation_middleware
    register_correlation_middleware(app)

    # Get current correlation ID anywhere in request context:
    from caftrack.resilience.correlation import get_correlation_id
    cid = get_correlation_id()
"""

import logging
import threading
import uuid
from typing import Optional

from flask import g, has_request_context, request

logger = logging.getLogger("caftrack.resilience.correlation")

CORRELATION_HEADER = "X-Correlation-ID"

# Thread-local storage for non-Flask contexts (CLI tools)
_thread_local = threading.local()


def generate_correlation_id() -> str:
    """Generate a 12-character correlation ID (UUID prefix)."""
    return uuid.uuid4().hex[:12]


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID.

    Checks the Flask request context first, then thread-local storage.
    Returns None if no correlation context exists.
    """
    if has_request_context():
        cid = getattr(g, "correlation_id", None)
        if cid:
            return cid
    return getattr(_thread_local, "correlation_id", None)


def set_correlation_id(correlation_id: str):
    """Set the correlation ID in thread-local storage (CLI runs)."""
    _thread_local.correlation_id = correlation_id


def clear_correlation_id():
    """Clear the thread-local correlation ID."""
    _thread_local.correlation_id = None


def register_correlation_middleware(app):
    """Register correlation ID middleware on a Flask app.

    Reuses an incoming X-Correlation-ID header or generates one, and echoes
    it on the response.
    """

    @app.before_request
    def _inject_correlation_id():
        cid = request.headers.get(CORRELATION_HEADER)
        if not cid:
            cid = generate_correlation_id()
        g.correlation_id = cid
        _thread_local.correlation_id = cid

    @app.after_request
    def _add_correlation_header(response):
        cid = getattr(g, "correlation_id", None)
        if cid:
            response.headers[CORRELATION_HEADER] = cid
        return response

    @app.teardown_request
    def _clear_correlation(exc=None):
        clear_correlation_id()


class CorrelationLogFilter(logging.Filter):
    """Logging filter that injects correlation_id into log records.

    Usage:
        handler = logging.StreamHandler()
        handler.addFilter(CorrelationLogFilter())
        formatter = logging.Formatter(
            "%(asctime)s [%(correlation_id)s] %(name)s: %(message)s"
        )
        handler.setFormatter(formatter)
    """

    def filter(self, record):
        record.correlation_id = get_correlation_id() or "-"
        return True
