# [TEMPLATE: CUI // SP-CTI]
"""Tests for caftrack.resilience.correlation on the scoring API."""
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import logging
import re
import threading

import pytest

from caftrack.resilience.correlation import (
    CORRELATION_HEADER,
    CorrelationLogFilter,
    clear_correlation_id,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
    _thread_local,
)


@pytest.fixture(autouse=True)
def _reset_thread_local():
    _thread_local.correlation_id = None
    yield
    _thread_local.correlation_id = None


def _record():
    return logging.LogRecord("caftrack.test", logging.INFO, __file__, 1, "scored", (), None)


# ---------------------------------------------------------------------------
# ID helpers
# ---------------------------------------------------------------------------
class TestCorrelationIds:

    def test_generated_id_is_12_hex(self):
        assert re.fullmatch(r"[0-9a-f]{12}", generate_correlation_id())

    def test_set_get_clear(self):
        set_correlation_id("cli-run-0001")
        assert get_correlation_id() == "cli-run-0001"
        clear_correlation_id()
        assert get_correlation_id() is None

    def test_ids_are_per_thread(self):
        """A CLI batch in one thread does not see another thread's id."""
        seen = {}
        set_correlation_id("main-thread1")

        def worker():
            seen["worker"] = get_correlation_id()

        t = threading.Thread(target=worker)
        t.start()
        t.join()
        assert seen["worker"] is None
        assert get_correlation_id() == "main-thread1"


# ---------------------------------------------------------------------------
# Middleware on the scoring API
# ---------------------------------------------------------------------------
class TestScoringApiCorrelation:

    def test_generated_header(self, client):
        resp = client.get("/health")
        assert re.fullmatch(r"[0-9a-f]{12}", resp.headers[CORRELATION_HEADER])

    def test_incoming_header_echoed(self, client):
        resp = client.get("/api/risk/matrix", headers={CORRELATION_HEADER: "report-req-42"})
        assert resp.headers[CORRELATION_HEADER] == "report-req-42"

    def test_error_responses_carry_header(self, client):
        resp = client.post("/api/risk/rating", data="not json",
                           headers={CORRELATION_HEADER: "bad-req-0001"})
        assert resp.status_code == 400
        assert resp.headers[CORRELATION_HEADER] == "bad-req-0001"

    def test_thread_local_cleared_after_request(self, client):
        client.get("/health", headers={CORRELATION_HEADER: "temp-id-0001"})
        assert _thread_local.correlation_id is None


# ---------------------------------------------------------------------------
# Log filter
# ---------------------------------------------------------------------------
class TestCorrelationLogFilter:

    def test_injects_id(self):
        set_correlation_id("log-id-00001")
        record = _record()
        assert CorrelationLogFilter().filter(record) is True
        assert record.correlation_id == "log-id-00001"

    def test_dash_without_context(self):
        record = _record()
        CorrelationLogFilter().filter(record)
        assert record.correlation_id == "-"
