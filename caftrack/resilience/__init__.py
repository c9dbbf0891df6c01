#!/usr/bin/env python3
# CUI // SP-CTI
"""CAFTRACK Resilience Package: Errors and Correlation.

Structured exception hierarchy shared by the scoring engine, CLIs and API,
plus correlation ids for scoring API requests and CLI runs.
"""

from caftrack.resilience.correlation import (  # noqa: F401
    CorrelationLogFilter,
    clear_correlation_id,
    generate_correlation_id,
    get_correlation_id,
    register_correlation_middleware,
    set_correlation_id,
)
from caftrack.resilience.errors import (  # noqa: F401
    CafTrackError,
    CatalogError,
    ConfigurationError,
    RiskValidationError,
    StatementEditError,
)
