#!/usr/bin/env python3
# CUI // SP-CTI
"""CAFTRACK: Structured Exception Hierarchy.

Scoring functions never raise for "no data" situations (excluded outcomes,
unknown rating pairs, risks without an appetite). These exceptions cover the
cases where a caller handed us something we cannot work with: a broken
catalog, an invalid risk edit, unusable configuration.

Usage:
    from caftrack.resilience.errors import StatementEditError

    raise StatementEditError("Likelihood phrase not found", risk_id="risk-001")
"""


class CafTrackError(Exception):
    """Base exception for all CAFTRACK errors.

    Attributes:
        component: Name of the component that raised (e.g. "risk_statement").
    """

    def __init__(self, message: str, component: str = ""):
        super().__init__(message)
        self.component = component


class ConfigurationError(CafTrackError):
    """Configuration error: missing or invalid configuration."""

    def __init__(self, message: str, config_key: str = ""):
        super().__init__(message, component="config")
        self.config_key = config_key


class CatalogError(CafTrackError):
    """Framework catalog is missing required structure."""

    def __init__(self, message: str, catalog_path: str = ""):
        super().__init__(message, component="caf_framework")
        self.catalog_path = catalog_path


class RiskValidationError(CafTrackError):
    """A risk record or lifecycle operation received invalid values.

    Attributes:
        field: Name of the offending field (e.g. "modified_likelihood").
    """

    def __init__(self, message: str, field: str = ""):
        super().__init__(message, component="risk")
        self.field = field


class StatementEditError(CafTrackError):
    """Risk statement text did not contain the expected likelihood/impact phrasing.

    The record the edit was applied to is left unchanged.
    """

    def __init__(self, message: str, risk_id: str = ""):
        super().__init__(message, component="risk_statement")
        self.risk_id = risk_id
