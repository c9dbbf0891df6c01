# [TEMPLATE: CUI // SP-CTI]
"""Behave environment configuration for CAFTRACK BDD tests."""

import os
import sys


def before_all(context):
    """Set up global test context."""
    # Ensure project root is in path
    project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    if project_root not in sys.path:
        sys.path.insert(0, project_root)
    context.project_root = project_root


def before_scenario(context, scenario):
    """Reset the register under construction for each scenario."""
    context.risks = []
    context.appetite = {}
    context.split = None
    context.error = None
