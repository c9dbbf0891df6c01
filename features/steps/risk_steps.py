# [TEMPLATE: CUI // SP-CTI]
"""Step definitions for CAFTRACK risk tolerance BDD scenarios."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from behave import given, then, when  # noqa: E402

from caftrack.risk.risk_statement import create_risk, edit_base_assessment, tune_risk  # noqa: E402
from caftrack.risk.risk_tolerance import classify_risks  # noqa: E402


def _find(context, risk_id):
    for index, risk in enumerate(context.risks):
        if risk.id == risk_id:
            return index, risk
    raise AssertionError(f"Risk {risk_id} not in register")


def _classification(context, risk_id):
    assert context.split is not None, "Register has not been classified"
    for classification in context.split.classifications:
        if classification.risk.id == risk_id:
            return classification
    raise AssertionError(f"Risk {risk_id} was not classified")


@given('a "{impact_type}" risk "{risk_id}" rated "{likelihood}" likelihood and "{impact}" impact')
def step_risk(context, impact_type, risk_id, likelihood, impact):
    """Add a risk with a generated statement."""
    statement = (
        f"It is {likelihood} that attackers reach the {impact_type} system, "
        f"and a {impact} {impact_type} impact of fraud"
    )
    context.risks.append(create_risk(risk_id, impact_type, likelihood, impact, statement=statement))


@given('the risk appetite for "{impact_type}" is "{level}"')
def step_appetite(context, impact_type, level):
    """Set the appetite level for one impact type."""
    context.appetite[impact_type] = level


@when('risk "{risk_id}" is tuned to "{likelihood}" likelihood and "{impact}" impact with justification "{reason}"')
def step_tune(context, risk_id, likelihood, impact, reason):
    """Record a modified assessment."""
    index, risk = _find(context, risk_id)
    context.risks[index] = tune_risk(
        risk, likelihood, impact,
        likelihood_justification=reason, impact_justification=reason,
    )


@when('the base assessment of "{risk_id}" is changed to "{likelihood}" likelihood and "{impact}" impact')
def step_edit_base(context, risk_id, likelihood, impact):
    """Edit base likelihood/impact."""
    index, risk = _find(context, risk_id)
    context.risks[index] = edit_base_assessment(risk, likelihood, impact)


@when('I classify the risk register')
def step_classify(context):
    """Split the register by tolerance."""
    context.split = classify_risks(context.risks, context.appetite)


@then('risk "{risk_id}" is rated "{rating}"')
def step_rating(context, risk_id, rating):
    """Verify the effective rating."""
    actual = _classification(context, risk_id).rating
    assert actual == rating, f"Expected {rating}, got {actual}"


@then('risk "{risk_id}" is "{status}"')
def step_status(context, risk_id, status):
    """Verify the tolerance status."""
    classification = _classification(context, risk_id)
    assert classification.status_label == status, classification.reason


@then('the statement of "{risk_id}" reads "{statement}"')
def step_statement(context, risk_id, statement):
    """Verify the regenerated statement text."""
    _, risk = _find(context, risk_id)
    assert risk.statement == statement, risk.statement


@then('the out of tolerance risks are "{risk_ids}"')
def step_out_of_tolerance(context, risk_ids):
    """Verify the out of tolerance side, highest rating first."""
    actual = [c.risk.id for c in context.split.out_of_tolerance]
    assert actual == risk_ids.split(","), actual


@then('the in tolerance risks are "{risk_ids}"')
def step_in_tolerance(context, risk_ids):
    """Verify the in tolerance side, highest rating first."""
    actual = [c.risk.id for c in context.split.in_tolerance]
    assert actual == risk_ids.split(","), actual
