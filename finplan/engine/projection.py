"""Forward projection of a plan under a scenario.

Each remaining month contributes projected savings that are compounded
at the scenario's monthly growth rate. The compounded value doubles as a
simplified net-worth figure; no other assets or liabilities are tracked.
"""

from datetime import date
from decimal import Decimal

from finplan.core.models import (
    FinancialPlan,
    FinancialProjection,
    MonthlyProjection,
    PlanMonthlyBreakdown,
    ProjectionScenario,
    ScenarioParameters,
)
from finplan.engine.breakdowns import seed_breakdown
from finplan.engine.periods import add_months, format_month

# scenario -> (income multiplier, expense multiplier, growth-rate factor)
SCENARIO_FACTORS: dict[ProjectionScenario, tuple[Decimal, Decimal, Decimal]] = {
    ProjectionScenario.OPTIMISTIC: (Decimal("1.1"), Decimal("0.95"), Decimal("1.2")),
    ProjectionScenario.REALISTIC: (Decimal("1.0"), Decimal("1.0"), Decimal("1.0")),
    ProjectionScenario.PESSIMISTIC: (Decimal("0.9"), Decimal("1.1"), Decimal("0.7")),
}

# Retirement heuristic: savings of 25x annual income
RETIREMENT_INCOME_MULTIPLE = 25


def scenario_parameters(plan: FinancialPlan, scenario: ProjectionScenario) -> ScenarioParameters:
    """Multipliers and monthly growth rate for a scenario."""
    income_multiplier, expense_multiplier, growth_factor = SCENARIO_FACTORS[scenario]
    return ScenarioParameters(
        income_multiplier=income_multiplier,
        expense_multiplier=expense_multiplier,
        monthly_growth_rate=plan.annual_interest_rate / 12 * growth_factor,
    )


def projected_retirement_age(
    plan: FinancialPlan,
    final_value: Decimal,
    current_age: int,
) -> int | None:
    """Age at plan end if final_value clears 25x annual income, else None."""
    threshold = plan.average_monthly_income * 12 * RETIREMENT_INCOME_MULTIPLE
    if final_value <= 0 or final_value < threshold:
        return None
    return current_age + int(plan.duration_in_years)


def project(
    plan: FinancialPlan,
    breakdowns: list[PlanMonthlyBreakdown],
    scenario: ProjectionScenario,
    today: date,
    current_age: int = 30,
    currency: str | None = None,
) -> FinancialProjection:
    """Project income, expenses and compounded savings to the plan's end.

    The walk starts at max(today, plan.start_date) and steps one calendar
    month at a time while the stepped date is on or before plan.end_date,
    so starting on the 15th stops before an end date on the 1st. A stored breakdown is used for each month when
    present; otherwise one is synthesised from plan averages. If the plan
    has already ended the series is empty and the final value is zero.

    Args:
        plan: Plan to project.
        breakdowns: Stored breakdowns of the plan.
        scenario: Scenario to apply.
        today: Reference date.
        current_age: Age used for the retirement estimate.
        currency: Output currency; defaults to the plan's currency.

    Returns:
        FinancialProjection with one record per remaining month.
    """
    params = scenario_parameters(plan, scenario)
    by_month = {b.month: b for b in breakdowns}

    projections: list[MonthlyProjection] = []
    value = Decimal(0)
    cumulative = Decimal(0)

    start = max(today, plan.start_date)
    step = 0
    current = start
    while current <= plan.end_date:
        month = format_month(current)
        breakdown = by_month.get(month) or seed_breakdown(plan, month)

        income = breakdown.planned_income * params.income_multiplier
        expenses = breakdown.planned_expenses * params.expense_multiplier
        savings = income - expenses

        value = value * (1 + params.monthly_growth_rate) + savings
        cumulative += savings

        projections.append(
            MonthlyProjection(
                month=month,
                projected_income=income,
                projected_expenses=expenses,
                projected_savings=savings,
                cumulative_savings=cumulative,
                investment_value=value,
                net_worth=value,
            )
        )

        # Step from start, not current, so day clamping does not drift
        step += 1
        current = add_months(start, step)

    return FinancialProjection(
        plan_id=plan.id,
        scenario=scenario,
        projections=projections,
        final_net_worth=value,
        total_savings=cumulative,
        projected_retirement_age=projected_retirement_age(plan, value, current_age),
        currency=currency or plan.currency,
    )
