"""Plan-level finance calculations.

Interest, annuity and payoff math used by the projection engine, the
optimizer and the recommendation layer. All functions are pure.
"""

import math
from decimal import Decimal
from typing import NamedTuple

from finplan.core.models import FinancialPlan

MONTHS_PER_YEAR = Decimal(12)

# Debt payoff stops after this many months even if a balance remains.
DEBT_PAYOFF_MONTH_LIMIT = 1000


class EmergencyFundProgress(NamedTuple):
    percentage: Decimal
    remaining: Decimal


class DebtPayoff(NamedTuple):
    months: int
    total_interest: Decimal


def spending_share(spent: Decimal, total_spent: Decimal) -> Decimal:
    """Percent of a month's spending that went to one category.

    Returns 0 when nothing was spent, rounded to one decimal place.
    """
    if total_spent <= 0:
        return Decimal(0)
    return (spent / total_spent * 100).quantize(Decimal("0.1"))


def future_value_of_annuity(payment: Decimal, annual_rate: Decimal, periods: int) -> Decimal:
    """Future value of equal monthly payments.

    FV = PMT * ((1 + r)^n - 1) / r, with r the monthly rate.

    Args:
        payment: Monthly payment.
        annual_rate: Annual rate as a fraction (0.05 = 5%).
        periods: Number of monthly payments.

    Returns:
        Accumulated value after the last payment.
    """
    if annual_rate <= 0:
        return payment * periods
    monthly_rate = annual_rate / MONTHS_PER_YEAR
    return payment * (((1 + monthly_rate) ** periods - 1) / monthly_rate)


def required_payment(future_value: Decimal, annual_rate: Decimal, periods: int) -> Decimal:
    """Monthly payment needed to accumulate future_value in periods months.

    The annuity formula solved for the payment. Returns 0 when periods < 1.
    """
    if periods < 1:
        return Decimal(0)
    if annual_rate <= 0:
        return future_value / periods
    monthly_rate = annual_rate / MONTHS_PER_YEAR
    return future_value * (monthly_rate / ((1 + monthly_rate) ** periods - 1))


def future_value_of_savings(
    plan: FinancialPlan,
    principal: Decimal = Decimal(0),
    monthly_contribution: Decimal | None = None,
    years: Decimal | None = None,
) -> Decimal:
    """Future value of a starting balance plus monthly contributions.

    The principal grows with the plan's interest type and compounding
    frequency; contributions grow as a monthly annuity.

    Args:
        plan: Plan providing rate and defaults.
        principal: Starting balance.
        monthly_contribution: Defaults to the plan's target monthly savings.
        years: Defaults to the plan's duration in years.

    Returns:
        Projected balance at the end of the period.
    """
    contribution = plan.target_monthly_savings if monthly_contribution is None else monthly_contribution
    time = plan.duration_in_years if years is None else years

    principal_value = plan.interest_type.calculate_amount(
        principal,
        plan.annual_interest_rate,
        time,
        plan.compounding_frequency,
    )

    if contribution <= 0 or plan.annual_interest_rate <= 0:
        return principal_value + contribution * MONTHS_PER_YEAR * time

    monthly_rate = plan.annual_interest_rate / MONTHS_PER_YEAR
    total_months = time * MONTHS_PER_YEAR
    annuity_value = contribution * (((1 + monthly_rate) ** total_months - 1) / monthly_rate)
    return principal_value + annuity_value


def required_monthly_savings(plan: FinancialPlan) -> Decimal:
    """Monthly contribution that reaches the plan's savings goal by its end date."""
    if plan.duration_in_years <= 0 or plan.annual_interest_rate <= 0:
        return plan.savings_goal / max(plan.duration_in_months, 1)

    monthly_rate = plan.annual_interest_rate / MONTHS_PER_YEAR
    total_months = plan.duration_in_years * MONTHS_PER_YEAR
    factor = ((1 + monthly_rate) ** total_months - 1) / monthly_rate
    return plan.savings_goal / factor


def emergency_fund_progress(plan: FinancialPlan, current_amount: Decimal) -> EmergencyFundProgress:
    """Progress toward the plan's emergency fund goal.

    Returns:
        Percentage reached (capped at 100) and amount still missing.
    """
    if plan.emergency_fund_goal <= 0:
        return EmergencyFundProgress(Decimal(0), Decimal(0))

    percentage = min(current_amount / plan.emergency_fund_goal * 100, Decimal(100))
    remaining = max(plan.emergency_fund_goal - current_amount, Decimal(0))
    return EmergencyFundProgress(percentage, remaining)


def debt_payoff(debt_amount: Decimal, monthly_payment: Decimal, interest_rate: Decimal) -> DebtPayoff:
    """Simulate paying off a debt with a fixed monthly payment.

    Simulation stops when the balance falls to a cent, when the payment no
    longer covers the monthly interest, or after DEBT_PAYOFF_MONTH_LIMIT
    months.

    Args:
        debt_amount: Outstanding balance.
        monthly_payment: Fixed payment per month.
        interest_rate: Annual interest rate as a fraction.

    Returns:
        Months taken and total interest paid.
    """
    if debt_amount <= 0 or monthly_payment <= 0:
        return DebtPayoff(0, Decimal(0))
    if interest_rate <= 0:
        return DebtPayoff(math.ceil(debt_amount / monthly_payment), Decimal(0))

    monthly_rate = interest_rate / MONTHS_PER_YEAR
    balance = debt_amount
    months = 0
    total_interest = Decimal(0)

    while balance > Decimal("0.01") and months < DEBT_PAYOFF_MONTH_LIMIT:
        interest = balance * monthly_rate
        principal_paid = min(monthly_payment - interest, balance)
        if principal_paid <= 0:
            # Payment does not cover interest
            break
        total_interest += interest
        balance -= principal_paid
        months += 1

    return DebtPayoff(months, total_interest)


def budget_variance_by_category(
    plan: FinancialPlan,
    actual_expenses: dict[str, Decimal],
) -> dict[str, Decimal]:
    """Planned minus actual for every budgeted variable category.

    Negative means overspent. Categories without actual spending count as
    zero spent; spending outside the plan's categories is ignored.
    """
    return {
        category_id: budget - actual_expenses.get(category_id, Decimal(0))
        for category_id, budget in plan.variable_expense_budgets.items()
    }


def recommended_allocation(plan: FinancialPlan) -> dict[str, Decimal]:
    """Split average monthly income by the 50/30/20 rule."""
    income = plan.average_monthly_income
    return {
        "needs": income * Decimal("0.50"),
        "wants": income * Decimal("0.30"),
        "savings": income * Decimal("0.20"),
    }


def net_worth_projection(
    plan: FinancialPlan,
    current_net_worth: Decimal,
    monthly_net_income: Decimal,
) -> list[Decimal]:
    """Month-by-month net worth over the plan's duration.

    Each month adds the net income and then grows the balance at the
    plan's monthly interest rate. The first element is the starting value.
    """
    monthly_rate = plan.annual_interest_rate / MONTHS_PER_YEAR
    values = [current_net_worth]
    value = current_net_worth
    for _ in range(plan.duration_in_months):
        value = (value + monthly_net_income) * (1 + monthly_rate)
        values.append(value)
    return values
