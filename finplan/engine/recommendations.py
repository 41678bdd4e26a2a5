"""Plan templates and profile-based recommendations."""

import math
from datetime import date
from decimal import Decimal

from finplan.core.models import (
    FinancialPlan,
    InterestType,
    PlanCustomization,
    PlanRecommendation,
    PlanRecommendationType,
    PlanTemplate,
    Priority,
    UserFinancialProfile,
)
from finplan.engine.periods import add_months

EMERGENCY_FUND_TARGET_MONTHS = Decimal(6)
RETIREMENT_TARGET_RATE = Decimal(15)
RETIREMENT_HORIZON_MONTHS = 360


# -----------------------------------------------------------------------------
# Templates
# -----------------------------------------------------------------------------


def basic_plan(
    name: str,
    monthly_income: Decimal,
    start_date: date,
    duration_months: int = 12,
) -> FinancialPlan:
    """80% budget, 20% savings, six months of income as emergency fund."""
    total_income = monthly_income * duration_months
    return FinancialPlan(
        name=name,
        description="Balanced plan: 80% for expenses, 20% for savings.",
        start_date=start_date,
        end_date=add_months(start_date, duration_months),
        total_income=total_income,
        total_budget=total_income * Decimal("0.8"),
        savings_goal=total_income * Decimal("0.2"),
        emergency_fund_goal=monthly_income * 6,
        interest_type=InterestType.COMPOUND,
        annual_interest_rate=Decimal("0.05"),
        compounding_frequency=12,
    )


def aggressive_savings_plan(
    name: str,
    monthly_income: Decimal,
    start_date: date,
    savings_rate: Decimal = Decimal("0.5"),
    duration_months: int = 60,
) -> FinancialPlan:
    """High savings rate over five years with a 12-month emergency fund."""
    total_income = monthly_income * duration_months
    return FinancialPlan(
        name=name,
        description="Aggressive savings plan.",
        start_date=start_date,
        end_date=add_months(start_date, duration_months),
        total_income=total_income,
        total_budget=total_income * (1 - savings_rate),
        savings_goal=monthly_income * savings_rate * duration_months,
        emergency_fund_goal=monthly_income * 12,
        interest_type=InterestType.COMPOUND,
        annual_interest_rate=Decimal("0.07"),
        compounding_frequency=12,
    )


def debt_payoff_plan(
    name: str,
    monthly_income: Decimal,
    total_debt: Decimal,
    start_date: date,
    debt_payment_percentage: Decimal = Decimal("0.3"),
) -> FinancialPlan:
    """Plan that lasts until the debt is repaid from a share of income.

    Raises:
        ValueError: If the monthly debt payment would not be positive.
    """
    monthly_payment = monthly_income * debt_payment_percentage
    if monthly_payment <= 0:
        raise ValueError("Monthly debt payment must be greater than zero")

    months = max(math.ceil(total_debt / monthly_payment), 1)
    total_income = monthly_income * months
    return FinancialPlan(
        name=name,
        description="Debt payoff plan: 30% of income goes to debt.",
        start_date=start_date,
        end_date=add_months(start_date, months),
        total_income=total_income,
        total_budget=total_income * Decimal("0.7"),
        savings_goal=Decimal(0),
        emergency_fund_goal=monthly_income * 3,
        interest_type=InterestType.SIMPLE,
        annual_interest_rate=Decimal("0.03"),
        compounding_frequency=12,
    )


def calculate_variable_budgets(
    monthly_income: Decimal,
    fixed_expenses: dict[str, Decimal],
    savings_rate: Decimal,
    allocations: dict[str, Decimal],
) -> dict[str, Decimal]:
    """Split what is left after fixed costs and savings across categories.

    Allocation percentages are normalised, so they need not sum to 100.
    """
    total_allocation = sum(allocations.values(), Decimal(0))
    if total_allocation <= 0:
        return {}

    available = monthly_income - sum(fixed_expenses.values(), Decimal(0)) - monthly_income * savings_rate
    return {
        category_id: available * (percentage / total_allocation)
        for category_id, percentage in allocations.items()
    }


def create_plan_from_template(
    template: PlanTemplate,
    customization: PlanCustomization,
    today: date,
    currency: str = "USD",
) -> FinancialPlan:
    """Build a plan from template ratios and user-specific amounts.

    Args:
        template: Ratios and defaults to apply.
        customization: Name, income, duration and fixed expenses.
        today: Start date when the customization does not set one.
        currency: Currency stamped on the plan.

    Returns:
        Unsaved FinancialPlan.
    """
    start = customization.start_date or today
    total_income = customization.monthly_income * customization.duration_months

    return FinancialPlan(
        name=customization.name,
        description=template.description,
        start_date=start,
        end_date=add_months(start, customization.duration_months),
        total_income=total_income,
        total_budget=total_income * template.budget_ratio,
        savings_goal=total_income * template.savings_ratio,
        emergency_fund_goal=customization.monthly_income * template.emergency_fund_months,
        interest_type=template.interest_type,
        annual_interest_rate=template.expected_return_rate,
        compounding_frequency=12,
        currency=currency,
        category_allocations=dict(template.category_allocations),
        fixed_expenses=dict(customization.fixed_expenses),
        variable_expense_budgets=calculate_variable_budgets(
            customization.monthly_income,
            customization.fixed_expenses,
            template.savings_ratio,
            template.category_allocations,
        ),
    )


# -----------------------------------------------------------------------------
# Profile recommendations
# -----------------------------------------------------------------------------


def profile_from_plan(plan: FinancialPlan | None) -> UserFinancialProfile:
    """Profile derived from a plan's averages, or an empty profile.

    Debt, retirement rate and diversification are not tracked and keep
    their defaults.
    """
    if plan is None:
        return UserFinancialProfile(monthly_income=Decimal(0), monthly_expenses=Decimal(0))
    return UserFinancialProfile(
        monthly_income=plan.average_monthly_income,
        monthly_expenses=plan.average_monthly_budget,
    )


def _emergency_fund(profile: UserFinancialProfile) -> PlanRecommendation:
    target = profile.monthly_expenses * EMERGENCY_FUND_TARGET_MONTHS
    needed = max(target - profile.monthly_expenses * profile.emergency_fund_months, Decimal(0))
    # 10% of income goes to the fund
    contribution = profile.monthly_income * Decimal("0.1")
    months = int(needed / contribution) if contribution > 0 else 0
    months = max(months, 6)
    return PlanRecommendation(
        type=PlanRecommendationType.EMERGENCY_FUND,
        title="Build your emergency fund",
        description="Keep six months of expenses available for emergencies.",
        priority=Priority.HIGH,
        estimated_months=months,
        target_amount=target,
        monthly_savings_required=needed / months,
    )


def _debt_payoff(profile: UserFinancialProfile) -> PlanRecommendation:
    payment = profile.monthly_income * Decimal("0.2")
    months = math.ceil(profile.total_debt / payment) if payment > 0 else 0
    return PlanRecommendation(
        type=PlanRecommendationType.DEBT_PAYOFF,
        title="Pay off your debt",
        description="Put 20% of your income toward debt until it is gone.",
        priority=Priority.HIGH,
        estimated_months=months,
        target_amount=Decimal(0),
        monthly_savings_required=payment,
    )


def _retirement(profile: UserFinancialProfile) -> PlanRecommendation:
    current = profile.monthly_income * profile.retirement_savings_rate / 100
    recommended = profile.monthly_income * RETIREMENT_TARGET_RATE / 100
    return PlanRecommendation(
        type=PlanRecommendationType.RETIREMENT_SAVINGS,
        title="Save more for retirement",
        description="Aim to put 15% of your income toward retirement.",
        priority=Priority.MEDIUM,
        estimated_months=RETIREMENT_HORIZON_MONTHS,
        target_amount=recommended * RETIREMENT_HORIZON_MONTHS,
        monthly_savings_required=recommended - current,
    )


def _diversification(profile: UserFinancialProfile) -> PlanRecommendation:
    return PlanRecommendation(
        type=PlanRecommendationType.INVESTMENT_DIVERSIFICATION,
        title="Diversify your investments",
        description="Spread savings across different investment types.",
        priority=Priority.MEDIUM,
        estimated_months=12,
        target_amount=profile.current_savings * Decimal("0.8"),
        monthly_savings_required=Decimal(0),
    )


def _budget_optimization(profile: UserFinancialProfile) -> PlanRecommendation:
    # Assumes 10% of expenses can be trimmed
    potential = profile.monthly_expenses * Decimal("0.1")
    return PlanRecommendation(
        type=PlanRecommendationType.BUDGET_OPTIMIZATION,
        title="Optimize your budget",
        description="Review recurring costs to free up money each month.",
        priority=Priority.LOW,
        estimated_months=3,
        target_amount=potential * 12,
        monthly_savings_required=potential,
    )


def generate_plan_recommendations(profile: UserFinancialProfile) -> list[PlanRecommendation]:
    """Recommendations for a financial profile, highest priority first."""
    recommendations = []

    if profile.emergency_fund_months < EMERGENCY_FUND_TARGET_MONTHS:
        recommendations.append(_emergency_fund(profile))
    if profile.total_debt > 0:
        recommendations.append(_debt_payoff(profile))
    if profile.retirement_savings_rate < RETIREMENT_TARGET_RATE:
        recommendations.append(_retirement(profile))
    if profile.investment_diversification_score < Decimal("0.7"):
        recommendations.append(_diversification(profile))
    if profile.budget_efficiency_score < Decimal("0.8"):
        recommendations.append(_budget_optimization(profile))

    return sorted(recommendations, key=lambda r: r.priority, reverse=True)
