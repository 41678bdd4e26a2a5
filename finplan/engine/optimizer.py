"""Budget optimization suggestions.

Looks at how each category's actual spending compared to its budget and
proposes increases, decreases and a higher savings rate.
"""

from datetime import date
from decimal import Decimal

from finplan.core.models import (
    BudgetOptimization,
    BudgetOptimizationSuggestion,
    FinancialPlan,
    OptimizationType,
    PlanMonthlyBreakdown,
    Priority,
)
from finplan.engine.breakdowns import category_performance, completed
from finplan.engine.calculator import required_payment
from finplan.engine.periods import months_between

OVER_BUDGET_THRESHOLD = Decimal("0.20")
UNDER_BUDGET_THRESHOLD = Decimal("0.15")
BUDGET_INCREASE_FACTOR = Decimal("1.10")
REDIRECT_SHARE = Decimal("0.5")
SAVINGS_RATE_GAP = Decimal(5)  # percentage points


def recommended_savings_rate(plan: FinancialPlan, today: date) -> Decimal:
    """Savings rate (percent of income) that reaches the goal by the end date.

    Solves the future value of an annuity for the monthly contribution over
    the plan's remaining whole months (at least one).
    """
    income = plan.average_monthly_income
    if income <= 0:
        return Decimal(0)

    remaining = max(months_between(max(today, plan.start_date), plan.end_date), 1)
    monthly = required_payment(plan.savings_goal, plan.annual_interest_rate, remaining)
    return monthly / income * 100


def budget_efficiency(breakdowns: list[PlanMonthlyBreakdown]) -> Decimal:
    """Average of budget accuracy and savings efficiency over completed months.

    Returns 0 when no month is completed.
    """
    done = completed(breakdowns)
    if not done:
        return Decimal(0)

    scores = []
    for b in done:
        accuracy = 1 - abs(b.expense_variance) / max(b.planned_expenses, Decimal(1))
        savings_efficiency = b.actual_savings / max(b.planned_savings, Decimal(1))
        scores.append((accuracy + min(savings_efficiency, Decimal(1))) / 2)
    return sum(scores, Decimal(0)) / len(scores)


def optimized_efficiency(suggestions: list[BudgetOptimizationSuggestion]) -> Decimal:
    """Heuristic efficiency after applying the suggestions.

    Not a simulation: each suggestion adds 5% (capped at 30%) and each
    high-priority one a further 2%, with a ceiling of 1.0.
    """
    high = sum(1 for s in suggestions if s.priority == Priority.HIGH)
    base = min(Decimal("0.05") * len(suggestions), Decimal("0.30"))
    return min(base + Decimal("0.02") * high, Decimal(1))


def category_suggestions(breakdowns: list[PlanMonthlyBreakdown]) -> list[BudgetOptimizationSuggestion]:
    """Increase/decrease suggestions from per-category variance of completed months.

    Open and future months carry planned budgets but no settled spending,
    so they are left out.
    """
    suggestions = []

    for category_id, perf in category_performance(completed(breakdowns)).items():
        planned = perf.total_planned
        actual = perf.total_actual
        overrun = actual - planned

        if overrun > planned * OVER_BUDGET_THRESHOLD:
            suggestions.append(
                BudgetOptimizationSuggestion(
                    category_id=category_id,
                    type=OptimizationType.INCREASE_BUDGET,
                    current_amount=planned,
                    suggested_amount=actual * BUDGET_INCREASE_FACTOR,
                    expected_savings=Decimal(0),
                    reasoning="Spending consistently exceeds the budget; set a realistic limit.",
                    priority=Priority.MEDIUM,
                )
            )
        elif overrun < -planned * UNDER_BUDGET_THRESHOLD:
            unused = abs(overrun)
            suggestions.append(
                BudgetOptimizationSuggestion(
                    category_id=category_id,
                    type=OptimizationType.DECREASE_BUDGET,
                    current_amount=planned,
                    suggested_amount=planned - unused * REDIRECT_SHARE,
                    expected_savings=unused * REDIRECT_SHARE,
                    reasoning="Budget is consistently underused; redirect half of the surplus to savings.",
                    priority=Priority.LOW,
                )
            )

    return suggestions


def optimize(
    plan: FinancialPlan,
    breakdowns: list[PlanMonthlyBreakdown],
    today: date,
    currency: str | None = None,
) -> BudgetOptimization:
    """Build budget optimization suggestions for a plan.

    Args:
        plan: Plan to optimize.
        breakdowns: All breakdowns of the plan; only completed ones feed
            the category suggestions.
        today: Reference date for the remaining duration.
        currency: Output currency; defaults to the plan's currency.

    Returns:
        BudgetOptimization with suggestions sorted high to low priority.
    """
    suggestions = category_suggestions(breakdowns)

    current_rate = plan.savings_rate
    recommended_rate = recommended_savings_rate(plan, today)
    if recommended_rate > current_rate + SAVINGS_RATE_GAP:
        income = plan.average_monthly_income
        suggestions.append(
            BudgetOptimizationSuggestion(
                category_id="savings",
                type=OptimizationType.INCREASE_SAVINGS,
                current_amount=plan.target_monthly_savings,
                suggested_amount=income * recommended_rate / 100,
                expected_savings=(recommended_rate - current_rate) / 100 * income,
                reasoning=(
                    f"Saving {recommended_rate:.1f}% of income instead of {current_rate:.1f}% "
                    "is needed to reach the savings goal on time."
                ),
                priority=Priority.HIGH,
            )
        )

    # sorted() is stable, so ties keep discovery order
    suggestions = sorted(suggestions, key=lambda s: s.priority, reverse=True)

    return BudgetOptimization(
        plan_id=plan.id,
        current_budget_efficiency=budget_efficiency(breakdowns),
        optimized_budget_efficiency=optimized_efficiency(suggestions),
        suggestions=suggestions,
        potential_monthly_savings=sum((s.expected_savings for s in suggestions), Decimal(0)),
        currency=currency or plan.currency,
    )
