"""Monthly breakdown generation and aggregation.

Expands a FinancialPlan into per-month breakdowns, folds expense records
into them, and aggregates breakdowns into performance summaries.
"""

from collections import defaultdict
from decimal import Decimal
from typing import NamedTuple

from finplan.core.models import (
    CategoryExpenseTotal,
    CategoryMonthlyData,
    CategoryPerformance,
    ExpenseRecord,
    ExpenseStatus,
    FinancialPlan,
    MonthlyTrendPoint,
    PlanMonthlyBreakdown,
    PlanPerformanceSummary,
)
from finplan.engine.periods import format_month, iterate_months


class ExpenseAggregate(NamedTuple):
    """Confirmed expenses of one month grouped by category and subcategory."""

    by_category: dict[str, CategoryExpenseTotal]
    by_sub_category: dict[str, Decimal]
    total: Decimal


# -----------------------------------------------------------------------------
# Generation
# -----------------------------------------------------------------------------


def seed_breakdown(plan: FinancialPlan, month: str) -> PlanMonthlyBreakdown:
    """Build one breakdown for a month, seeded from plan averages with zero actuals."""
    return PlanMonthlyBreakdown.for_month(
        plan.id,
        month,
        planned_income=plan.average_monthly_income,
        planned_expenses=plan.average_monthly_budget,
        planned_savings=plan.target_monthly_savings,
        fixed_expenses=plan.total_fixed_expenses,
        variable_expenses=plan.total_variable_budget,
        category_breakdown={
            category_id: CategoryMonthlyData(planned_budget=budget)
            for category_id, budget in plan.variable_expense_budgets.items()
        },
    )


def generate_breakdowns(plan: FinancialPlan) -> list[PlanMonthlyBreakdown]:
    """Create one breakdown per calendar month covered by the plan.

    Months run from the month of start_date to the month of end_date
    inclusive, so partial months at either end are included.

    Args:
        plan: Plan to expand.

    Returns:
        Breakdowns in chronological order.
    """
    return [
        seed_breakdown(plan, format_month(month_start))
        for month_start in iterate_months(plan.start_date, plan.end_date)
    ]


def reseed_breakdowns(
    plan: FinancialPlan,
    existing: list[PlanMonthlyBreakdown],
) -> list[PlanMonthlyBreakdown]:
    """Regenerate breakdowns after a plan change, keeping recorded actuals.

    Months that fall outside the new date range are dropped. Kept months
    get fresh planned figures; actual income, expenses, savings, category
    actuals, subcategory totals and the completion flag are preserved.
    A category no longer in the plan keeps its actuals with a zero budget.

    Args:
        plan: Updated plan.
        existing: Breakdowns currently stored for the plan.

    Returns:
        Full, chronologically ordered breakdown list for the updated plan.
    """
    by_month = {b.month: b for b in existing}
    result = []

    for fresh in generate_breakdowns(plan):
        old = by_month.get(fresh.month)
        if old is None:
            result.append(fresh)
            continue

        # Categories dropped from the plan keep their actuals with no budget
        categories = {
            category_id: current.model_copy(update={"planned_budget": Decimal(0)})
            for category_id, current in old.category_breakdown.items()
        }
        for category_id, seeded in fresh.category_breakdown.items():
            current = categories.get(category_id)
            if current is None:
                categories[category_id] = seeded
            else:
                categories[category_id] = current.model_copy(
                    update={"planned_budget": seeded.planned_budget}
                )

        result.append(
            old.model_copy(
                update={
                    "planned_income": fresh.planned_income,
                    "planned_expenses": fresh.planned_expenses,
                    "planned_savings": fresh.planned_savings,
                    "fixed_expenses": fresh.fixed_expenses,
                    "variable_expenses": fresh.variable_expenses,
                    "category_breakdown": categories,
                    "updated_at": fresh.updated_at,
                }
            )
        )

    return result


# -----------------------------------------------------------------------------
# Expense reconciliation
# -----------------------------------------------------------------------------


def aggregate_expenses(expenses: list[ExpenseRecord]) -> ExpenseAggregate:
    """Group confirmed expenses by category and subcategory.

    Expenses with any other status are ignored.
    """
    by_category: dict[str, CategoryExpenseTotal] = {}
    by_sub_category: dict[str, Decimal] = defaultdict(Decimal)
    total = Decimal(0)

    for expense in expenses:
        if expense.status != ExpenseStatus.CONFIRMED:
            continue

        current = by_category.get(expense.category_id, CategoryExpenseTotal())
        by_category[expense.category_id] = CategoryExpenseTotal(
            total_amount=current.total_amount + expense.amount,
            transaction_count=current.transaction_count + 1,
        )
        if expense.sub_category_id:
            by_sub_category[expense.sub_category_id] += expense.amount
        total += expense.amount

    return ExpenseAggregate(by_category, dict(by_sub_category), total)


def apply_expenses(
    breakdown: PlanMonthlyBreakdown,
    aggregate: ExpenseAggregate,
) -> PlanMonthlyBreakdown:
    """Replace a breakdown's actual expense figures with aggregated totals.

    Planned budgets are kept. Categories missing from the aggregate get
    zero actuals; categories without a planned budget are added with a
    zero budget. Applying the same aggregate twice yields the same result.
    """
    categories: dict[str, CategoryMonthlyData] = {}

    for category_id, data in breakdown.category_breakdown.items():
        totals = aggregate.by_category.get(category_id, CategoryExpenseTotal())
        categories[category_id] = data.with_actuals(totals.total_amount, totals.transaction_count)

    for category_id, totals in aggregate.by_category.items():
        if category_id not in categories:
            categories[category_id] = CategoryMonthlyData().with_actuals(
                totals.total_amount, totals.transaction_count
            )

    updated = breakdown.with_actual_expenses(aggregate.total)
    return updated.model_copy(
        update={
            "category_breakdown": categories,
            "expenses_by_sub_category": dict(aggregate.by_sub_category),
        }
    )


# -----------------------------------------------------------------------------
# Aggregation
# -----------------------------------------------------------------------------


def completed(breakdowns: list[PlanMonthlyBreakdown]) -> list[PlanMonthlyBreakdown]:
    return [b for b in breakdowns if b.is_completed]


def sorted_chronologically(breakdowns: list[PlanMonthlyBreakdown]) -> list[PlanMonthlyBreakdown]:
    return sorted(breakdowns, key=lambda b: (b.year, b.month_number))


def average_health_score(breakdowns: list[PlanMonthlyBreakdown]) -> Decimal:
    if not breakdowns:
        return Decimal(0)
    return sum((b.financial_health_score for b in breakdowns), Decimal(0)) / len(breakdowns)


def best_performing_month(breakdowns: list[PlanMonthlyBreakdown]) -> PlanMonthlyBreakdown | None:
    if not breakdowns:
        return None
    return max(breakdowns, key=lambda b: b.financial_health_score)


def worst_performing_month(breakdowns: list[PlanMonthlyBreakdown]) -> PlanMonthlyBreakdown | None:
    if not breakdowns:
        return None
    return min(breakdowns, key=lambda b: b.financial_health_score)


def monthly_trends(breakdowns: list[PlanMonthlyBreakdown]) -> list[MonthlyTrendPoint]:
    """Planned vs actual series for charts, in chronological order."""
    return [
        MonthlyTrendPoint(
            month=b.month,
            planned_income=b.planned_income,
            actual_income=b.actual_income,
            planned_expenses=b.planned_expenses,
            actual_expenses=b.actual_expenses,
            planned_savings=b.planned_savings,
            actual_savings=b.actual_savings,
            health_score=b.financial_health_score,
        )
        for b in sorted_chronologically(breakdowns)
    ]


def summarize_performance(
    plan: FinancialPlan,
    breakdowns: list[PlanMonthlyBreakdown],
    currency: str | None = None,
) -> PlanPerformanceSummary:
    """Aggregate totals and variances over a plan's completed months.

    Monthly trends cover every breakdown, completed or not.

    Args:
        plan: Plan being summarised.
        breakdowns: All breakdowns of the plan.
        currency: Output currency; defaults to the plan's currency.

    Returns:
        PlanPerformanceSummary with totals, variances and trends.
    """
    done = completed(breakdowns)

    planned_income = sum((b.planned_income for b in done), Decimal(0))
    actual_income = sum((b.actual_income for b in done), Decimal(0))
    planned_expenses = sum((b.planned_expenses for b in done), Decimal(0))
    actual_expenses = sum((b.actual_expenses for b in done), Decimal(0))
    planned_savings = sum((b.planned_savings for b in done), Decimal(0))
    actual_savings = sum((b.actual_savings for b in done), Decimal(0))

    return PlanPerformanceSummary(
        plan_id=plan.id,
        plan_name=plan.name,
        total_planned_income=planned_income,
        total_actual_income=actual_income,
        total_planned_expenses=planned_expenses,
        total_actual_expenses=actual_expenses,
        total_planned_savings=planned_savings,
        total_actual_savings=actual_savings,
        average_financial_health_score=average_health_score(done),
        income_variance=actual_income - planned_income,
        expense_variance=planned_expenses - actual_expenses,
        savings_variance=actual_savings - planned_savings,
        completed_months=len(done),
        monthly_trends=monthly_trends(breakdowns),
        currency=currency or plan.currency,
    )


def category_performance(
    breakdowns: list[PlanMonthlyBreakdown],
    start_month: str | None = None,
    end_month: str | None = None,
) -> dict[str, CategoryPerformance]:
    """Aggregate planned vs actual spend per category.

    Args:
        breakdowns: Breakdowns to aggregate.
        start_month: Optional inclusive lower month key.
        end_month: Optional inclusive upper month key.

    Returns:
        Mapping of category id to its aggregate performance.
    """
    totals: dict[str, CategoryPerformance] = {}

    for breakdown in breakdowns:
        # Month keys are zero-padded, so string order is chronological
        if start_month and breakdown.month < start_month:
            continue
        if end_month and breakdown.month > end_month:
            continue

        for category_id, data in breakdown.category_breakdown.items():
            current = totals.get(category_id, CategoryPerformance(category_id=category_id))
            totals[category_id] = CategoryPerformance(
                category_id=category_id,
                total_planned=current.total_planned + data.planned_budget,
                total_actual=current.total_actual + data.actual_expenses,
                total_variance=current.total_variance + data.expense_variance,
                transaction_count=current.transaction_count + data.transaction_count,
            )

    return totals


def year_over_year_income_growth(breakdowns: list[PlanMonthlyBreakdown]) -> dict[int, Decimal]:
    """Percentage change in actual income versus the previous year.

    Years whose previous year had no income are omitted.
    """
    yearly: dict[int, Decimal] = defaultdict(Decimal)
    for breakdown in breakdowns:
        yearly[breakdown.year] += breakdown.actual_income

    growth: dict[int, Decimal] = {}
    years = sorted(yearly)
    for previous, current in zip(years, years[1:]):
        if yearly[previous] > 0:
            growth[current] = (yearly[current] - yearly[previous]) / yearly[previous] * 100
    return growth
