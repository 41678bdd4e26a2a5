"""Financial health scoring.

Five sub-scores in [0, 1] are read from band tables and combined with
fixed weights into a 0-100 score. Each table is a sequence of
(upper_bound, score) pairs checked in order; a value falls into the
first band whose bound it is below, otherwise the table's default.
"""

from collections.abc import Sequence
from decimal import Decimal

from finplan.core.models import (
    FinancialHealthAnalysis,
    FinancialHealthLevel,
    FinancialHealthMetrics,
    FinancialPlan,
    HealthRecommendation,
    HealthRecommendationType,
    PlanMonthlyBreakdown,
    PlanPerformanceSummary,
    Priority,
)

Band = tuple[Decimal, Decimal]

SAVINGS_RATE_BANDS: Sequence[Band] = (
    (Decimal(10), Decimal("0.4")),
    (Decimal(15), Decimal("0.6")),
    (Decimal(20), Decimal("0.8")),
    (Decimal(30), Decimal("1.0")),
)
# Very high savings rates may mean under-spending on necessities
SAVINGS_RATE_DEFAULT = Decimal("0.9")

# Upper bounds are inclusive: exactly 30% still scores 0.4
BUDGET_VARIANCE_BANDS: Sequence[Band] = (
    (Decimal(5), Decimal("1.0")),
    (Decimal(10), Decimal("0.8")),
    (Decimal(20), Decimal("0.6")),
    (Decimal(30), Decimal("0.4")),
)
BUDGET_VARIANCE_DEFAULT = Decimal("0.2")

EMERGENCY_FUND_BANDS: Sequence[Band] = (
    (Decimal(1), Decimal("0.0")),
    (Decimal(3), Decimal("0.3")),
    (Decimal(6), Decimal("0.7")),
)
EMERGENCY_FUND_DEFAULT = Decimal("1.0")

DEBT_TO_INCOME_BANDS: Sequence[Band] = (
    (Decimal("0.1"), Decimal("1.0")),
    (Decimal("0.2"), Decimal("0.8")),
    (Decimal("0.36"), Decimal("0.6")),
    (Decimal("0.5"), Decimal("0.4")),
)
DEBT_TO_INCOME_DEFAULT = Decimal("0.2")

DIVERSIFICATION_BANDS: Sequence[Band] = (
    (Decimal(3), Decimal("0.3")),
    (Decimal(5), Decimal("0.6")),
    (Decimal(8), Decimal("0.8")),
)
DIVERSIFICATION_DEFAULT = Decimal("1.0")

# savings rate, budget variance, emergency fund, debt-to-income, diversification
WEIGHTS: tuple[Decimal, ...] = (
    Decimal("0.25"),
    Decimal("0.20"),
    Decimal("0.20"),
    Decimal("0.20"),
    Decimal("0.15"),
)

LEVEL_BANDS: Sequence[tuple[Decimal, FinancialHealthLevel]] = (
    (Decimal(40), FinancialHealthLevel.POOR),
    (Decimal(60), FinancialHealthLevel.FAIR),
    (Decimal(80), FinancialHealthLevel.GOOD),
)

# Fixed expenses above this share of monthly income are treated as debt payments
DEBT_PAYMENT_THRESHOLD = Decimal("0.1")


def score_from_bands(
    value: Decimal,
    bands: Sequence[Band],
    default: Decimal,
    upper_inclusive: bool = False,
) -> Decimal:
    """Look up the score of the first band containing value."""
    for upper, score in bands:
        if value < upper or (upper_inclusive and value == upper):
            return score
    return default


# -----------------------------------------------------------------------------
# Sub-scores
# -----------------------------------------------------------------------------


def savings_rate_score(savings_rate: Decimal) -> Decimal:
    """Score a savings rate given in percent."""
    return score_from_bands(savings_rate, SAVINGS_RATE_BANDS, SAVINGS_RATE_DEFAULT)


def budget_variance_score(variance_percent: Decimal) -> Decimal:
    """Score the absolute expense variance given in percent of planned."""
    return score_from_bands(
        abs(variance_percent),
        BUDGET_VARIANCE_BANDS,
        BUDGET_VARIANCE_DEFAULT,
        upper_inclusive=True,
    )


def expense_variance_percent(summary: PlanPerformanceSummary) -> Decimal:
    return abs(summary.expense_variance) / max(summary.total_planned_expenses, Decimal(1)) * 100


def emergency_fund_score(plan: FinancialPlan) -> Decimal:
    """Score months of average budget covered by the emergency fund goal."""
    budget = plan.average_monthly_budget
    if budget <= 0:
        return Decimal(1) if plan.emergency_fund_goal > 0 else Decimal(0)
    months = plan.emergency_fund_goal / budget
    return score_from_bands(months, EMERGENCY_FUND_BANDS, EMERGENCY_FUND_DEFAULT)


def debt_to_income_ratio(plan: FinancialPlan) -> Decimal | None:
    """Inferred debt payments over monthly income, None without income.

    Heuristic: there is no debt data, so each fixed expense larger than
    10% of monthly income is assumed to be a debt payment.
    """
    income = plan.average_monthly_income
    if income <= 0:
        return None
    threshold = income * DEBT_PAYMENT_THRESHOLD
    debt = sum((amount for amount in plan.fixed_expenses.values() if amount > threshold), Decimal(0))
    return debt / income


def debt_to_income_score(plan: FinancialPlan) -> Decimal:
    ratio = debt_to_income_ratio(plan)
    if ratio is None:
        return DEBT_TO_INCOME_DEFAULT
    return score_from_bands(ratio, DEBT_TO_INCOME_BANDS, DEBT_TO_INCOME_DEFAULT)


def diversification_score(breakdowns: list[PlanMonthlyBreakdown]) -> Decimal:
    """Score the number of categories with spending across all months."""
    totals: dict[str, Decimal] = {}
    for breakdown in breakdowns:
        for category_id, data in breakdown.category_breakdown.items():
            totals[category_id] = totals.get(category_id, Decimal(0)) + data.actual_expenses

    categories = sum(1 for total in totals.values() if total > 0)
    if categories == 0:
        return Decimal(0)
    return score_from_bands(Decimal(categories), DIVERSIFICATION_BANDS, DIVERSIFICATION_DEFAULT)


# -----------------------------------------------------------------------------
# Aggregate
# -----------------------------------------------------------------------------


def overall_score(metrics: FinancialHealthMetrics) -> Decimal:
    """Weighted sum of the sub-scores scaled to 0-100."""
    total = sum((score * weight for score, weight in zip(metrics.as_list(), WEIGHTS)), Decimal(0))
    return min(max(total * 100, Decimal(0)), Decimal(100))


def health_level(score: Decimal) -> FinancialHealthLevel:
    for upper, level in LEVEL_BANDS:
        if score < upper:
            return level
    return FinancialHealthLevel.EXCELLENT


def calculate_metrics(
    plan: FinancialPlan,
    breakdowns: list[PlanMonthlyBreakdown],
    summary: PlanPerformanceSummary,
) -> FinancialHealthMetrics:
    return FinancialHealthMetrics(
        savings_rate_score=savings_rate_score(plan.savings_rate),
        budget_variance_score=budget_variance_score(expense_variance_percent(summary)),
        emergency_fund_score=emergency_fund_score(plan),
        debt_to_income_score=debt_to_income_score(plan),
        diversification_score=diversification_score(breakdowns),
    )


def health_recommendations(metrics: FinancialHealthMetrics) -> list[HealthRecommendation]:
    """Recommendations for weak sub-scores, in metric order."""
    recommendations = []

    if metrics.savings_rate_score < Decimal("0.7"):
        recommendations.append(
            HealthRecommendation(
                type=HealthRecommendationType.INCREASE_SAVINGS_RATE,
                title="Increase your savings rate",
                description="Aim to save 15-20% of your income each month.",
                priority=Priority.HIGH,
            )
        )
    if metrics.emergency_fund_score < Decimal("0.7"):
        recommendations.append(
            HealthRecommendation(
                type=HealthRecommendationType.BUILD_EMERGENCY_FUND,
                title="Build an emergency fund",
                description="Set aside 3-6 months of expenses for emergencies.",
                priority=Priority.HIGH,
            )
        )
    if metrics.budget_variance_score < Decimal("0.6"):
        recommendations.append(
            HealthRecommendation(
                type=HealthRecommendationType.IMPROVE_BUDGET_ACCURACY,
                title="Improve budget accuracy",
                description="Actual spending differs widely from plan; revisit category budgets.",
                priority=Priority.MEDIUM,
            )
        )
    if metrics.debt_to_income_score < Decimal("0.6"):
        recommendations.append(
            HealthRecommendation(
                type=HealthRecommendationType.REDUCE_DEBT,
                title="Reduce debt payments",
                description="Large fixed payments take a high share of income.",
                priority=Priority.MEDIUM,
            )
        )
    if metrics.diversification_score < Decimal("0.6"):
        recommendations.append(
            HealthRecommendation(
                type=HealthRecommendationType.DIVERSIFY_SPENDING,
                title="Track spending across categories",
                description="Most spending falls into very few categories.",
                priority=Priority.LOW,
            )
        )

    return recommendations


def analyze(
    plan: FinancialPlan,
    breakdowns: list[PlanMonthlyBreakdown],
    summary: PlanPerformanceSummary,
) -> FinancialHealthAnalysis:
    """Score a plan's financial health.

    Args:
        plan: Plan to score.
        breakdowns: All breakdowns of the plan.
        summary: Performance summary over completed months.

    Returns:
        FinancialHealthAnalysis with score, level, metrics and recommendations.
    """
    metrics = calculate_metrics(plan, breakdowns, summary)
    score = overall_score(metrics)
    return FinancialHealthAnalysis(
        plan_id=plan.id,
        overall_score=score,
        metrics=metrics,
        health_level=health_level(score),
        recommendations=health_recommendations(metrics),
    )
