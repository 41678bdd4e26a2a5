"""Tests for financial health scoring."""

from decimal import Decimal

import pytest

from finplan.core.models import (
    CategoryMonthlyData,
    FinancialHealthLevel,
    FinancialHealthMetrics,
    FinancialPlan,
    HealthRecommendationType,
    PlanMonthlyBreakdown,
    PlanPerformanceSummary,
)
from finplan.engine import health
from finplan.engine.breakdowns import summarize_performance


def summary_with(planned: str, actual: str) -> PlanPerformanceSummary:
    return PlanPerformanceSummary(
        plan_id="plan-1",
        plan_name="Test",
        total_planned_expenses=Decimal(planned),
        total_actual_expenses=Decimal(actual),
        expense_variance=Decimal(planned) - Decimal(actual),
    )


def spending_in(*categories: str) -> list[PlanMonthlyBreakdown]:
    data = CategoryMonthlyData().adding_expense(Decimal(10))
    return [PlanMonthlyBreakdown.for_month("plan-1", "2025-01", category_breakdown={c: data for c in categories})]


class TestBands:
    """Tests for the band lookups at their boundaries."""

    @pytest.mark.parametrize(
        ("rate", "expected"),
        [("0", "0.4"), ("9.99", "0.4"), ("10", "0.6"), ("15", "0.8"), ("20", "1.0"), ("29", "1.0"), ("30", "0.9")],
    )
    def test_savings_rate(self, rate: str, expected: str) -> None:
        assert health.savings_rate_score(Decimal(rate)) == Decimal(expected)

    @pytest.mark.parametrize(
        ("variance", "expected"),
        [("0", "1.0"), ("5", "1.0"), ("7", "0.8"), ("15", "0.6"), ("30", "0.4"), ("30.1", "0.2"), ("-12", "0.6")],
    )
    def test_budget_variance(self, variance: str, expected: str) -> None:
        assert health.budget_variance_score(Decimal(variance)) == Decimal(expected)

    def test_budget_variance_from_summary(self) -> None:
        """1000 planned, 1300 spent -> 30% variance -> 0.4."""
        percent = health.expense_variance_percent(summary_with("1000", "1300"))
        assert percent == Decimal(30)
        assert health.budget_variance_score(percent) == Decimal("0.4")

    @pytest.mark.parametrize(("goal", "expected"), [("0", "0.0"), ("800", "0.3"), ("2400", "0.7"), ("4800", "1.0")])
    def test_emergency_fund(self, plan_factory, goal: str, expected: str) -> None:
        plan = plan_factory(emergency_fund_goal=Decimal(goal))
        assert health.emergency_fund_score(plan) == Decimal(expected)

    @pytest.mark.parametrize(
        ("categories", "expected"),
        [(0, "0"), (1, "0.3"), (3, "0.6"), (5, "0.8"), (8, "1.0")],
    )
    def test_diversification(self, categories: int, expected: str) -> None:
        breakdowns = spending_in(*(f"c{i}" for i in range(categories)))
        assert health.diversification_score(breakdowns) == Decimal(expected)

    def test_diversification_ignores_categories_without_spend(self) -> None:
        breakdowns = [
            PlanMonthlyBreakdown.for_month(
                "plan-1",
                "2025-01",
                category_breakdown={"food": CategoryMonthlyData(planned_budget=Decimal(100))},
            )
        ]
        assert health.diversification_score(breakdowns) == 0

    @pytest.mark.parametrize(
        ("score", "level"),
        [
            ("0", FinancialHealthLevel.POOR),
            ("39.9", FinancialHealthLevel.POOR),
            ("40", FinancialHealthLevel.FAIR),
            ("60", FinancialHealthLevel.GOOD),
            ("80", FinancialHealthLevel.EXCELLENT),
            ("100", FinancialHealthLevel.EXCELLENT),
        ],
    )
    def test_levels(self, score: str, level: FinancialHealthLevel) -> None:
        assert health.health_level(Decimal(score)) == level


class TestDebtToIncome:
    """Tests for the inferred debt-to-income ratio."""

    def test_large_fixed_expenses_count_as_debt(self, plan: FinancialPlan) -> None:
        # rent 300 of 1000 income
        assert health.debt_to_income_ratio(plan) == Decimal("0.3")
        assert health.debt_to_income_score(plan) == Decimal("0.6")

    def test_small_fixed_expenses_ignored(self, plan_factory) -> None:
        plan = plan_factory(fixed_expenses={"phone": Decimal(50)})
        assert health.debt_to_income_ratio(plan) == 0
        assert health.debt_to_income_score(plan) == Decimal("1.0")

    def test_no_income(self, plan_factory) -> None:
        plan = plan_factory(total_income=Decimal(0))
        assert health.debt_to_income_ratio(plan) is None
        assert health.debt_to_income_score(plan) == Decimal("0.2")


class TestAnalyze:
    """Tests for the weighted score and recommendations."""

    def test_weights_sum_to_one(self) -> None:
        assert sum(health.WEIGHTS) == 1

    def test_savings_rate_example(self, plan: FinancialPlan) -> None:
        """12000 income over 12 months with a 2400 goal is a 20% rate."""
        assert plan.savings_rate == Decimal(20)
        assert health.savings_rate_score(plan.savings_rate) == Decimal("1.0")

    def test_overall_score_for_plan(self, plan: FinancialPlan) -> None:
        analysis = health.analyze(plan, [], summarize_performance(plan, []))

        assert analysis.metrics.savings_rate_score == Decimal("1.0")
        assert analysis.metrics.budget_variance_score == Decimal("1.0")
        assert analysis.metrics.emergency_fund_score == Decimal("1.0")
        assert analysis.metrics.debt_to_income_score == Decimal("0.6")
        assert analysis.metrics.diversification_score == 0
        assert analysis.overall_score == Decimal(77)
        assert analysis.health_level == FinancialHealthLevel.GOOD
        assert [r.type for r in analysis.recommendations] == [HealthRecommendationType.DIVERSIFY_SPENDING]

    def test_perfect_metrics(self) -> None:
        one = Decimal(1)
        metrics = FinancialHealthMetrics(
            savings_rate_score=one,
            budget_variance_score=one,
            emergency_fund_score=one,
            debt_to_income_score=one,
            diversification_score=one,
        )
        assert health.overall_score(metrics) == 100
        assert health.health_recommendations(metrics) == []

    def test_all_weak_metrics_recommend_everything(self) -> None:
        zero = Decimal(0)
        metrics = FinancialHealthMetrics(
            savings_rate_score=zero,
            budget_variance_score=zero,
            emergency_fund_score=zero,
            debt_to_income_score=zero,
            diversification_score=zero,
        )
        assert health.overall_score(metrics) == 0
        assert [r.type for r in health.health_recommendations(metrics)] == [
            HealthRecommendationType.INCREASE_SAVINGS_RATE,
            HealthRecommendationType.BUILD_EMERGENCY_FUND,
            HealthRecommendationType.IMPROVE_BUDGET_ACCURACY,
            HealthRecommendationType.REDUCE_DEBT,
            HealthRecommendationType.DIVERSIFY_SPENDING,
        ]
