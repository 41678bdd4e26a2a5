"""Tests for plan, breakdown and category models."""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from finplan.core.models import (
    BreakdownPatch,
    CategoryMonthlyData,
    FinancialPlan,
    InterestType,
    PlanMonthlyBreakdown,
    PlanPatch,
    PlanStatus,
)


def make_breakdown(**fields) -> PlanMonthlyBreakdown:
    return PlanMonthlyBreakdown.for_month("plan-1", fields.pop("month", "2025-02"), **fields)


class TestFinancialPlanDerived:
    """Tests for FinancialPlan derived values."""

    def test_monthly_averages(self, plan: FinancialPlan) -> None:
        """12000 over 12 months with 2400 goal -> 1000 income, 200 savings, 20%."""
        assert plan.duration_in_months == 12
        assert plan.average_monthly_income == Decimal(1000)
        assert plan.average_monthly_budget == Decimal(800)
        assert plan.target_monthly_savings == Decimal(200)
        assert plan.savings_rate == Decimal(20)

    def test_expense_totals(self, plan: FinancialPlan) -> None:
        assert plan.total_fixed_expenses == Decimal(300)
        assert plan.total_variable_budget == Decimal(300)
        assert plan.available_income == Decimal(700)
        assert plan.monthly_allocations == Decimal(800)

    def test_zero_duration_averages_are_zero(self, plan_factory) -> None:
        plan = plan_factory(end_date=date(2025, 1, 1))
        assert plan.duration_in_months == 0
        assert plan.average_monthly_income == 0
        assert plan.target_monthly_savings == 0
        assert plan.savings_rate == 0

    def test_progress_percentage_bounds(self, plan: FinancialPlan) -> None:
        assert plan.progress_percentage(date(2024, 12, 1)) == 0
        assert plan.progress_percentage(date(2026, 6, 1)) == 100
        assert 0 < plan.progress_percentage(date(2025, 7, 1)) < 100

    def test_currently_active(self, plan: FinancialPlan) -> None:
        assert plan.is_currently_active(date(2025, 6, 1))
        assert not plan.is_currently_active(date(2027, 1, 1))

    def test_overlap_is_inclusive(self, plan_factory) -> None:
        a = plan_factory()
        b = plan_factory(start_date=date(2026, 1, 1), end_date=date(2026, 6, 1))
        c = plan_factory(start_date=date(2026, 1, 2), end_date=date(2026, 6, 1))
        assert a.overlaps(b)
        assert not a.overlaps(c)


class TestFinancialPlanCopyOnWrite:
    """Tests for PlanPatch and the helper mutators."""

    def test_updated_applies_only_set_fields(self, plan: FinancialPlan) -> None:
        changed = plan.updated(PlanPatch(name="Renamed", status=PlanStatus.PAUSED))
        assert changed.name == "Renamed"
        assert changed.status == PlanStatus.PAUSED
        assert changed.id == plan.id
        assert changed.total_income == plan.total_income
        assert plan.name == "Test plan"

    def test_explicit_none_is_ignored(self, plan: FinancialPlan) -> None:
        changed = plan.updated(PlanPatch(description=None))
        assert changed.description == plan.description

    def test_updated_refreshes_timestamp(self, plan: FinancialPlan) -> None:
        assert plan.updated(PlanPatch(notes="x")).updated_at >= plan.updated_at

    def test_plan_is_frozen(self, plan: FinancialPlan) -> None:
        with pytest.raises(ValidationError):
            plan.name = "changed"

    def test_fixed_expense_helpers(self, plan: FinancialPlan) -> None:
        added = plan.adding_fixed_expense("insurance", Decimal(50))
        assert added.total_fixed_expenses == Decimal(350)
        removed = added.removing_fixed_expense("rent")
        assert removed.fixed_expenses == {"insurance": Decimal(50)}

    def test_updating_category_budget(self, plan: FinancialPlan) -> None:
        changed = plan.updating_category_budget("food", Decimal(250))
        assert changed.variable_expense_budgets["food"] == Decimal(250)
        assert plan.variable_expense_budgets["food"] == Decimal(200)


class TestInterestType:
    """Tests for simple and compound interest."""

    def test_simple_interest(self) -> None:
        amount = InterestType.SIMPLE.calculate_amount(Decimal(1000), Decimal("0.05"), Decimal(2))
        assert amount == Decimal(1100)

    def test_compound_interest_annual(self) -> None:
        amount = InterestType.COMPOUND.calculate_amount(Decimal(1000), Decimal("0.05"), Decimal(2), 1)
        assert amount == Decimal("1102.5")

    def test_interest_excludes_principal(self) -> None:
        interest = InterestType.SIMPLE.calculate_interest(Decimal(1000), Decimal("0.05"), Decimal(1))
        assert interest == Decimal(50)


class TestCategoryMonthlyData:
    """Tests for per-category monthly data."""

    def test_adding_expense_keeps_average_consistent(self) -> None:
        data = CategoryMonthlyData(planned_budget=Decimal(100))
        for amount in (Decimal(10), Decimal(20), Decimal(30)):
            data = data.adding_expense(amount)
        assert data.actual_expenses == Decimal(60)
        assert data.transaction_count == 3
        assert data.average_transaction_amount == Decimal(20)
        assert data.average_transaction_amount * data.transaction_count == data.actual_expenses

    def test_variance_and_flags(self) -> None:
        data = CategoryMonthlyData(planned_budget=Decimal(100)).adding_expense(Decimal(130))
        assert data.expense_variance == Decimal(-30)
        assert data.is_over_budget
        assert data.remaining_budget == 0
        assert data.budget_utilization == Decimal(130)

    def test_utilization_without_budget(self) -> None:
        assert CategoryMonthlyData().budget_utilization == 0
        assert CategoryMonthlyData().adding_expense(Decimal(5)).budget_utilization == 100

    def test_with_actuals_zero_count(self) -> None:
        data = CategoryMonthlyData(planned_budget=Decimal(50)).with_actuals(Decimal(0), 0)
        assert data.average_transaction_amount == 0
        assert data.planned_budget == Decimal(50)


class TestBreakdownValidation:
    """Tests for month key consistency."""

    def test_for_month_derives_year_and_month(self) -> None:
        b = make_breakdown(month="2025-11")
        assert (b.year, b.month_number) == (2025, 11)

    def test_mismatched_month_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PlanMonthlyBreakdown(plan_id="p", month="2025-02", year=2025, month_number=3)

    def test_malformed_month_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PlanMonthlyBreakdown(plan_id="p", month="2025-2", year=2025, month_number=2)


class TestBreakdownActuals:
    """Tests for actual-figure mutators."""

    def test_savings_clamped_at_zero(self) -> None:
        b = make_breakdown().with_actual_income(Decimal(500)).with_actual_expenses(Decimal(900))
        assert b.actual_savings == 0

    def test_savings_recomputed_from_income(self) -> None:
        b = make_breakdown().with_actual_expenses(Decimal(300)).with_actual_income(Decimal(1000))
        assert b.actual_savings == Decimal(700)

    def test_recording_expense_is_additive(self) -> None:
        b = make_breakdown().with_actual_income(Decimal(1000))
        b = b.recording_expense("groceries", Decimal(40))
        b = b.recording_expense("groceries", Decimal(60))
        b = b.recording_expense("cinema", Decimal(25))
        assert b.expenses_by_sub_category == {"groceries": Decimal(100), "cinema": Decimal(25)}
        assert b.actual_expenses == Decimal(125)
        assert b.actual_savings == Decimal(875)

    def test_mark_as_completed_returns_copy(self) -> None:
        b = make_breakdown()
        done = b.mark_as_completed()
        assert done.is_completed
        assert not b.is_completed

    def test_patch_keeps_nested_category_models(self) -> None:
        categories = {"food": CategoryMonthlyData(planned_budget=Decimal(200))}
        b = make_breakdown().updated(BreakdownPatch(category_breakdown=categories, notes="n"))
        assert isinstance(b.category_breakdown["food"], CategoryMonthlyData)
        assert b.notes == "n"


class TestBreakdownVariance:
    """Tests for variance, percentages and health score."""

    def test_expense_variance_negative_when_over(self) -> None:
        b = make_breakdown(planned_expenses=Decimal(1000)).with_actual_expenses(Decimal(1300))
        assert b.expense_variance == Decimal(-300)

    def test_income_variance(self) -> None:
        b = make_breakdown(planned_income=Decimal(1000)).with_actual_income(Decimal(900))
        assert b.income_variance == Decimal(-100)
        assert b.income_achievement_percentage == Decimal(90)

    def test_expense_control_without_plan(self) -> None:
        assert make_breakdown().expense_control_percentage == 100
        assert make_breakdown().with_actual_expenses(Decimal(1)).expense_control_percentage == 0

    def test_health_score_weights(self) -> None:
        """Full income (30) + overspent (0) + no savings (0) = 30."""
        b = make_breakdown(
            planned_income=Decimal(1000),
            planned_expenses=Decimal(1000),
            planned_savings=Decimal(200),
        )
        b = b.with_actual_expenses(Decimal(1300)).with_actual_income(Decimal(1000))
        assert b.financial_health_score == Decimal(30)

    def test_health_score_capped(self) -> None:
        b = make_breakdown(
            planned_income=Decimal(100),
            planned_expenses=Decimal(100),
            planned_savings=Decimal(10),
        ).with_actual_income(Decimal(1000))
        assert b.financial_health_score <= 100

    def test_category_analysis(self) -> None:
        b = make_breakdown(
            category_breakdown={
                "food": CategoryMonthlyData(planned_budget=Decimal(200), actual_expenses=Decimal(260)),
                "fun": CategoryMonthlyData(planned_budget=Decimal(100), actual_expenses=Decimal(20)),
                "rent": CategoryMonthlyData(planned_budget=Decimal(300), actual_expenses=Decimal(300)),
            }
        )
        assert b.top_expense_category == "rent"
        assert b.most_over_budget_category == "food"
        assert b.best_performing_category == "fun"
        assert b.total_category_variance == Decimal(20)

    def test_no_over_budget_category(self) -> None:
        b = make_breakdown(
            category_breakdown={"fun": CategoryMonthlyData(planned_budget=Decimal(100))}
        )
        assert b.most_over_budget_category is None
        assert make_breakdown().top_expense_category is None

    def test_month_position(self) -> None:
        b = make_breakdown(month="2025-02")
        assert b.is_past_month(date(2025, 3, 1))
        assert b.is_current_month(date(2025, 2, 28))
        assert b.is_future_month(date(2025, 1, 31))


class TestDayOfMonthProjection:
    """Tests for calculate_projections."""

    def test_halfway_through_month_doubles(self) -> None:
        b = make_breakdown(month="2025-02").with_actual_income(Decimal(500)).with_actual_expenses(Decimal(400))
        p = b.calculate_projections(14)
        assert p.projected_income == Decimal(1000)
        assert p.projected_expenses == Decimal(800)
        assert p.projected_savings == Decimal(200)

    def test_projected_savings_clamped(self) -> None:
        b = make_breakdown(month="2025-02").with_actual_income(Decimal(100)).with_actual_expenses(Decimal(400))
        assert b.calculate_projections(14).projected_savings == 0

    @pytest.mark.parametrize("day", [0, 29, -1])
    def test_out_of_range_day_returns_actuals(self, day: int) -> None:
        b = make_breakdown(month="2025-02").with_actual_expenses(Decimal(400))
        p = b.calculate_projections(day)
        assert p.projected_expenses == Decimal(400)


class TestSerialization:
    """JSON round trip of breakdowns."""

    def test_category_breakdown_round_trip(self) -> None:
        data = CategoryMonthlyData(planned_budget=Decimal("200.10"))
        data = data.adding_expense(Decimal("12.35")).adding_expense(Decimal("7.65"))
        b = make_breakdown(category_breakdown={"food": data})

        restored = PlanMonthlyBreakdown.model_validate_json(b.model_dump_json())

        assert restored.category_breakdown == b.category_breakdown
        assert restored.month == b.month

    def test_plan_round_trip(self, plan: FinancialPlan) -> None:
        restored = FinancialPlan.model_validate_json(plan.model_dump_json())
        assert restored == plan
