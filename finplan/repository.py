"""Plan repository: the orchestration layer of FinPlan.

PlanRepository validates plans, guards against overlapping active plans,
keeps monthly breakdowns in step with plans and expense data, and runs the
projection, optimization and health engines on demand. Derived data is
published to observers as immutable RepositoryState snapshots.
"""

from collections.abc import Callable
from datetime import date, datetime
from decimal import Decimal

from finplan.core.config import EngineConfig
from finplan.core.exceptions import (
    BreakdownNotFoundError,
    BudgetExceedsIncomeError,
    DuplicatePlanError,
    InvalidDateRangeError,
    InvalidIncomeError,
    InvalidInterestRateError,
    InvalidSavingsGoalError,
    MissingPlanNameError,
    OverlappingActivePlansError,
    PlanNotFoundError,
)
from finplan.core.models import (
    BudgetOptimization,
    CategoryMonthlyData,
    ExpenseStatus,
    FinancialHealthAnalysis,
    FinancialPlan,
    FinancialProjection,
    PlanCustomization,
    PlanMonthlyBreakdown,
    PlanPatch,
    PlanPerformanceSummary,
    PlanRecommendation,
    PlanStatus,
    PlanTemplate,
    ProjectionScenario,
    RepositoryState,
    UserFinancialProfile,
)
from finplan.engine import health, optimizer, projection, recommendations
from finplan.engine.breakdowns import (
    aggregate_expenses,
    apply_expenses,
    generate_breakdowns,
    reseed_breakdowns,
    summarize_performance,
)
from finplan.engine.periods import format_month, month_bounds, parse_month
from finplan.logging_config import get_logger
from finplan.storage.base import ExpenseSource, PlanStore

logger = get_logger(__name__)

StateObserver = Callable[[RepositoryState], None]


class PlanRepository:
    """Business operations over plans and their monthly breakdowns.

    Primary operations raise typed PlanRepositoryError subclasses before
    any write. Recomputing derived state after a write is best-effort:
    failures are logged and never reach the caller.

    Args:
        store: Plan and breakdown persistence.
        expense_source: Source of confirmed expenses.
        config: Engine settings (currency, tolerance, age).
        today: Clock returning the current date.
    """

    def __init__(
        self,
        store: PlanStore,
        expense_source: ExpenseSource,
        config: EngineConfig | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._store = store
        self._expenses = expense_source
        self._config = config or EngineConfig()
        self._today = today
        self._state = RepositoryState()
        self._observers: list[StateObserver] = []

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def state(self) -> RepositoryState:
        """Latest derived-state snapshot."""
        return self._state

    def subscribe(self, observer: StateObserver) -> Callable[[], None]:
        """Register an observer for state snapshots.

        Returns:
            Callable that removes the observer.
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate_plan(self, plan: FinancialPlan) -> None:
        """Check plan business rules.

        Raises:
            MissingPlanNameError: Name is empty or whitespace.
            InvalidDateRangeError: start_date is not before end_date.
            InvalidIncomeError: total_income is not positive.
            InvalidSavingsGoalError: savings_goal is negative.
            InvalidInterestRateError: annual_interest_rate is outside [0, 1].
            BudgetExceedsIncomeError: Monthly allocations exceed income plus tolerance.
        """
        if not plan.name.strip():
            raise MissingPlanNameError()
        if plan.start_date >= plan.end_date:
            raise InvalidDateRangeError()
        if plan.total_income <= 0:
            raise InvalidIncomeError()
        if plan.savings_goal < 0:
            raise InvalidSavingsGoalError()
        if not 0 <= plan.annual_interest_rate <= 1:
            raise InvalidInterestRateError()

        income = plan.average_monthly_income
        limit = income * (1 + self._config.budget_tolerance)
        if plan.monthly_allocations > limit:
            raise BudgetExceedsIncomeError(
                f"Monthly allocations {plan.monthly_allocations:.2f} exceed average monthly "
                f"income {income:.2f} by more than {self._config.budget_tolerance:.0%}"
            )

    def _check_overlap(self, plan: FinancialPlan) -> None:
        for other in self._store.list_plans(include_inactive=False):
            if other.id != plan.id and plan.overlaps(other):
                raise OverlappingActivePlansError(
                    f"Plan '{plan.name}' overlaps active plan '{other.name}' "
                    f"({other.start_date} - {other.end_date})"
                )

    # -------------------------------------------------------------------------
    # Plan CRUD
    # -------------------------------------------------------------------------

    def get_plan(self, plan_id: str) -> FinancialPlan:
        """Get a plan by ID.

        Raises:
            PlanNotFoundError: If no plan has this ID.
        """
        plan = self._store.get_plan(plan_id)
        if plan is None:
            raise PlanNotFoundError(f"Financial plan not found: {plan_id}")
        return plan

    def list_plans(self, include_inactive: bool = True) -> list[FinancialPlan]:
        return self._store.list_plans(include_inactive=include_inactive)

    def active_plan(self) -> FinancialPlan | None:
        """The active plan covering today, else the first active plan."""
        active = self._store.list_plans(include_inactive=False)
        today = self._today()
        for plan in active:
            if plan.is_currently_active(today):
                return plan
        return active[0] if active else None

    def create_plan(self, plan: FinancialPlan) -> FinancialPlan:
        """Validate and store a new plan with its monthly breakdowns.

        Args:
            plan: Plan to create.

        Returns:
            The stored plan (currency taken from configuration).

        Raises:
            PlanValidationError: If the plan breaks a business rule.
            DuplicatePlanError: If a plan with the same ID is already stored.
            OverlappingActivePlansError: If the plan is active and overlaps
                another active plan. The other plan is left untouched.
        """
        self.validate_plan(plan)
        if self._store.get_plan(plan.id) is not None:
            raise DuplicatePlanError(f"Financial plan already exists: {plan.id}")
        if plan.is_active:
            self._check_overlap(plan)

        plan = plan.model_copy(update={"currency": self._config.currency})
        breakdowns = generate_breakdowns(plan)

        self._store.save_plan(plan)
        self._store.replace_breakdowns(plan.id, breakdowns)
        logger.info(
            "Created plan %s (%s) with %d monthly breakdowns",
            plan.id,
            plan.name,
            len(breakdowns),
            extra={"plan_id": plan.id},
        )

        self._refresh_quietly()
        return plan

    def update_plan(self, plan: FinancialPlan) -> FinancialPlan:
        """Validate and replace an existing plan.

        Breakdowns are re-seeded for the new date range; recorded actuals
        of months that remain covered are kept.

        Raises:
            PlanNotFoundError: If the plan does not exist.
            PlanValidationError: If the plan breaks a business rule.
            OverlappingActivePlansError: If it overlaps another active plan.
        """
        self.get_plan(plan.id)
        self.validate_plan(plan)
        if plan.is_active:
            self._check_overlap(plan)

        plan = plan.model_copy(update={"updated_at": datetime.now()})
        breakdowns = reseed_breakdowns(plan, self._store.list_breakdowns(plan.id))

        self._store.save_plan(plan)
        self._store.replace_breakdowns(plan.id, breakdowns)
        logger.info("Updated plan %s (%s)", plan.id, plan.name, extra={"plan_id": plan.id})

        self._refresh_quietly()
        return plan

    def patch_plan(self, plan_id: str, patch: PlanPatch) -> FinancialPlan:
        """Apply a typed partial update to a stored plan."""
        return self.update_plan(self.get_plan(plan_id).updated(patch))

    def delete_plan(self, plan_id: str) -> None:
        """Delete a plan and all of its breakdowns.

        Raises:
            PlanNotFoundError: If the plan does not exist.
        """
        self.get_plan(plan_id)
        self._store.delete_plan(plan_id)
        logger.info("Deleted plan %s", plan_id, extra={"plan_id": plan_id})
        self._refresh_quietly()

    def activate_plan(self, plan_id: str, deactivate_others: bool = True) -> FinancialPlan:
        """Make a plan the active one.

        Args:
            plan_id: Plan to activate.
            deactivate_others: Deactivate every other active plan. When
                False, activation fails if another active plan overlaps.

        Raises:
            PlanNotFoundError: If the plan does not exist.
            OverlappingActivePlansError: If deactivate_others is False and
                an active plan overlaps.
        """
        plan = self.get_plan(plan_id)
        activated = plan.updated(PlanPatch(is_active=True, status=PlanStatus.ACTIVE))

        if deactivate_others:
            for other in self._store.list_plans(include_inactive=False):
                if other.id != plan_id:
                    self._store.save_plan(_deactivated(other))
                    logger.info(
                        "Deactivated plan %s while activating %s", other.id, plan_id, extra={"plan_id": other.id}
                    )
        else:
            self._check_overlap(activated)

        self._store.save_plan(activated)
        logger.info("Activated plan %s", plan_id, extra={"plan_id": plan_id})
        self._refresh_quietly()
        return activated

    def deactivate_plan(self, plan_id: str) -> FinancialPlan:
        """Mark a plan inactive; an active status becomes paused."""
        plan = _deactivated(self.get_plan(plan_id))
        self._store.save_plan(plan)
        logger.info("Deactivated plan %s", plan_id, extra={"plan_id": plan_id})
        self._refresh_quietly()
        return plan

    # -------------------------------------------------------------------------
    # Breakdowns
    # -------------------------------------------------------------------------

    def get_breakdowns(self, plan_id: str) -> list[PlanMonthlyBreakdown]:
        """All breakdowns of a plan in chronological order."""
        self.get_plan(plan_id)
        return self._store.list_breakdowns(plan_id)

    def get_breakdown(self, plan_id: str, month: str) -> PlanMonthlyBreakdown:
        """Breakdown for a (plan, month) key.

        Raises:
            InvalidMonthError: If month is not a valid YYYY-MM key.
            PlanNotFoundError: If the plan does not exist.
            BreakdownNotFoundError: If the plan has no breakdown for month.
        """
        parse_month(month)
        self.get_plan(plan_id)
        breakdown = self._store.get_breakdown(plan_id, month)
        if breakdown is None:
            raise BreakdownNotFoundError(f"No breakdown for plan {plan_id} in {month}")
        return breakdown

    def current_month_breakdown(self, plan_id: str | None = None) -> PlanMonthlyBreakdown | None:
        """Breakdown of the current month for a plan (default: the active plan)."""
        if plan_id is None:
            plan = self.active_plan()
            if plan is None:
                return None
            plan_id = plan.id
        return self._store.get_breakdown(plan_id, format_month(self._today()))

    def update_monthly_breakdown_from_expenses(self, plan_id: str, month: str) -> PlanMonthlyBreakdown:
        """Replace a month's actual expenses with confirmed expense totals.

        Confirmed expenses dated within the month are grouped by category.
        Planned budgets are kept. Running this again with unchanged
        expense data produces the same figures.

        Args:
            plan_id: Plan ID.
            month: Month key (YYYY-MM).

        Returns:
            The updated breakdown.

        Raises:
            InvalidMonthError: If month is not a valid YYYY-MM key.
            PlanNotFoundError: If the plan does not exist.
            BreakdownNotFoundError: If the plan has no breakdown for month.
        """
        start, end = month_bounds(month)
        breakdown = self.get_breakdown(plan_id, month)

        expenses = self._expenses.query_expenses(start, end, ExpenseStatus.CONFIRMED)
        aggregate = aggregate_expenses(expenses)
        updated = apply_expenses(breakdown, aggregate)

        self._store.save_breakdowns([updated])
        logger.info(
            "Reconciled %s for plan %s: %d expenses, total %s",
            month,
            plan_id,
            len(expenses),
            aggregate.total,
            extra={"plan_id": plan_id, "month": month},
        )
        self._refresh_quietly()
        return updated

    def complete_monthly_breakdown(
        self,
        plan_id: str,
        month: str,
        actual_income: Decimal,
    ) -> PlanMonthlyBreakdown:
        """Record a month's income and mark it completed.

        Raises:
            InvalidMonthError: If month is not a valid YYYY-MM key.
            PlanNotFoundError: If the plan does not exist.
            BreakdownNotFoundError: If the plan has no breakdown for month.
        """
        breakdown = self.get_breakdown(plan_id, month)
        completed = breakdown.with_actual_income(actual_income).mark_as_completed()
        self._store.save_breakdowns([completed])
        logger.info("Completed %s for plan %s", month, plan_id, extra={"plan_id": plan_id, "month": month})
        self._refresh_quietly()
        return completed

    def record_expense(
        self,
        plan_id: str,
        month: str,
        category_id: str,
        amount: Decimal,
        sub_category_id: str | None = None,
    ) -> PlanMonthlyBreakdown:
        """Post a single expense to a month's category and totals."""
        breakdown = self.get_breakdown(plan_id, month)

        category = breakdown.category_breakdown.get(category_id, CategoryMonthlyData())
        updated = breakdown.updating_category(category_id, category.adding_expense(amount))
        if sub_category_id:
            updated = updated.recording_expense(sub_category_id, amount)
        else:
            updated = updated.with_actual_expenses(updated.actual_expenses + amount)

        self._store.save_breakdowns([updated])
        logger.debug(
            "Recorded expense %s in %s/%s",
            amount,
            month,
            category_id,
            extra={"plan_id": plan_id, "month": month, "category_id": category_id},
        )
        self._refresh_quietly()
        return updated

    # -------------------------------------------------------------------------
    # Analysis
    # -------------------------------------------------------------------------

    def calculate_plan_performance(self, plan_id: str) -> PlanPerformanceSummary:
        plan = self.get_plan(plan_id)
        return summarize_performance(plan, self._store.list_breakdowns(plan_id), self._config.currency)

    def generate_financial_projections(
        self,
        plan_id: str,
        scenario: ProjectionScenario = ProjectionScenario.REALISTIC,
    ) -> FinancialProjection:
        plan = self.get_plan(plan_id)
        return projection.project(
            plan,
            self._store.list_breakdowns(plan_id),
            scenario,
            today=self._today(),
            current_age=self._config.current_age,
            currency=self._config.currency,
        )

    def optimize_budget(self, plan_id: str) -> BudgetOptimization:
        plan = self.get_plan(plan_id)
        return optimizer.optimize(
            plan,
            self._store.list_breakdowns(plan_id),
            today=self._today(),
            currency=self._config.currency,
        )

    def calculate_financial_health(self, plan_id: str) -> FinancialHealthAnalysis:
        plan = self.get_plan(plan_id)
        breakdowns = self._store.list_breakdowns(plan_id)
        summary = summarize_performance(plan, breakdowns, self._config.currency)
        return health.analyze(plan, breakdowns, summary)

    # -------------------------------------------------------------------------
    # Templates and recommendations
    # -------------------------------------------------------------------------

    def generate_plan_recommendations(
        self,
        profile: UserFinancialProfile | None = None,
    ) -> list[PlanRecommendation]:
        """Recommendations for a profile (default: derived from the active plan)."""
        if profile is None:
            profile = recommendations.profile_from_plan(self.active_plan())
        return recommendations.generate_plan_recommendations(profile)

    def create_plan_from_template(
        self,
        template: PlanTemplate,
        customization: PlanCustomization,
    ) -> FinancialPlan:
        """Build an unsaved plan from a template; pass it to create_plan to store it."""
        return recommendations.create_plan_from_template(
            template,
            customization,
            today=self._today(),
            currency=self._config.currency,
        )

    # -------------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------------

    def refresh_all_data(self) -> RepositoryState:
        """Rebuild the derived-state snapshot and notify observers.

        Each derived part is computed independently; a part that fails is
        logged and left empty in the new snapshot.
        """
        plans = self._store.list_plans()
        active = [p for p in plans if p.is_active]
        primary = self.active_plan()

        current = None
        summary = None
        score = Decimal(0)
        if primary is not None:
            breakdowns = self._store.list_breakdowns(primary.id)
            current = self._store.get_breakdown(primary.id, format_month(self._today()))
            try:
                summary = summarize_performance(primary, breakdowns, self._config.currency)
                score = health.analyze(primary, breakdowns, summary).overall_score
            except Exception:
                logger.exception("Failed to compute performance for plan %s", primary.id, extra={"plan_id": primary.id})

        try:
            recs = self.generate_plan_recommendations()
        except Exception:
            logger.exception("Failed to generate plan recommendations")
            recs = []

        self._state = RepositoryState(
            plans=plans,
            active_plans=active,
            current_month_breakdown=current,
            performance_summary=summary,
            recommendations=recs,
            financial_health_score=score,
        )
        self._notify()
        return self._state

    def clear_cache(self) -> None:
        """Drop the derived-state snapshot."""
        self._state = RepositoryState()
        self._notify()

    def _refresh_quietly(self) -> None:
        try:
            self.refresh_all_data()
        except Exception:
            logger.warning("Refreshing derived plan data failed", exc_info=True)

    def _notify(self) -> None:
        for observer in list(self._observers):
            try:
                observer(self._state)
            except Exception:
                logger.exception("State observer %r failed", observer)


def _deactivated(plan: FinancialPlan) -> FinancialPlan:
    status = PlanStatus.PAUSED if plan.status == PlanStatus.ACTIVE else plan.status
    return plan.updated(PlanPatch(is_active=False, status=status))
