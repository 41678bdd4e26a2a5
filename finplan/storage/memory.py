"""In-memory store and expense source.

Used by the CLI (loaded from JSON files) and by tests.
"""

from datetime import date

from finplan.core.models import ExpenseRecord, ExpenseStatus, FinancialPlan, PlanMonthlyBreakdown


class InMemoryPlanStore:
    """Dict-backed PlanStore."""

    def __init__(self) -> None:
        self._plans: dict[str, FinancialPlan] = {}
        self._breakdowns: dict[tuple[str, str], PlanMonthlyBreakdown] = {}

    def get_plan(self, plan_id: str) -> FinancialPlan | None:
        return self._plans.get(plan_id)

    def list_plans(self, include_inactive: bool = True) -> list[FinancialPlan]:
        plans = sorted(self._plans.values(), key=lambda p: (p.start_date, p.created_at))
        if include_inactive:
            return plans
        return [p for p in plans if p.is_active]

    def save_plan(self, plan: FinancialPlan) -> FinancialPlan:
        self._plans[plan.id] = plan
        return plan

    def delete_plan(self, plan_id: str) -> None:
        self._plans.pop(plan_id, None)
        for key in [k for k in self._breakdowns if k[0] == plan_id]:
            del self._breakdowns[key]

    def get_breakdown(self, plan_id: str, month: str) -> PlanMonthlyBreakdown | None:
        return self._breakdowns.get((plan_id, month))

    def list_breakdowns(self, plan_id: str) -> list[PlanMonthlyBreakdown]:
        items = [b for (pid, _), b in self._breakdowns.items() if pid == plan_id]
        return sorted(items, key=lambda b: (b.year, b.month_number))

    def save_breakdowns(self, breakdowns: list[PlanMonthlyBreakdown]) -> None:
        for breakdown in breakdowns:
            self._breakdowns[(breakdown.plan_id, breakdown.month)] = breakdown

    def replace_breakdowns(self, plan_id: str, breakdowns: list[PlanMonthlyBreakdown]) -> None:
        for key in [k for k in self._breakdowns if k[0] == plan_id]:
            del self._breakdowns[key]
        self.save_breakdowns(breakdowns)


class InMemoryExpenseSource:
    """List-backed ExpenseSource."""

    def __init__(self, expenses: list[ExpenseRecord] | None = None) -> None:
        self._expenses: list[ExpenseRecord] = list(expenses or [])

    def add(self, expense: ExpenseRecord) -> None:
        self._expenses.append(expense)

    def query_expenses(
        self,
        start_date: date,
        end_date: date,
        status: ExpenseStatus = ExpenseStatus.CONFIRMED,
    ) -> list[ExpenseRecord]:
        return [
            e
            for e in self._expenses
            if e.status == status and start_date <= e.date < end_date
        ]
