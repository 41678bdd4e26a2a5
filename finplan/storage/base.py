"""Storage protocols consumed by the plan repository."""

from datetime import date
from typing import Protocol

from finplan.core.models import ExpenseRecord, ExpenseStatus, FinancialPlan, PlanMonthlyBreakdown


class PlanStore(Protocol):
    """Persistence for plans and their monthly breakdowns."""

    def get_plan(self, plan_id: str) -> FinancialPlan | None:
        """Retrieve a plan by ID."""
        ...

    def list_plans(self, include_inactive: bool = True) -> list[FinancialPlan]:
        """List plans, optionally only active ones."""
        ...

    def save_plan(self, plan: FinancialPlan) -> FinancialPlan:
        """Insert or replace a plan."""
        ...

    def delete_plan(self, plan_id: str) -> None:
        """Delete a plan and all of its breakdowns."""
        ...

    def get_breakdown(self, plan_id: str, month: str) -> PlanMonthlyBreakdown | None:
        """Retrieve the breakdown for a (plan, month) key."""
        ...

    def list_breakdowns(self, plan_id: str) -> list[PlanMonthlyBreakdown]:
        """All breakdowns of a plan in chronological order."""
        ...

    def save_breakdowns(self, breakdowns: list[PlanMonthlyBreakdown]) -> None:
        """Insert or replace breakdowns by (plan, month) key."""
        ...

    def replace_breakdowns(self, plan_id: str, breakdowns: list[PlanMonthlyBreakdown]) -> None:
        """Replace the full breakdown set of a plan."""
        ...


class ExpenseSource(Protocol):
    """Read access to recorded expenses."""

    def query_expenses(
        self,
        start_date: date,
        end_date: date,
        status: ExpenseStatus = ExpenseStatus.CONFIRMED,
    ) -> list[ExpenseRecord]:
        """Expenses with the given status in [start_date, end_date)."""
        ...
