"""Storage seams: plan store and expense source."""

from finplan.storage.base import ExpenseSource, PlanStore
from finplan.storage.memory import InMemoryExpenseSource, InMemoryPlanStore

__all__ = [
    "ExpenseSource",
    "InMemoryExpenseSource",
    "InMemoryPlanStore",
    "PlanStore",
]
