"""Shared fixtures for FinPlan tests."""

from datetime import date
from decimal import Decimal

import pytest

from finplan.core.config import EngineConfig
from finplan.core.models import FinancialPlan
from finplan.repository import PlanRepository
from finplan.storage.memory import InMemoryExpenseSource, InMemoryPlanStore

TODAY = date(2025, 3, 15)


def make_plan(**overrides) -> FinancialPlan:
    """A valid 12-month plan: 1000/month income, 800 budget, 200 savings."""
    values = {
        "name": "Test plan",
        "start_date": date(2025, 1, 1),
        "end_date": date(2026, 1, 1),
        "total_income": Decimal("12000"),
        "total_budget": Decimal("9600"),
        "savings_goal": Decimal("2400"),
        "emergency_fund_goal": Decimal("4800"),
        "annual_interest_rate": Decimal("0"),
        "fixed_expenses": {"rent": Decimal("300")},
        "variable_expense_budgets": {"food": Decimal("200"), "fun": Decimal("100")},
    }
    values.update(overrides)
    return FinancialPlan(**values)


@pytest.fixture
def plan_factory():
    return make_plan


@pytest.fixture
def plan() -> FinancialPlan:
    return make_plan()


@pytest.fixture
def store() -> InMemoryPlanStore:
    return InMemoryPlanStore()


@pytest.fixture
def expense_source() -> InMemoryExpenseSource:
    return InMemoryExpenseSource()


@pytest.fixture
def repo(store: InMemoryPlanStore, expense_source: InMemoryExpenseSource) -> PlanRepository:
    return PlanRepository(store, expense_source, config=EngineConfig(), today=lambda: TODAY)
