"""Shared helpers for CLI commands: formatting and file loading."""

import json
from decimal import Decimal
from pathlib import Path
from typing import NoReturn

import typer
from pydantic import BaseModel, Field, ValidationError
from rich.console import Console
from rich.markup import escape

from finplan.core.config import load_config
from finplan.core.exceptions import BreakdownNotFoundError, PlanRepositoryError
from finplan.core.models import ExpenseRecord, FinancialPlan
from finplan.engine.periods import format_month
from finplan.logging_config import get_logger
from finplan.repository import PlanRepository
from finplan.storage.memory import InMemoryExpenseSource, InMemoryPlanStore

logger = get_logger(__name__)

console = Console()


class ActivityFile(BaseModel):
    """Recorded activity loaded alongside a plan.

    Attributes:
        expenses: Expense records.
        income: Actual income per month key; those months are marked completed.
    """

    expenses: list[ExpenseRecord] = Field(default_factory=list)
    income: dict[str, Decimal] = Field(default_factory=dict)


def format_currency(amount: Decimal, currency: str) -> str:
    """Format an amount with thousands separators and currency code."""
    return f"{amount:,.2f} {currency}"


def format_percentage(value: Decimal) -> str:
    """Format a percentage value (25 -> '25.0%')."""
    return f"{value:.1f}%"


def fail(message: str) -> NoReturn:
    """Print an error and exit with status 1."""
    console.print(f"[red]Error:[/red] {escape(message)}")
    raise typer.Exit(1)


def load_plan_file(path: Path) -> FinancialPlan:
    """Load a plan from a JSON file."""
    try:
        return FinancialPlan.model_validate_json(path.read_text(encoding="utf-8"))
    except OSError as e:
        fail(f"Cannot read plan file {path}: {e}")
    except ValidationError as e:
        fail(f"Invalid plan file {path}:\n{e}")


def load_activity_file(path: Path | None) -> ActivityFile:
    """Load expenses and income from a JSON file.

    The file holds either a list of expenses or an object with
    "expenses" and "income" keys.
    """
    if path is None:
        return ActivityFile()
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        if isinstance(raw, list):
            raw = {"expenses": raw}
        return ActivityFile.model_validate(raw)
    except OSError as e:
        fail(f"Cannot read expenses file {path}: {e}")
    except (json.JSONDecodeError, ValidationError) as e:
        fail(f"Invalid expenses file {path}:\n{e}")


def open_plan(plan_file: Path, expenses_file: Path | None = None) -> tuple[PlanRepository, FinancialPlan]:
    """Load a plan and its activity into an in-memory repository.

    Every month with expenses or income is reconciled; months with income
    are marked completed.

    Returns:
        Repository and the stored plan.
    """
    plan = load_plan_file(plan_file)
    activity = load_activity_file(expenses_file)

    repo = PlanRepository(
        InMemoryPlanStore(),
        InMemoryExpenseSource(activity.expenses),
        config=load_config(),
    )

    try:
        plan = repo.create_plan(plan)
        months = {format_month(e.date) for e in activity.expenses}
        months.update(activity.income)
        for month in sorted(months):
            try:
                repo.update_monthly_breakdown_from_expenses(plan.id, month)
            except BreakdownNotFoundError:
                logger.warning("Skipping %s: outside the plan's date range", month)
                continue
            if month in activity.income:
                repo.complete_monthly_breakdown(plan.id, month, activity.income[month])
    except PlanRepositoryError as e:
        fail(str(e))

    return repo, plan
