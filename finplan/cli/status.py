"""Implementation of 'finplan status' command.

Shows planned vs actual figures for one month of a plan.
"""

from datetime import date
from decimal import Decimal
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from finplan.cli.utils import fail, format_currency, format_percentage, open_plan
from finplan.core.exceptions import PlanRepositoryError
from finplan.engine.calculator import spending_share
from finplan.engine.periods import format_month

console = Console()


def status_command(
    plan_file: Path = typer.Argument(..., help="Plan JSON file"),
    expenses: Path = typer.Option(
        None,
        "--expenses",
        "-e",
        help="Expenses JSON file (list of expenses or {expenses, income})",
    ),
    month: str = typer.Option(
        None,
        "--month",
        "-m",
        help="Month to show as YYYY-MM (default: current month)",
    ),
) -> None:
    """Show one month's planned vs actual status.

    Displays income, expenses and savings against plan, the top
    categories, and warnings about budget overruns.
    """
    repo, plan = open_plan(plan_file, expenses)
    month = month or format_month(date.today())

    try:
        breakdown = repo.get_breakdown(plan.id, month)
    except PlanRepositoryError as e:
        fail(str(e))

    currency = repo.config.currency
    warnings: list[str] = []

    console.print()
    title = f"{plan.name}: {month}"
    if breakdown.is_completed:
        title += " (completed)"
    console.print(Panel(f"[bold]{title}[/bold]", style="cyan"))
    console.print()

    # Income
    console.print("[bold]Income (vs Plan)[/bold]")
    console.print(f"  Plan:      {format_currency(breakdown.planned_income, currency):>16}")
    console.print(
        f"  Actual:    {format_currency(breakdown.actual_income, currency):>16}"
        f"  ({format_percentage(breakdown.income_achievement_percentage)})"
    )
    if breakdown.is_completed and breakdown.income_variance < 0:
        warnings.append(f"Income below plan by {format_currency(abs(breakdown.income_variance), currency)}")
    console.print()

    # Expenses
    console.print("[bold]Expenses (vs Budget)[/bold]")
    console.print(f"  Budget:    {format_currency(breakdown.planned_expenses, currency):>16}")
    console.print(
        f"  Spent:     {format_currency(breakdown.actual_expenses, currency):>16}"
        f"  ({format_percentage(breakdown.expense_control_percentage)})"
    )
    if breakdown.expense_variance >= 0:
        console.print(f"  [green]Remaining: {format_currency(breakdown.expense_variance, currency):>16}[/green]")
    else:
        over = abs(breakdown.expense_variance)
        console.print(f"  [red]Over budget: {format_currency(over, currency):>14}[/red]")
        warnings.append(f"Expenses over budget by {format_currency(over, currency)}")
    console.print()

    # Savings
    console.print("[bold]Savings[/bold]")
    console.print(f"  Target:    {format_currency(breakdown.planned_savings, currency):>16}")
    console.print(
        f"  Saved:     {format_currency(breakdown.actual_savings, currency):>16}"
        f"  ({format_percentage(breakdown.savings_achievement_percentage)})"
    )
    if breakdown.is_completed and breakdown.savings_variance < 0:
        warnings.append(f"Savings target missed by {format_currency(abs(breakdown.savings_variance), currency)}")
    console.print()

    # Categories
    if breakdown.category_breakdown:
        console.print("[bold]Top Categories[/bold]")
        top = sorted(
            breakdown.category_breakdown.items(),
            key=lambda x: x[1].actual_expenses,
            reverse=True,
        )[:5]
        spent_total = sum((d.actual_expenses for d in breakdown.category_breakdown.values()), Decimal(0))
        for category_id, data in top:
            share = spending_share(data.actual_expenses, spent_total)
            marker = "[red](over)[/red]" if data.is_over_budget else ""
            console.print(
                f"  {category_id}: {format_currency(data.actual_expenses, currency):>14}"
                f" / {format_currency(data.planned_budget, currency)}"
                f"  {format_percentage(share)} of spending {marker}"
            )
            if data.is_over_budget:
                warnings.append(
                    f"{category_id} over budget by {format_currency(abs(data.expense_variance), currency)}"
                )
        console.print()

    if warnings:
        console.print("[bold yellow]⚠ Warnings[/bold yellow]")
        for w in warnings:
            console.print(f"  - {w}")
        console.print()

    console.print(f"[dim]Health score: {breakdown.financial_health_score:.1f}/100[/dim]")
