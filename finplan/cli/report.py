"""Implementation of 'finplan breakdowns' and 'finplan project' commands."""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from finplan.cli.utils import format_currency, format_percentage, open_plan
from finplan.core.models import ProjectionScenario

console = Console()


def breakdowns_command(
    plan_file: Path = typer.Argument(..., help="Plan JSON file"),
    expenses: Path = typer.Option(
        None,
        "--expenses",
        "-e",
        help="Expenses JSON file",
    ),
) -> None:
    """List the plan's monthly breakdowns with planned vs actual figures."""
    repo, plan = open_plan(plan_file, expenses)
    currency = repo.config.currency
    breakdowns = repo.get_breakdowns(plan.id)

    table = Table(title=f"{plan.name}: {len(breakdowns)} months")
    table.add_column("Month")
    table.add_column("Income (plan)", justify="right")
    table.add_column("Expenses (plan)", justify="right")
    table.add_column("Expenses (actual)", justify="right")
    table.add_column("Savings (actual)", justify="right")
    table.add_column("Health", justify="right")
    table.add_column("Done", justify="center")

    for b in breakdowns:
        style = "red" if b.expense_variance < 0 else None
        table.add_row(
            b.month,
            format_currency(b.planned_income, currency),
            format_currency(b.planned_expenses, currency),
            format_currency(b.actual_expenses, currency),
            format_currency(b.actual_savings, currency),
            f"{b.financial_health_score:.0f}",
            "✓" if b.is_completed else "",
            style=style,
        )

    console.print(table)

    summary = repo.calculate_plan_performance(plan.id)
    if summary.completed_months:
        console.print(
            f"Completed months: {summary.completed_months}  "
            f"Income achieved: {format_percentage(summary.income_achievement_percentage)}  "
            f"Savings achieved: {format_percentage(summary.savings_achievement_percentage)}"
        )


def project_command(
    plan_file: Path = typer.Argument(..., help="Plan JSON file"),
    scenario: ProjectionScenario = typer.Option(
        ProjectionScenario.REALISTIC,
        "--scenario",
        "-s",
        help="Projection scenario",
    ),
    expenses: Path = typer.Option(
        None,
        "--expenses",
        "-e",
        help="Expenses JSON file",
    ),
) -> None:
    """Project savings and investment value to the end of the plan."""
    repo, plan = open_plan(plan_file, expenses)
    currency = repo.config.currency
    result = repo.generate_financial_projections(plan.id, scenario)

    if not result.projections:
        console.print("[yellow]Plan has already ended; nothing to project[/yellow]")
        raise typer.Exit(0)

    table = Table(title=f"{plan.name}: {scenario.value} projection")
    table.add_column("Month")
    table.add_column("Income", justify="right")
    table.add_column("Expenses", justify="right")
    table.add_column("Savings", justify="right")
    table.add_column("Cumulative", justify="right")
    table.add_column("Value", justify="right")

    for p in result.projections:
        table.add_row(
            p.month,
            format_currency(p.projected_income, currency),
            format_currency(p.projected_expenses, currency),
            format_currency(p.projected_savings, currency),
            format_currency(p.cumulative_savings, currency),
            format_currency(p.investment_value, currency),
        )

    console.print(table)
    console.print(f"[bold]Final net worth:[/bold] {format_currency(result.final_net_worth, currency)}")
    if result.projected_retirement_age is not None:
        console.print(f"[green]Projected retirement age: {result.projected_retirement_age}[/green]")
