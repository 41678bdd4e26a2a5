"""Implementation of 'finplan optimize' and 'finplan health' commands."""

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from finplan.cli.utils import format_currency, open_plan
from finplan.core.models import FinancialHealthLevel, Priority

console = Console()

LEVEL_STYLES = {
    FinancialHealthLevel.POOR: "red",
    FinancialHealthLevel.FAIR: "yellow",
    FinancialHealthLevel.GOOD: "green",
    FinancialHealthLevel.EXCELLENT: "bold green",
}

PRIORITY_STYLES = {
    Priority.HIGH: "red",
    Priority.MEDIUM: "yellow",
    Priority.LOW: "dim",
}


def optimize_command(
    plan_file: Path = typer.Argument(..., help="Plan JSON file"),
    expenses: Path = typer.Option(
        None,
        "--expenses",
        "-e",
        help="Expenses JSON file",
    ),
) -> None:
    """Suggest budget changes based on recorded spending."""
    repo, plan = open_plan(plan_file, expenses)
    currency = repo.config.currency
    result = repo.optimize_budget(plan.id)

    console.print(
        f"Budget efficiency: {result.current_budget_efficiency:.0%} "
        f"(estimated after changes: +{result.optimized_budget_efficiency:.0%})"
    )

    if not result.suggestions:
        console.print("[green]No budget changes suggested[/green]")
        raise typer.Exit(0)

    table = Table(title="Suggestions")
    table.add_column("Priority")
    table.add_column("Category")
    table.add_column("Change")
    table.add_column("Current", justify="right")
    table.add_column("Suggested", justify="right")
    table.add_column("Saves / month", justify="right")

    for s in result.suggestions:
        style = PRIORITY_STYLES[s.priority]
        table.add_row(
            f"[{style}]{s.priority.name.lower()}[/{style}]",
            s.category_id,
            s.type.value,
            format_currency(s.current_amount, currency),
            format_currency(s.suggested_amount, currency),
            format_currency(s.expected_savings, currency),
        )

    console.print(table)
    for s in result.suggestions:
        console.print(f"  - {s.category_id}: {s.reasoning}")
    console.print(
        f"[bold]Potential monthly savings:[/bold] {format_currency(result.potential_monthly_savings, currency)}"
    )


def health_command(
    plan_file: Path = typer.Argument(..., help="Plan JSON file"),
    expenses: Path = typer.Option(
        None,
        "--expenses",
        "-e",
        help="Expenses JSON file",
    ),
) -> None:
    """Show the plan's financial health score and its components."""
    repo, plan = open_plan(plan_file, expenses)
    analysis = repo.calculate_financial_health(plan.id)

    style = LEVEL_STYLES[analysis.health_level]
    console.print(
        Panel(
            f"[bold]{analysis.overall_score:.0f}/100[/bold]  [{style}]{analysis.health_level.value}[/{style}]",
            title=f"Financial health: {plan.name}",
        )
    )

    metrics = analysis.metrics
    table = Table(show_header=True)
    table.add_column("Metric")
    table.add_column("Score", justify="right")
    table.add_row("Savings rate", f"{metrics.savings_rate_score:.2f}")
    table.add_row("Budget variance", f"{metrics.budget_variance_score:.2f}")
    table.add_row("Emergency fund", f"{metrics.emergency_fund_score:.2f}")
    table.add_row("Debt to income", f"{metrics.debt_to_income_score:.2f}")
    table.add_row("Diversification", f"{metrics.diversification_score:.2f}")
    console.print(table)

    if analysis.recommendations:
        console.print("[bold]Recommendations[/bold]")
        for r in analysis.recommendations:
            rstyle = PRIORITY_STYLES[r.priority]
            console.print(f"  [{rstyle}]●[/{rstyle}] {r.title}: {r.description}")
