"""Domain models for FinPlan.

All plan, breakdown and analysis structures are defined here using
Pydantic v2. Plans and breakdowns are frozen: every change produces a new
object through the copy-on-write helpers.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Annotated
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from finplan.engine.periods import (
    days_in_month,
    format_month,
    months_between,
    parse_month,
    start_of_month,
)

ZERO = Decimal(0)
HUNDRED = Decimal(100)


def _new_id() -> str:
    return str(uuid4())


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------


class PlanStatus(str, Enum):
    """Lifecycle state of a plan.

    Intended transitions: draft -> active <-> paused, active -> completed,
    any non-terminal state -> cancelled. The engine does not enforce them.
    """

    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class InterestType(str, Enum):
    """Interest calculation mode for savings growth."""

    SIMPLE = "simple"
    COMPOUND = "compound"

    def calculate_amount(
        self,
        principal: Decimal,
        rate: Decimal,
        years: Decimal,
        compounding_frequency: int = 1,
    ) -> Decimal:
        """Total amount (principal + interest) after the given time.

        Simple:   A = P(1 + rt)
        Compound: A = P(1 + r/n)^(nt)
        """
        if self == InterestType.SIMPLE:
            return principal * (1 + rate * years)
        periods_per_year = Decimal(max(compounding_frequency, 1))
        return principal * (1 + rate / periods_per_year) ** (periods_per_year * years)

    def calculate_interest(
        self,
        principal: Decimal,
        rate: Decimal,
        years: Decimal,
        compounding_frequency: int = 1,
    ) -> Decimal:
        """Interest earned, excluding the principal."""
        return self.calculate_amount(principal, rate, years, compounding_frequency) - principal


class ExpenseStatus(str, Enum):
    """Status of an expense in the external expense source."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class ProjectionScenario(str, Enum):
    """Named multiplier sets applied during forward projection."""

    OPTIMISTIC = "optimistic"
    REALISTIC = "realistic"
    PESSIMISTIC = "pessimistic"


class OptimizationType(str, Enum):
    INCREASE_BUDGET = "increase_budget"
    DECREASE_BUDGET = "decrease_budget"
    INCREASE_SAVINGS = "increase_savings"
    REALLOCATE_FUNDS = "reallocate_funds"


class Priority(IntEnum):
    """Priority of suggestions and recommendations (higher sorts first)."""

    LOW = 1
    MEDIUM = 2
    HIGH = 3


class FinancialHealthLevel(str, Enum):
    POOR = "poor"
    FAIR = "fair"
    GOOD = "good"
    EXCELLENT = "excellent"


class HealthRecommendationType(str, Enum):
    INCREASE_SAVINGS_RATE = "increase_savings_rate"
    BUILD_EMERGENCY_FUND = "build_emergency_fund"
    IMPROVE_BUDGET_ACCURACY = "improve_budget_accuracy"
    REDUCE_DEBT = "reduce_debt"
    DIVERSIFY_SPENDING = "diversify_spending"


class PlanRecommendationType(str, Enum):
    EMERGENCY_FUND = "emergency_fund"
    DEBT_PAYOFF = "debt_payoff"
    RETIREMENT_SAVINGS = "retirement_savings"
    INVESTMENT_DIVERSIFICATION = "investment_diversification"
    BUDGET_OPTIMIZATION = "budget_optimization"


class RiskTolerance(str, Enum):
    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"


# -----------------------------------------------------------------------------
# Financial Plan
# -----------------------------------------------------------------------------


def _set_fields(patch: BaseModel) -> dict:
    """Fields explicitly set on a patch, skipping None and keeping nested models."""
    values = {name: getattr(patch, name) for name in patch.model_fields_set}
    return {name: value for name, value in values.items() if value is not None}


class PlanPatch(BaseModel):
    """Typed partial update for FinancialPlan.

    Only fields that were explicitly set are applied by FinancialPlan.updated.
    """

    name: str | None = None
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    total_income: Decimal | None = None
    total_budget: Decimal | None = None
    savings_goal: Decimal | None = None
    emergency_fund_goal: Decimal | None = None
    interest_type: InterestType | None = None
    annual_interest_rate: Decimal | None = None
    compounding_frequency: int | None = Field(default=None, ge=1)
    status: PlanStatus | None = None
    is_active: bool | None = None
    currency: str | None = None
    category_allocations: dict[str, Decimal] | None = None
    fixed_expenses: dict[str, Decimal] | None = None
    variable_expense_budgets: dict[str, Decimal] | None = None
    notes: str | None = None
    tags: list[str] | None = None


class FinancialPlan(BaseModel):
    """A financial goal over a fixed date range.

    Business rules (date order, positive income, interest bounds, budget
    tolerance) are checked by the repository so that invalid plans can be
    represented and rejected with typed errors.

    Money Flow (per month):
        Average Monthly Income
        - Fixed Expenses (rent, loans, subscriptions)
        - Variable Budgets (per category)
        - Target Monthly Savings
        = Slack (must stay within the configured tolerance)
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    name: str = ""
    description: str = ""
    start_date: date
    end_date: date

    total_income: Decimal = ZERO
    total_budget: Decimal = ZERO
    savings_goal: Decimal = ZERO
    emergency_fund_goal: Decimal = ZERO

    interest_type: InterestType = InterestType.COMPOUND
    annual_interest_rate: Decimal = Decimal("0.05")
    compounding_frequency: int = Field(default=12, ge=1)

    status: PlanStatus = PlanStatus.ACTIVE
    is_active: bool = True
    currency: str = "USD"

    category_allocations: dict[str, Decimal] = Field(default_factory=dict)  # category -> percentage
    fixed_expenses: dict[str, Decimal] = Field(default_factory=dict)  # label -> monthly amount
    variable_expense_budgets: dict[str, Decimal] = Field(default_factory=dict)  # category -> monthly

    notes: str = ""
    tags: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @computed_field  # type: ignore[misc]
    @property
    def duration_in_months(self) -> int:
        """Whole calendar months between start and end date."""
        return max(months_between(self.start_date, self.end_date), 0)

    @property
    def duration_in_years(self) -> Decimal:
        """Plan length in years (365.25-day years)."""
        days = (self.end_date - self.start_date).days
        return Decimal(days) / Decimal("365.25")

    @computed_field  # type: ignore[misc]
    @property
    def average_monthly_income(self) -> Decimal:
        if self.duration_in_months <= 0:
            return ZERO
        return self.total_income / self.duration_in_months

    @computed_field  # type: ignore[misc]
    @property
    def average_monthly_budget(self) -> Decimal:
        if self.duration_in_months <= 0:
            return ZERO
        return self.total_budget / self.duration_in_months

    @computed_field  # type: ignore[misc]
    @property
    def target_monthly_savings(self) -> Decimal:
        if self.duration_in_months <= 0:
            return ZERO
        return self.savings_goal / self.duration_in_months

    @computed_field  # type: ignore[misc]
    @property
    def total_fixed_expenses(self) -> Decimal:
        """Sum of all fixed monthly expenses."""
        return sum(self.fixed_expenses.values(), ZERO)

    @computed_field  # type: ignore[misc]
    @property
    def total_variable_budget(self) -> Decimal:
        """Sum of all variable category budgets."""
        return sum(self.variable_expense_budgets.values(), ZERO)

    @property
    def available_income(self) -> Decimal:
        """Monthly income left after fixed expenses."""
        return self.average_monthly_income - self.total_fixed_expenses

    @computed_field  # type: ignore[misc]
    @property
    def savings_rate(self) -> Decimal:
        """Target savings as a percentage of average monthly income."""
        if self.average_monthly_income <= 0:
            return ZERO
        return self.target_monthly_savings / self.average_monthly_income * HUNDRED

    @property
    def monthly_allocations(self) -> Decimal:
        """Fixed + variable budgets + target savings for one month."""
        return self.total_fixed_expenses + self.total_variable_budget + self.target_monthly_savings

    def is_currently_active(self, today: date) -> bool:
        return self.is_active and self.start_date <= today <= self.end_date

    def progress_percentage(self, today: date) -> Decimal:
        """Elapsed share of the plan's date range (0-100)."""
        if today < self.start_date:
            return ZERO
        if today > self.end_date:
            return HUNDRED
        total = (self.end_date - self.start_date).days
        if total <= 0:
            return HUNDRED
        return Decimal((today - self.start_date).days) / Decimal(total) * HUNDRED

    def overlaps(self, other: "FinancialPlan") -> bool:
        """True if the two date ranges intersect (inclusive bounds)."""
        return self.start_date <= other.end_date and self.end_date >= other.start_date

    # Copy-on-write helpers

    def updated(self, patch: PlanPatch) -> "FinancialPlan":
        """Return a copy with the explicitly set patch fields applied."""
        changes = _set_fields(patch)
        changes["updated_at"] = datetime.now()
        return self.model_copy(update=changes)

    def adding_fixed_expense(self, label: str, amount: Decimal) -> "FinancialPlan":
        return self.updated(PlanPatch(fixed_expenses={**self.fixed_expenses, label: amount}))

    def removing_fixed_expense(self, label: str) -> "FinancialPlan":
        remaining = {k: v for k, v in self.fixed_expenses.items() if k != label}
        return self.updated(PlanPatch(fixed_expenses=remaining))

    def updating_category_budget(self, category_id: str, budget: Decimal) -> "FinancialPlan":
        budgets = {**self.variable_expense_budgets, category_id: budget}
        return self.updated(PlanPatch(variable_expense_budgets=budgets))


# -----------------------------------------------------------------------------
# Monthly Breakdown
# -----------------------------------------------------------------------------


class CategoryMonthlyData(BaseModel):
    """Planned budget and actual spend for one category in one month.

    adding_expense is the only mutator; the average is always derived from
    actual_expenses and transaction_count.
    """

    model_config = ConfigDict(frozen=True)

    planned_budget: Decimal = ZERO
    actual_expenses: Decimal = ZERO
    transaction_count: int = Field(default=0, ge=0)
    average_transaction_amount: Decimal = ZERO
    notes: str = ""

    @computed_field  # type: ignore[misc]
    @property
    def expense_variance(self) -> Decimal:
        """Planned minus actual (negative = over budget)."""
        return self.planned_budget - self.actual_expenses

    @property
    def budget_utilization(self) -> Decimal:
        if self.planned_budget <= 0:
            return HUNDRED if self.actual_expenses > 0 else ZERO
        return self.actual_expenses / self.planned_budget * HUNDRED

    @property
    def is_over_budget(self) -> bool:
        return self.planned_budget > 0 and self.actual_expenses > self.planned_budget

    @property
    def remaining_budget(self) -> Decimal:
        return max(self.planned_budget - self.actual_expenses, ZERO)

    def adding_expense(self, amount: Decimal) -> "CategoryMonthlyData":
        expenses = self.actual_expenses + amount
        count = self.transaction_count + 1
        return self.model_copy(
            update={
                "actual_expenses": expenses,
                "transaction_count": count,
                "average_transaction_amount": expenses / count,
            }
        )

    def with_actuals(self, actual_expenses: Decimal, transaction_count: int) -> "CategoryMonthlyData":
        """Replace actual figures, keeping the planned budget and notes."""
        average = actual_expenses / transaction_count if transaction_count > 0 else ZERO
        return self.model_copy(
            update={
                "actual_expenses": actual_expenses,
                "transaction_count": transaction_count,
                "average_transaction_amount": average,
            }
        )


class BreakdownPatch(BaseModel):
    """Typed partial update for planned and bookkeeping fields of a breakdown.

    Actual income and expenses are deliberately absent: they change only
    through with_actual_income, with_actual_expenses and recording_expense.
    """

    planned_income: Decimal | None = None
    planned_expenses: Decimal | None = None
    planned_savings: Decimal | None = None
    fixed_expenses: Decimal | None = None
    variable_expenses: Decimal | None = None
    emergency_fund_contribution: Decimal | None = None
    investment_contribution: Decimal | None = None
    debt_payment: Decimal | None = None
    category_breakdown: dict[str, CategoryMonthlyData] | None = None
    notes: str | None = None


class DayProjection(BaseModel):
    """Month-end figures extrapolated from progress so far."""

    projected_income: Decimal
    projected_expenses: Decimal
    projected_savings: Decimal


class PlanMonthlyBreakdown(BaseModel):
    """One calendar month's planned-vs-actual snapshot for a plan."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    plan_id: str
    month: str  # "YYYY-MM"
    year: int
    month_number: int = Field(ge=1, le=12)

    planned_income: Decimal = ZERO
    actual_income: Decimal = ZERO
    planned_expenses: Decimal = ZERO
    actual_expenses: Decimal = ZERO
    planned_savings: Decimal = ZERO
    actual_savings: Decimal = ZERO

    fixed_expenses: Decimal = ZERO
    variable_expenses: Decimal = ZERO
    emergency_fund_contribution: Decimal = ZERO
    investment_contribution: Decimal = ZERO
    debt_payment: Decimal = ZERO

    category_breakdown: dict[str, CategoryMonthlyData] = Field(default_factory=dict)
    expenses_by_sub_category: dict[str, Decimal] = Field(default_factory=dict)

    notes: str = ""
    is_completed: bool = False
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @model_validator(mode="after")
    def validate_month_key(self) -> "PlanMonthlyBreakdown":
        """Ensure year and month_number agree with the month key."""
        first_day = parse_month(self.month)
        if first_day.year != self.year or first_day.month != self.month_number:
            raise ValueError(
                f"month {self.month!r} does not match year={self.year} month_number={self.month_number}"
            )
        return self

    @classmethod
    def for_month(cls, plan_id: str, month: str, **fields) -> "PlanMonthlyBreakdown":
        """Build a breakdown, deriving year and month_number from the key."""
        first_day = parse_month(month)
        return cls(plan_id=plan_id, month=month, year=first_day.year, month_number=first_day.month, **fields)

    # Calendar

    @property
    def month_start(self) -> date:
        return date(self.year, self.month_number, 1)

    def is_past_month(self, today: date) -> bool:
        return self.month_start < start_of_month(today)

    def is_current_month(self, today: date) -> bool:
        return self.month == format_month(today)

    def is_future_month(self, today: date) -> bool:
        return self.month_start > start_of_month(today)

    # Variance

    @computed_field  # type: ignore[misc]
    @property
    def planned_net_income(self) -> Decimal:
        return self.planned_income - self.planned_expenses

    @computed_field  # type: ignore[misc]
    @property
    def actual_net_income(self) -> Decimal:
        return self.actual_income - self.actual_expenses

    @computed_field  # type: ignore[misc]
    @property
    def income_variance(self) -> Decimal:
        """Actual minus planned income (positive = above plan)."""
        return self.actual_income - self.planned_income

    @computed_field  # type: ignore[misc]
    @property
    def expense_variance(self) -> Decimal:
        """Planned minus actual expenses (positive = under budget)."""
        return self.planned_expenses - self.actual_expenses

    @computed_field  # type: ignore[misc]
    @property
    def savings_variance(self) -> Decimal:
        return self.actual_savings - self.planned_savings

    @property
    def net_variance(self) -> Decimal:
        return self.actual_net_income - self.planned_net_income

    @property
    def income_achievement_percentage(self) -> Decimal:
        if self.planned_income <= 0:
            return ZERO
        return self.actual_income / self.planned_income * HUNDRED

    @property
    def expense_control_percentage(self) -> Decimal:
        """Share of the expense budget used (lower is better)."""
        if self.planned_expenses <= 0:
            return HUNDRED if self.actual_expenses == 0 else ZERO
        return self.actual_expenses / self.planned_expenses * HUNDRED

    @property
    def savings_achievement_percentage(self) -> Decimal:
        if self.planned_savings <= 0:
            return HUNDRED if self.actual_savings > 0 else ZERO
        return self.actual_savings / self.planned_savings * HUNDRED

    @property
    def total_expenses(self) -> Decimal:
        """Fixed plus variable planned expenses."""
        return self.fixed_expenses + self.variable_expenses

    @property
    def savings_rate(self) -> Decimal:
        if self.actual_income <= 0:
            return ZERO
        return self.actual_savings / self.actual_income * HUNDRED

    @computed_field  # type: ignore[misc]
    @property
    def financial_health_score(self) -> Decimal:
        """Monthly score 0-100: income 30%, expense control 30%, savings 40%."""
        score = min(self.income_achievement_percentage, HUNDRED) * Decimal("0.3")
        score += max(HUNDRED - self.expense_control_percentage, ZERO) * Decimal("0.3")
        score += min(self.savings_achievement_percentage, HUNDRED) * Decimal("0.4")
        return min(score, HUNDRED)

    # Category analysis

    @property
    def top_expense_category(self) -> str | None:
        if not self.category_breakdown:
            return None
        return max(self.category_breakdown.items(), key=lambda x: x[1].actual_expenses)[0]

    @property
    def most_over_budget_category(self) -> str | None:
        """Category with the largest overspend, or None if none is over budget."""
        if not self.category_breakdown:
            return None
        category, data = min(self.category_breakdown.items(), key=lambda x: x[1].expense_variance)
        return category if data.expense_variance < 0 else None

    @property
    def best_performing_category(self) -> str | None:
        """Category furthest under its budget."""
        if not self.category_breakdown:
            return None
        return max(self.category_breakdown.items(), key=lambda x: x[1].expense_variance)[0]

    @property
    def total_category_variance(self) -> Decimal:
        return sum((d.expense_variance for d in self.category_breakdown.values()), ZERO)

    # Copy-on-write helpers

    def _with(self, **changes) -> "PlanMonthlyBreakdown":
        changes["updated_at"] = datetime.now()
        return self.model_copy(update=changes)

    def updated(self, patch: BreakdownPatch) -> "PlanMonthlyBreakdown":
        return self._with(**_set_fields(patch))

    def with_actual_income(self, income: Decimal) -> "PlanMonthlyBreakdown":
        return self._with(
            actual_income=income,
            actual_savings=max(income - self.actual_expenses, ZERO),
        )

    def with_actual_expenses(self, expenses: Decimal) -> "PlanMonthlyBreakdown":
        return self._with(
            actual_expenses=expenses,
            actual_savings=max(self.actual_income - expenses, ZERO),
        )

    def updating_category(self, category_id: str, data: CategoryMonthlyData) -> "PlanMonthlyBreakdown":
        return self._with(category_breakdown={**self.category_breakdown, category_id: data})

    def recording_expense(self, sub_category_id: str, amount: Decimal) -> "PlanMonthlyBreakdown":
        """Add an expense to a subcategory and to the month's actual total."""
        by_sub = dict(self.expenses_by_sub_category)
        by_sub[sub_category_id] = by_sub.get(sub_category_id, ZERO) + amount
        total = self.actual_expenses + amount
        return self._with(
            expenses_by_sub_category=by_sub,
            actual_expenses=total,
            actual_savings=max(self.actual_income - total, ZERO),
        )

    def mark_as_completed(self) -> "PlanMonthlyBreakdown":
        return self._with(is_completed=True)

    def calculate_projections(self, day_of_month: int) -> DayProjection:
        """Extrapolate month-end figures from the first day_of_month days.

        Outside 1..days_in_month the current actuals are returned unchanged.
        """
        total_days = days_in_month(self.year, self.month_number)
        if not 0 < day_of_month <= total_days:
            return DayProjection(
                projected_income=self.actual_income,
                projected_expenses=self.actual_expenses,
                projected_savings=self.actual_savings,
            )

        progress = Decimal(day_of_month) / Decimal(total_days)
        income = self.actual_income / progress
        expenses = self.actual_expenses / progress
        return DayProjection(
            projected_income=income,
            projected_expenses=expenses,
            projected_savings=max(income - expenses, ZERO),
        )


# -----------------------------------------------------------------------------
# External Expense Data
# -----------------------------------------------------------------------------


class ExpenseRecord(BaseModel):
    """A single expense as delivered by the expense source."""

    id: str = Field(default_factory=_new_id)
    category_id: str = Field(min_length=1)
    sub_category_id: str | None = None
    amount: Annotated[Decimal, Field(ge=0)]
    date: date
    status: ExpenseStatus = ExpenseStatus.CONFIRMED


class CategoryExpenseTotal(BaseModel):
    """Expenses of one category within a month."""

    total_amount: Decimal = ZERO
    transaction_count: int = 0


# -----------------------------------------------------------------------------
# Performance Summary
# -----------------------------------------------------------------------------


class MonthlyTrendPoint(BaseModel):
    """Planned vs actual figures of one month, for charts."""

    month: str
    planned_income: Decimal
    actual_income: Decimal
    planned_expenses: Decimal
    actual_expenses: Decimal
    planned_savings: Decimal
    actual_savings: Decimal
    health_score: Decimal


class CategoryPerformance(BaseModel):
    """Aggregate planned vs actual spend of one category across months."""

    category_id: str
    total_planned: Decimal = ZERO
    total_actual: Decimal = ZERO
    total_variance: Decimal = ZERO  # planned - actual
    transaction_count: int = 0


class PlanPerformanceSummary(BaseModel):
    """Totals and variances over a plan's completed months."""

    plan_id: str
    plan_name: str
    total_planned_income: Decimal = ZERO
    total_actual_income: Decimal = ZERO
    total_planned_expenses: Decimal = ZERO
    total_actual_expenses: Decimal = ZERO
    total_planned_savings: Decimal = ZERO
    total_actual_savings: Decimal = ZERO
    average_financial_health_score: Decimal = ZERO
    income_variance: Decimal = ZERO  # actual - planned
    expense_variance: Decimal = ZERO  # planned - actual
    savings_variance: Decimal = ZERO  # actual - planned
    completed_months: int = 0
    monthly_trends: list[MonthlyTrendPoint] = Field(default_factory=list)
    currency: str = "USD"

    @computed_field  # type: ignore[misc]
    @property
    def income_achievement_percentage(self) -> Decimal:
        if self.total_planned_income <= 0:
            return ZERO
        return self.total_actual_income / self.total_planned_income * HUNDRED

    @computed_field  # type: ignore[misc]
    @property
    def expense_control_percentage(self) -> Decimal:
        """Share of the expense budget left unspent (100 = nothing spent)."""
        if self.total_planned_expenses <= 0:
            return HUNDRED
        return max(ZERO, (1 - self.total_actual_expenses / self.total_planned_expenses) * HUNDRED)

    @computed_field  # type: ignore[misc]
    @property
    def savings_achievement_percentage(self) -> Decimal:
        if self.total_planned_savings <= 0:
            return ZERO
        return self.total_actual_savings / self.total_planned_savings * HUNDRED


# -----------------------------------------------------------------------------
# Projection
# -----------------------------------------------------------------------------


class ScenarioParameters(BaseModel):
    income_multiplier: Decimal
    expense_multiplier: Decimal
    monthly_growth_rate: Decimal


class MonthlyProjection(BaseModel):
    """One projected month. net_worth mirrors investment_value."""

    month: str
    projected_income: Decimal
    projected_expenses: Decimal
    projected_savings: Decimal
    cumulative_savings: Decimal
    investment_value: Decimal
    net_worth: Decimal


class FinancialProjection(BaseModel):
    plan_id: str
    scenario: ProjectionScenario
    projections: list[MonthlyProjection] = Field(default_factory=list)
    final_net_worth: Decimal = ZERO
    total_savings: Decimal = ZERO
    projected_retirement_age: int | None = None
    currency: str = "USD"


# -----------------------------------------------------------------------------
# Budget Optimization
# -----------------------------------------------------------------------------


class BudgetOptimizationSuggestion(BaseModel):
    category_id: str
    type: OptimizationType
    current_amount: Decimal
    suggested_amount: Decimal
    expected_savings: Decimal = ZERO
    reasoning: str = ""
    priority: Priority


class BudgetOptimization(BaseModel):
    plan_id: str
    current_budget_efficiency: Decimal = ZERO
    optimized_budget_efficiency: Decimal = ZERO
    suggestions: list[BudgetOptimizationSuggestion] = Field(default_factory=list)
    potential_monthly_savings: Decimal = ZERO
    currency: str = "USD"


# -----------------------------------------------------------------------------
# Financial Health
# -----------------------------------------------------------------------------


class FinancialHealthMetrics(BaseModel):
    """Five sub-scores, each within [0, 1]."""

    savings_rate_score: Annotated[Decimal, Field(ge=0, le=1)]
    budget_variance_score: Annotated[Decimal, Field(ge=0, le=1)]
    emergency_fund_score: Annotated[Decimal, Field(ge=0, le=1)]
    debt_to_income_score: Annotated[Decimal, Field(ge=0, le=1)]
    diversification_score: Annotated[Decimal, Field(ge=0, le=1)]

    def as_list(self) -> list[Decimal]:
        """Scores in weight order."""
        return [
            self.savings_rate_score,
            self.budget_variance_score,
            self.emergency_fund_score,
            self.debt_to_income_score,
            self.diversification_score,
        ]


class HealthRecommendation(BaseModel):
    type: HealthRecommendationType
    title: str
    description: str
    priority: Priority


class FinancialHealthAnalysis(BaseModel):
    plan_id: str
    overall_score: Annotated[Decimal, Field(ge=0, le=100)]
    metrics: FinancialHealthMetrics
    health_level: FinancialHealthLevel
    recommendations: list[HealthRecommendation] = Field(default_factory=list)
    last_updated: datetime = Field(default_factory=datetime.now)


# -----------------------------------------------------------------------------
# Recommendations & Templates
# -----------------------------------------------------------------------------


class UserFinancialProfile(BaseModel):
    """Inputs for plan recommendations.

    Fields the engine cannot observe (debt, retirement rate, diversification)
    default to fixed assumptions.
    """

    monthly_income: Decimal
    monthly_expenses: Decimal
    current_savings: Decimal = ZERO
    total_debt: Decimal = ZERO
    emergency_fund_months: Decimal = Decimal(3)
    retirement_savings_rate: Decimal = Decimal(10)
    investment_diversification_score: Decimal = Decimal("0.5")
    budget_efficiency_score: Decimal = Decimal("0.7")
    risk_tolerance: RiskTolerance = RiskTolerance.MODERATE


class PlanRecommendation(BaseModel):
    type: PlanRecommendationType
    title: str
    description: str
    priority: Priority
    estimated_months: int
    target_amount: Decimal
    monthly_savings_required: Decimal


class PlanTemplate(BaseModel):
    """Reusable ratios for creating a plan."""

    name: str
    description: str = ""
    budget_ratio: Annotated[Decimal, Field(ge=0, le=1)]
    savings_ratio: Annotated[Decimal, Field(ge=0, le=1)]
    emergency_fund_months: int = Field(default=6, ge=0)
    interest_type: InterestType = InterestType.COMPOUND
    expected_return_rate: Annotated[Decimal, Field(ge=0, le=1)] = Decimal("0.05")
    category_allocations: dict[str, Decimal] = Field(default_factory=dict)


class PlanCustomization(BaseModel):
    name: str
    monthly_income: Decimal
    duration_months: int = Field(ge=1)
    start_date: date | None = None
    fixed_expenses: dict[str, Decimal] = Field(default_factory=dict)


# -----------------------------------------------------------------------------
# Repository State
# -----------------------------------------------------------------------------


class RepositoryState(BaseModel):
    """Immutable snapshot of derived repository data pushed to observers."""

    model_config = ConfigDict(frozen=True)

    plans: list[FinancialPlan] = Field(default_factory=list)
    active_plans: list[FinancialPlan] = Field(default_factory=list)
    current_month_breakdown: PlanMonthlyBreakdown | None = None
    performance_summary: PlanPerformanceSummary | None = None
    recommendations: list[PlanRecommendation] = Field(default_factory=list)
    financial_health_score: Decimal = ZERO
