"""Errors raised by the plan repository and engine.

Every error carries an ErrorKind so callers can branch on the kind
without matching on exception classes.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Discriminator for PlanRepositoryError subclasses."""

    MISSING_PLAN_NAME = "missing_plan_name"
    INVALID_DATE_RANGE = "invalid_date_range"
    INVALID_INCOME = "invalid_income"
    INVALID_SAVINGS_GOAL = "invalid_savings_goal"
    INVALID_INTEREST_RATE = "invalid_interest_rate"
    BUDGET_EXCEEDS_INCOME = "budget_exceeds_income"
    OVERLAPPING_ACTIVE_PLANS = "overlapping_active_plans"
    PLAN_NOT_FOUND = "plan_not_found"
    DUPLICATE_PLAN_ID = "duplicate_plan_id"
    BREAKDOWN_NOT_FOUND = "breakdown_not_found"
    INVALID_MONTH = "invalid_month"


class PlanRepositoryError(Exception):
    """Base class for all plan repository errors."""

    kind: ErrorKind
    default_message = "Plan repository error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class PlanValidationError(PlanRepositoryError):
    """A plan failed validation before any write happened."""


class MissingPlanNameError(PlanValidationError):
    kind = ErrorKind.MISSING_PLAN_NAME
    default_message = "Plan name is required"


class InvalidDateRangeError(PlanValidationError):
    kind = ErrorKind.INVALID_DATE_RANGE
    default_message = "Plan start date must be before end date"


class InvalidIncomeError(PlanValidationError):
    kind = ErrorKind.INVALID_INCOME
    default_message = "Total income must be greater than zero"


class InvalidSavingsGoalError(PlanValidationError):
    kind = ErrorKind.INVALID_SAVINGS_GOAL
    default_message = "Savings goal cannot be negative"


class InvalidInterestRateError(PlanValidationError):
    kind = ErrorKind.INVALID_INTEREST_RATE
    default_message = "Annual interest rate must be between 0 and 1"


class BudgetExceedsIncomeError(PlanValidationError):
    kind = ErrorKind.BUDGET_EXCEEDS_INCOME
    default_message = "Planned allocations exceed average monthly income"


class OverlappingActivePlansError(PlanRepositoryError):
    kind = ErrorKind.OVERLAPPING_ACTIVE_PLANS
    default_message = "Another active plan overlaps this date range"


class PlanNotFoundError(PlanRepositoryError):
    kind = ErrorKind.PLAN_NOT_FOUND
    default_message = "Financial plan not found"


class DuplicatePlanError(PlanRepositoryError):
    kind = ErrorKind.DUPLICATE_PLAN_ID
    default_message = "A plan with this ID already exists"


class BreakdownNotFoundError(PlanRepositoryError):
    kind = ErrorKind.BREAKDOWN_NOT_FOUND
    default_message = "Monthly breakdown not found"


class InvalidMonthError(PlanRepositoryError, ValueError):
    kind = ErrorKind.INVALID_MONTH
    default_message = "Invalid month key"
