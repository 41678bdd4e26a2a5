"""Command-line interface for FinPlan."""
