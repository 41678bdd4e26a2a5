"""Calculation engine: breakdowns, projections, optimisation, health scoring."""
