"""FinPlan - financial plan analytics engine.

Turns a financial plan into tracked monthly breakdowns and derives
variance, projections, budget suggestions and a health score from them.
"""

__version__ = "0.1.0"
