"""Engine configuration.

Settings are read from FINPLAN_* environment variables (a local .env file
is honoured) and validated with the same pydantic model used everywhere
else, so a bad value fails loudly at startup.
"""

import os
from decimal import Decimal
from typing import Annotated, Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field

ENV_PREFIX = "FINPLAN_"


class EngineConfig(BaseModel):
    """Settings shared by the repository, the CLI and logging.

    Attributes:
        currency: ISO-4217 code stamped on plans and reports.
        locale: Locale tag used only when formatting output.
        budget_tolerance: Allowed overshoot of allocations above monthly income.
        current_age: Age used by the retirement-age heuristic.
        log_level: Root level for the finplan logger.
        log_json: Emit JSON log lines instead of plain text.
    """

    currency: str = Field(default="USD", min_length=3, max_length=3, pattern=r"^[A-Z]{3}$")
    locale: str = "en_US"
    budget_tolerance: Annotated[Decimal, Field(ge=0, le=1)] = Decimal("0.05")
    current_age: int = Field(default=30, ge=0, le=120)
    log_level: str = "WARNING"
    log_json: bool = False


def _env_values() -> dict[str, Any]:
    """Collect config fields present in the environment."""
    values: dict[str, Any] = {}
    for name in EngineConfig.model_fields:
        raw = os.getenv(f"{ENV_PREFIX}{name.upper()}")
        if raw is None:
            continue
        if name == "log_json":
            values[name] = raw.strip().lower() in {"1", "true", "yes", "on"}
        else:
            values[name] = raw.strip()
    return values


def load_config(**overrides: Any) -> EngineConfig:
    """Build an EngineConfig from the environment.

    Args:
        **overrides: Explicit values that take priority over the environment.

    Returns:
        Validated EngineConfig.
    """
    load_dotenv()
    values = _env_values()
    values.update({k: v for k, v in overrides.items() if v is not None})
    return EngineConfig.model_validate(values)
