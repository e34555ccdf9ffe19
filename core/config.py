"""
Engine configuration.
Cash-flow assumptions for the forward simulation, history shaping for the
reconstructed look-back, cache sizing and conflict thresholds.
Life-event probabilities live in distributions/life_events.py (LIFE_EVENT_TABLE).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

import pandas as pd


@dataclass(frozen=True)
class ProjectionConfig:
    as_of_date: Optional[pd.Timestamp] = None  # defaults to today
    projection_months: int = 12
    lookback_months: int = 6
    seed: int = 7

    # baseline monthly cash flow
    monthly_income: float = 5200.0
    fixed_expenses: float = 3100.0
    variable_expenses: float = 650.0
    seasonal_amplitude: float = 0.25  # fraction of variable_expenses

    # debt service
    debt_minimum_payment: float = 250.0
    debt_extra_payment: float = 100.0

    emergency_contribution: float = 150.0
    investment_monthly_rate: float = 0.0055

    # historical reconstruction shaping
    monthly_improvement: float = 400.0
    history_seasonal_amplitude: float = 300.0
    trend_noise: float = 150.0
    history_event_noise: float = 400.0

    # hard cap on forward months (pathological requests are clamped, not refused)
    max_projection_months: int = 600


@dataclass(frozen=True)
class CacheConfig:
    max_entries: int = 100
    default_ttl_seconds: float = 300.0  # 5 minutes


@dataclass(frozen=True)
class ConflictConfig:
    max_active_scenarios: int = 3


@dataclass(frozen=True)
class EngineConfig:
    projection: ProjectionConfig = field(default_factory=ProjectionConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    conflicts: ConflictConfig = field(default_factory=ConflictConfig)
    effect_horizon_months: int = 12


# Chart timeframe labels offered by the UI
TIMEFRAME_MONTHS: Dict[str, int] = {
    "6m": 6,
    "1y": 12,
    "2y": 24,
    "5y": 60,
}


def timeframe_to_months(timeframe: str) -> int:
    """Map a timeframe label ("6m", "1y", "2y", "5y") to a month count."""
    key = str(timeframe).strip().lower()
    if key not in TIMEFRAME_MONTHS:
        raise ValueError(
            f"Unknown timeframe '{timeframe}'. "
            f"Available: {list(TIMEFRAME_MONTHS.keys())}"
        )
    return TIMEFRAME_MONTHS[key]
