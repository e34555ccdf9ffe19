"""
Discrete probability table for stochastic life events in the forward simulation.

Each projected month independently may carry:
  - an unplanned expense (car repair, medical bill, home repair), 8% per month,
    drawn from one of three severity bands
  - a windfall (bonus, gift, tax refund surprise), 3% per month

The figures are illustrative household-budget defaults, not calibrated to data.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class SeverityBand:
    label: str
    weight: float  # relative likelihood among expense events
    min_amount: float
    max_amount: float


DEFAULT_EXPENSE_BANDS: Tuple[SeverityBand, ...] = (
    SeverityBand("minor", 0.60, 200.0, 800.0),
    SeverityBand("moderate", 0.30, 800.0, 2500.0),
    SeverityBand("major", 0.10, 2500.0, 6000.0),
)


@dataclass(frozen=True)
class LifeEventTable:
    expense_probability: float = 0.08
    expense_bands: Tuple[SeverityBand, ...] = DEFAULT_EXPENSE_BANDS
    windfall_probability: float = 0.03
    windfall_min: float = 500.0
    windfall_max: float = 3000.0

    def __post_init__(self) -> None:
        for name in ("expense_probability", "windfall_probability"):
            p = getattr(self, name)
            if not 0.0 <= p <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {p}")
        if not self.expense_bands:
            raise ValueError("At least one expense band is required.")

    @property
    def band_weights(self) -> np.ndarray:
        w = np.array([b.weight for b in self.expense_bands], dtype=float)
        return w / w.sum()

    def expected_monthly_cost(self) -> float:
        """Mean unplanned expense per month, net of expected windfalls."""
        mids = np.array([(b.min_amount + b.max_amount) / 2 for b in self.expense_bands])
        expense = self.expense_probability * float((self.band_weights * mids).sum())
        windfall = self.windfall_probability * (self.windfall_min + self.windfall_max) / 2
        return expense - windfall

    def summary(self) -> pd.DataFrame:
        rows = [
            {
                "Event": f"Expense ({b.label})",
                "Probability": self.expense_probability * w,
                "Min": b.min_amount,
                "Max": b.max_amount,
            }
            for b, w in zip(self.expense_bands, self.band_weights)
        ]
        rows.append({
            "Event": "Windfall",
            "Probability": self.windfall_probability,
            "Min": self.windfall_min,
            "Max": self.windfall_max,
        })
        return pd.DataFrame(rows)


LIFE_EVENT_TABLE = LifeEventTable()
