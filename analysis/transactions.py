"""
Projected scenario transactions for the ledger overlay.

Each rule schedules dated entries for its scenario (effects/base.py). This
module merges them across scenarios into one date-ordered frame, lays them
over a baseline ledger and summarises what a scenario's entries add up to:

  year_one_impact      entries dated within a year of the as-of date
  year_two_impact      entries dated in the year after that
  monthly_change       mean of the per-month totals
  affected_categories  every category the scenario touches

Transfers between the user's own accounts (investment contributions) are
listed but left out of the impact totals.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, Optional, Tuple

import pandas as pd

from core.schema import RiskLevel, Scenario
from core.utils import resolve_as_of
from effects.base import TRANSACTION_COLUMNS, TRANSFER, magnitude_risk
from effects.registry import scenario_transactions

logger = logging.getLogger(__name__)

LEDGER_COLUMNS = ["date", "description", "category", "amount"]


@dataclass(frozen=True)
class TransactionImpact:
    scenario_id: Optional[str]
    total_transactions: int
    year_one_impact: float
    year_two_impact: float
    monthly_change: float
    affected_categories: Tuple[str, ...]
    risk_level: RiskLevel

    @property
    def net_effect(self) -> float:
        return self.year_one_impact + self.year_two_impact


def merge_scenario_transactions(
    scenarios: Iterable[Scenario],
    months: int,
    as_of: Optional[date] = None,
) -> pd.DataFrame:
    """
    Projected transactions of every active scenario, ordered by date.

    Same-day entries keep scenario order. Malformed scenarios contribute no
    rows.
    """
    frames = []
    for scenario in scenarios or ():
        if not scenario.is_active:
            logger.debug("Skipping inactive scenario %s", scenario.id)
            continue
        frame = scenario_transactions(scenario, months, as_of)
        if not frame.empty:
            frames.append(frame)
    if not frames:
        return pd.DataFrame(columns=TRANSACTION_COLUMNS)
    merged = pd.concat(frames, ignore_index=True)
    return merged.sort_values("date", kind="mergesort").reset_index(drop=True)


def summarize_transactions(
    transactions: pd.DataFrame,
    as_of: Optional[date] = None,
    scenario_id: Optional[str] = None,
) -> TransactionImpact:
    anchor = resolve_as_of(as_of)
    if transactions.empty:
        return TransactionImpact(scenario_id, 0, 0.0, 0.0, 0.0, (), RiskLevel.LOW)

    counted = transactions.loc[transactions["kind"] != TRANSFER]
    dates = pd.to_datetime(counted["date"])
    amounts = counted["amount"].astype(float)
    one_year = anchor + pd.DateOffset(years=1)
    two_years = anchor + pd.DateOffset(years=2)

    year_one = float(amounts[dates <= one_year].sum())
    year_two = float(amounts[(dates > one_year) & (dates <= two_years)].sum())
    per_month = amounts.groupby(dates.dt.to_period("M")).sum()
    monthly = float(per_month.mean()) if len(per_month) else 0.0

    return TransactionImpact(
        scenario_id=scenario_id,
        total_transactions=int(len(transactions)),
        year_one_impact=year_one + 0.0,
        year_two_impact=year_two + 0.0,
        monthly_change=monthly + 0.0,
        affected_categories=tuple(sorted(set(transactions["category"].astype(str)))),
        risk_level=magnitude_risk(monthly),
    )


def transaction_impacts(
    scenarios: Iterable[Scenario],
    months: int,
    as_of: Optional[date] = None,
) -> Dict[str, TransactionImpact]:
    """TransactionImpact per active scenario, keyed by scenario id."""
    return {
        s.id: summarize_transactions(scenario_transactions(s, months, as_of), as_of, s.id)
        for s in scenarios or ()
        if s.is_active
    }


def overlay_on_ledger(ledger: Optional[pd.DataFrame], transactions: pd.DataFrame) -> pd.DataFrame:
    """
    Baseline ledger rows plus projected scenario rows, ordered by date.

    The ledger needs date / description / category / amount columns; extra
    columns are kept. Scenario rows are flagged with is_scenario=True.
    """
    base = pd.DataFrame(columns=LEDGER_COLUMNS) if ledger is None else ledger.copy()
    missing = [c for c in LEDGER_COLUMNS if c not in base.columns]
    if missing:
        raise ValueError(f"Ledger is missing columns: {missing}")
    base["date"] = pd.to_datetime(base["date"])
    base["is_scenario"] = False

    scenario_rows = transactions.copy()
    scenario_rows["date"] = pd.to_datetime(scenario_rows["date"])
    scenario_rows["is_scenario"] = True

    frames = [f for f in (base, scenario_rows) if not f.empty]
    if not frames:
        return pd.DataFrame(columns=list(dict.fromkeys(list(base.columns) + list(scenario_rows.columns))))
    combined = pd.concat(frames, ignore_index=True, sort=False)
    return combined.sort_values("date", kind="mergesort").reset_index(drop=True)
