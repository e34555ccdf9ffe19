"""
Projection generator — month-indexed net-worth series for the scenario chart.

Timeline, split at "now" (month start of the as-of date):
  1. Historical reconstruction: `lookback_months` points walking back from
     current net worth. An illustrative approximation, not a ledger replay.
  2. The "now" point: exactly the account-derived net worth.
  3. Forward simulation: one point per future month from the cash-flow model
     (engine/cashflow.py) plus life events (engine/events.py) plus the
     per-month impacts of any active scenarios. Scenario debt payments speed
     up paydown of the snapshot's liabilities; a snapshot with no liabilities
     is charged for them as plain cash outflow instead.

Scenario date parameters are measured from the configured as-of date.

All randomness comes from a NoiseSampler. Without an explicit sampler each
call starts a fresh one from `config.seed`, so a baseline call and a
scenario-adjusted call draw identical noise and differ only by the scenarios.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from core.config import ProjectionConfig
from core.schema import ProjectionPoint, Scenario
from core.utils import month_start, resolve_as_of, shift_months
from data_prep.accounts import (
    AccountsInput,
    build_account_snapshot,
    compute_net_worth,
    total_liabilities,
)
from distributions.life_events import LIFE_EVENT_TABLE, LifeEventTable
from distributions.sampler import NoiseSampler
from effects.registry import monthly_impacts

from .cashflow import project_month, reconstructed_net_worth
from .events import history_event_noise, simulate_life_event_month

logger = logging.getLogger(__name__)

# Chance that a reconstructed historical month carries a visible dip
HISTORY_EVENT_PROBABILITY = 0.10


class ProjectionGenerator:
    """
    Parameters
    ----------
    config : ProjectionConfig
        Cash-flow assumptions, look-back length, seed and as-of date
    table : LifeEventTable
        Monthly life-event probabilities for the forward simulation
    """

    def __init__(
        self,
        config: Optional[ProjectionConfig] = None,
        table: LifeEventTable = LIFE_EVENT_TABLE,
    ):
        self.config = config if config is not None else ProjectionConfig()
        self.table = table

    def generate(
        self,
        accounts: AccountsInput,
        months: Optional[int] = None,
        active_scenarios: Optional[Iterable[Scenario]] = None,
        *,
        sampler: Optional[NoiseSampler] = None,
    ) -> List[ProjectionPoint]:
        """
        Historical + now + forward points, time-ascending.

        Parameters
        ----------
        accounts : mapping, iterable of records/Accounts, or None
            Current account snapshot; missing or empty means zero net worth
        months : int, optional
            Forward months (defaults to config.projection_months)
        active_scenarios : iterable of Scenario, optional
            Scenarios whose monthly impacts are layered on top; inactive
            entries are ignored
        sampler : NoiseSampler, optional
            Noise source; a fresh one seeded from config.seed when omitted
        """
        cfg = self.config
        horizon = self.resolve_months(months)
        snapshot = build_account_snapshot(accounts)
        current = compute_net_worth(snapshot)
        debt = total_liabilities(snapshot)
        if not snapshot:
            logger.debug("No accounts supplied; projecting from zero net worth")

        noise = sampler if sampler is not None else NoiseSampler(cfg.seed)
        as_of = resolve_as_of(cfg.as_of_date)
        now = month_start(as_of)

        points = self._history(current, now, noise)
        points.append(ProjectionPoint(timestamp=now, net_worth=current, is_historical=False))

        cash_impacts, debt_impacts = self._scenario_impacts(active_scenarios, horizon, as_of)
        if debt <= 0 and debt_impacts.any():
            # The debt these payments retire is not in the snapshot; they still leave cash.
            logger.debug("No liabilities in the snapshot; charging scenario debt payments as cash")
            cash_impacts = cash_impacts - debt_impacts
            debt_impacts = np.zeros_like(debt_impacts)

        net_worth = current
        remaining_debt = debt
        for m in range(1, horizon + 1):
            ts = shift_months(now, m)
            month = project_month(
                cfg,
                net_worth=net_worth,
                remaining_debt=remaining_debt,
                calendar_month=ts.month,
                extra_debt_payment=float(debt_impacts[m - 1]),
            )
            events = simulate_life_event_month(sampler=noise, table=self.table)
            net_worth = net_worth + month.total + events.net + float(cash_impacts[m - 1])
            remaining_debt = month.remaining_debt
            points.append(ProjectionPoint(timestamp=ts, net_worth=float(net_worth), is_historical=False))

        return points

    def generate_pair(
        self,
        accounts: AccountsInput,
        months: Optional[int] = None,
        active_scenarios: Optional[Iterable[Scenario]] = None,
    ) -> Tuple[List[ProjectionPoint], List[ProjectionPoint]]:
        """(baseline, scenario-adjusted), computed independently with the same seed."""
        scenarios = list(active_scenarios or [])
        baseline = self.generate(accounts, months)
        adjusted = self.generate(accounts, months, scenarios)
        return baseline, adjusted

    # ------------------------------------------------------------------

    def resolve_months(self, months: Optional[int]) -> int:
        cfg = self.config
        n = cfg.projection_months if months is None else int(months)
        if n < 0:
            logger.warning("Negative projection length %d; using 0 forward months", n)
            return 0
        if n > cfg.max_projection_months:
            logger.warning(
                "Projection length %d exceeds the %d-month cap; clamping",
                n, cfg.max_projection_months,
            )
            return cfg.max_projection_months
        return n

    def _history(self, current: float, now: pd.Timestamp, noise: NoiseSampler) -> List[ProjectionPoint]:
        cfg = self.config
        points: List[ProjectionPoint] = []
        for k in range(max(int(cfg.lookback_months), 0), 0, -1):
            ts = shift_months(now, -k)
            event = history_event_noise(noise, cfg.history_event_noise, HISTORY_EVENT_PROBABILITY)
            trend = noise.symmetric(cfg.trend_noise)
            value = reconstructed_net_worth(
                current, k, ts.month, cfg, event_noise=event, trend_noise=trend,
            )
            points.append(ProjectionPoint(timestamp=ts, net_worth=float(value), is_historical=True))
        return points

    def _scenario_impacts(
        self,
        scenarios: Optional[Iterable[Scenario]],
        horizon: int,
        as_of: pd.Timestamp,
    ) -> Tuple[np.ndarray, np.ndarray]:
        cash = np.zeros(horizon, dtype=float)
        debt = np.zeros(horizon, dtype=float)
        for scenario in scenarios or ():
            if not scenario.is_active:
                logger.debug("Skipping inactive scenario %s", scenario.id)
                continue
            schedule = monthly_impacts(scenario, horizon, as_of)
            cash += np.array([i.cash for i in schedule], dtype=float)
            debt += np.array([i.debt_payment for i in schedule], dtype=float)
        return cash, debt


def generate_projection(
    accounts: AccountsInput,
    months: Optional[int] = None,
    active_scenarios: Optional[Sequence[Scenario]] = None,
    *,
    config: Optional[ProjectionConfig] = None,
    sampler: Optional[NoiseSampler] = None,
) -> List[ProjectionPoint]:
    """Convenience wrapper: ProjectionGenerator(config).generate(...)."""
    return ProjectionGenerator(config).generate(
        accounts, months, active_scenarios, sampler=sampler,
    )
