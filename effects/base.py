"""
Base classes for scenario effect rules.

A rule turns one template's typed parameters into:
  - an EffectResult (cumulative net effect over a horizon + steady-state monthly delta)
  - dated ScheduledEntry rows per projected month, the projected transactions
    a scenario adds to the ledger
  - a per-month MonthImpact schedule consumed by the projection generator,
    derived from those entries

Date parameters (effectiveDate, targetDate, startDate) are measured from the
as-of date handed in by the caller, never from the wall clock.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Any, ClassVar, List, Mapping, Optional, Tuple, Type

import pandas as pd
from pydantic import ValidationError

from core.schema import EffectResult, RiskLevel, TemplateType
from core.utils import month_start, resolve_as_of, shift_months

from .parameters import TemplateParameters, parse_parameters

logger = logging.getLogger(__name__)

# Absolute monthly change thresholds for magnitude-based risk
HIGH_RISK_MONTHLY = 2000.0
MEDIUM_RISK_MONTHLY = 500.0

# Entry kinds
CASH = "cash"          # moves net worth directly
DEBT = "debt"          # extra money sent to outstanding debt
TRANSFER = "transfer"  # moves money between the user's own accounts

TRANSACTION_COLUMNS = [
    "date", "scenario_id", "month", "description", "category", "amount", "kind", "tags",
]


def magnitude_risk(monthly_change: float) -> RiskLevel:
    size = abs(float(monthly_change))
    if size > HIGH_RISK_MONTHLY:
        return RiskLevel.HIGH
    if size > MEDIUM_RISK_MONTHLY:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def months_in_window(horizon_months: int, start_month: int, duration: Optional[int] = None) -> int:
    """Months of a window starting after start_month that fall inside the horizon."""
    elapsed = max(int(horizon_months) - int(start_month), 0)
    if duration is None:
        return elapsed
    return min(elapsed, max(int(duration), 0))


def _unsigned_zero(value: float) -> float:
    # -0.0 + 0.0 == +0.0
    return float(value) + 0.0


@dataclass(frozen=True)
class MonthImpact:
    """
    What one scenario does to a single projected month.

    cash is added straight to net worth; debt_payment is extra money sent to
    outstanding debt, which the projection converts into faster paydown.
    """
    cash: float = 0.0
    debt_payment: float = 0.0


NO_IMPACT = MonthImpact()


@dataclass(frozen=True)
class ScheduledEntry:
    """
    One projected transaction inside a forward month.

    amount is signed from the household's side: negative leaves the user's
    accounts. day is the day of month the entry is booked on.
    """
    description: str
    category: str
    amount: float
    tags: Tuple[str, ...] = ()
    kind: str = CASH
    day: int = 1


class EffectRule:
    """Interface for one template's effect rule."""

    template: ClassVar[TemplateType]
    parameter_model: ClassVar[Type[TemplateParameters]]

    def parse(self, parameters: Optional[Mapping[str, Any]]) -> TemplateParameters:
        return parse_parameters(self.parameter_model, parameters)

    def effect(self, params: TemplateParameters, horizon_months: int, as_of: date) -> EffectResult:
        raise NotImplementedError

    def entries(self, params: TemplateParameters, month: int, as_of: date) -> List[ScheduledEntry]:
        """Projected transactions in forward month `month` (1 is the first month after now)."""
        raise NotImplementedError

    def span_months(self, params: TemplateParameters, horizon_months: int, as_of: date) -> int:
        """Forward months the effect is measured over; the horizon unless the rule says otherwise."""
        return horizon_months

    def tags(self, *extra: str) -> Tuple[str, ...]:
        return ("scenario", self.template.value) + extra

    def monthly_impact(self, params: TemplateParameters, month: int, as_of: date) -> MonthImpact:
        cash = 0.0
        debt_payment = 0.0
        for entry in self.entries(params, month, as_of):
            if entry.kind == CASH:
                cash += entry.amount
            elif entry.kind == DEBT:
                debt_payment -= entry.amount
        if cash == 0.0 and debt_payment == 0.0:
            return NO_IMPACT
        return MonthImpact(cash=cash, debt_payment=debt_payment)

    def count_entries(self, params: TemplateParameters, horizon_months: int, as_of: date) -> int:
        span = self.span_months(params, horizon_months, as_of)
        return sum(len(self.entries(params, m, as_of)) for m in range(1, span + 1))

    # ------------------------------------------------------------------
    # Entry points that never raise on bad input
    # ------------------------------------------------------------------

    def compute(
        self,
        parameters: Optional[Mapping[str, Any]],
        horizon_months: int = 12,
        as_of: Optional[date] = None,
    ) -> EffectResult:
        params = self._parse_or_warn(parameters)
        if params is None:
            return EffectResult.zero()
        horizon = max(int(horizon_months), 0)
        anchor = resolve_as_of(as_of)
        result = self.effect(params, horizon, anchor)
        return replace(
            result,
            net_effect=_unsigned_zero(result.net_effect),
            monthly_change=_unsigned_zero(result.monthly_change),
            affected_transactions=self.count_entries(params, horizon, anchor),
        )

    def impact_schedule(
        self,
        parameters: Optional[Mapping[str, Any]],
        months: int,
        as_of: Optional[date] = None,
    ) -> List[MonthImpact]:
        """MonthImpact for future months 1..months (index 0 is month 1)."""
        params = self._parse_or_warn(parameters)
        if params is None:
            return [NO_IMPACT] * max(int(months), 0)
        anchor = resolve_as_of(as_of)
        return [self.monthly_impact(params, m, anchor) for m in range(1, int(months) + 1)]

    def transactions(
        self,
        parameters: Optional[Mapping[str, Any]],
        months: int,
        as_of: Optional[date] = None,
        scenario_id: Optional[str] = None,
    ) -> pd.DataFrame:
        """
        Dated projected transactions for future months 1..months.

        Parameters
        ----------
        parameters : mapping
            Raw scenario parameters
        months : int
            Forward months to schedule
        as_of : date, optional
            Projection anchor; today when omitted
        scenario_id : str, optional
            Copied into the scenario_id column

        Returns
        -------
        DataFrame with TRANSACTION_COLUMNS, ordered by date. Malformed
        parameters give an empty frame.
        """
        params = self._parse_or_warn(parameters)
        if params is None:
            return pd.DataFrame(columns=TRANSACTION_COLUMNS)
        anchor = resolve_as_of(as_of)
        now = month_start(anchor)
        rows = []
        for m in range(1, max(int(months), 0) + 1):
            booked = shift_months(now, m)
            for entry in self.entries(params, m, anchor):
                rows.append({
                    "date": booked + pd.Timedelta(days=min(max(entry.day, 1), 28) - 1),
                    "scenario_id": scenario_id,
                    "month": m,
                    "description": entry.description,
                    "category": entry.category,
                    "amount": round(float(entry.amount), 2),
                    "kind": entry.kind,
                    "tags": entry.tags,
                })
        frame = pd.DataFrame(rows, columns=TRANSACTION_COLUMNS)
        return frame.sort_values("date", kind="mergesort").reset_index(drop=True)

    def _parse_or_warn(
        self, parameters: Optional[Mapping[str, Any]]
    ) -> Optional[TemplateParameters]:
        if parameters is not None and not isinstance(parameters, Mapping):
            logger.warning(
                "Malformed %s parameters, using a zero effect (expected a mapping, got %s)",
                self.template.value,
                type(parameters).__name__,
            )
            return None
        try:
            return self.parse(parameters)
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'parameters'}: {err['msg']}"
                for err in exc.errors()
            )
            logger.warning(
                "Malformed %s parameters, using a zero effect (%s)",
                self.template.value,
                problems,
            )
            return None
