"""
GenericRule — fallback for templates the registry does not recognise.
A flat monthly amount for a fixed number of months; never fails on odd input.
"""

from __future__ import annotations

from datetime import date
from typing import List

from core.schema import EffectResult, TemplateType

from .base import EffectRule, ScheduledEntry, magnitude_risk
from .parameters import GenericParameters


class GenericRule(EffectRule):
    template = TemplateType.GENERIC
    parameter_model = GenericParameters

    def span_months(self, params: GenericParameters, horizon_months: int, as_of: date) -> int:
        return max(horizon_months, params.start_month + params.duration)

    def effect(self, params: GenericParameters, horizon_months: int, as_of: date) -> EffectResult:
        amount = float(params.monthly_amount)
        return EffectResult(
            net_effect=amount * params.duration,
            monthly_change=amount,
            affected_transactions=params.duration if amount != 0.0 else 0,
            risk_level=magnitude_risk(amount),
        )

    def entries(self, params: GenericParameters, month: int, as_of: date) -> List[ScheduledEntry]:
        start = params.start_month
        if params.monthly_amount == 0.0 or not (start < month <= start + params.duration):
            return []
        return [ScheduledEntry(
            "Scenario - Monthly Effect", "Scenario", float(params.monthly_amount), self.tags(),
        )]
