"""
Income-side rules: salary increase (or cut), job change and job loss.
"""

from __future__ import annotations

from datetime import date
from typing import List

from core.schema import EffectResult, RiskLevel, TemplateType

from .base import EffectRule, ScheduledEntry, magnitude_risk, months_in_window
from .parameters import JobChangeParameters, JobLossParameters, SalaryIncreaseParameters

PAYDAY = 15


class SalaryIncreaseRule(EffectRule):
    """
    Recurring change in take-home pay starting after `startMonth` (or the
    month of `effectiveDate`).

    net_effect = increase * months elapsed inside the horizon.
    Raises are low risk; pay cuts are banded by size.
    """

    template = TemplateType.SALARY_INCREASE
    parameter_model = SalaryIncreaseParameters

    def effect(self, params: SalaryIncreaseParameters, horizon_months: int, as_of: date) -> EffectResult:
        increase = params.monthly_increase
        months = months_in_window(horizon_months, params.offset_months(as_of))
        risk = RiskLevel.LOW if increase >= 0 else magnitude_risk(increase)
        return EffectResult(
            net_effect=increase * months,
            monthly_change=increase,
            affected_transactions=months,
            risk_level=risk,
        )

    def entries(self, params: SalaryIncreaseParameters, month: int, as_of: date) -> List[ScheduledEntry]:
        increase = params.monthly_increase
        if month <= params.offset_months(as_of) or increase == 0.0:
            return []
        description = "Salary Increase - Additional Income" if increase > 0 else "Salary Reduction"
        return [ScheduledEntry(description, "Income", increase, self.tags("salary"), day=PAYDAY)]


class JobChangeRule(EffectRule):
    """
    Move to a new job: the salary difference from the start month on, plus
    one-off relocation costs in the first month at the new job.

    Risk follows the average monthly change over the horizon, so a raise that
    pays for the move stays low risk.
    """

    template = TemplateType.JOB_CHANGE
    parameter_model = JobChangeParameters

    def effect(self, params: JobChangeParameters, horizon_months: int, as_of: date) -> EffectResult:
        difference = params.monthly_difference
        offset = params.offset_months(as_of)
        months = months_in_window(horizon_months, offset)
        moving = float(params.moving_costs) if months > 0 else 0.0
        net = difference * months - moving
        average = net / horizon_months if horizon_months > 0 else 0.0
        return EffectResult(
            net_effect=net,
            monthly_change=difference,
            affected_transactions=months,
            risk_level=RiskLevel.LOW if average >= 0 else magnitude_risk(average),
        )

    def entries(self, params: JobChangeParameters, month: int, as_of: date) -> List[ScheduledEntry]:
        offset = params.offset_months(as_of)
        if month <= offset:
            return []
        out = []
        if month == offset + 1 and params.moving_costs > 0:
            out.append(ScheduledEntry(
                "Moving/Relocation Expenses", "Moving", -float(params.moving_costs),
                self.tags("relocation"),
            ))
        difference = params.monthly_difference
        if difference != 0.0:
            out.append(ScheduledEntry(
                "Salary - New Job", "Income", difference, self.tags("salary"), day=PAYDAY,
            ))
        return out


class JobLossRule(EffectRule):
    """
    Income lost (net of unemployment benefit) for `durationMonths`.

    Only the months that fall inside both the unemployment window and the
    horizon count. Always high risk.
    """

    template = TemplateType.JOB_LOSS
    parameter_model = JobLossParameters

    def effect(self, params: JobLossParameters, horizon_months: int, as_of: date) -> EffectResult:
        loss = params.net_monthly_loss
        months = months_in_window(horizon_months, params.start_month, params.duration_months)
        return EffectResult(
            net_effect=-loss * months,
            monthly_change=-loss,
            affected_transactions=months,
            risk_level=RiskLevel.HIGH,
        )

    def entries(self, params: JobLossParameters, month: int, as_of: date) -> List[ScheduledEntry]:
        start = params.start_month
        loss = params.net_monthly_loss
        if loss == 0.0 or not (start < month <= start + params.duration_months):
            return []
        return [ScheduledEntry(
            "Lost Income - Unemployment", "Income", -loss, self.tags("lost_income"), day=PAYDAY,
        )]
