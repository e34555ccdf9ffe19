"""
Savings-side rules: accelerated debt payoff, emergency fund buildup and
recurring investment contributions.
"""

from __future__ import annotations

import math
from datetime import date
from typing import List

from core.schema import EffectResult, RiskLevel, TemplateType
from core.utils import ceil_div

from .base import DEBT, TRANSFER, EffectRule, ScheduledEntry, magnitude_risk, months_in_window
from .parameters import (
    DebtPayoffParameters,
    EmergencyFundParameters,
    InvestmentStrategyParameters,
)

# Payoff horizon used when the payment never retires the balance
MAX_PAYOFF_MONTHS = 360

_PROFILE_RISK = {
    "conservative": RiskLevel.LOW,
    "moderate": RiskLevel.MEDIUM,
    "aggressive": RiskLevel.HIGH,
}


def months_to_payoff(
    balance: float,
    payment: float,
    monthly_rate: float,
    *,
    cap: int = MAX_PAYOFF_MONTHS,
) -> int:
    """Standard amortisation count: months of `payment` needed to retire `balance`."""
    if balance <= 0:
        return 0
    if payment <= 0:
        return cap
    if monthly_rate <= 1e-12:
        return min(ceil_div(balance, payment), cap)
    if payment <= balance * monthly_rate:
        # interest outruns the payment
        return cap
    n = -math.log(1.0 - monthly_rate * balance / payment) / math.log(1.0 + monthly_rate)
    return min(int(math.ceil(n - 1e-9)), cap)


class DebtPayoffRule(EffectRule):
    """
    Pay more than the current payment until the debt is gone.

    The effect tracks the extra cash outflow only:
        net_effect = -(new_payment - current_payment) * months_to_payoff
    so it is never positive when the new payment is at least the current one.
    Turning those payments into a smaller debt balance is the projection's job,
    hence the entries are booked as debt payments, not cash.
    """

    template = TemplateType.DEBT_PAYOFF
    parameter_model = DebtPayoffParameters

    def payoff_months(self, params: DebtPayoffParameters) -> int:
        return months_to_payoff(
            float(params.current_balance), params.target_payment, params.monthly_rate
        )

    def span_months(self, params: DebtPayoffParameters, horizon_months: int, as_of: date) -> int:
        return self.payoff_months(params)

    def effect(self, params: DebtPayoffParameters, horizon_months: int, as_of: date) -> EffectResult:
        extra = params.target_payment - float(params.current_payment)
        months = self.payoff_months(params)
        return EffectResult(
            net_effect=-extra * months,
            monthly_change=-extra,
            affected_transactions=months,
            risk_level=magnitude_risk(extra),
        )

    def entries(self, params: DebtPayoffParameters, month: int, as_of: date) -> List[ScheduledEntry]:
        extra = params.target_payment - float(params.current_payment)
        if extra == 0.0 or month > self.payoff_months(params):
            return []
        return [ScheduledEntry(
            "Extra Debt Payment", "Debt", -extra, self.tags("extra_payment"), kind=DEBT, day=5,
        )]


class EmergencyFundRule(EffectRule):
    """Fixed monthly contribution until the target balance is reached. Always low risk."""

    template = TemplateType.EMERGENCY_FUND
    parameter_model = EmergencyFundParameters

    def months_to_target(self, params: EmergencyFundParameters) -> int:
        gap = float(params.target_amount) - float(params.current_amount)
        return ceil_div(gap, float(params.monthly_contribution))

    def span_months(self, params: EmergencyFundParameters, horizon_months: int, as_of: date) -> int:
        return self.months_to_target(params)

    def effect(self, params: EmergencyFundParameters, horizon_months: int, as_of: date) -> EffectResult:
        contribution = float(params.monthly_contribution)
        months = self.months_to_target(params)
        return EffectResult(
            net_effect=-contribution * months,
            monthly_change=-contribution,
            affected_transactions=months,
            risk_level=RiskLevel.LOW,
        )

    def entries(self, params: EmergencyFundParameters, month: int, as_of: date) -> List[ScheduledEntry]:
        if month > self.months_to_target(params):
            return []
        return [ScheduledEntry(
            "Emergency Fund Contribution", "Savings", -float(params.monthly_contribution),
            self.tags("contribution"), day=10,
        )]


class InvestmentStrategyRule(EffectRule):
    """
    Recurring contribution into an investment account.

    Contributions only move money between accounts, so they are booked as
    transfers and the effect on net worth is the growth they earn: future
    value of the contribution stream minus the amount paid in. Risk follows
    the declared risk profile.
    """

    template = TemplateType.INVESTMENT_STRATEGY
    parameter_model = InvestmentStrategyParameters

    @staticmethod
    def _balance_after(contribution: float, rate: float, n_months: int) -> float:
        if n_months <= 0:
            return 0.0
        if abs(rate) < 1e-12:
            return contribution * n_months
        return contribution * ((1.0 + rate) ** n_months - 1.0) / rate

    def effect(self, params: InvestmentStrategyParameters, horizon_months: int, as_of: date) -> EffectResult:
        contribution = float(params.monthly_contribution)
        months = months_in_window(horizon_months, params.start_month)
        growth = self._balance_after(contribution, params.monthly_rate, months) - contribution * months
        return EffectResult(
            net_effect=growth,
            monthly_change=growth / horizon_months if horizon_months > 0 else 0.0,
            affected_transactions=months,
            risk_level=_PROFILE_RISK[params.risk_profile],
        )

    def entries(self, params: InvestmentStrategyParameters, month: int, as_of: date) -> List[ScheduledEntry]:
        if month <= params.start_month:
            return []
        contribution = float(params.monthly_contribution)
        out = [ScheduledEntry(
            "Investment Contribution", "Investment", -contribution,
            self.tags("contribution"), kind=TRANSFER, day=15,
        )]
        balance = self._balance_after(contribution, params.monthly_rate, month - params.start_month - 1)
        growth = balance * params.monthly_rate
        if growth != 0.0:
            out.append(ScheduledEntry(
                "Investment Returns", "Investment", growth, self.tags("returns"), day=15,
            ))
        return out
