"""
Deterministic monthly cash-flow helpers for the net-worth projection.

Forward month (before scenario impacts and life events):
    flow = (income - fixed expenses)
           - seasonal variable spending
           - debt service
           - emergency-fund contribution
           + investment growth on the positive part of net worth

Debt service charges minimum + extra while debt remains; the outstanding
balance falls by the payment each month (linear decay, no interest). Once it
is exhausted only the baseline minimum is charged.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from core.config import ProjectionConfig
from core.utils import seasonal_history_factor, seasonal_spending_factor


@dataclass(frozen=True)
class MonthCashflow:
    """Deterministic components of one projected month."""
    base_flow: float
    variable_expenses: float
    debt_service: float
    emergency_contribution: float
    investment_growth: float
    remaining_debt: float

    @property
    def total(self) -> float:
        return (
            self.base_flow
            - self.variable_expenses
            - self.debt_service
            - self.emergency_contribution
            + self.investment_growth
        )


def base_monthly_flow(config: ProjectionConfig) -> float:
    return float(config.monthly_income) - float(config.fixed_expenses)


def seasonal_variable_expenses(config: ProjectionConfig, calendar_month: int) -> float:
    factor = 1.0 + config.seasonal_amplitude * seasonal_spending_factor(calendar_month)
    return max(float(config.variable_expenses) * factor, 0.0)


def debt_service(
    remaining_debt: float,
    payment: float,
    minimum_payment: float,
) -> Tuple[float, float]:
    """
    Charge for one month and the balance left afterwards.

    Returns
    -------
    (charged, remaining_after)
    """
    payment = max(float(payment), 0.0)
    if remaining_debt <= 0:
        return float(minimum_payment), 0.0
    return payment, max(float(remaining_debt) - payment, 0.0)


def investment_growth(net_worth: float, monthly_rate: float) -> float:
    """Monthly compounding on the positive part of net worth only."""
    return max(float(net_worth), 0.0) * float(monthly_rate)


def project_month(
    config: ProjectionConfig,
    *,
    net_worth: float,
    remaining_debt: float,
    calendar_month: int,
    extra_debt_payment: float = 0.0,
) -> MonthCashflow:
    payment = config.debt_minimum_payment + config.debt_extra_payment + extra_debt_payment
    charged, remaining_after = debt_service(remaining_debt, payment, config.debt_minimum_payment)
    return MonthCashflow(
        base_flow=base_monthly_flow(config),
        variable_expenses=seasonal_variable_expenses(config, calendar_month),
        debt_service=charged,
        emergency_contribution=float(config.emergency_contribution),
        investment_growth=investment_growth(net_worth, config.investment_monthly_rate),
        remaining_debt=remaining_after,
    )


def reconstructed_net_worth(
    current_net_worth: float,
    months_back: int,
    calendar_month: int,
    config: ProjectionConfig,
    *,
    event_noise: float = 0.0,
    trend_noise: float = 0.0,
) -> float:
    """
    Plausible net worth `months_back` months ago: undo the steady monthly
    improvement, then add seasonality and noise. An approximation for the
    chart, not a replay of the ledger.
    """
    cumulative_improvement = float(config.monthly_improvement) * months_back
    seasonal = float(config.history_seasonal_amplitude) * seasonal_history_factor(calendar_month)
    return current_net_worth - cumulative_improvement + seasonal + event_noise + trend_noise
