"""
Spending-side rules: one-off major purchases (optionally financed), home
purchases with a mortgage and carrying costs, and recurring expense changes.
"""

from __future__ import annotations

from datetime import date
from typing import List

from core.schema import EffectResult, RiskLevel, TemplateType

from .base import EffectRule, ScheduledEntry, magnitude_risk, months_in_window
from .parameters import ExpenseChangeParameters, HomeBuyingParameters, MajorPurchaseParameters

# Total purchase commitment thresholds
PURCHASE_HIGH_RISK = 20000.0
PURCHASE_MEDIUM_RISK = 5000.0


def purchase_risk(commitment: float) -> RiskLevel:
    if commitment > PURCHASE_HIGH_RISK:
        return RiskLevel.HIGH
    if commitment > PURCHASE_MEDIUM_RISK:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def level_payment(principal: float, monthly_rate: float, n_months: int) -> float:
    """Fully amortising monthly payment; straight-line when the rate is ~0."""
    if principal <= 0:
        return 0.0
    if n_months <= 0:
        return float(principal)
    if abs(monthly_rate) < 1e-12:
        return float(principal) / n_months
    growth = (1.0 + monthly_rate) ** n_months
    return float(principal) * monthly_rate * growth / (growth - 1.0)


class MajorPurchaseRule(EffectRule):
    """
    Down payment at the purchase month plus financed payments afterwards.

    net_effect is the full commitment: -(down + monthly * term), measured
    over however many months the payments run.
    """

    template = TemplateType.MAJOR_PURCHASE
    parameter_model = MajorPurchaseParameters

    def _term(self, params: MajorPurchaseParameters) -> int:
        return params.loan_term_months if params.monthly_payment > 0 else 0

    def span_months(self, params: MajorPurchaseParameters, horizon_months: int, as_of: date) -> int:
        return max(horizon_months, params.purchase_month(as_of) + self._term(params))

    def effect(self, params: MajorPurchaseParameters, horizon_months: int, as_of: date) -> EffectResult:
        financed = float(params.monthly_payment) * params.loan_term_months
        total = params.upfront + financed
        return EffectResult(
            net_effect=-total,
            monthly_change=0.0 - float(params.monthly_payment),
            affected_transactions=(1 if params.upfront > 0 else 0) + self._term(params),
            risk_level=purchase_risk(total),
        )

    def entries(self, params: MajorPurchaseParameters, month: int, as_of: date) -> List[ScheduledEntry]:
        purchase_month = params.purchase_month(as_of)
        if month == purchase_month and params.upfront > 0:
            return [ScheduledEntry(
                "Major Purchase - Down Payment", "Purchase", -params.upfront, self.tags("down_payment"),
            )]
        if purchase_month < month <= purchase_month + self._term(params):
            return [ScheduledEntry(
                "Major Purchase - Monthly Payment", "Purchase", -float(params.monthly_payment),
                self.tags("monthly_payment"),
            )]
        return []


class HomeBuyingRule(EffectRule):
    """
    Buy a home: down payment and closing costs in the purchase month, then a
    level mortgage payment on (price - down payment) plus property tax and
    home insurance every month after it.

    Unlike a major purchase the commitment runs for decades, so net_effect
    only counts the months inside the horizon. Risk is banded on that same
    in-horizon commitment.
    """

    template = TemplateType.HOME_BUYING
    parameter_model = HomeBuyingParameters

    def mortgage_payment(self, params: HomeBuyingParameters) -> float:
        return level_payment(params.loan_amount, params.monthly_rate, params.term_months)

    def monthly_carrying_cost(self, params: HomeBuyingParameters) -> float:
        return self.mortgage_payment(params) + params.monthly_property_tax + params.monthly_insurance

    def effect(self, params: HomeBuyingParameters, horizon_months: int, as_of: date) -> EffectResult:
        net = sum(
            entry.amount
            for month in range(1, horizon_months + 1)
            for entry in self.entries(params, month, as_of)
        )
        return EffectResult(
            net_effect=net,
            monthly_change=-self.monthly_carrying_cost(params),
            affected_transactions=0,
            risk_level=purchase_risk(-net),
        )

    def entries(self, params: HomeBuyingParameters, month: int, as_of: date) -> List[ScheduledEntry]:
        purchase_month = params.purchase_month(as_of)
        out: List[ScheduledEntry] = []
        if month == purchase_month:
            if params.upfront > 0:
                out.append(ScheduledEntry(
                    "Home Purchase - Down Payment", "Housing", -params.upfront, self.tags("down_payment"),
                ))
            out.append(ScheduledEntry(
                "Home Purchase - Closing Costs", "Housing", -params.closing_costs, self.tags("closing_costs"),
            ))
        elif month > purchase_month:
            payment = self.mortgage_payment(params)
            if payment > 0 and month <= purchase_month + params.term_months:
                out.append(ScheduledEntry(
                    "Mortgage Payment", "Housing", -payment, self.tags("mortgage"),
                ))
            out.append(ScheduledEntry(
                "Property Tax", "Housing", -params.monthly_property_tax, self.tags("property_tax"), day=15,
            ))
            out.append(ScheduledEntry(
                "Home Insurance", "Insurance", -params.monthly_insurance, self.tags("insurance"), day=20,
            ))
        return out


class ExpenseChangeRule(EffectRule):
    """Add, modify or remove a recurring monthly expense."""

    template = TemplateType.EXPENSE_CHANGE
    parameter_model = ExpenseChangeParameters

    def effect(self, params: ExpenseChangeParameters, horizon_months: int, as_of: date) -> EffectResult:
        amount = params.signed_amount
        months = months_in_window(horizon_months, params.offset_months(as_of), params.duration_months)
        return EffectResult(
            net_effect=amount * months,
            monthly_change=amount,
            affected_transactions=months,
            risk_level=magnitude_risk(amount),
        )

    def entries(self, params: ExpenseChangeParameters, month: int, as_of: date) -> List[ScheduledEntry]:
        start = params.offset_months(as_of)
        amount = params.signed_amount
        if month <= start or amount == 0.0:
            return []
        if params.duration_months is not None and month > start + params.duration_months:
            return []
        if amount < 0:
            description, tag = f"Increased {params.category} Expense", "increase"
        else:
            description, tag = f"Reduced {params.category} Expense", "decrease"
        return [ScheduledEntry(description, params.category, amount, self.tags(tag), day=15)]
