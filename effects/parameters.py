"""
Typed parameter records, one per scenario template.

Scenario parameters arrive as loosely typed form values (numbers as strings,
blank inputs, "$1,200"). Each template coerces them into a pydantic model
before any rule touches them:
  - blank strings and None count as "not supplied"
  - numeric strings are parsed leniently (thousands separators, "$")
  - optional fields carry explicit defaults
  - a missing/unparseable required field raises pydantic.ValidationError,
    which the rules turn into a zeroed effect plus a logged warning

Both camelCase form keys (increaseAmount) and snake_case names are accepted.
"""

from __future__ import annotations

import math
from datetime import date
from typing import Annotated, Any, ClassVar, Dict, Literal, Mapping, Optional, Type, TypeVar

import pandas as pd
from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    model_validator,
)

from core.utils import to_float


def _coerce_number(value: Any) -> Any:
    parsed = to_float(value)
    # Leave unparseable input untouched so pydantic reports it.
    return value if parsed is None else parsed


def _coerce_months(value: Any) -> Any:
    parsed = to_float(value)
    if parsed is None:
        return value
    return int(math.ceil(parsed - 1e-9))


def _coerce_choice(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


Amount = Annotated[float, BeforeValidator(_coerce_number)]
Months = Annotated[int, BeforeValidator(_coerce_months)]


def _names(*names: str) -> AliasChoices:
    return AliasChoices(*names)


class TemplateParameters(BaseModel):
    """Base for all template parameter records."""

    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        allow_inf_nan=False,
        populate_by_name=True,
    )

    @staticmethod
    def months_until(target: Optional[date], as_of: date) -> int:
        """Whole calendar months from as_of to target; 0 for past dates."""
        if target is None:
            return 0
        start = pd.Timestamp(as_of)
        end = pd.Timestamp(target)
        months = (end.year - start.year) * 12 + (end.month - start.month)
        return max(int(months), 0)


class SalaryIncreaseParameters(TemplateParameters):
    increase_amount: Optional[Amount] = Field(
        None, validation_alias=_names("increaseAmount", "increase_amount", "monthlyIncrease")
    )
    current_salary: Optional[Amount] = Field(
        None, ge=0, validation_alias=_names("currentSalary", "current_salary")
    )
    new_salary: Optional[Amount] = Field(
        None, ge=0, validation_alias=_names("newSalary", "new_salary")
    )
    start_month: Months = Field(0, ge=0, validation_alias=_names("startMonth", "start_month"))
    effective_date: Optional[date] = Field(
        None, validation_alias=_names("effectiveDate", "effective_date")
    )

    @model_validator(mode="after")
    def _require_increase(self) -> "SalaryIncreaseParameters":
        if self.increase_amount is None and (self.current_salary is None or self.new_salary is None):
            raise ValueError("increaseAmount (or currentSalary and newSalary) is required")
        return self

    @property
    def monthly_increase(self) -> float:
        if self.increase_amount is not None:
            return float(self.increase_amount)
        # salaries are annual
        return (float(self.new_salary) - float(self.current_salary)) / 12.0

    def offset_months(self, as_of: date) -> int:
        return max(self.start_month, self.months_until(self.effective_date, as_of))


class JobChangeParameters(TemplateParameters):
    new_salary: Amount = Field(..., ge=0, validation_alias=_names("newSalary", "new_salary"))
    current_salary: Amount = Field(
        75000.0, ge=0, validation_alias=_names("currentSalary", "current_salary")
    )
    moving_costs: Amount = Field(
        0.0, ge=0, validation_alias=_names("movingCosts", "moving_costs", "relocationCosts")
    )
    start_month: Months = Field(0, ge=0, validation_alias=_names("startMonth", "start_month"))
    start_date: Optional[date] = Field(
        None, validation_alias=_names("startDate", "transitionDate", "start_date")
    )

    @property
    def monthly_difference(self) -> float:
        # salaries are annual
        return (float(self.new_salary) - float(self.current_salary)) / 12.0

    def offset_months(self, as_of: date) -> int:
        return max(self.start_month, self.months_until(self.start_date, as_of))


class JobLossParameters(TemplateParameters):
    lost_monthly_income: Optional[Amount] = Field(
        None, ge=0, validation_alias=_names("lostMonthlyIncome", "lost_monthly_income", "monthlyIncome")
    )
    current_salary: Optional[Amount] = Field(
        None, ge=0, validation_alias=_names("currentSalary", "current_salary")
    )
    unemployment_benefit: Amount = Field(
        0.0, ge=0, validation_alias=_names("unemploymentBenefit", "unemployment_benefit")
    )
    duration_months: Months = Field(
        6, ge=0, validation_alias=_names("durationMonths", "duration_months", "duration")
    )
    start_month: Months = Field(0, ge=0, validation_alias=_names("startMonth", "start_month"))

    @model_validator(mode="after")
    def _require_income(self) -> "JobLossParameters":
        if self.lost_monthly_income is None and self.current_salary is None:
            raise ValueError("lostMonthlyIncome (or currentSalary) is required")
        return self

    @property
    def net_monthly_loss(self) -> float:
        if self.lost_monthly_income is not None:
            lost = float(self.lost_monthly_income)
        else:
            lost = float(self.current_salary) / 12.0
        return max(lost - float(self.unemployment_benefit), 0.0)


class MajorPurchaseParameters(TemplateParameters):
    down_payment: Optional[Amount] = Field(
        None, ge=0, validation_alias=_names("downPayment", "down_payment")
    )
    total_cost: Optional[Amount] = Field(
        None, ge=0, validation_alias=_names("totalCost", "total_cost")
    )
    monthly_payment: Amount = Field(
        0.0, ge=0, validation_alias=_names("monthlyPayment", "monthly_payment")
    )
    loan_term_months: Months = Field(
        0, ge=0, validation_alias=_names("loanTermMonths", "loan_term_months", "loanTerm")
    )
    timing_months: Months = Field(
        0, ge=0, validation_alias=_names("timingMonths", "timing_months")
    )
    target_date: Optional[date] = Field(
        None, validation_alias=_names("targetDate", "purchaseDate", "target_date")
    )

    # Share of total cost paid up front when only the price is known.
    DEFAULT_DOWN_PAYMENT_SHARE: ClassVar[float] = 0.20

    @model_validator(mode="after")
    def _require_amount(self) -> "MajorPurchaseParameters":
        if self.down_payment is None and self.total_cost is None:
            raise ValueError("downPayment (or totalCost) is required")
        return self

    @property
    def upfront(self) -> float:
        if self.down_payment is not None:
            return float(self.down_payment)
        return float(self.total_cost) * self.DEFAULT_DOWN_PAYMENT_SHARE

    def purchase_month(self, as_of: date) -> int:
        # A purchase "now" lands in the first projected month.
        return max(self.timing_months, self.months_until(self.target_date, as_of), 1)


class HomeBuyingParameters(TemplateParameters):
    home_price: Amount = Field(
        ..., gt=0, validation_alias=_names("homePrice", "totalCost", "home_price")
    )
    down_payment: Optional[Amount] = Field(
        None, ge=0, validation_alias=_names("downPayment", "down_payment")
    )
    mortgage_rate: Amount = Field(
        6.5, ge=0, validation_alias=_names("mortgageRate", "mortgage_rate", "interestRate")
    )  # annual, percent
    loan_term_years: Months = Field(
        30, ge=1, validation_alias=_names("loanTermYears", "loan_term_years")
    )
    timing_months: Months = Field(
        0, ge=0, validation_alias=_names("timingMonths", "timing_months")
    )
    target_date: Optional[date] = Field(
        None, validation_alias=_names("purchaseDate", "targetDate", "target_date")
    )

    DEFAULT_DOWN_PAYMENT_SHARE: ClassVar[float] = 0.20
    # Shares of the home price
    CLOSING_COST_SHARE: ClassVar[float] = 0.025
    PROPERTY_TAX_ANNUAL_SHARE: ClassVar[float] = 0.012
    INSURANCE_ANNUAL_SHARE: ClassVar[float] = 0.005

    @model_validator(mode="after")
    def _down_payment_within_price(self) -> "HomeBuyingParameters":
        if self.down_payment is not None and self.down_payment > self.home_price:
            raise ValueError("downPayment cannot exceed homePrice")
        return self

    @property
    def upfront(self) -> float:
        if self.down_payment is not None:
            return float(self.down_payment)
        return float(self.home_price) * self.DEFAULT_DOWN_PAYMENT_SHARE

    @property
    def loan_amount(self) -> float:
        return float(self.home_price) - self.upfront

    @property
    def closing_costs(self) -> float:
        return float(self.home_price) * self.CLOSING_COST_SHARE

    @property
    def monthly_property_tax(self) -> float:
        return float(self.home_price) * self.PROPERTY_TAX_ANNUAL_SHARE / 12.0

    @property
    def monthly_insurance(self) -> float:
        return float(self.home_price) * self.INSURANCE_ANNUAL_SHARE / 12.0

    @property
    def monthly_rate(self) -> float:
        return float(self.mortgage_rate) / 100.0 / 12.0

    @property
    def term_months(self) -> int:
        return int(self.loan_term_years) * 12

    def purchase_month(self, as_of: date) -> int:
        return max(self.timing_months, self.months_until(self.target_date, as_of), 1)


class DebtPayoffParameters(TemplateParameters):
    current_balance: Amount = Field(
        ..., ge=0, validation_alias=_names("currentBalance", "current_balance")
    )
    current_payment: Amount = Field(
        ..., ge=0, validation_alias=_names("currentPayment", "current_payment", "monthlyPayment")
    )
    new_payment: Optional[Amount] = Field(
        None, ge=0, validation_alias=_names("newPayment", "new_payment")
    )
    extra_payment: Optional[Amount] = Field(
        None, validation_alias=_names("extraPayment", "extra_payment")
    )
    interest_rate: Amount = Field(
        0.0, ge=0, validation_alias=_names("interestRate", "interest_rate")
    )  # annual, percent

    @model_validator(mode="after")
    def _require_new_payment(self) -> "DebtPayoffParameters":
        if self.new_payment is None and self.extra_payment is None:
            raise ValueError("newPayment (or extraPayment) is required")
        return self

    @property
    def target_payment(self) -> float:
        if self.new_payment is not None:
            return float(self.new_payment)
        return float(self.current_payment) + float(self.extra_payment)

    @property
    def monthly_rate(self) -> float:
        return float(self.interest_rate) / 100.0 / 12.0


class EmergencyFundParameters(TemplateParameters):
    target_amount: Amount = Field(
        ..., ge=0, validation_alias=_names("targetAmount", "target_amount")
    )
    monthly_contribution: Amount = Field(
        ..., gt=0, validation_alias=_names("monthlyContribution", "monthly_contribution")
    )
    current_amount: Amount = Field(
        0.0, ge=0, validation_alias=_names("currentAmount", "current_amount")
    )


ChangeType = Annotated[Literal["add", "modify", "remove"], BeforeValidator(_coerce_choice)]
RiskProfile = Annotated[
    Literal["conservative", "moderate", "aggressive"], BeforeValidator(_coerce_choice)
]


class ExpenseChangeParameters(TemplateParameters):
    monthly_amount: Amount = Field(
        ..., validation_alias=_names("monthlyAmount", "monthly_amount")
    )
    change_type: ChangeType = Field("add", validation_alias=_names("changeType", "change_type"))
    duration_months: Optional[Months] = Field(
        None, ge=0, validation_alias=_names("durationMonths", "duration_months", "duration")
    )
    start_month: Months = Field(0, ge=0, validation_alias=_names("startMonth", "start_month"))
    start_date: Optional[date] = Field(None, validation_alias=_names("startDate", "start_date"))
    category: str = Field("Expense", min_length=1, validation_alias=_names("category", "expenseCategory"))

    @property
    def signed_amount(self) -> float:
        """Net-worth direction: new expenses cost money, removed ones save it."""
        amount = float(self.monthly_amount)
        if self.change_type == "remove":
            return abs(amount)
        if self.change_type == "add":
            return -abs(amount)
        # modify: amount is the change in the expense itself
        return -amount

    def offset_months(self, as_of: date) -> int:
        return max(self.start_month, self.months_until(self.start_date, as_of))


class InvestmentStrategyParameters(TemplateParameters):
    monthly_contribution: Amount = Field(
        ..., gt=0, validation_alias=_names("monthlyContribution", "monthly_contribution")
    )
    expected_return: Amount = Field(
        7.0, validation_alias=_names("expectedReturn", "expected_return")
    )  # annual, percent
    risk_profile: RiskProfile = Field(
        "moderate", validation_alias=_names("riskProfile", "risk_profile")
    )
    start_month: Months = Field(0, ge=0, validation_alias=_names("startMonth", "start_month"))

    @property
    def monthly_rate(self) -> float:
        return float(self.expected_return) / 100.0 / 12.0


class GenericParameters(TemplateParameters):
    monthly_amount: Amount = Field(
        0.0, validation_alias=_names("monthlyAmount", "monthly_amount", "amount")
    )
    duration: Months = Field(
        12, ge=0, validation_alias=_names("duration", "durationMonths", "duration_months")
    )
    start_month: Months = Field(0, ge=0, validation_alias=_names("startMonth", "start_month"))


P = TypeVar("P", bound=TemplateParameters)


def clean_raw_parameters(raw: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Drop blank form values so field defaults apply.

    Raises TypeError when raw is neither None nor a mapping.
    """
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise TypeError(f"parameters must be a mapping, got {type(raw).__name__}")
    cleaned: Dict[str, Any] = {}
    for key, value in raw.items():
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        cleaned[str(key)] = value
    return cleaned


def parse_parameters(model: Type[P], raw: Optional[Mapping[str, Any]]) -> P:
    """Coerce raw scenario parameters into the template's typed record."""
    return model.model_validate(clean_raw_parameters(raw))
