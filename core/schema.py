from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, FrozenSet, Iterable, Mapping, Optional, Tuple

import pandas as pd


class TemplateType(str, Enum):
    """Closed set of scenario templates. Anything unrecognised is GENERIC."""

    SALARY_INCREASE = "salary_increase"
    JOB_CHANGE = "job_change"
    JOB_LOSS = "job_loss"
    MAJOR_PURCHASE = "major_purchase"
    HOME_BUYING = "home_buying"
    DEBT_PAYOFF = "debt_payoff"
    EMERGENCY_FUND = "emergency_fund"
    EXPENSE_CHANGE = "expense_change"
    INVESTMENT_STRATEGY = "investment_strategy"
    GENERIC = "generic"


# Display names and legacy ids used by older scenario records.
_TEMPLATE_ALIASES: Mapping[str, TemplateType] = {
    "salary_change": TemplateType.SALARY_INCREASE,
    "salary_raise": TemplateType.SALARY_INCREASE,
    "raise": TemplateType.SALARY_INCREASE,
    "new_job": TemplateType.JOB_CHANGE,
    "career_change": TemplateType.JOB_CHANGE,
    "ai_engineering_career_move": TemplateType.JOB_CHANGE,
    "unemployment": TemplateType.JOB_LOSS,
    "layoff": TemplateType.JOB_LOSS,
    "purchase": TemplateType.MAJOR_PURCHASE,
    "home_purchase": TemplateType.HOME_BUYING,
    "buy_home": TemplateType.HOME_BUYING,
    "debt_reduction": TemplateType.DEBT_PAYOFF,
    "savings_goal": TemplateType.EMERGENCY_FUND,
    "investment": TemplateType.INVESTMENT_STRATEGY,
}


def normalize_template_type(value: Any) -> TemplateType:
    """
    Resolve a raw template id to the closed TemplateType set.

    Accepts enum members, snake/kebab/space separated ids, display names
    ("Major Purchase") and camelCase ("majorPurchase"). Anything else maps
    to GENERIC.
    """
    if isinstance(value, TemplateType):
        return value
    if value is None:
        return TemplateType.GENERIC
    raw = str(value).strip()
    if not raw:
        return TemplateType.GENERIC
    # camelCase -> snake_case before lowercasing
    snake = "".join(f"_{c}" if c.isupper() and i > 0 and raw[i - 1].islower() else c
                    for i, c in enumerate(raw))
    key = snake.lower().replace("-", "_").replace(" ", "_")
    while "__" in key:
        key = key.replace("__", "_")
    try:
        return TemplateType(key)
    except ValueError:
        return _TEMPLATE_ALIASES.get(key, TemplateType.GENERIC)


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _RISK_RANK[self]

    @classmethod
    def max_of(cls, levels: Iterable["RiskLevel"]) -> "RiskLevel":
        """Ordinal maximum; LOW for an empty iterable."""
        best = cls.LOW
        for level in levels:
            if level.rank > best.rank:
                best = level
        return best


_RISK_RANK = {RiskLevel.LOW: 0, RiskLevel.MEDIUM: 1, RiskLevel.HIGH: 2}


class AccountType(str, Enum):
    # assets
    CHECKING = "checking"
    SAVINGS = "savings"
    INVESTMENT = "investment"
    RETIREMENT = "retirement"
    BROKERAGE = "brokerage"
    VEHICLE = "vehicle"
    REAL_ESTATE = "real_estate"
    # liabilities
    CREDIT_CARD = "credit_card"
    LINE_OF_CREDIT = "line_of_credit"
    MORTGAGE = "mortgage"
    AUTO_LOAN = "auto_loan"
    STUDENT_LOAN = "student_loan"
    PERSONAL_LOAN = "personal_loan"


ASSET_TYPES: FrozenSet[AccountType] = frozenset({
    AccountType.CHECKING,
    AccountType.SAVINGS,
    AccountType.INVESTMENT,
    AccountType.RETIREMENT,
    AccountType.BROKERAGE,
    AccountType.VEHICLE,
    AccountType.REAL_ESTATE,
})

LIABILITY_TYPES: FrozenSet[AccountType] = frozenset({
    AccountType.CREDIT_CARD,
    AccountType.LINE_OF_CREDIT,
    AccountType.MORTGAGE,
    AccountType.AUTO_LOAN,
    AccountType.STUDENT_LOAN,
    AccountType.PERSONAL_LOAN,
})


@dataclass(frozen=True)
class Account:
    """One account balance in an immutable snapshot."""
    id: str
    type: AccountType
    balance: float

    @property
    def is_liability(self) -> bool:
        return self.type in LIABILITY_TYPES

    @property
    def net_value(self) -> float:
        # Liabilities may be stored signed either way; only the magnitude counts.
        if self.is_liability:
            return -abs(float(self.balance))
        return float(self.balance)


@dataclass(frozen=True)
class Scenario:
    """
    A user-defined hypothetical event.

    `template_type` keeps the raw string as stored by the owning collaborator;
    `template` resolves it against the closed TemplateType set. `parameters`
    are loosely typed form values and are coerced per template by the rules.
    """
    id: str
    name: str
    template_type: str
    parameters: Mapping[str, Any] = field(default_factory=dict)
    is_active: bool = True
    created_at: Optional[pd.Timestamp] = None
    last_modified: Optional[pd.Timestamp] = None

    @property
    def template(self) -> TemplateType:
        return normalize_template_type(self.template_type)


@dataclass(frozen=True)
class EffectResult:
    """Numeric effect of a single scenario."""
    net_effect: float
    monthly_change: float
    affected_transactions: int
    risk_level: RiskLevel

    @classmethod
    def zero(cls) -> "EffectResult":
        return cls(
            net_effect=0.0,
            monthly_change=0.0,
            affected_transactions=0,
            risk_level=RiskLevel.LOW,
        )


@dataclass(frozen=True)
class CombinedEffect:
    """Sum of the effects of all active scenarios; risk is the ordinal max."""
    net_effect: float
    monthly_change: float
    affected_transactions: int
    risk_level: RiskLevel
    scenario_count: int = 0

    @classmethod
    def identity(cls) -> "CombinedEffect":
        return cls(
            net_effect=0.0,
            monthly_change=0.0,
            affected_transactions=0,
            risk_level=RiskLevel.LOW,
            scenario_count=0,
        )


@dataclass(frozen=True)
class ProjectionPoint:
    timestamp: pd.Timestamp
    net_worth: float
    is_historical: bool


@dataclass(frozen=True)
class Conflict:
    """A heuristic warning about scenarios that may interact unpredictably."""
    code: str
    severity: RiskLevel
    message: str
    scenario_ids: Tuple[str, ...] = ()
