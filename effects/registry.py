"""
Template registry and effect dispatch.

Every TemplateType has exactly one rule; compute_effect() resolves the raw
template id, looks the rule up in a single table and never raises on bad
parameters (malformed input yields a zeroed EffectResult and a warning).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Type, Union

import pandas as pd

from core.schema import EffectResult, Scenario, TemplateType, normalize_template_type

from .base import EffectRule, MonthImpact
from .generic import GenericRule
from .income import JobChangeRule, JobLossRule, SalaryIncreaseRule
from .parameters import TemplateParameters
from .savings import DebtPayoffRule, EmergencyFundRule, InvestmentStrategyRule
from .spending import ExpenseChangeRule, HomeBuyingRule, MajorPurchaseRule

logger = logging.getLogger(__name__)

DEFAULT_HORIZON_MONTHS = 12


@dataclass(frozen=True)
class TemplateSpec:
    """Registry entry: what the UI shows and which rule applies."""
    template: TemplateType
    display_name: str
    description: str
    rule: EffectRule

    @property
    def parameter_model(self) -> Type[TemplateParameters]:
        return self.rule.parameter_model


TEMPLATE_REGISTRY: Dict[TemplateType, TemplateSpec] = {
    spec.template: spec
    for spec in (
        TemplateSpec(TemplateType.SALARY_INCREASE, "Salary Increase",
                     "Model a raise, pay cut or new salary", SalaryIncreaseRule()),
        TemplateSpec(TemplateType.JOB_CHANGE, "Job Change",
                     "Switch jobs, including relocation costs", JobChangeRule()),
        TemplateSpec(TemplateType.JOB_LOSS, "Job Loss",
                     "A stretch without employment income", JobLossRule()),
        TemplateSpec(TemplateType.MAJOR_PURCHASE, "Major Purchase",
                     "Budget for a car, renovation or other large expense", MajorPurchaseRule()),
        TemplateSpec(TemplateType.HOME_BUYING, "Home Buying",
                     "Down payment, closing costs, mortgage, tax and insurance", HomeBuyingRule()),
        TemplateSpec(TemplateType.DEBT_PAYOFF, "Debt Payoff",
                     "Pay more than the minimum to clear a debt", DebtPayoffRule()),
        TemplateSpec(TemplateType.EMERGENCY_FUND, "Emergency Fund",
                     "Save monthly until a safety cushion is built", EmergencyFundRule()),
        TemplateSpec(TemplateType.EXPENSE_CHANGE, "Expense Change",
                     "Add, remove or modify a recurring expense", ExpenseChangeRule()),
        TemplateSpec(TemplateType.INVESTMENT_STRATEGY, "Investment Strategy",
                     "Recurring contributions and their expected growth", InvestmentStrategyRule()),
        TemplateSpec(TemplateType.GENERIC, "Custom",
                     "A flat monthly amount for a fixed period", GenericRule()),
    )
}

_missing = set(TemplateType) - set(TEMPLATE_REGISTRY)
if _missing:
    raise RuntimeError(f"Templates without an effect rule: {sorted(t.value for t in _missing)}")


def get_rule(template_type: Union[TemplateType, str, None]) -> EffectRule:
    return TEMPLATE_REGISTRY[normalize_template_type(template_type)].rule


def is_recognized(template_type: Union[TemplateType, str, None]) -> bool:
    """True when the id maps to a specific template rather than the generic fallback."""
    resolved = normalize_template_type(template_type)
    if resolved is not TemplateType.GENERIC:
        return True
    return str(getattr(template_type, "value", template_type)).strip().lower() == "generic"


def compute_effect(
    template_type: Union[TemplateType, str, None],
    parameters: Optional[Mapping[str, Any]],
    *,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
    as_of: Optional[date] = None,
) -> EffectResult:
    """
    Effect of one scenario.

    Parameters
    ----------
    template_type : TemplateType or str
        Template id; unrecognised ids fall back to the generic rule.
    parameters : mapping
        Raw scenario parameters (form strings or numbers).
    horizon_months : int
        Months over which cumulative effects are measured (default 12).
    as_of : date, optional
        Anchor for date parameters (effectiveDate, targetDate, startDate);
        today when omitted. Pass the projection's as-of date to pin results.
    """
    template = normalize_template_type(template_type)
    if template is TemplateType.GENERIC and not is_recognized(template_type):
        logger.debug("Template %r not recognised, using generic rule", template_type)
    return TEMPLATE_REGISTRY[template].rule.compute(parameters, horizon_months, as_of)


def scenario_effect(
    scenario: Scenario,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
    as_of: Optional[date] = None,
) -> EffectResult:
    return compute_effect(
        scenario.template_type, scenario.parameters, horizon_months=horizon_months, as_of=as_of,
    )


def monthly_impacts(scenario: Scenario, months: int, as_of: Optional[date] = None) -> List[MonthImpact]:
    """Per-month impact of a scenario for future months 1..months."""
    return get_rule(scenario.template_type).impact_schedule(scenario.parameters, months, as_of)


def scenario_transactions(scenario: Scenario, months: int, as_of: Optional[date] = None) -> pd.DataFrame:
    """Dated projected transactions of one scenario; empty for malformed parameters."""
    return get_rule(scenario.template_type).transactions(
        scenario.parameters, months, as_of, scenario_id=scenario.id,
    )


def template_schema(template_type: Union[TemplateType, str]) -> Dict[str, Any]:
    """JSON schema of a template's parameter record (for form generation)."""
    model = TEMPLATE_REGISTRY[normalize_template_type(template_type)].parameter_model
    return model.model_json_schema()


def required_parameters(template_type: Union[TemplateType, str]) -> List[str]:
    model = TEMPLATE_REGISTRY[normalize_template_type(template_type)].parameter_model
    return [name for name, info in model.model_fields.items() if info.is_required()]


def registry_summary() -> pd.DataFrame:
    """One row per template: id, display name, description, required fields."""
    return pd.DataFrame([
        {
            "template": spec.template.value,
            "display_name": spec.display_name,
            "description": spec.description,
            "required": ", ".join(required_parameters(spec.template)),
        }
        for spec in TEMPLATE_REGISTRY.values()
    ])
