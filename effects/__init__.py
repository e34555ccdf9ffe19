"""
Effect rules — convert one scenario's template + parameters into a numeric effect.
"""

from .base import EffectRule, MonthImpact, ScheduledEntry
from .parameters import TemplateParameters, parse_parameters
from .registry import (
    TEMPLATE_REGISTRY,
    TemplateSpec,
    compute_effect,
    get_rule,
    is_recognized,
    monthly_impacts,
    scenario_effect,
    scenario_transactions,
    template_schema,
)

__all__ = [
    "EffectRule",
    "MonthImpact",
    "ScheduledEntry",
    "TemplateParameters",
    "parse_parameters",
    "TEMPLATE_REGISTRY",
    "TemplateSpec",
    "compute_effect",
    "get_rule",
    "is_recognized",
    "monthly_impacts",
    "scenario_effect",
    "scenario_transactions",
    "template_schema",
]
