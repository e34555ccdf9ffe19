"""
Core package — schema definitions, configuration, and shared utilities.
No business logic lives here.
"""

from .schema import (
    ASSET_TYPES,
    LIABILITY_TYPES,
    Account,
    AccountType,
    CombinedEffect,
    Conflict,
    EffectResult,
    ProjectionPoint,
    RiskLevel,
    Scenario,
    TemplateType,
    normalize_template_type,
)
from .config import (
    CacheConfig,
    ConflictConfig,
    EngineConfig,
    ProjectionConfig,
    TIMEFRAME_MONTHS,
    timeframe_to_months,
)
from .utils import month_start, resolve_as_of, shift_months, to_float

__all__ = [
    "ASSET_TYPES",
    "LIABILITY_TYPES",
    "Account",
    "AccountType",
    "CombinedEffect",
    "Conflict",
    "EffectResult",
    "ProjectionPoint",
    "RiskLevel",
    "Scenario",
    "TemplateType",
    "normalize_template_type",
    "CacheConfig",
    "ConflictConfig",
    "EngineConfig",
    "ProjectionConfig",
    "TIMEFRAME_MONTHS",
    "timeframe_to_months",
    "month_start",
    "resolve_as_of",
    "shift_months",
    "to_float",
]
