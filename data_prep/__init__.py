"""
Data preparation — account snapshots, scenario records, boundary validation.
"""

from .accounts import (
    accounts_to_dataframe,
    build_account_snapshot,
    canonicalize_account_type,
    compute_net_worth,
    total_liabilities,
)
from .scenarios import active_only, load_scenarios, scenario_from_record
from .validators import (
    ValidationIssue,
    ValidationResult,
    validate_accounts,
    validate_scenario,
    validate_scenarios,
)

__all__ = [
    "accounts_to_dataframe",
    "build_account_snapshot",
    "canonicalize_account_type",
    "compute_net_worth",
    "total_liabilities",
    "active_only",
    "load_scenarios",
    "scenario_from_record",
    "ValidationIssue",
    "ValidationResult",
    "validate_accounts",
    "validate_scenario",
    "validate_scenarios",
]
