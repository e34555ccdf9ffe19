"""
Analysis — combining scenario effects, flagging conflicts, comparing series.
"""

from .aggregator import EffectAggregator, combine_effects, combine_results, effect_cache_key
from .conflicts import ConflictDetector, detect_conflicts
from .metrics import compare_projections, projection_to_dataframe, summarize_comparison
from .transactions import (
    TransactionImpact,
    merge_scenario_transactions,
    overlay_on_ledger,
    summarize_transactions,
    transaction_impacts,
)

__all__ = [
    "EffectAggregator",
    "combine_effects",
    "combine_results",
    "effect_cache_key",
    "ConflictDetector",
    "detect_conflicts",
    "compare_projections",
    "projection_to_dataframe",
    "summarize_comparison",
    "TransactionImpact",
    "merge_scenario_transactions",
    "overlay_on_ledger",
    "summarize_transactions",
    "transaction_impacts",
]
