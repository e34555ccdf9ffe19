"""
Projection series helpers: tabular views and baseline-vs-scenario comparison.
"""

from __future__ import annotations

from typing import Dict, Sequence

import numpy as np
import pandas as pd

from core.schema import ProjectionPoint


def projection_to_dataframe(points: Sequence[ProjectionPoint]) -> pd.DataFrame:
    """One row per point: timestamp, net_worth, is_historical."""
    return pd.DataFrame(
        {
            "timestamp": pd.to_datetime([p.timestamp for p in points]),
            "net_worth": np.array([p.net_worth for p in points], dtype=float),
            "is_historical": np.array([p.is_historical for p in points], dtype=bool),
        }
    )


def compare_projections(
    baseline: Sequence[ProjectionPoint],
    adjusted: Sequence[ProjectionPoint],
) -> pd.DataFrame:
    """
    Align two series on timestamp.

    Returns
    -------
    DataFrame with columns timestamp, is_historical, baseline, scenario, difference
    (scenario - baseline). Timestamps present in only one series carry NaN.
    """
    base = projection_to_dataframe(baseline).rename(columns={"net_worth": "baseline"})
    adj = projection_to_dataframe(adjusted).rename(columns={"net_worth": "scenario"})
    merged = base.merge(
        adj.drop(columns=["is_historical"]), on="timestamp", how="outer",
    ).sort_values("timestamp").reset_index(drop=True)
    merged["is_historical"] = merged["is_historical"].fillna(False).astype(bool)
    merged["difference"] = merged["scenario"] - merged["baseline"]
    return merged[["timestamp", "is_historical", "baseline", "scenario", "difference"]]


def summarize_comparison(comparison: pd.DataFrame) -> Dict[str, float]:
    """
    Headline numbers for a compare_projections() frame, forward months only.

    Keys: final_baseline, final_scenario, final_difference, min_baseline,
    min_scenario, months_below_zero_baseline, months_below_zero_scenario.
    """
    fwd = comparison.loc[~comparison["is_historical"]]
    if fwd.empty:
        return {
            "final_baseline": 0.0,
            "final_scenario": 0.0,
            "final_difference": 0.0,
            "min_baseline": 0.0,
            "min_scenario": 0.0,
            "months_below_zero_baseline": 0,
            "months_below_zero_scenario": 0,
        }
    last = fwd.iloc[-1]
    return {
        "final_baseline": float(last["baseline"]),
        "final_scenario": float(last["scenario"]),
        "final_difference": float(last["difference"]),
        "min_baseline": float(fwd["baseline"].min()),
        "min_scenario": float(fwd["scenario"].min()),
        "months_below_zero_baseline": int((fwd["baseline"] < 0).sum()),
        "months_below_zero_scenario": int((fwd["scenario"] < 0).sum()),
    }
