"""
ScenarioProjectionEngine — one object the UI layer talks to.

Wires the rule set, aggregator, generator and conflict detector around a
single injected EffectCache. Nothing here holds UI state: every method takes
its inputs and returns its outputs.

Usage:
    engine = ScenarioProjectionEngine()
    preview = engine.preview({"checking": 29.22, "creditCards": -20361}, scenarios, months=12)
    preview.combined.net_effect
    preview.comparison()        # DataFrame: timestamp, baseline, scenario, difference
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import pandas as pd

from analysis.aggregator import EffectAggregator
from analysis.conflicts import ConflictDetector
from analysis.metrics import compare_projections
from analysis.transactions import TransactionImpact, merge_scenario_transactions, transaction_impacts
from core.config import EngineConfig
from core.schema import CombinedEffect, Conflict, EffectResult, ProjectionPoint, Scenario
from core.utils import month_start, resolve_as_of
from data_prep.accounts import AccountsInput, build_account_snapshot
from effects.registry import scenario_effect

from .cache import EffectCache
from .projection import ProjectionGenerator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScenarioPreview:
    baseline: List[ProjectionPoint]
    adjusted: List[ProjectionPoint]
    combined: CombinedEffect
    effects: Dict[str, EffectResult] = field(default_factory=dict)
    conflicts: List[Conflict] = field(default_factory=list)

    def comparison(self) -> pd.DataFrame:
        return compare_projections(self.baseline, self.adjusted)


class ScenarioProjectionEngine:
    """
    Parameters
    ----------
    config : EngineConfig, optional
        Projection, cache and conflict settings
    cache : EffectCache, optional
        Shared memo for effects and baseline projections; built from
        config.cache when omitted
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        cache: Optional[EffectCache] = None,
    ):
        self.config = config if config is not None else EngineConfig()
        self.cache = cache if cache is not None else EffectCache.from_config(self.config.cache)
        self.aggregator = EffectAggregator(
            self.cache,
            horizon_months=self.config.effect_horizon_months,
            as_of=self.config.projection.as_of_date,
        )
        self.generator = ProjectionGenerator(self.config.projection)
        self.detector = ConflictDetector(self.config.conflicts)

    def compute_effect(self, scenario: Scenario) -> EffectResult:
        return scenario_effect(
            scenario, self.config.effect_horizon_months, self.config.projection.as_of_date,
        )

    def combine(self, active_scenarios: Iterable[Scenario]) -> CombinedEffect:
        return self.aggregator.combine(active_scenarios)

    def generate(
        self,
        accounts: AccountsInput,
        months: Optional[int] = None,
        active_scenarios: Optional[Iterable[Scenario]] = None,
    ) -> List[ProjectionPoint]:
        return self.generator.generate(accounts, months, active_scenarios)

    def detect(self, active_scenarios: Iterable[Scenario]) -> List[Conflict]:
        return self.detector.detect(active_scenarios)

    def transactions(self, scenarios: Iterable[Scenario], months: Optional[int] = None) -> pd.DataFrame:
        """Projected transactions of the active scenarios over the forward months, by date."""
        n = self.generator.resolve_months(months)
        return merge_scenario_transactions(scenarios, n, self.config.projection.as_of_date)

    def transaction_impacts(
        self,
        scenarios: Iterable[Scenario],
        months: Optional[int] = None,
    ) -> Dict[str, TransactionImpact]:
        n = self.generator.resolve_months(months)
        return transaction_impacts(scenarios, n, self.config.projection.as_of_date)

    def baseline(self, accounts: AccountsInput, months: Optional[int] = None) -> List[ProjectionPoint]:
        """Scenario-free projection, cached by account fingerprint, months and seed."""
        snapshot = build_account_snapshot(accounts)
        cfg = self.config.projection
        n = cfg.projection_months if months is None else int(months)
        key = "baseline:{}:{}:{}:{}".format(
            account_fingerprint(snapshot),
            n,
            cfg.seed,
            month_start(resolve_as_of(cfg.as_of_date)).strftime("%Y-%m"),
        )
        return list(self.cache.get_or_compute(key, lambda: self.generator.generate(snapshot, n)))

    def preview(
        self,
        accounts: AccountsInput,
        scenarios: Iterable[Scenario],
        months: Optional[int] = None,
    ) -> ScenarioPreview:
        """Baseline and adjusted series plus the effect summary and warnings."""
        snapshot = build_account_snapshot(accounts)
        active = [s for s in scenarios if s.is_active]
        baseline = self.baseline(snapshot, months)
        adjusted = self.generator.generate(snapshot, months, active) if active else list(baseline)
        return ScenarioPreview(
            baseline=baseline,
            adjusted=adjusted,
            combined=self.aggregator.combine(active),
            effects=self.aggregator.effects_for(active),
            conflicts=self.detector.detect(active),
        )


def account_fingerprint(accounts) -> str:
    """Stable digest of an account snapshot (order-independent)."""
    parts = sorted(f"{a.id}|{a.type.value}|{a.balance!r}" for a in accounts)
    return hashlib.sha1("\n".join(parts).encode("utf-8")).hexdigest()[:16]
