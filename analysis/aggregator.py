"""
Combine the effects of all active scenarios into one CombinedEffect.

  net_effect / monthly_change / affected_transactions : sums
  risk_level                                          : ordinal max (low < medium < high)

Sums use math.fsum, so the result does not depend on scenario order. The
empty combination is the identity (all zeros, low risk). Per-scenario results
are memoised in an EffectCache under a key built from the scenario id, its
last-modified stamp, the horizon and the as-of month; editing a scenario or
moving into a new month therefore changes the key.
"""

from __future__ import annotations

import logging
import math
from datetime import date
from typing import Dict, Iterable, List, Optional

from core.schema import CombinedEffect, EffectResult, RiskLevel, Scenario
from core.utils import resolve_as_of
from effects.registry import DEFAULT_HORIZON_MONTHS, scenario_effect
from engine.cache import EffectCache

logger = logging.getLogger(__name__)


def effect_cache_key(scenario: Scenario, horizon_months: int, as_of: Optional[date] = None) -> str:
    stamp = "" if scenario.last_modified is None else str(scenario.last_modified)
    # date parameters resolve to whole months, so the as-of month is enough
    month = resolve_as_of(as_of).strftime("%Y-%m")
    return f"effect:{scenario.id}:{stamp}:{int(horizon_months)}:{month}"


class EffectAggregator:
    """
    Parameters
    ----------
    cache : EffectCache, optional
        Memo for per-scenario results; a private cache is created when omitted
    horizon_months : int
        Horizon passed to every effect rule (default 12)
    ttl : float, optional
        TTL for cached results; the cache default when None
    as_of : date, optional
        Anchor for date parameters; today when None
    """

    def __init__(
        self,
        cache: Optional[EffectCache] = None,
        *,
        horizon_months: int = DEFAULT_HORIZON_MONTHS,
        ttl: Optional[float] = None,
        as_of: Optional[date] = None,
    ):
        self.cache = cache if cache is not None else EffectCache()
        self.horizon_months = int(horizon_months)
        self.ttl = ttl
        self.as_of = as_of

    def effect(self, scenario: Scenario) -> EffectResult:
        """EffectResult for one scenario, through the cache when possible."""
        try:
            key = effect_cache_key(scenario, self.horizon_months, self.as_of)
            cached = self.cache.get(key)
        except (TypeError, ValueError) as exc:
            logger.warning("Effect cache unavailable for %s (%s); computing directly", scenario.id, exc)
            return scenario_effect(scenario, self.horizon_months, self.as_of)

        if cached is not None:
            logger.debug("Effect cache hit for %s", key)
            return cached

        result = scenario_effect(scenario, self.horizon_months, self.as_of)
        try:
            self.cache.set(key, result, self.ttl)
        except (TypeError, ValueError) as exc:
            logger.warning("Could not cache effect for %s (%s)", scenario.id, exc)
        return result

    def effects_for(self, scenarios: Iterable[Scenario]) -> Dict[str, EffectResult]:
        """Per-scenario results for the active members, keyed by scenario id."""
        return {s.id: self.effect(s) for s in scenarios if s.is_active}

    def combine(self, active_scenarios: Iterable[Scenario]) -> CombinedEffect:
        results: List[EffectResult] = []
        for scenario in active_scenarios or ():
            if not scenario.is_active:
                logger.debug("Skipping inactive scenario %s", scenario.id)
                continue
            results.append(self.effect(scenario))
        return combine_results(results)


def combine_results(results: Iterable[EffectResult]) -> CombinedEffect:
    results = list(results)
    if not results:
        return CombinedEffect.identity()
    return CombinedEffect(
        net_effect=math.fsum(r.net_effect for r in results),
        monthly_change=math.fsum(r.monthly_change for r in results),
        affected_transactions=sum(int(r.affected_transactions) for r in results),
        risk_level=RiskLevel.max_of(r.risk_level for r in results),
        scenario_count=len(results),
    )


def combine_effects(a: CombinedEffect, b: CombinedEffect) -> CombinedEffect:
    """Merge two partial combinations (associative, identity is CombinedEffect.identity())."""
    return CombinedEffect(
        net_effect=a.net_effect + b.net_effect,
        monthly_change=a.monthly_change + b.monthly_change,
        affected_transactions=a.affected_transactions + b.affected_transactions,
        risk_level=RiskLevel.max_of((a.risk_level, b.risk_level)),
        scenario_count=a.scenario_count + b.scenario_count,
    )
