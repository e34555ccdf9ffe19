"""
Unit tests for EffectAggregator.

Covers:
1. Identity for the empty set
2. Single scenario equals the rule-set result
3. Order independence and the ordinal-max risk
4. Cache keying by id + last modified + as-of month, and cache bypass on failure
"""

import pandas as pd
import pytest

from analysis.aggregator import EffectAggregator, combine_effects, effect_cache_key
from core.schema import CombinedEffect, RiskLevel
from effects.registry import compute_effect
from engine.cache import EffectCache

from .conftest import make_scenario


@pytest.fixture
def aggregator(clock):
    return EffectAggregator(EffectCache(clock=clock))


class TestCombine:

    def test_empty_is_identity(self, aggregator):
        assert aggregator.combine([]) == CombinedEffect.identity()

    def test_single_matches_rule_set(self, aggregator, purchase_scenario):
        combined = aggregator.combine([purchase_scenario])
        direct = compute_effect(purchase_scenario.template_type, purchase_scenario.parameters)
        assert combined.net_effect == direct.net_effect
        assert combined.monthly_change == direct.monthly_change
        assert combined.affected_transactions == direct.affected_transactions
        assert combined.risk_level is direct.risk_level
        assert combined.scenario_count == 1

    def test_salary_plus_purchase(self, aggregator, salary_scenario, purchase_scenario):
        combined = aggregator.combine([salary_scenario, purchase_scenario])
        assert combined.net_effect == pytest.approx(400.0)
        assert combined.risk_level.rank >= RiskLevel.MEDIUM.rank

    def test_order_independent(self, aggregator, salary_scenario, purchase_scenario,
                               job_loss_scenario, emergency_scenario):
        forward = [salary_scenario, purchase_scenario, job_loss_scenario, emergency_scenario]
        a = aggregator.combine(forward)
        b = aggregator.combine(list(reversed(forward)))
        assert a == b
        assert a.risk_level is RiskLevel.HIGH

    def test_inactive_scenarios_skipped(self, aggregator, salary_scenario):
        off = make_scenario("sc_off", "job_loss", {"lostMonthlyIncome": 5000}, is_active=False)
        combined = aggregator.combine([salary_scenario, off])
        assert combined.net_effect == pytest.approx(6000.0)
        assert combined.scenario_count == 1

    def test_combine_effects_is_associative(self, aggregator, salary_scenario,
                                            purchase_scenario, job_loss_scenario):
        a, b, c = (aggregator.combine([s]) for s in (salary_scenario, purchase_scenario, job_loss_scenario))
        left = combine_effects(combine_effects(a, b), c)
        right = combine_effects(a, combine_effects(b, c))
        assert left.net_effect == pytest.approx(right.net_effect)
        assert left.risk_level is right.risk_level
        assert combine_effects(a, CombinedEffect.identity()) == a


class TestCaching:

    def test_results_are_cached(self, aggregator, salary_scenario):
        aggregator.combine([salary_scenario])
        key = effect_cache_key(salary_scenario, 12)
        assert aggregator.cache.has(key)
        aggregator.combine([salary_scenario])
        assert aggregator.cache.stats["hits"] == 1

    def test_edit_bumps_key(self, aggregator):
        before = make_scenario("s1", "salary_increase", {"increaseAmount": 100},
                               last_modified="2024-03-01T10:00:00")
        after = make_scenario("s1", "salary_increase", {"increaseAmount": 200},
                              last_modified="2024-03-02T10:00:00")
        assert aggregator.combine([before]).net_effect == pytest.approx(1200.0)
        assert aggregator.combine([after]).net_effect == pytest.approx(2400.0)

    def test_as_of_month_in_key(self, clock):
        cache = EffectCache(clock=clock)
        scenario = make_scenario("s1", "salary_increase", {"increaseAmount": 500, "effectiveDate": "2024-06-01"})
        march = EffectAggregator(cache, as_of=pd.Timestamp("2024-03-15"))
        july = EffectAggregator(cache, as_of=pd.Timestamp("2024-07-02"))
        assert march.combine([scenario]).net_effect == pytest.approx(4500.0)
        assert july.combine([scenario]).net_effect == pytest.approx(6000.0)
        assert effect_cache_key(scenario, 12, pd.Timestamp("2024-03-15")).endswith(":12:2024-03")
        assert len(cache) == 2

    def test_cache_failure_bypasses(self, salary_scenario):
        class BrokenCache(EffectCache):
            def get(self, key):
                raise TypeError("unhashable")

        aggregator = EffectAggregator(BrokenCache())
        assert aggregator.combine([salary_scenario]).net_effect == pytest.approx(6000.0)

    def test_effects_for(self, aggregator, salary_scenario, purchase_scenario):
        effects = aggregator.effects_for([salary_scenario, purchase_scenario])
        assert set(effects) == {"sc_salary", "sc_purchase"}
        assert effects["sc_purchase"].net_effect == pytest.approx(-5600.0)
