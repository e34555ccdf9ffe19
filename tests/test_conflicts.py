"""
Unit tests for ConflictDetector.

Covers:
1. The complexity threshold (default 3, configurable)
2. Pairwise template rules and duplicate templates
3. Ordering of findings and inactive scenarios
"""

import pytest

from analysis.conflicts import ConflictDetector, detect_conflicts
from core.config import ConflictConfig
from core.schema import RiskLevel

from .conftest import make_scenario


def codes(findings):
    return [c.code for c in findings]


class TestComplexity:

    def test_three_is_fine(self):
        scenarios = [make_scenario(f"g{i}", "generic", {"monthlyAmount": i}) for i in range(3)]
        assert "complexity" not in codes(detect_conflicts(scenarios))

    def test_four_is_medium(self):
        scenarios = [
            make_scenario("a", "salary_increase", {"increaseAmount": 100}),
            make_scenario("b", "expense_change", {"monthlyAmount": 50}),
            make_scenario("c", "investment_strategy", {"monthlyContribution": 100}),
            make_scenario("d", "generic", {"monthlyAmount": 10}),
        ]
        findings = detect_conflicts(scenarios)
        assert codes(findings) == ["complexity"]
        assert findings[0].severity is RiskLevel.MEDIUM
        assert set(findings[0].scenario_ids) == {"a", "b", "c", "d"}

    def test_configurable_threshold(self, salary_scenario, purchase_scenario):
        detector = ConflictDetector(ConflictConfig(max_active_scenarios=1))
        assert "complexity" in codes(detector.detect([salary_scenario, purchase_scenario]))

    def test_inactive_not_counted(self):
        scenarios = [make_scenario(f"g{i}", "generic", {}, is_active=i < 2) for i in range(6)]
        assert "complexity" not in codes(detect_conflicts(scenarios))


class TestPairRules:

    def test_empty_set(self):
        assert detect_conflicts([]) == []

    def test_purchase_during_job_loss(self, job_loss_scenario, purchase_scenario):
        findings = detect_conflicts([purchase_scenario, job_loss_scenario])
        assert codes(findings) == ["purchase_during_job_loss"]
        assert findings[0].severity is RiskLevel.HIGH
        assert set(findings[0].scenario_ids) == {"sc_job", "sc_purchase"}

    def test_contradictory_income(self, job_loss_scenario, salary_scenario):
        findings = detect_conflicts([salary_scenario, job_loss_scenario])
        assert codes(findings) == ["contradictory_income"]

    def test_home_purchase_during_job_loss(self, job_loss_scenario):
        home = make_scenario("h", "buy_home", {"homePrice": 350000})
        findings = detect_conflicts([home, job_loss_scenario])
        assert codes(findings) == ["purchase_during_job_loss"]
        assert findings[0].scenario_ids == ("sc_job", "h")

    def test_job_change_during_job_loss(self, job_loss_scenario):
        move = make_scenario("j", "new_job", {"newSalary": 90000})
        findings = detect_conflicts([move, job_loss_scenario])
        assert codes(findings) == ["contradictory_income"]

    def test_competing_savings_goals(self, debt_scenario, emergency_scenario):
        findings = detect_conflicts([debt_scenario, emergency_scenario])
        assert codes(findings) == ["competing_savings_goals"]
        assert findings[0].severity is RiskLevel.LOW

    def test_duplicate_template_via_alias(self):
        a = make_scenario("a", "salary_increase", {"increaseAmount": 100})
        b = make_scenario("b", "salaryIncrease", {"increaseAmount": 200})
        findings = detect_conflicts([a, b])
        assert codes(findings) == ["duplicate_template"]
        assert findings[0].scenario_ids == ("a", "b")

    def test_sorted_high_first(self, job_loss_scenario, purchase_scenario, salary_scenario,
                               debt_scenario, emergency_scenario):
        findings = detect_conflicts(
            [emergency_scenario, salary_scenario, debt_scenario, purchase_scenario, job_loss_scenario]
        )
        assert codes(findings) == [
            "purchase_during_job_loss",
            "complexity",
            "contradictory_income",
            "competing_savings_goals",
        ]
        ranks = [c.severity.rank for c in findings]
        assert ranks == sorted(ranks, reverse=True)
