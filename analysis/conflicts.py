"""
Heuristic conflict scan over the active-scenario set.

Each rule looks at the active scenarios and may emit one named,
severity-tagged finding. The detector is stateless; findings come back
sorted high severity first, then by code.

Rules:
  complexity                 more than N active scenarios            medium
  duplicate_template         two+ active scenarios of one template   low
  purchase_during_job_loss   job loss alongside a major purchase     high
                             or a home purchase
  contradictory_income       job loss alongside a salary increase    medium
                             or a job change
  competing_savings_goals    emergency fund alongside debt payoff    low
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Sequence

from core.config import ConflictConfig
from core.schema import Conflict, RiskLevel, Scenario, TemplateType

logger = logging.getLogger(__name__)

Rule = Callable[[Sequence[Scenario]], List[Conflict]]


def _by_template(scenarios: Sequence[Scenario]) -> Dict[TemplateType, List[Scenario]]:
    groups: Dict[TemplateType, List[Scenario]] = defaultdict(list)
    for s in scenarios:
        groups[s.template].append(s)
    return groups


def _pair_rule(
    first: FrozenSet[TemplateType],
    second: FrozenSet[TemplateType],
    code: str,
    severity: RiskLevel,
    message: str,
) -> Rule:
    """Fires when at least one scenario from each template group is active."""
    def rule(scenarios: Sequence[Scenario]) -> List[Conflict]:
        left = [s for s in scenarios if s.template in first]
        right = [s for s in scenarios if s.template in second]
        if not left or not right:
            return []
        ids = tuple(s.id for s in left + right)
        return [Conflict(code=code, severity=severity, message=message, scenario_ids=ids)]
    return rule


def _duplicate_templates(scenarios: Sequence[Scenario]) -> List[Conflict]:
    out = []
    for template, members in _by_template(scenarios).items():
        if len(members) < 2:
            continue
        out.append(Conflict(
            code="duplicate_template",
            severity=RiskLevel.LOW,
            message=(
                f"{len(members)} active scenarios use the '{template.value}' template; "
                f"their effects are added together."
            ),
            scenario_ids=tuple(s.id for s in members),
        ))
    return out


_PAIR_RULES: List[Rule] = [
    _pair_rule(
        frozenset({TemplateType.JOB_LOSS}),
        frozenset({TemplateType.MAJOR_PURCHASE, TemplateType.HOME_BUYING}),
        "purchase_during_job_loss", RiskLevel.HIGH,
        "A major or home purchase is planned while a job loss is modelled; financing may not be available.",
    ),
    _pair_rule(
        frozenset({TemplateType.JOB_LOSS}),
        frozenset({TemplateType.SALARY_INCREASE, TemplateType.JOB_CHANGE}),
        "contradictory_income", RiskLevel.MEDIUM,
        "Job loss and a salary increase or job change are both active; the income assumptions contradict each other.",
    ),
    _pair_rule(
        frozenset({TemplateType.EMERGENCY_FUND}),
        frozenset({TemplateType.DEBT_PAYOFF}),
        "competing_savings_goals", RiskLevel.LOW,
        "Emergency fund and debt payoff compete for the same monthly surplus.",
    ),
]


class ConflictDetector:
    def __init__(self, config: Optional[ConflictConfig] = None):
        self.config = config if config is not None else ConflictConfig()

    def detect(self, active_scenarios: Iterable[Scenario]) -> List[Conflict]:
        scenarios = [s for s in active_scenarios or () if s.is_active]
        findings: List[Conflict] = []

        threshold = self.config.max_active_scenarios
        if len(scenarios) > threshold:
            findings.append(Conflict(
                code="complexity",
                severity=RiskLevel.MEDIUM,
                message=(
                    f"{len(scenarios)} scenarios are active (more than {threshold}); "
                    f"combined results may interact in hard-to-predict ways."
                ),
                scenario_ids=tuple(s.id for s in scenarios),
            ))

        findings.extend(_duplicate_templates(scenarios))
        for rule in _PAIR_RULES:
            findings.extend(rule(scenarios))

        findings.sort(key=lambda c: (-c.severity.rank, c.code))
        if findings:
            logger.debug("Detected %d scenario conflicts", len(findings))
        return findings


def detect_conflicts(
    active_scenarios: Iterable[Scenario],
    config: Optional[ConflictConfig] = None,
) -> List[Conflict]:
    return ConflictDetector(config).detect(active_scenarios)
