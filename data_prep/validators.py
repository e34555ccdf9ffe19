"""
Boundary validation for scenarios and account snapshots.

The engine itself never raises on bad parameters (it falls back to a zero
effect). These checks exist so the editing UI can tell the user *why*:
- required parameters missing or unparseable
- parameters that are not a key/value mapping at all
- template ids that will fall back to the generic rule
- duplicate ids
- account balances that do not parse or have an unknown type

Every finding is attached to the scenario or account it concerns, so the UI
can show it next to the right form.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping

from pydantic import ValidationError

from core.schema import Scenario
from core.utils import to_float
from effects.parameters import parse_parameters
from effects.registry import TEMPLATE_REGISTRY, is_recognized

from .accounts import canonicalize_account_type

ERROR = "error"
WARNING = "warning"

# Subject for findings about the input as a whole
INPUT = "input"


@dataclass(frozen=True)
class ValidationIssue:
    subject: str    # scenario id, "account <id>" or INPUT
    message: str
    severity: str = ERROR

    def __str__(self) -> str:
        return f"{self.subject}: {self.message}"


@dataclass
class ValidationResult:
    """Findings for a scenario set or an account snapshot, grouped by subject."""
    issues: List[ValidationIssue] = field(default_factory=list)
    checked: List[str] = field(default_factory=list)

    def error(self, subject: str, message: str) -> None:
        self.issues.append(ValidationIssue(subject, message, ERROR))

    def warn(self, subject: str, message: str) -> None:
        self.issues.append(ValidationIssue(subject, message, WARNING))

    @property
    def errors(self) -> List[str]:
        return [str(i) for i in self.issues if i.severity == ERROR]

    @property
    def warnings(self) -> List[str]:
        return [str(i) for i in self.issues if i.severity == WARNING]

    @property
    def is_valid(self) -> bool:
        return not any(i.severity == ERROR for i in self.issues)

    def extend(self, other: "ValidationResult") -> "ValidationResult":
        self.issues.extend(other.issues)
        self.checked.extend(other.checked)
        return self

    def by_subject(self) -> Dict[str, List[ValidationIssue]]:
        grouped: Dict[str, List[ValidationIssue]] = OrderedDict()
        for issue in self.issues:
            grouped.setdefault(issue.subject, []).append(issue)
        return grouped

    def summary(self) -> str:
        """One block per scenario/account with findings, errors listed before warnings."""
        if not self.issues:
            return f"{len(self.checked)} checked, no problems found."
        lines = []
        for subject, issues in self.by_subject().items():
            n_errors = sum(i.severity == ERROR for i in issues)
            lines.append(f"{subject}: {n_errors} error(s), {len(issues) - n_errors} warning(s)")
            for issue in sorted(issues, key=lambda i: i.severity != ERROR):
                lines.append(f"  {issue.severity}: {issue.message}")
        return "\n".join(lines)


def validate_scenario(scenario: Scenario) -> ValidationResult:
    """Check one scenario's template id and parameters against its typed record."""
    result = ValidationResult(checked=[scenario.id])
    subject = scenario.id

    if not is_recognized(scenario.template_type):
        result.warn(
            subject,
            f"template '{scenario.template_type}' is not recognised; the generic rule will be used.",
        )

    model = TEMPLATE_REGISTRY[scenario.template].parameter_model
    try:
        parse_parameters(model, scenario.parameters)
    except TypeError as exc:
        result.error(subject, str(exc))
    except ValidationError as exc:
        for err in exc.errors():
            where = ".".join(str(p) for p in err["loc"]) or "parameters"
            result.error(subject, f"{where}: {err['msg']}")

    return result


def validate_scenarios(scenarios: Iterable[Scenario]) -> ValidationResult:
    result = ValidationResult()
    seen = set()
    for scenario in scenarios:
        if scenario.id in seen:
            result.warn(scenario.id, "Duplicate scenario id; both copies are counted.")
        seen.add(scenario.id)
        result.extend(validate_scenario(scenario))
    return result


def validate_accounts(records: Any) -> ValidationResult:
    """
    Check raw account input (a {type: balance} mapping or a list of records)
    before it is turned into a snapshot.
    """
    result = ValidationResult()
    if records is None:
        result.warn(INPUT, "No accounts supplied; net worth will be treated as zero.")
        return result

    if isinstance(records, Mapping):
        items = [{"id": k, "type": k, "balance": v} for k, v in records.items()]
    else:
        items = list(records)

    if not items:
        result.warn(INPUT, "No accounts supplied; net worth will be treated as zero.")
        return result

    for i, item in enumerate(items):
        if not isinstance(item, Mapping):
            # Account objects are already typed
            continue
        subject = f"account {item.get('id', f'#{i}')}"
        result.checked.append(subject)
        raw_type = item.get("type", item.get("account_type", item.get("accountType")))
        if to_float(item.get("balance")) is None:
            result.error(subject, f"balance {item.get('balance')!r} is not numeric.")
        if canonicalize_account_type(raw_type) is None:
            result.warn(subject, f"unknown type {raw_type!r}; classified by balance sign.")
    return result
