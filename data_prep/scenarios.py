"""
Scenario records from the scenario store into immutable Scenario objects.

Store rows use camelCase (templateType, isActive, lastModified) with ISO
timestamps; snake_case keys are accepted too.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional

import pandas as pd

from core.schema import Scenario

logger = logging.getLogger(__name__)

_TRUE_STRINGS = {"true", "1", "yes", "y", "on"}


def _pick(record: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in record and record[key] is not None:
            return record[key]
    return default


def _parse_timestamp(value: Any) -> Optional[pd.Timestamp]:
    if value is None or value == "":
        return None
    ts = pd.to_datetime(value, errors="coerce", utc=False)
    if pd.isna(ts):
        logger.warning("Unparseable scenario timestamp %r ignored", value)
        return None
    return pd.Timestamp(ts)


def _parse_bool(value: Any, default: bool = True) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def scenario_from_record(record: Mapping[str, Any]) -> Scenario:
    """Build a Scenario from one store row; raises ValueError without an id."""
    scenario_id = _pick(record, "id", "scenario_id", "scenarioId")
    if scenario_id is None or str(scenario_id).strip() == "":
        raise ValueError("Scenario record has no id")

    parameters = _pick(record, "parameters", "params", default={})
    if not isinstance(parameters, Mapping):
        logger.warning("Scenario %s has non-mapping parameters; ignoring them", scenario_id)
        parameters = {}

    return Scenario(
        id=str(scenario_id),
        name=str(_pick(record, "name", default=str(scenario_id))),
        template_type=str(_pick(record, "templateType", "template_type", "template", default="generic")),
        parameters=dict(parameters),
        is_active=_parse_bool(_pick(record, "isActive", "is_active", "active")),
        created_at=_parse_timestamp(_pick(record, "createdAt", "created_at")),
        last_modified=_parse_timestamp(_pick(record, "lastModified", "last_modified", "updatedAt")),
    )


def load_scenarios(records: Iterable[Any]) -> List[Scenario]:
    """Scenarios from store rows; Scenario objects pass through, rows without an id are skipped."""
    out: List[Scenario] = []
    for record in records or ():
        if isinstance(record, Scenario):
            out.append(record)
            continue
        try:
            out.append(scenario_from_record(record))
        except ValueError as exc:
            logger.warning("Skipping scenario record: %s", exc)
    return out


def active_only(scenarios: Iterable[Scenario]) -> List[Scenario]:
    return [s for s in scenarios if s.is_active]
