"""
Month-level life-event simulation — random draws deciding whether a projected
month carries an unplanned expense and/or a windfall.

Every month consumes exactly five uniforms, whatever the outcome. Keeping the
draw count fixed means a baseline run and a scenario-adjusted run with the
same seed see identical events, so their difference is the scenario alone.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from distributions.life_events import LIFE_EVENT_TABLE, LifeEventTable
from distributions.sampler import NoiseSampler


@dataclass(frozen=True)
class LifeEventDraw:
    """Result of simulating one month of life events."""
    expense: float
    windfall: float
    severity: Optional[str] = None  # band label when an expense happened

    @property
    def net(self) -> float:
        return self.windfall - self.expense


def simulate_life_event_month(
    *,
    sampler: NoiseSampler,
    table: LifeEventTable = LIFE_EVENT_TABLE,
) -> LifeEventDraw:
    """
    Draw one month's life events.

    Parameters
    ----------
    sampler : NoiseSampler
        Source of uniforms
    table : LifeEventTable
        Event probabilities and severity bands
    """
    u_expense = sampler.random()
    u_band = sampler.random()
    u_expense_amount = sampler.random()
    u_windfall = sampler.random()
    u_windfall_amount = sampler.random()

    expense = 0.0
    severity = None
    if u_expense < table.expense_probability:
        band = table.expense_bands[sampler.choose(table.band_weights, u=u_band)]
        expense = band.min_amount + u_expense_amount * (band.max_amount - band.min_amount)
        severity = band.label

    windfall = 0.0
    if u_windfall < table.windfall_probability:
        windfall = table.windfall_min + u_windfall_amount * (table.windfall_max - table.windfall_min)

    return LifeEventDraw(expense=expense, windfall=windfall, severity=severity)


def history_event_noise(sampler: NoiseSampler, bound: float, probability: float) -> float:
    """
    Bounded shock for a reconstructed historical month: with `probability` a
    dip of up to `bound`, otherwise a small wobble. Two uniforms per call.
    """
    u_event = sampler.random()
    u_size = sampler.random()
    if u_event < probability:
        return -u_size * bound
    return (u_size - 0.5) * 0.1 * bound
