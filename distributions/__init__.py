"""
Distributions package — probability tables and the seedable noise source
behind the stochastic parts of a projection.

  1. life_events.py — monthly unplanned-expense / windfall probability table
  2. sampler.py     — NoiseSampler, an injectable wrapper around numpy's Generator
"""

from .life_events import LIFE_EVENT_TABLE, LifeEventTable, SeverityBand
from .sampler import NoiseSampler

__all__ = [
    "LIFE_EVENT_TABLE",
    "LifeEventTable",
    "SeverityBand",
    "NoiseSampler",
]
