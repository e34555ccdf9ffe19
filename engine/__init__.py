"""
Engine — effect cache, month-level cash flow and life events, and the
net-worth projection generator.

The ScenarioProjectionEngine facade lives in engine.service and is imported
from there directly (it depends on the analysis package, which in turn uses
the cache defined here).
"""

from .cache import CacheEntry, EffectCache
from .cashflow import MonthCashflow, debt_service, investment_growth, project_month
from .events import LifeEventDraw, simulate_life_event_month
from .projection import ProjectionGenerator, generate_projection

__all__ = [
    "CacheEntry",
    "EffectCache",
    "MonthCashflow",
    "debt_service",
    "investment_growth",
    "project_month",
    "LifeEventDraw",
    "simulate_life_event_month",
    "ProjectionGenerator",
    "generate_projection",
]
